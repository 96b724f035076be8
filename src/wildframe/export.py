"""Write a run's prompt package and keyframes to disk."""

import logging
import mimetypes
from pathlib import Path
from typing import Optional

from .errors import InvalidState
from .models import PromptPackage, RunState
from .services.imagen import decode_data_url

logger = logging.getLogger(__name__)

PACKAGE_FILE = "sequence.yaml"


def export_run(state: RunState, output_dir: Path, project_name: Optional[str] = None) -> Path:
    """Save ``sequence.yaml`` plus one file per available keyframe.

    Keyframes that cannot be decoded are skipped with a warning.

    Returns:
        Path of the written package file.
    """
    package = PromptPackage.from_run(state, project_name=project_name)
    output_dir.mkdir(parents=True, exist_ok=True)

    for scene in state.sequence or []:
        if not scene.image_url:
            continue
        try:
            mime_type, payload = decode_data_url(scene.image_url)
        except InvalidState as e:
            logger.warning(f"Skipping keyframe for scene {scene.scene_number}: {e}")
            continue

        extension = mimetypes.guess_extension(mime_type) or ".img"
        if extension == ".jpe":
            extension = ".jpg"
        filename = f"scene_{scene.scene_number}{extension}"
        (output_dir / filename).write_bytes(payload)
        package.keyframes[scene.scene_number] = filename
        logger.info(f"Saved keyframe to {output_dir / filename}")

    package_path = output_dir / PACKAGE_FILE
    package.to_yaml(package_path)
    logger.info(f"Saved prompt package to {package_path}")
    return package_path
