"""CLI entry point for the wildlife sequence generator."""

import asyncio
import json
import logging
import typer
from pathlib import Path
from typing import Optional

from . import __version__
from .config import config
from .errors import WildframeError
from .models import KeyframeStatus, PromptPackage, ReferenceVideo, RunState, SceneState, UserInput
from .models.options import (
    ASPECT_RATIO_OPTIONS,
    DEFAULT_SCENARIO,
    DURATION_OPTIONS,
    ENVIRONMENTS,
    MOODS,
    TIMES_OF_DAY,
)
from .pipeline import (
    Event,
    GenerationOrchestrator,
    ImageFailed,
    ImageReady,
    RevisionFailed,
    RevisionReady,
    RevisionStarted,
    SequenceReady,
)
from .randomizer import randomize_input

app = typer.Typer(
    name="wildframe",
    help="Cinematic wildlife prompt sequences with Gemini and Imagen",
    no_args_is_help=True
)

ASSEMBLY_GUIDE = """\
🧭 Workflow & Assembly Guide

Step 1: Generate keyframes with Imagen
   For each scene, use the Imagen prompt to create a still that anchors the
   scene visually. Wildframe renders these for you; revise them until they fit.

Step 2: Generate video clips with VEO
   Use each scene's VEO prompt together with its keyframe to create the
   7-second clip. The keyframe helps VEO keep characters and setting consistent.

Step 3: Assemble in an editor (like CapCut)
   Place the clips on the timeline in scene order. The prompts are written to
   flow into each other; add subtle crossfades if the cut feels abrupt.

Step 4: Sound design
   Follow the sound notes: lay the ambient bed first, then animal and action
   sounds matched to the movement, then the emotional cues.

Step 5: Color grading & final touches
   Apply one grade across all clips, tune contrast and saturation to the mood,
   and export.
"""


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"wildframe version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit"
    )
) -> None:
    """Wildframe - turn a wildlife scenario into a cinematic prompt sequence."""
    pass


def _check_choice(value: str, choices: list[str], option: str) -> str:
    if value not in choices:
        raise typer.BadParameter(
            f"{value!r} is not one of: {', '.join(choices)}", param_hint=option
        )
    return value


def _preview(text: str, limit: int = 70) -> str:
    return text[:limit] + "..." if len(text) > limit else text


def _describe_input(user_input: UserInput) -> None:
    duration = DURATION_OPTIONS[user_input.duration]
    typer.echo(f"   Scenario: {user_input.scenario}")
    typer.echo(f"   Duration: {user_input.duration} ({duration.description})")
    typer.echo(f"   Aspect ratio: {ASPECT_RATIO_OPTIONS[user_input.aspect_ratio]}")
    typer.echo(f"   Environment: {user_input.environment}")
    typer.echo(f"   Time of day: {user_input.time_of_day}")
    typer.echo(f"   Mood: {user_input.mood}")
    if user_input.reference_video:
        typer.echo(f"   Reference video: {user_input.reference_video.name}")


def _print_progress(state: RunState, event: Event) -> None:
    """Echo each state change while a run is in flight."""
    if isinstance(event, SequenceReady):
        typer.echo(f"\n📋 {len(event.scenes)} scenes written, rendering keyframes...")
    elif isinstance(event, ImageReady):
        typer.echo(f"   ✅ Scene {event.scene_number}: keyframe ready")
    elif isinstance(event, ImageFailed):
        typer.echo(f"   ❌ Scene {event.scene_number}: {event.message}")
        for scene in state.sequence or []:
            if scene.scene_number > event.scene_number and scene.status == KeyframeStatus.ERROR:
                typer.echo(f"   ⏹️  Scene {scene.scene_number}: {scene.image_error}")
    elif isinstance(event, RevisionStarted):
        typer.echo(f"   🎨 Revising scene {event.scene_number}...")
    elif isinstance(event, RevisionReady):
        typer.echo(f"   ✅ Scene {event.scene_number}: keyframe revised")
    elif isinstance(event, RevisionFailed):
        typer.echo(f"   ❌ Scene {event.scene_number}: {event.message}")


def _render_scene(scene_state: SceneState) -> None:
    scene = scene_state.scene
    typer.echo(f"\n🎬 Scene {scene.scene_number} of {scene.total_scenes}: {scene.story_beat}")

    status = scene_state.status
    if status == KeyframeStatus.READY:
        typer.echo("   🖼️  Keyframe: ready")
    elif status == KeyframeStatus.ERROR:
        typer.echo(f"   ⚠️  Keyframe failed: {scene_state.image_error}")
        if scene_state.image_url:
            typer.echo("      (previous keyframe kept)")
    elif status == KeyframeStatus.GENERATING:
        typer.echo("   ⏳ Keyframe: generating...")

    typer.echo("\n   📷 Imagen prompt (keyframe):")
    typer.echo(f"      {scene.image_prompt}")

    typer.echo("\n   🎥 VEO prompt (video):")
    video_prompt = json.dumps(scene.video_prompt.model_dump(by_alias=True), indent=2, ensure_ascii=False)
    for line in video_prompt.splitlines():
        typer.echo(f"      {line}")

    typer.echo("\n   🔊 Sound design:")
    typer.echo(f"      Audio mix: {scene.sound_design.audio_mix}")
    for sound in scene.sound_design.ambient_sounds:
        typer.echo(f"      • {sound}")

    typer.echo("\n   🎞️  Camera & mood:")
    typer.echo(f"      Camera work: {scene.camera_mood.camera_work}")
    typer.echo(f"      Target mood: {scene.camera_mood.target_mood}")


def _build_orchestrator() -> GenerationOrchestrator:
    """Create an orchestrator sharing one Gemini client."""
    from .agents import SequenceAgent
    from .services import GeminiClient, ImageGenerator, ImageReviser

    client = GeminiClient()
    return GenerationOrchestrator(
        sequence_agent=SequenceAgent(client=client),
        image_generator=ImageGenerator(client=client),
        image_reviser=ImageReviser(client=client),
        on_change=_print_progress,
    )


async def _revise_loop(orchestrator: GenerationOrchestrator) -> None:
    """Prompt for keyframe revisions until the user submits a blank scene."""
    while True:
        revisable = [
            scene.scene_number
            for scene in orchestrator.state.sequence or []
            if scene.can_revise
        ]
        if not revisable:
            return

        choice = typer.prompt(
            f"\n✏️  Revise a keyframe? Scene {', '.join(map(str, revisable))} (blank to finish)",
            default="",
            show_default=False,
        ).strip()
        if not choice:
            return
        if not choice.isdigit() or int(choice) not in revisable:
            typer.echo(f"   Pick one of: {', '.join(map(str, revisable))}")
            continue

        instruction = typer.prompt(
            "   Describe the change (e.g., add a dramatic thundercloud in the sky)"
        )
        try:
            state = await orchestrator.revise(int(choice), instruction)
        except WildframeError as e:
            typer.echo(f"   ❌ {e}")
            continue
        _render_scene(state.scene(int(choice)))


async def _session(
    orchestrator: GenerationOrchestrator, user_input: UserInput, revise: bool
) -> RunState:
    state = await orchestrator.generate(user_input)
    if state.run_error is not None:
        return state

    for scene_state in state.sequence or []:
        _render_scene(scene_state)
    if revise:
        await _revise_loop(orchestrator)
    return orchestrator.state


@app.command()
def generate(
    scenario: Optional[str] = typer.Argument(
        None,
        help="What happens, e.g. 'A Komodo dragon ambushing a deer'"
    ),
    duration: str = typer.Option(
        "14_seconds",
        "--duration",
        "-d",
        help=f"Duration category ({', '.join(DURATION_OPTIONS)})"
    ),
    aspect_ratio: str = typer.Option(
        "9:16",
        "--aspect-ratio",
        "-a",
        help=f"Aspect ratio ({', '.join(ASPECT_RATIO_OPTIONS)})"
    ),
    environment: str = typer.Option(
        "African Savanna",
        "--environment",
        "-e",
        help="Environment (see 'wildframe options')"
    ),
    time_of_day: str = typer.Option(
        "Golden Hour",
        "--time-of-day",
        "-t",
        help="Time of day (see 'wildframe options')"
    ),
    mood: str = typer.Option(
        "Tense",
        "--mood",
        "-m",
        help="Overall mood (see 'wildframe options')"
    ),
    reference_video: Optional[Path] = typer.Option(
        None,
        "--reference-video",
        "-r",
        help="Video whose content, style and pacing should guide the prompts",
        exists=True,
        file_okay=True,
        dir_okay=False
    ),
    lucky: bool = typer.Option(
        False,
        "--lucky",
        "-l",
        help="I'm feeling lucky: randomize every selection"
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Directory to export sequence.yaml and keyframes to"
    ),
    revise: bool = typer.Option(
        True,
        "--revise/--no-revise",
        help="Offer keyframe revisions once the run settles"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging"
    ),
) -> None:
    """Generate a cinematic scene sequence and its keyframes."""
    setup_logging(verbose)

    if lucky:
        if scenario or reference_video:
            raise typer.BadParameter(
                "--lucky picks its own scenario and takes no reference video",
                param_hint="--lucky",
            )
        user_input = randomize_input()
    else:
        _check_choice(duration, list(DURATION_OPTIONS), "--duration")
        _check_choice(aspect_ratio, list(ASPECT_RATIO_OPTIONS), "--aspect-ratio")
        _check_choice(environment, ENVIRONMENTS, "--environment")
        _check_choice(time_of_day, TIMES_OF_DAY, "--time-of-day")
        _check_choice(mood, MOODS, "--mood")

        video = None
        if reference_video:
            try:
                video = ReferenceVideo.from_path(reference_video)
            except ValueError as e:
                typer.echo(f"❌ {e}")
                raise typer.Exit(1)

        user_input = UserInput(
            scenario=scenario or DEFAULT_SCENARIO,
            duration=duration,
            environment=environment,
            time_of_day=time_of_day,
            mood=mood,
            aspect_ratio=aspect_ratio,
            reference_video=video,
        )

    # Validate credentials
    try:
        config.validate_required()
    except ValueError as e:
        typer.echo(f"❌ Configuration error: {e}")
        raise typer.Exit(1)

    typer.echo("🎬 Generating cinematic sequence")
    _describe_input(user_input)

    try:
        orchestrator = _build_orchestrator()
    except ValueError as e:
        typer.echo(f"❌ Failed to initialize Gemini client: {e}")
        raise typer.Exit(1)

    state = asyncio.run(_session(orchestrator, user_input, revise))

    if output and state.sequence:
        from .export import export_run

        package_path = export_run(state, output)
        typer.echo(f"\n📄 Prompt package saved: {package_path}")

    if state.run_error:
        typer.echo(f"\n❌ Error: {state.run_error}")
        raise typer.Exit(1)

    failed = [s.scene_number for s in state.sequence or [] if s.status == KeyframeStatus.ERROR]
    if failed:
        typer.echo(f"\n⚠️  {len(failed)} keyframe(s) failed: scene {', '.join(map(str, failed))}")
    else:
        typer.echo("\n✅ Sequence complete")
    typer.echo("   Run 'wildframe guide' for the assembly workflow")


@app.command()
def lucky() -> None:
    """Show a random set of selections (I'm feeling lucky)."""
    user_input = randomize_input()
    typer.echo("🎲 Feeling lucky:")
    _describe_input(user_input)
    typer.echo("\nGenerate it with the same selections:")
    typer.echo(
        f"   wildframe generate \"{user_input.scenario}\" -d {user_input.duration} "
        f"-a {user_input.aspect_ratio} -e \"{user_input.environment}\" "
        f"-t \"{user_input.time_of_day}\" -m {user_input.mood}"
    )


@app.command()
def options() -> None:
    """List the available selections."""
    typer.echo("⏱️  Durations:")
    for key, option in DURATION_OPTIONS.items():
        typer.echo(f"   {key}: {option.description}")
        typer.echo(f"      → {' -> '.join(option.structure)}")

    typer.echo("\n📐 Aspect ratios:")
    for key, label in ASPECT_RATIO_OPTIONS.items():
        typer.echo(f"   {key}: {label}")

    for title, values in (
        ("🌍 Environments", ENVIRONMENTS),
        ("🕰️  Times of day", TIMES_OF_DAY),
        ("🎭 Moods", MOODS),
    ):
        typer.echo(f"\n{title}:")
        for value in values:
            typer.echo(f"   • {value}")


@app.command()
def guide() -> None:
    """Explain how to turn a sequence into a finished video."""
    typer.echo(ASSEMBLY_GUIDE)


@app.command()
def show(
    package: Path = typer.Argument(
        ...,
        help="Path to an exported sequence.yaml",
        exists=True,
        file_okay=True,
        dir_okay=False
    )
) -> None:
    """Show an exported prompt package."""
    try:
        prompt_package = PromptPackage.from_yaml(package)
    except Exception as e:
        typer.echo(f"❌ Error loading package: {e}")
        raise typer.Exit(1)

    typer.echo(f"📁 Project: {prompt_package.project_name}")
    typer.echo(f"   Duration: {prompt_package.duration}")
    typer.echo(f"   Aspect ratio: {prompt_package.aspect_ratio}")
    typer.echo(f"   Scenes: {len(prompt_package.scenes)}")

    typer.echo("\n📽️  Scenes:")
    for scene in prompt_package.scenes:
        keyframe = prompt_package.keyframes.get(scene.scene_number)
        status_icon = "✅" if keyframe else "⏳"
        typer.echo(f"   {status_icon} Scene {scene.scene_number}: {scene.story_beat}")
        typer.echo(f"      → {_preview(scene.image_prompt)}")
        if keyframe:
            typer.echo(f"      🖼️  {package.parent / keyframe}")


@app.command()
def imagen(
    prompt: str = typer.Argument(
        ...,
        help="Text description of the image to generate"
    ),
    output: Path = typer.Option(
        Path("./keyframe.jpg"),
        "--output",
        "-o",
        help="Output image file path"
    ),
    aspect_ratio: str = typer.Option(
        "9:16",
        "--aspect-ratio",
        "-a",
        help=f"Image aspect ratio ({', '.join(ASPECT_RATIO_OPTIONS)})"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging"
    ),
) -> None:
    """Generate a single keyframe from a prompt.

    Example:
        wildframe imagen "A cheetah crouched in tall golden grass, photorealistic"
    """
    from .services import ImageGenerator, decode_data_url

    setup_logging(verbose)
    _check_choice(aspect_ratio, list(ASPECT_RATIO_OPTIONS), "--aspect-ratio")
    typer.echo("🎨 Generating image with Imagen")
    typer.echo(f"   Prompt: {_preview(prompt)}")

    try:
        config.validate_required()
        generator = ImageGenerator()
        typer.echo(f"   Model: {generator.model}")
    except ValueError as e:
        typer.echo(f"❌ Configuration error: {e}")
        raise typer.Exit(1)

    try:
        image_url = asyncio.run(generator.generate(prompt, aspect_ratio))
    except WildframeError as e:
        typer.echo(f"❌ Generation failed: {e}")
        raise typer.Exit(1)

    _, payload = decode_data_url(image_url)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(payload)
    typer.echo(f"✅ Image saved: {output}")


if __name__ == "__main__":
    app()
