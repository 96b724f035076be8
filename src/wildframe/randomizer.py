"""The "I'm Feeling Lucky" form filler."""

import random
from typing import Optional

from .models import UserInput
from .models.options import (
    ASPECT_RATIO_OPTIONS,
    DURATION_OPTIONS,
    ENVIRONMENTS,
    LUCKY_SCENARIOS,
    MOODS,
    TIMES_OF_DAY,
)


def randomize_input(rng: Optional[random.Random] = None) -> UserInput:
    """Pick every form field uniformly at random. Never attaches a reference video."""
    rng = rng or random.Random()
    return UserInput(
        scenario=rng.choice(LUCKY_SCENARIOS),
        duration=rng.choice(list(DURATION_OPTIONS)),
        environment=rng.choice(ENVIRONMENTS),
        time_of_day=rng.choice(TIMES_OF_DAY),
        mood=rng.choice(MOODS),
        aspect_ratio=rng.choice(list(ASPECT_RATIO_OPTIONS)),
        reference_video=None,
    )
