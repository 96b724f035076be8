"""Static option lists offered by the generation form."""

from dataclasses import dataclass

from ..errors import InvalidConfiguration


@dataclass(frozen=True)
class DurationOption:
    """A duration category and the story structure it implies."""

    scenes: int
    description: str
    structure: tuple[str, ...]


DURATION_OPTIONS: dict[str, DurationOption] = {
    "14_seconds": DurationOption(
        scenes=2,
        description="2 scenes × 7 seconds each",
        structure=("Setup/Approach", "Action/Climax"),
    ),
    "21_seconds": DurationOption(
        scenes=3,
        description="3 scenes × 7 seconds each",
        structure=("Setup/Tension", "Confrontation/Action", "Resolution/Outcome"),
    ),
}

ASPECT_RATIO_OPTIONS: dict[str, str] = {
    "16:9": "16:9 (Widescreen)",
    "9:16": "9:16 (Vertical)",
    "1:1": "1:1 (Square)",
    "4:3": "4:3 (Standard)",
    "3:4": "3:4 (Portrait)",
}

ENVIRONMENTS = [
    "African Savanna",
    "Amazon Rainforest",
    "Arctic Tundra",
    "Coral Reef",
    "Mountain Range",
    "Dense Forest",
    "Scorching Desert",
    "Misty Swamp",
]

TIMES_OF_DAY = [
    "Golden Hour",
    "Misty Morning",
    "Harsh Midday Sun",
    "Dramatic Sunset",
    "Moonlit Night",
    "Stormy Afternoon",
]

MOODS = [
    "Tense",
    "Suspenseful",
    "Dramatic",
    "Majestic",
    "Chaotic",
    "Peaceful",
    "Intense",
    "Somber",
]

LUCKY_SCENARIOS = [
    "A pack of wolves coordinating to hunt a large bison in the snow",
    "An eagle diving to catch a fish from a river",
    "A Komodo dragon ambushing a deer",
    "A mother bear fiercely defending her cubs from a lone wolf",
    "Lizards attempting a raid on a nest of peacock eggs",
    "A huge python slowly stalking an unsuspecting monkey in the jungle canopy",
    "A tense standoff between a honey badger and a cobra over a meal",
]

DEFAULT_SCENARIO = "A brave cheetah hunts a gazelle near a hidden hunter's trap"


def get_duration(key: str) -> DurationOption:
    """Look up a duration category.

    Raises:
        InvalidConfiguration: If the key is not a known duration category.
    """
    try:
        return DURATION_OPTIONS[key]
    except KeyError:
        raise InvalidConfiguration("Invalid duration selected.") from None
