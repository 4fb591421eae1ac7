from dataclasses import dataclass
from typing import Optional

from ..core.config import settings

# Upper bound (inclusive) of each band, checked in order
BANDS = (
    (25, "low"),
    (50, "medium"),
    (75, "high"),
)
TOP_BAND = "extreme"

JINNIFICATION_ENDING = (
    " End the story by bringing in Jenni, a fixated girl who fixes the picture."
)


@dataclass(frozen=True)
class PromptPair:
    system: str
    user: str


def band_for(value: int) -> str:
    """Map a 0-100 slider value to its band label.

    The same labels are shown next to the sliders and sent to the model.
    """
    for upper, label in BANDS:
        if value <= upper:
            return label
    return TOP_BAND


def system_prompt(language: Optional[str] = None) -> str:
    language = language or settings.output_language
    return (
        f"You are an artistic assistant who analyzes images and writes creative "
        f"descriptions in {language}. Focus on an engaging 'journey' from outside "
        f"the image into it that matches the requested creativity and excitement levels."
    )


def compose(creativity_value: int, excitement_value: int, jinnification: bool) -> PromptPair:
    user = (
        "From an artistic perspective, try to describe the artistic cut the image "
        "cannot bring out without words. Write a short description that is a journey "
        "from outside the image and into it. "
        f"The excitement should be {band_for(excitement_value)}, "
        f"the creativity should be {band_for(creativity_value)}."
    )
    if jinnification:
        user += JINNIFICATION_ENDING
    return PromptPair(system=system_prompt(), user=user)
