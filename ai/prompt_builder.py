# ai/prompt_builder.py
"""
Assembles the per-request system prompt: the base coach prompt plus,
at most, one age-band overlay.
"""
from __future__ import annotations

from dataclasses import dataclass

from ai.prompts.personas import CHILD_OVERLAY, TODDLER_OVERLAY, YOUTH_OVERLAY
from ai.prompts.system_coach import SYSTEM_COACH

SECTION_SEPARATOR = "\n\n"


@dataclass(frozen=True)
class AgeBand:
    name: str
    low: int
    high: int
    overlay: str

    def contains(self, age: int) -> bool:
        return self.low <= age <= self.high


# Checked in order; first match wins.
AGE_BANDS: tuple[AgeBand, ...] = (
    AgeBand("toddler", 2, 5, TODDLER_OVERLAY),
    AgeBand("child", 6, 10, CHILD_OVERLAY),
    AgeBand("youth", 11, 17, YOUTH_OVERLAY),
)


def select_age_band(age: int | None) -> AgeBand | None:
    """Return the band covering ``age``, or None when there is none."""
    if age is None:
        return None
    for band in AGE_BANDS:
        if band.contains(age):
            return band
    return None


def assemble_prompt(age: int | None) -> str:
    """Build the system prompt for a user of the given age.

    Unknown or out-of-range ages fall back to the base prompt alone.
    """
    band = select_age_band(age)
    if band is None:
        return SYSTEM_COACH
    return SYSTEM_COACH + SECTION_SEPARATOR + band.overlay
