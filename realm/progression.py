"""Progression rules: experience to level, creation-time attribute preview."""

from dataclasses import dataclass

EXPERIENCE_PER_LEVEL = 100

BASE_HEALTH = 20
BASE_MANA = 10
ATTRIBUTE_BASELINE = 10
POINTS_PER_ATTRIBUTE = 2


@dataclass(frozen=True)
class AttributePreview:
    base_health: int
    base_mana: int


def level_from_experience(experience: int) -> int:
    """Level for a running experience total. Level bands are 100 wide."""
    return experience // EXPERIENCE_PER_LEVEL + 1


def level_for_experience(
    current_level: int,
    current_experience: int,
    experience_gained: int,
) -> int:
    """Level after gaining experience.

    Experience is a running total, never reset per level, so the result
    depends only on the new total. ``current_level`` is ignored: a stored
    level that disagrees with the total is corrected, even when nothing
    was gained.
    """
    return level_from_experience(current_experience + experience_gained)


def gain_experience(experience: int, gained: int) -> tuple[int, int]:
    """Apply an experience gain. Returns ``(new_experience, new_level)``."""
    if gained < 0:
        raise ValueError(f"Experience gain must be non-negative, got {gained}")
    total = experience + gained
    return total, level_from_experience(total)


def experience_progress(experience: int) -> tuple[int, int]:
    """Experience earned inside the current level band, and the band width."""
    return experience % EXPERIENCE_PER_LEVEL, EXPERIENCE_PER_LEVEL


def attribute_preview(constitution: int, intelligence: int) -> AttributePreview:
    """Starting health and mana pools for a new character."""
    return AttributePreview(
        base_health=BASE_HEALTH + (constitution - ATTRIBUTE_BASELINE) * POINTS_PER_ATTRIBUTE,
        base_mana=BASE_MANA + (intelligence - ATTRIBUTE_BASELINE) * POINTS_PER_ATTRIBUTE,
    )
