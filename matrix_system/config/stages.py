# matrix_system/config/stages.py
"""
Stage catalog - ordered, priced tiers a member advances through by cycling.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class Stage:
    level: int
    name: str
    price: Decimal


STAGES = (
    Stage(1, "Stage 1 Adpack", Decimal("30")),
    Stage(2, "Stage 2 Adpack", Decimal("90")),
    Stage(3, "Stage 3 Adpack", Decimal("270")),
    Stage(4, "Stage 4 Adpack", Decimal("810")),
    Stage(5, "Stage 5 Adpack", Decimal("2430")),
    Stage(6, "Stage 6 Adpack", Decimal("7290")),
    Stage(7, "Stage 7 Adpack", Decimal("43740")),
)

STAGE_BY_LEVEL = {stage.level: stage for stage in STAGES}

# Constants
MIN_STAGE = STAGES[0].level
MAX_STAGE = STAGES[-1].level


def getStageByLevel(level: int) -> Optional[Stage]:
    """Return the stage with the given level, or None."""
    return STAGE_BY_LEVEL.get(level)


def getNextStage(currentLevel: int) -> Optional[Stage]:
    """Return the stage right after currentLevel; None at the last stage."""
    return STAGE_BY_LEVEL.get(currentLevel + 1)


def getStagePrice(level: int) -> Decimal:
    stage = getStageByLevel(level)
    if not stage:
        raise ValueError(f"Unknown stage level {level}")
    return stage.price
