# matrix_system/config/placement.py
"""
Placement and earnings configuration.
"""
from enum import Enum


class PlacementPolicy(Enum):
    BUBBLE_UP = "bubble_up"
    DIRECT_SPONSOR = "direct_sponsor"
    SPILLOVER = "spillover"
    FLAT = "flat"


class EarningsFormula(Enum):
    PAYLINE = "payline"
    FLAT = "flat"


# Matrix geometry
LEVEL1_SLOTS = 2
LEVEL2_SLOTS = 4
MATRIX_SIZE = LEVEL1_SLOTS + LEVEL2_SLOTS

# Root position
ROOT_LEVEL = 0
ROOT_SLOT = 0
