# matrix_system/services/position_allocator.py
"""
Slot arithmetic for a 2x2 matrix: 2 slots on level 1, 4 slots on level 2.

Every function here is pure and works with any occupant objects that carry
``level`` and ``slot`` attributes (members, matrix slot rows, test doubles).
The canonical fill order is left to right, level by level.
"""
from typing import Iterable, List, Optional, Set, Tuple

from matrix_system.config.placement import LEVEL1_SLOTS, LEVEL2_SLOTS, MATRIX_SIZE

Position = Tuple[int, int]

SLOT_ORDER: Tuple[Position, ...] = tuple(
    [(1, slot) for slot in range(LEVEL1_SLOTS)] +
    [(2, slot) for slot in range(LEVEL2_SLOTS)]
)


def occupiedPositions(occupants: Iterable) -> Set[Position]:
    return {(occupant.level, occupant.slot) for occupant in occupants}


def isValidPosition(level: int, slot: int) -> bool:
    return (level, slot) in SLOT_ORDER


def level1ParentSlotFor(level2Slot: int) -> int:
    """Level-2 slots 0,1 hang under level-1 slot 0; slots 2,3 under slot 1."""
    if not 0 <= level2Slot < LEVEL2_SLOTS:
        raise ValueError(f"Invalid level-2 slot {level2Slot}")
    return level2Slot // 2


def openSlots(occupants: Iterable) -> List[Position]:
    """All unoccupied positions in fill order."""
    taken = occupiedPositions(occupants)
    return [position for position in SLOT_ORDER if position not in taken]


def nextOpenSlot(occupants: Iterable) -> Optional[Position]:
    """First unoccupied position in fill order, None when the matrix is full."""
    free = openSlots(occupants)
    return free[0] if free else None


def isAllocatable(position: Position, taken: Set[Position]) -> bool:
    level, slot = position
    if position in taken or not isValidPosition(level, slot):
        return False
    if level == 2:
        return (1, level1ParentSlotFor(slot)) in taken
    return True


def allocatableSlots(occupants: Iterable) -> List[Position]:
    """Open positions whose level-1 parent, if any, is already filled."""
    taken = occupiedPositions(occupants)
    return [position for position in SLOT_ORDER if isAllocatable(position, taken)]


def nextAllocatableSlot(occupants: Iterable) -> Optional[Position]:
    free = allocatableSlots(occupants)
    return free[0] if free else None


def isFull(occupants) -> bool:
    return len(occupants) >= MATRIX_SIZE
