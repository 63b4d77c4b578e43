# matrix_system/services/placement_service.py
"""
Placement resolver - decides which matrix receives a new member and where.

Resolution never touches the session: it only reads the store and returns a
Placement, so a rejected request leaves nothing behind.
"""
from dataclasses import dataclass
from typing import Optional, Tuple, Union, List
import logging

from models import Member, MatrixSlot
from matrix_system.config.placement import PlacementPolicy, ROOT_LEVEL, ROOT_SLOT
from matrix_system.errors import MemberNotFoundError, MatrixOwnerNotFoundError, MatrixFullError
from matrix_system.services.matrix_store import MatrixStore
from matrix_system.services.position_allocator import (
    Position,
    isAllocatable,
    isValidPosition,
    level1ParentSlotFor,
    nextAllocatableSlot,
    occupiedPositions,
)

logger = logging.getLogger(__name__)


@dataclass
class SlotChoice:
    ownerId: str
    level: int
    slot: int
    parentId: Optional[str]


@dataclass
class Placement:
    ownerId: Optional[str]
    level: int
    slot: int
    parentId: Optional[str]
    recruiterId: Optional[str]
    isRoot: bool = False
    mirror: Optional[SlotChoice] = None

    @property
    def isSpillover(self) -> bool:
        return not self.isRoot and self.ownerId != self.recruiterId


class PlacementStrategy:
    """Picks the owner matrix and slot for a member brought in by recruiter."""

    policy: Optional[PlacementPolicy] = None

    def findSlot(
            self,
            service: "PlacementService",
            recruiter: Member,
            root: Member,
            desired: Optional[Position]
    ) -> Tuple[Member, Position]:
        raise NotImplementedError


class BubbleUpStrategy(PlacementStrategy):
    """
    The new member lands one level up: in the matrix of the recruiter's
    structural parent. A full matrix passes the member further up the
    parent chain until the root.
    """

    policy = PlacementPolicy.BUBBLE_UP

    def findSlot(self, service, recruiter, root, desired):
        store = service.store

        if recruiter.memberID == root.memberID or not recruiter.parentID:
            owner = root
        else:
            owner = store.getMember(recruiter.parentID)
            if not owner:
                raise MatrixOwnerNotFoundError(recruiter.parentID)

        candidate = owner
        visited = set()
        while candidate.memberID not in visited:
            visited.add(candidate.memberID)

            position = service.chooseSlot(
                store.findOwnerMatrix(candidate.memberID),
                desired if candidate is owner else None
            )
            if position:
                if candidate is not owner:
                    logger.info(f"Matrix of {owner.memberID} is full, passed up to {candidate.memberID}")
                return candidate, position

            if candidate.isRoot or not candidate.parentID:
                break

            parent = store.getMember(candidate.parentID)
            if not parent:
                raise MatrixOwnerNotFoundError(candidate.parentID)
            candidate = parent

        raise MatrixFullError(owner.memberID)


class DirectSponsorStrategy(PlacementStrategy):
    """The new member lands in the recruiter's own matrix."""

    policy = PlacementPolicy.DIRECT_SPONSOR

    def findSlot(self, service, recruiter, root, desired):
        position = service.chooseSlot(service.store.findOwnerMatrix(recruiter.memberID), desired)
        if not position:
            raise MatrixFullError(recruiter.memberID)
        return recruiter, position


class SpilloverStrategy(PlacementStrategy):
    """Breadth-first search through the recruiter's downline for an open matrix."""

    policy = PlacementPolicy.SPILLOVER

    def findSlot(self, service, recruiter, root, desired):
        for candidate in service.store.downline(recruiter.memberID):
            position = service.chooseSlot(
                service.store.findOwnerMatrix(candidate.memberID),
                desired if candidate is recruiter else None
            )
            if position:
                return candidate, position

        raise MatrixFullError(recruiter.memberID)


class FlatStrategy(PlacementStrategy):
    """One global matrix owned by the root."""

    policy = PlacementPolicy.FLAT

    def findSlot(self, service, recruiter, root, desired):
        position = service.chooseSlot(service.store.findOwnerMatrix(root.memberID), desired)
        if not position:
            raise MatrixFullError(root.memberID)
        return root, position


STRATEGIES = {
    PlacementPolicy.BUBBLE_UP: BubbleUpStrategy,
    PlacementPolicy.DIRECT_SPONSOR: DirectSponsorStrategy,
    PlacementPolicy.SPILLOVER: SpilloverStrategy,
    PlacementPolicy.FLAT: FlatStrategy,
}


def getStrategy(policy: Union[PlacementPolicy, str, PlacementStrategy, None]) -> PlacementStrategy:
    if isinstance(policy, PlacementStrategy):
        return policy
    if policy is None:
        policy = PlacementPolicy.BUBBLE_UP
    if isinstance(policy, str):
        try:
            policy = PlacementPolicy(policy)
        except ValueError:
            raise ValueError(f"Unknown placement policy {policy!r}")
    return STRATEGIES[policy]()


class PlacementService:
    """Service resolving placements under the active policy."""

    def __init__(
            self,
            store: MatrixStore,
            policy: Union[PlacementPolicy, str, PlacementStrategy, None] = None,
            mirrorToRecruiter: bool = True
    ):
        self.store = store
        self.strategy = getStrategy(policy)
        self.mirrorToRecruiter = mirrorToRecruiter

    @property
    def policy(self) -> Optional[PlacementPolicy]:
        return self.strategy.policy

    def resolve(
            self,
            recruiterRef: Optional[str] = None,
            currentViewId: Optional[str] = None,
            desiredPosition: Optional[Position] = None
    ) -> Placement:
        """
        Work out the placement for a new member.
        Raises MemberNotFoundError, MatrixOwnerNotFoundError or MatrixFullError.
        """
        root = self.store.getRoot()
        if not root:
            return Placement(
                ownerId=None,
                level=ROOT_LEVEL,
                slot=ROOT_SLOT,
                parentId=None,
                recruiterId=None,
                isRoot=True
            )

        recruiterId = recruiterRef or currentViewId or root.memberID
        recruiter = self.store.getMember(recruiterId)
        if not recruiter:
            raise MemberNotFoundError(recruiterId, f"Recruiter {recruiterId} not found")

        owner, (level, slot) = self.strategy.findSlot(self, recruiter, root, desiredPosition)
        occupants = self.store.findOwnerMatrix(owner.memberID)

        placement = Placement(
            ownerId=owner.memberID,
            level=level,
            slot=slot,
            parentId=self.parentFor(owner.memberID, occupants, level, slot),
            recruiterId=recruiter.memberID
        )

        if self.mirrorToRecruiter and recruiter.memberID != owner.memberID:
            placement.mirror = self.resolveMirror(recruiter)

        logger.debug(
            f"Resolved placement: owner={placement.ownerId} pos={level}/{slot} "
            f"parent={placement.parentId} recruiter={recruiter.memberID}"
        )
        return placement

    def resolveMirror(self, recruiter: Member) -> Optional[SlotChoice]:
        """
        Secondary copy in the recruiter's own matrix; skipped when it has no room.
        Copies are allocated among the recruiter's other copies and never take
        an authoritative slot.
        """
        occupants = self.store.mirrorCopies(recruiter.memberID)
        position = self.chooseSlot(occupants, None)
        if not position:
            logger.warning(f"No room for mirror copy in matrix of {recruiter.memberID}, skipped")
            return None

        level, slot = position
        return SlotChoice(
            ownerId=recruiter.memberID,
            level=level,
            slot=slot,
            parentId=self.parentFor(recruiter.memberID, occupants, level, slot)
        )

    def chooseSlot(self, occupants: List[MatrixSlot], desired: Optional[Position]) -> Optional[Position]:
        """Desired position when it is free and allocatable, else the next allocatable one."""
        if desired and isValidPosition(*desired) and isAllocatable(desired, occupiedPositions(occupants)):
            return desired
        return nextAllocatableSlot(occupants)

    @staticmethod
    def parentFor(ownerId: str, occupants: List[MatrixSlot], level: int, slot: int) -> Optional[str]:
        """Level-1 slots hang under the owner, level-2 slots under their level-1 occupant."""
        if level == 1:
            return ownerId

        parentSlot = level1ParentSlotFor(slot)
        for row in occupants:
            if row.level == 1 and row.slot == parentSlot:
                return row.memberID
        return None
