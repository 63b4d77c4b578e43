# matrix_system/services/cycle_service.py
"""
Cycling service - resets full matrices and advances their owners' stage.
"""
from dataclasses import dataclass
from typing import Optional
import logging

from models import Member, StageHistory
from matrix_system.config.stages import getNextStage, MAX_STAGE
from matrix_system.events.event_bus import EventBus, MatrixEvents
from matrix_system.services.matrix_store import MatrixStore
from matrix_system.services.position_allocator import isFull
from matrix_system.utils.time_machine import TimeMachine

logger = logging.getLogger(__name__)


@dataclass
class CycleResult:
    memberId: str
    previousStage: int
    newStage: int
    cycleNumber: int
    uplineStage: Optional[int]
    method: str


class CycleService:
    """Service for matrix cycling and stage progression."""

    def __init__(self, store: MatrixStore, clock: TimeMachine, bus: EventBus):
        self.store = store
        self.clock = clock
        self.bus = bus

    def getUplineStage(self, member: Member) -> Optional[int]:
        upline = self.store.getMember(member.directUplineID)
        return upline.stage if upline else None

    def computeTargetStage(self, member: Member) -> Optional[int]:
        """
        Stage the member moves to on its next cycle, None at the last stage.
        The member is pulled up to its direct upline's stage when the upline
        is already at or past the next stage.
        """
        nextStage = getNextStage(member.stage)
        if not nextStage:
            return None

        targetStage = nextStage.level
        uplineStage = self.getUplineStage(member)
        if uplineStage is not None and uplineStage >= targetStage:
            targetStage = uplineStage

        return min(targetStage, MAX_STAGE)

    def checkAndCycle(self, ownerId: str) -> Optional[CycleResult]:
        """
        Cycle the owner if its live matrix is full.
        Only authoritative placements count; recruiter copies never cycle.
        Returns the cycle result, or None when nothing happened.
        """
        owner = self.store.requireMember(ownerId)
        occupants = self.store.findOwnerMatrix(owner.memberID)
        if not isFull(occupants):
            return None

        targetStage = self.computeTargetStage(owner)
        if targetStage is None:
            logger.warning(
                f"Matrix of {owner.memberID} is full but stage {owner.stage} is final, no progression"
            )
            self.bus.emit(MatrixEvents.STAGE_TERMINAL, {
                "memberId": owner.memberID,
                "stage": owner.stage
            })
            return None

        return self._applyCycle(owner, targetStage)

    def _applyCycle(self, owner: Member, targetStage: int) -> CycleResult:
        previousStage = owner.stage
        uplineStage = self.getUplineStage(owner)
        nextStage = getNextStage(previousStage)
        method = "upline_match" if targetStage > nextStage.level else "cycle"

        owner.stage = targetStage
        owner.updatedAt = self.clock.now
        self.store.clearMatrix(owner)

        result = CycleResult(
            memberId=owner.memberID,
            previousStage=previousStage,
            newStage=targetStage,
            cycleNumber=owner.cycleCount,
            uplineStage=uplineStage,
            method=method
        )

        history = StageHistory(
            createdAt=self.clock.now,
            memberID=owner.memberID,
            previousStage=previousStage,
            newStage=targetStage,
            cycleNumber=result.cycleNumber,
            uplineStage=uplineStage,
            method=method
        )
        self.store.session.add(history)

        logger.info(
            f"Member {owner.memberID} cycled (#{result.cycleNumber}): "
            f"stage {previousStage} -> {targetStage} ({method})"
        )

        self.bus.emit(MatrixEvents.MATRIX_CYCLED, {
            "memberId": owner.memberID,
            "cycleNumber": result.cycleNumber
        })
        self.bus.emit(MatrixEvents.STAGE_ADVANCED, {
            "memberId": owner.memberID,
            "previousStage": previousStage,
            "newStage": targetStage,
            "method": method
        })

        return result
