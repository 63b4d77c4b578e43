# matrix_system/engine.py
"""
MatrixEngine - the operation contract of the matrix system.

One engine owns one database (in-memory by default) and one session.
Calls are expected to be serialized by the host; every mutating operation
either commits completely or rolls back.
"""
from decimal import Decimal
from typing import Optional, List, Dict, Any, Union
import logging

import config
from init import get_session, init_tables
from models import Member, StageHistory, MEMBER_STATUSES
from matrix_system.config.placement import PlacementPolicy, EarningsFormula
from matrix_system.config.stages import MIN_STAGE
from matrix_system.events.event_bus import EventBus, MatrixEvents
from matrix_system.services.cycle_service import CycleService, CycleResult
from matrix_system.services.matrix_store import MatrixStore
from matrix_system.services.placement_service import PlacementService, PlacementStrategy, Placement
from matrix_system.services.position_allocator import openSlots
from matrix_system.services.stats_service import StatsService, MatrixStats
from matrix_system.utils.id_generator import MemberIdGenerator
from matrix_system.utils.time_machine import TimeMachine

logger = logging.getLogger(__name__)


def normalizePosition(position) -> Optional[tuple]:
    """Accept {"level", "slot"} dicts or (level, slot) pairs."""
    if position is None:
        return None
    if isinstance(position, dict):
        return int(position["level"]), int(position["slot"])
    level, slot = position
    return int(level), int(slot)


class MatrixEngine:
    """Matrix placement and cycling engine."""

    def __init__(
            self,
            databaseUrl: Optional[str] = None,
            policy: Union[PlacementPolicy, str, PlacementStrategy, None] = None,
            mirrorToRecruiter: Optional[bool] = None,
            earningsFormula: Union[EarningsFormula, str, None] = None,
            flatEarningsPerMember: Optional[Decimal] = None,
            clock: Optional[TimeMachine] = None,
            eventBus: Optional[EventBus] = None
    ):
        sessionFactory, self._dbEngine = get_session(databaseUrl)
        init_tables(self._dbEngine)
        self.session = sessionFactory()

        self.clock = clock or TimeMachine()
        self.bus = eventBus or EventBus()
        self.ids = MemberIdGenerator(self.clock)

        self.store = MatrixStore(self.session)
        self.placement = PlacementService(
            self.store,
            policy if policy is not None else config.PLACEMENT_POLICY,
            config.MIRROR_TO_RECRUITER if mirrorToRecruiter is None else mirrorToRecruiter
        )
        self.cycles = CycleService(self.store, self.clock, self.bus)
        self.stats = StatsService(
            self.store,
            earningsFormula or config.EARNINGS_FORMULA,
            flatEarningsPerMember if flatEarningsPerMember is not None else config.FLAT_EARNINGS_PER_MEMBER
        )

        self.currentViewId: Optional[str] = None
        self.lastCycle: Optional[CycleResult] = None

        logger.info(
            f"Matrix engine ready: policy={self.placement.policy}, "
            f"mirror={self.placement.mirrorToRecruiter}, earnings={self.stats.formula.value}"
        )

    # --- lifecycle -----------------------------------------------------

    def close(self):
        self.session.close()
        self._dbEngine.dispose()

    def __enter__(self):
        return self

    def __exit__(self, excType, excValue, traceback):
        self.close()

    # --- placement -----------------------------------------------------

    def addMember(
            self,
            name: str,
            email: Optional[str] = None,
            phone: Optional[str] = None,
            recruiterId: Optional[str] = None,
            desiredPosition=None,
            status: Optional[str] = None
    ) -> Member:
        """
        Place a new member into the network.
        The first member becomes the root; everybody else goes through the
        placement policy. Raises MemberNotFoundError or MatrixFullError.
        """
        if not name:
            raise ValueError("Member name is required")
        if status and status not in MEMBER_STATUSES:
            raise ValueError(f"Invalid status {status!r}")

        placement = self.placement.resolve(
            recruiterRef=recruiterId,
            currentViewId=self.currentViewId,
            desiredPosition=normalizePosition(desiredPosition)
        )

        try:
            if placement.isRoot:
                member = self._createRoot(name, email, phone, status)
                cycle = None
            else:
                member = self._createPlaced(name, email, phone, placement)
                self.session.flush()
                cycle = self.cycles.checkAndCycle(placement.ownerId)

            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        self.lastCycle = cycle
        self.bus.emit(MatrixEvents.MEMBER_PLACED, {
            "memberId": member.memberID,
            "ownerId": placement.ownerId,
            "level": placement.level,
            "slot": placement.slot,
            "parentId": placement.parentId,
            "recruiterId": placement.recruiterId,
            "isSpillover": placement.isSpillover
        })
        if placement.mirror:
            self.bus.emit(MatrixEvents.MEMBER_MIRRORED, {
                "memberId": member.memberID,
                "ownerId": placement.mirror.ownerId,
                "level": placement.mirror.level,
                "slot": placement.mirror.slot
            })

        return member

    def _createRoot(self, name, email, phone, status) -> Member:
        now = self.clock.now
        member = Member(
            memberID=self.ids.nextId(),
            joinDate=now,
            createdAt=now,
            updatedAt=now,
            name=name,
            email=email,
            phone=phone,
            level=0,
            slot=0,
            parentID=None,
            ownerID=None,
            status=status or "active",
            stage=MIN_STAGE,
            cycleCount=0
        )
        self.store.insert(member)
        logger.info(f"Root member {member.memberID} ({name}) created")
        return member

    def _createPlaced(self, name, email, phone, placement: Placement) -> Member:
        recruiter = self.store.requireMember(placement.recruiterId)
        owner = self.store.requireMember(placement.ownerId)

        now = self.clock.now
        member = Member(
            memberID=self.ids.nextId(),
            joinDate=now,
            createdAt=now,
            updatedAt=now,
            name=name,
            email=email,
            phone=phone,
            level=placement.level,
            slot=placement.slot,
            parentID=placement.parentId,
            ownerID=owner.memberID,
            status="active",
            sponsor=recruiter.name,
            stage=recruiter.stage,
            directUplineID=recruiter.memberID,
            cycleCount=0
        )
        self.store.insert(member)
        self.store.addToMatrix(
            owner, member, placement.level, placement.slot, placement.parentId, createdAt=now
        )

        if placement.mirror:
            self.store.addToMatrix(
                recruiter,
                member,
                placement.mirror.level,
                placement.mirror.slot,
                placement.mirror.parentId,
                isPrimary=False,
                createdAt=now
            )

        logger.info(
            f"Member {member.memberID} ({name}) placed in matrix of {owner.memberID} "
            f"at {placement.level}/{placement.slot}, recruiter {recruiter.memberID}"
        )
        return member

    # --- edits ---------------------------------------------------------

    def updateMember(self, memberId: str, **fields) -> Member:
        try:
            member = self.store.updateById(memberId, fields)
            member.updatedAt = self.clock.now
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        self.bus.emit(MatrixEvents.MEMBER_UPDATED, {"memberId": memberId, "fields": sorted(fields)})
        return member

    def setMemberStatus(self, memberId: str, status: str) -> Member:
        try:
            member = self.store.setStatus(memberId, status)
            member.updatedAt = self.clock.now
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        self.bus.emit(MatrixEvents.MEMBER_STATUS_CHANGED, {"memberId": memberId, "status": status})
        return member

    # --- views ---------------------------------------------------------

    def setCurrentView(self, memberId: Optional[str]):
        """Select whose matrix is looked at; None goes back to the root."""
        if memberId is not None:
            self.store.requireMember(memberId)
        self.currentViewId = memberId

    def getCurrentViewMatrix(self) -> List[Member]:
        return [row.member for row in self.store.currentView(self.currentViewId)]

    def getAvailablePositions(self, viewId: Optional[str] = None) -> List[Dict[str, int]]:
        occupants = self.store.currentView(viewId or self.currentViewId)
        return [{"level": level, "slot": slot} for level, slot in openSlots(occupants)]

    def getStats(self, viewId: Optional[str] = None) -> MatrixStats:
        return self.stats.getStats(viewId or self.currentViewId)

    # --- lookups -------------------------------------------------------

    def getRoot(self) -> Optional[Member]:
        return self.store.getRoot()

    def getMember(self, memberId: str) -> Optional[Member]:
        return self.store.getMember(memberId)

    def getMembers(self) -> List[Member]:
        return self.store.registry()

    def getMatrix(self, ownerId: str) -> List[Dict[str, Any]]:
        """Live matrix of the owner with per-slot positions, recruiter copies last."""
        return [
            {
                "level": row.level,
                "slot": row.slot,
                "parentId": row.parentID,
                "isPrimary": row.isPrimary,
                "member": row.member,
            }
            for row in self.store.findOwnerMatrix(ownerId, isPrimary=None)
        ]

    def getStageHistory(self, memberId: str) -> List[StageHistory]:
        self.store.requireMember(memberId)
        return self.store.stageHistory(memberId)

    def getEarnings(self, memberId: str) -> Decimal:
        return self.stats.memberEarnings(memberId)

    def exportSnapshot(self) -> Dict[str, Any]:
        """JSON-ready dump of the whole network."""
        root = self.store.getRoot()
        return {
            "rootMember": self._memberSnapshot(root) if root else None,
            "members": [self._memberSnapshot(member) for member in self.store.registry()],
            "stats": self.getStats().toDict(),
            "exportDate": self.clock.now.isoformat(),
            "matrixType": config.MATRIX_TYPE,
        }

    def _memberSnapshot(self, member: Member) -> Dict[str, Any]:
        data = member.toDict()
        data["earnings"] = str(self.stats.memberEarnings(member.memberID))
        data["personalMatrix"] = {
            "members": [
                {"id": row.memberID, "level": row.level, "slot": row.slot, "parentId": row.parentID}
                for row in self.store.findOwnerMatrix(member.memberID)
            ]
        }
        return data

