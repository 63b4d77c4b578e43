# matrix_system/services/stats_service.py
"""
Statistics and derived earnings for the matrix network.
Earnings are never stored on members; they are computed from placements.
"""
from dataclasses import dataclass, asdict
from decimal import Decimal
from typing import Optional, Union, Dict, Any
import logging

from models import MatrixSlot
from matrix_system.config.placement import EarningsFormula, MATRIX_SIZE
from matrix_system.config.stages import getStagePrice
from matrix_system.services.matrix_store import MatrixStore
from matrix_system.services.position_allocator import openSlots

logger = logging.getLogger(__name__)


@dataclass
class MatrixStats:
    totalMembers: int
    activeMembers: int
    pendingMembers: int
    totalEarnings: Decimal
    matrixFull: bool
    availablePositions: int
    currentMatrixMemberCount: int

    def toDict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["totalEarnings"] = str(self.totalEarnings)
        return data


class StatsService:
    """Service for network statistics and earnings."""

    def __init__(
            self,
            store: MatrixStore,
            formula: Union[EarningsFormula, str, None] = None,
            flatRate: Decimal = Decimal("30")
    ):
        self.store = store
        if isinstance(formula, str):
            formula = EarningsFormula(formula)
        self.formula = formula or EarningsFormula.PAYLINE
        self.flatRate = Decimal(str(flatRate))

    def memberEarnings(self, memberId: str) -> Decimal:
        """Earnings credited to one member under the active formula."""
        member = self.store.requireMember(memberId)

        if self.formula == EarningsFormula.FLAT:
            # Flat formula only credits the root with the whole network
            if not member.isRoot:
                return Decimal("0")
            return self.flatRate * (self.store.countMembers() - 1)

        # Payline: every authoritative level-2 placement pays the owner's stage price
        rows = self.store.session.query(MatrixSlot).filter_by(
            ownerID=member.memberID,
            isPrimary=True,
            level=2
        ).all()
        return sum((getStagePrice(row.stage) for row in rows), Decimal("0"))

    def totalEarnings(self) -> Decimal:
        if self.formula == EarningsFormula.FLAT:
            return self.flatRate * max(self.store.countMembers() - 1, 0)

        rows = self.store.session.query(MatrixSlot).filter_by(
            isPrimary=True,
            level=2
        ).all()
        return sum((getStagePrice(row.stage) for row in rows), Decimal("0"))

    def getStats(self, viewId: Optional[str] = None) -> MatrixStats:
        occupants = self.store.currentView(viewId)
        available = len(openSlots(occupants))

        stats = MatrixStats(
            totalMembers=self.store.countMembers(),
            activeMembers=self.store.countMembers("active"),
            pendingMembers=self.store.countMembers("pending"),
            totalEarnings=self.totalEarnings(),
            matrixFull=len(occupants) >= MATRIX_SIZE,
            availablePositions=available,
            currentMatrixMemberCount=len(occupants)
        )

        logger.debug(f"Stats for view {viewId or 'root'}: {stats}")
        return stats

    def earningsBreakdown(self) -> Dict[str, Decimal]:
        """Earnings per member id, members with nothing earned skipped."""
        breakdown = {}
        for member in self.store.allMembers():
            amount = self.memberEarnings(member.memberID)
            if amount:
                breakdown[member.memberID] = amount
        return breakdown
