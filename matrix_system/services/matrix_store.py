# matrix_system/services/matrix_store.py
"""
Matrix store - members table plus owner -> member slot index.
"""
from collections import deque
from datetime import datetime
from typing import Dict, Any, Iterator, List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import func
import logging

from models import Member, MatrixSlot, StageHistory, MEMBER_STATUSES, EDITABLE_FIELDS
from matrix_system.errors import MemberNotFoundError

logger = logging.getLogger(__name__)


class MatrixStore:
    """Data access for members and their personal matrices."""

    def __init__(self, session: Session):
        self.session = session

    # --- members -------------------------------------------------------

    def getRoot(self) -> Optional[Member]:
        return self.session.query(Member).filter_by(level=0).first()

    def getMember(self, memberId: Optional[str]) -> Optional[Member]:
        if not memberId:
            return None
        return self.session.get(Member, memberId)

    def requireMember(self, memberId: Optional[str]) -> Member:
        member = self.getMember(memberId)
        if not member:
            raise MemberNotFoundError(memberId)
        return member

    def allMembers(self) -> List[Member]:
        """Root first, then everyone else in join order."""
        return self.session.query(Member).order_by(Member.joinOrder).all()

    def registry(self) -> List[Member]:
        """All non-root members in join order."""
        return self.session.query(Member).filter(
            Member.level != 0
        ).order_by(Member.joinOrder).all()

    def countMembers(self, status: Optional[str] = None) -> int:
        query = self.session.query(func.count(Member.memberID))
        if status:
            query = query.filter(Member.status == status)
        return query.scalar() or 0

    def insert(self, member: Member) -> Member:
        """Add a new member; members are never removed."""
        member.joinOrder = self.countMembers()
        self.session.add(member)
        logger.debug(f"Inserted member {member.memberID} ({member.name})")
        return member

    def updateById(self, memberId: str, fields: Dict[str, Any]) -> Member:
        """
        Apply editable field updates to one member.
        Matrices reference members by id, so every view sees the change.
        """
        unknown = set(fields) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValueError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        if "status" in fields and fields["status"] not in MEMBER_STATUSES:
            raise ValueError(f"Invalid status {fields['status']!r}")

        if "name" in fields and not fields["name"]:
            raise ValueError("Member name is required")

        member = self.requireMember(memberId)
        for key, value in fields.items():
            setattr(member, key, value)

        logger.info(f"Member {memberId} updated: {', '.join(sorted(fields))}")
        return member

    def setStatus(self, memberId: str, status: str) -> Member:
        return self.updateById(memberId, {"status": status})

    # --- matrices ------------------------------------------------------

    def findOwnerMatrix(self, ownerId: str, isPrimary: Optional[bool] = True) -> List[MatrixSlot]:
        """
        Live slots of the owner's personal matrix in fill order.
        Authoritative placements by default; isPrimary=False gives the
        recruiter copies, None gives both.
        """
        owner = self.requireMember(ownerId)
        query = self.session.query(MatrixSlot).filter_by(
            ownerID=owner.memberID,
            cycle=owner.cycleCount
        )
        if isPrimary is not None:
            query = query.filter_by(isPrimary=isPrimary)
        return query.order_by(MatrixSlot.isPrimary.desc(), MatrixSlot.level, MatrixSlot.slot).all()

    def mirrorCopies(self, ownerId: str) -> List[MatrixSlot]:
        return self.findOwnerMatrix(ownerId, isPrimary=False)

    def matrixMembers(self, ownerId: str) -> List[Member]:
        return [row.member for row in self.findOwnerMatrix(ownerId)]

    def currentView(self, viewId: Optional[str] = None) -> List[MatrixSlot]:
        """Matrix being looked at; the root's matrix when nothing is selected."""
        if viewId:
            return self.findOwnerMatrix(viewId)

        root = self.getRoot()
        if not root:
            return []
        return self.findOwnerMatrix(root.memberID)

    def occupantAt(self, ownerId: str, level: int, slot: int) -> Optional[MatrixSlot]:
        for row in self.findOwnerMatrix(ownerId):
            if row.level == level and row.slot == slot:
                return row
        return None

    def addToMatrix(
            self,
            owner: Member,
            member: Member,
            level: int,
            slot: int,
            parentId: Optional[str],
            isPrimary: bool = True,
            createdAt: Optional[datetime] = None
    ) -> MatrixSlot:
        row = MatrixSlot(
            ownerID=owner.memberID,
            memberID=member.memberID,
            cycle=owner.cycleCount,
            level=level,
            slot=slot,
            parentID=parentId,
            isPrimary=isPrimary,
            stage=owner.stage
        )
        if createdAt:
            row.createdAt = createdAt
        self.session.add(row)

        logger.debug(
            f"Slot {level}/{slot} of {owner.memberID} -> {member.memberID} "
            f"({'primary' if isPrimary else 'mirror'})"
        )
        return row

    def clearMatrix(self, owner: Member):
        """Start a fresh matrix; rows of the old cycle stay as history."""
        owner.cycleCount = (owner.cycleCount or 0) + 1

    def primaryPlacements(self, ownerId: str) -> List[MatrixSlot]:
        """Authoritative placements in every cycle of the owner's matrix."""
        return self.session.query(MatrixSlot).filter_by(
            ownerID=ownerId,
            isPrimary=True
        ).order_by(MatrixSlot.cycle, MatrixSlot.level, MatrixSlot.slot).all()

    def downline(self, ownerId: str) -> Iterator[Member]:
        """Breadth-first walk over the owner and everyone placed under them."""
        start = self.requireMember(ownerId)
        queue = deque([start])
        seen = {start.memberID}

        while queue:
            current = queue.popleft()
            yield current

            for row in self.primaryPlacements(current.memberID):
                if row.memberID not in seen:
                    seen.add(row.memberID)
                    queue.append(row.member)

    def stageHistory(self, memberId: str) -> List[StageHistory]:
        return self.session.query(StageHistory).filter_by(
            memberID=memberId
        ).order_by(StageHistory.historyID).all()
