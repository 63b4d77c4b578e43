# models/matrix/matrix_slot.py
"""
MatrixSlot model - membership of a member in some owner's matrix.
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from models.base import Base


class MatrixSlot(Base):
    __tablename__ = 'matrix_slots'

    slotID = Column(Integer, primary_key=True, autoincrement=True)
    createdAt = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    # Relations
    ownerID = Column(String, ForeignKey('members.memberID'), nullable=False, index=True)
    memberID = Column(String, ForeignKey('members.memberID'), nullable=False, index=True)

    # Номер цикла владельца; живая матрица = cycle == owner.cycleCount
    cycle = Column(Integer, nullable=False, default=0)

    # Position inside the owner's matrix
    level = Column(Integer, nullable=False)  # 1 or 2
    slot = Column(Integer, nullable=False)  # 0..1 / 0..3
    parentID = Column(String, ForeignKey('members.memberID'), nullable=True)

    # Authoritative placement or recruiter's copy; copies have their own slot space
    isPrimary = Column(Boolean, nullable=False, default=True)

    # Stage of the owner at the moment of placement
    stage = Column(Integer, nullable=False, default=1)

    # Relationships
    owner = relationship('Member', foreign_keys=[ownerID])
    member = relationship('Member', foreign_keys=[memberID])

    __table_args__ = (
        UniqueConstraint('ownerID', 'cycle', 'isPrimary', 'level', 'slot', name='uq_matrix_slot_position'),
    )

    def __repr__(self):
        return f"<MatrixSlot(owner={self.ownerID}, member={self.memberID}, pos={self.level}/{self.slot})>"
