# models/member.py
"""
Member model - central entity of the matrix network.
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from models.base import Base, AuditMixin

MEMBER_STATUSES = ("active", "pending", "inactive")

# Поля, которые можно менять через updateMember
EDITABLE_FIELDS = ("name", "email", "phone", "sponsor", "status")


class Member(Base, AuditMixin):
    __tablename__ = 'members'

    # Primary identification
    memberID = Column(String, primary_key=True)
    joinDate = Column(DateTime, nullable=False)
    joinOrder = Column(Integer, nullable=False, index=True)  # Порядок вступления, 0 у root

    # Personal information
    name = Column(String, nullable=False)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)

    # Authoritative position (root: level 0, slot 0, без родителя)
    level = Column(Integer, nullable=False, default=0)
    slot = Column(Integer, nullable=False, default=0)
    parentID = Column(String, ForeignKey('members.memberID'), nullable=True)  # Структурный родитель
    ownerID = Column(String, ForeignKey('members.memberID'), nullable=True)  # Владелец матрицы

    # System fields
    status = Column(String, default="active", index=True)  # active, pending, inactive
    sponsor = Column(String, nullable=True)  # Имя рекрутера, только для отображения

    # Stage progression
    stage = Column(Integer, default=1, nullable=False)  # 1..7
    directUplineID = Column(String, ForeignKey('members.memberID'), nullable=True)  # Кто пригласил
    cycleCount = Column(Integer, default=0, nullable=False)  # Номер текущей (живой) матрицы

    @property
    def isRoot(self) -> bool:
        return self.level == 0

    @property
    def position(self) -> dict:
        return {"level": self.level, "slot": self.slot, "parentId": self.parentID}

    def toDict(self) -> dict:
        """Plain dict for exports and API responses."""
        return {
            "id": self.memberID,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "joinDate": self.joinDate.isoformat() if self.joinDate else None,
            "position": self.position,
            "ownerId": self.ownerID,
            "sponsor": self.sponsor,
            "status": self.status,
            "stage": self.stage,
            "directUplineId": self.directUplineID,
            "cycleCount": self.cycleCount,
        }

    def __repr__(self):
        return f"<Member(memberID={self.memberID}, name={self.name}, stage={self.stage})>"
