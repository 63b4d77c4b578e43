# models/matrix/stage_history.py
"""
StageHistory model - tracks stage advancements after matrix cycles.
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from models.base import Base


class StageHistory(Base):
    __tablename__ = 'stage_history'

    historyID = Column(Integer, primary_key=True, autoincrement=True)
    createdAt = Column(DateTime, nullable=False)  # Время движка, не реальное

    # Relations
    memberID = Column(String, ForeignKey('members.memberID'), nullable=False, index=True)

    # Stage details
    previousStage = Column(Integer, nullable=False)
    newStage = Column(Integer, nullable=False)

    # Context at time of advancement
    cycleNumber = Column(Integer, nullable=False)  # Какой по счету цикл завершен
    uplineStage = Column(Integer, nullable=True)  # Stage прямого аплайна на момент цикла
    method = Column(String, nullable=False, default="cycle")  # cycle, upline_match

    # Relationships
    member = relationship('Member', backref='stage_history')

    def __repr__(self):
        return f"<StageHistory(member={self.memberID}, {self.previousStage} -> {self.newStage})>"
