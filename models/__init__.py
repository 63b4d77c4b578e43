# models/__init__.py
"""
Database models for the matrix engine.
Import all models here so metadata is complete before create_all.
"""

# Base and mixins
from models.base import Base, AuditMixin

# Core models
from models.member import Member, MEMBER_STATUSES, EDITABLE_FIELDS

# Matrix models
from models.matrix.matrix_slot import MatrixSlot
from models.matrix.stage_history import StageHistory

__all__ = [
    # Base
    'Base',
    'AuditMixin',

    # Core
    'Member',
    'MEMBER_STATUSES',
    'EDITABLE_FIELDS',

    # Matrix
    'MatrixSlot',
    'StageHistory',
]
