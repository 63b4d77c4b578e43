# models/matrix/__init__.py
"""
Matrix-specific models: slot membership and stage history.
"""

from models.matrix.matrix_slot import MatrixSlot
from models.matrix.stage_history import StageHistory

__all__ = [
    'MatrixSlot',
    'StageHistory',
]
