# matrix_system/errors.py
"""
Request-scoped errors raised by the matrix engine.
"""
from typing import Optional


class MatrixError(Exception):
    """Base class for rejected engine requests."""


class MemberNotFoundError(MatrixError):
    """Referenced recruiter or member does not exist."""

    def __init__(self, memberId: Optional[str], message: Optional[str] = None):
        self.memberId = memberId
        super().__init__(message or f"Member {memberId} not found")


class MatrixOwnerNotFoundError(MemberNotFoundError):
    """Resolved matrix owner id points to no member."""

    def __init__(self, ownerId: Optional[str]):
        super().__init__(ownerId, f"Matrix owner {ownerId} not found")


class MatrixFullError(MatrixError):
    """No slot available under the resolved owner."""

    def __init__(self, ownerId: Optional[str]):
        self.ownerId = ownerId
        super().__init__(f"Matrix of {ownerId} is full - no available positions")

