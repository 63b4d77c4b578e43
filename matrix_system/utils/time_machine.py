# matrix_system/utils/time_machine.py
"""
Time machine - controls the clock the engine stamps members with.
"""
from datetime import datetime, timezone, timedelta
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class TimeMachine:
    """Engine clock, real or virtual."""

    def __init__(self, virtualTime: Optional[datetime] = None):
        self._virtualTime: Optional[datetime] = None
        self._isTestMode: bool = False
        if virtualTime is not None:
            self.setTime(virtualTime)

    @property
    def now(self) -> datetime:
        """Get current system time (real or virtual)."""
        if self._isTestMode and self._virtualTime:
            return self._virtualTime
        return datetime.now(timezone.utc)

    @property
    def isTestMode(self) -> bool:
        return self._isTestMode

    def setTime(self, newTime: datetime):
        """Set virtual time for testing."""
        self._isTestMode = True
        self._virtualTime = newTime
        logger.info(f"Virtual time set to {newTime}")

    def advanceTime(self, days: int = 0, hours: int = 0, seconds: int = 0, milliseconds: int = 0):
        """Advance virtual time forward."""
        if not self._isTestMode:
            raise ValueError("Cannot advance time when not in test mode")

        self._virtualTime += timedelta(
            days=days, hours=hours, seconds=seconds, milliseconds=milliseconds
        )
        logger.debug(f"Time advanced to {self._virtualTime}")

    def resetToRealTime(self):
        """Return to real time."""
        self._isTestMode = False
        self._virtualTime = None
        logger.info("Returned to real time")
