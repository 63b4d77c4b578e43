# matrix_system/utils/id_generator.py
"""
Member id source: member-<epoch ms>-<9 base36 chars>.
"""
import secrets
import string

from matrix_system.utils.time_machine import TimeMachine

ALPHABET = string.digits + string.ascii_lowercase
SUFFIX_LENGTH = 9


class MemberIdGenerator:
    """Monotonic id source; the millisecond part never goes backwards."""

    def __init__(self, clock: TimeMachine):
        self.clock = clock
        self._lastMillis = 0
        self._issued = set()

    def nextId(self) -> str:
        millis = int(self.clock.now.timestamp() * 1000)
        # Virtual time can stand still or jump back
        if millis < self._lastMillis:
            millis = self._lastMillis
        if millis > self._lastMillis:
            # Only ids of the same millisecond can collide
            self._issued.clear()
        self._lastMillis = millis

        while True:
            suffix = ''.join(secrets.choice(ALPHABET) for _ in range(SUFFIX_LENGTH))
            memberId = f"member-{millis}-{suffix}"
            if memberId not in self._issued:
                self._issued.add(memberId)
                return memberId
