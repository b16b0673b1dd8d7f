"""
Time sources for the rewards ledger.

The ledger has no clock of its own: it reads the current block timestamp
from whatever clock it was deployed on. Chain is a simulated chain whose
time only moves when a test or scenario advances it; SystemClock follows
wall-clock time.
"""

import time
import logging
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class SystemClock:
    """Wall-clock time in whole seconds"""

    def __init__(self):
        self._nonces: Dict[str, int] = {}

    def now(self) -> int:
        return int(time.time())

    def mine(self) -> int:
        return self.now()

    def next_nonce(self, address: str) -> int:
        nonce = self._nonces.get(address, 0)
        self._nonces[address] = nonce + 1
        return nonce


class Chain(SystemClock):
    """
    Simulated block time, advanced explicitly.

    block_time is added by mine() before every state-changing transaction,
    like an automining dev node. The default of 0 keeps every transaction
    in the same second until increase() is called.
    """

    def __init__(self, timestamp: Optional[int] = None, block_time: int = 0):
        super().__init__()
        if block_time < 0:
            raise ValueError(f"Invalid block time {block_time}")
        self.timestamp = int(time.time()) if timestamp is None else int(timestamp)
        self.block_time = int(block_time)

    def now(self) -> int:
        return self.timestamp

    def mine(self) -> int:
        """Open a new block and return its timestamp"""
        self.timestamp += self.block_time
        return self.timestamp

    def increase(self, seconds: int) -> int:
        """Move time forward by seconds and return the new timestamp"""
        if seconds < 0:
            raise ValueError(f"Cannot move time backwards by {seconds}s")
        self.timestamp += int(seconds)
        logger.debug(f"⏩ Chain time +{seconds}s -> {self.timestamp}")
        return self.timestamp

    def increase_to(self, timestamp: int) -> int:
        if timestamp < self.timestamp:
            raise ValueError(f"Timestamp {timestamp} is before current time {self.timestamp}")
        return self.increase(timestamp - self.timestamp)
