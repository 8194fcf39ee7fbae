"""
Touchfile monitor used to trigger configuration reloads.

Touching the file (updating its modification time) signals that the
configuration should be reloaded. The file is checked lazily when the
configuration is accessed, never in the background, and checks are throttled
by a polling interval so repeated reads do not hit the file system.
"""

import logging
import time
from pathlib import Path
from typing import Callable, Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_MS = 10000


class Touchfile:
    """
    Rate-limited modification check for a single file.

    A monitor created without a path is disarmed: ``has_changed`` always
    returns False and no I/O is performed.
    """

    def __init__(
        self,
        path: Optional[Union[str, Path]],
        interval_ms: int = DEFAULT_INTERVAL_MS,
        clock: Callable[[], float] = time.time
    ):
        """
        Initialize the monitor.

        Args:
            path: File to watch, or None/empty to disarm the monitor
            interval_ms: Minimum time in milliseconds between file checks
            clock: Wall clock returning seconds
        """
        self.path: Optional[Path] = Path(path) if path else None
        self.interval_ms = max(0, int(interval_ms))
        self._clock = clock
        self._last_checked_ms = 0.0
        self._last_modified = 0.0

        if self.path is not None:
            self._last_checked_ms = self._now_ms()
            self._last_modified = self._read_modified() or 0.0

    @property
    def armed(self) -> bool:
        """Check if a file is configured."""
        return self.path is not None

    @property
    def last_modified(self) -> float:
        """Get the last recorded modification time of the file."""
        return self._last_modified

    def is_due(self) -> bool:
        """Check if the polling interval has elapsed since the last check."""
        if self.path is None:
            return False
        return self._now_ms() - self._last_checked_ms >= self.interval_ms

    def has_changed(self) -> bool:
        """
        Check if the file has been modified since the last detected change.

        Returns:
            True exactly once per detected modification
        """
        if not self.is_due():
            return False

        self._last_checked_ms = self._now_ms()

        modified = self._read_modified()
        if modified is None or modified <= self._last_modified:
            return False

        self._last_modified = modified
        logger.info(f"Touchfile changed: {self.path}")
        return True

    def _read_modified(self) -> Optional[float]:
        """Read the file modification time, or None if it cannot be read."""
        assert self.path is not None
        try:
            return self.path.stat().st_mtime
        except OSError as e:
            logger.debug(f"Cannot read touchfile {self.path}: {e}")
            return None

    def _now_ms(self) -> float:
        return self._clock() * 1000.0

    def __repr__(self) -> str:
        if self.path is None:
            return "Touchfile(disarmed)"
        return f"Touchfile({str(self.path)!r}, interval_ms={self.interval_ms})"
