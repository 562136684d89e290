"""
Memory usage reporting for ArcWeaver runs.

Samples the peak resident set size of the process and logs it.
"""

import logging
import sys

logger = logging.getLogger(__name__)


class MemoryMeter:
    """
    Log process memory at chosen points of a run.

    Uses the peak resident set size from resource.getrusage. Where the
    resource module is unavailable, reporting is a no-op apart from a
    single informational message.
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self._resource = None
        self._warned = False
        if enabled:
            try:
                import resource
                self._resource = resource
            except ImportError:
                self._resource = None

    def peak_rss_mib(self) -> float:
        """Peak resident set size in MiB, or 0.0 if unavailable."""
        if self._resource is None:
            return 0.0
        peak = self._resource.getrusage(self._resource.RUSAGE_SELF).ru_maxrss
        # ru_maxrss is bytes on macOS, KiB elsewhere
        if sys.platform == 'darwin':
            return peak / (1024 * 1024)
        return peak / 1024

    def report(self, label: str = ""):
        if not self.enabled:
            return
        if self._resource is None:
            if not self._warned:
                logger.info("Memory reporting only supported on Unix-like systems")
                self._warned = True
            return

        suffix = f" ({label})" if label else ""
        logger.info(f"Peak memory usage: {self.peak_rss_mib():.0f}MiB{suffix}")
