"""Background thread that keeps a shared mirror up to date."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from pathlib import Path

from ipverse_mcp.asn_ip.state import SharedMirror
from ipverse_mcp.errors import MirrorError

logger = logging.getLogger(__name__)


class MirrorRefresher:
    """Calls ``SharedMirror.update()`` every *interval* seconds.

    Failed updates are logged and retried on the next tick. The callback,
    if given, receives every non-empty change set.
    """

    def __init__(
        self,
        mirror: SharedMirror,
        interval: float,
        callback: Callable[[list[Path]], None] | None = None,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self._mirror = mirror
        self._interval = interval
        self._callback = callback
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self.last_error: Exception | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(self) -> list[Path]:
        """Run a single update cycle. Returns [] if the update failed."""
        try:
            changed = self._mirror.update()
        except MirrorError as e:
            self.last_error = e
            logger.warning("Mirror update failed (%s): %s", type(e).__name__, e)
            return []
        except Exception as e:
            self.last_error = e
            logger.exception("Unexpected error while updating %s", self._mirror.repo_path)
            return []
        self.last_error = None
        if changed:
            logger.info("Mirror refresh changed %d files", len(changed))
            if self._callback is not None:
                try:
                    self._callback(changed)
                except Exception:
                    logger.exception("Refresh callback failed")
        return changed

    def _loop(self) -> None:
        while not self._stop.wait(self._interval):
            self.run_once()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._loop, name="ipverse-mirror-refresh", daemon=True
        )
        self._thread.start()
        logger.info("Refreshing %s every %ss", self._mirror.repo_path, self._interval)

    def stop(self, timeout: float | None = None) -> None:
        """Signal the loop to exit. An update already in flight still completes."""
        if self._thread is None:
            return
        self._stop.set()
        self._thread.join(timeout=timeout)
        self._thread = None
        logger.info("Stopped refreshing %s", self._mirror.repo_path)
