"""
Background vocabulary refresher.

A single daemon thread checks the seed file every ``refresh_interval``
seconds and reloads it when its modification time changed. Reload
failures are logged; the thread keeps going and retries on the next tick.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional

from autosuggest.config.settings import VocabularySettings
from autosuggest.engine.models import IngestReport
from autosuggest.vocabulary.loader import VocabularyLoader

logger = logging.getLogger(__name__)


class VocabularyRefresher:
    """Periodically reloads a seed file into an engine."""

    def __init__(
        self,
        loader: VocabularyLoader,
        path: Path,
        settings: Optional[VocabularySettings] = None,
        name: str = "vocabulary-refresher",
    ) -> None:
        self._loader = loader
        self._path = Path(path)
        self._settings = settings or VocabularySettings()
        self._name = name
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._last_mtime: Optional[float] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def mark_loaded(self) -> None:
        """Remember the current mtime so an unchanged file is not reloaded."""
        self._last_mtime = self._mtime()

    def start(self) -> None:
        """Start the background thread. No-op if the interval is 0 or already running."""
        if self._settings.refresh_interval <= 0:
            logger.info("Vocabulary refresh disabled (interval=0)")
            return
        if self.is_running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name=self._name, daemon=True)
        self._thread.start()
        logger.info(
            "Refresher '%s' watching %s every %.1fs",
            self._name, self._path, self._settings.refresh_interval,
        )

    def stop(self, timeout: float = 5.0) -> None:
        """Signal the thread to stop and wait for it."""
        self._stop.set()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=timeout)
        self._thread = None
        logger.info("Refresher '%s' stopped", self._name)

    def _loop(self) -> None:
        while not self._stop.wait(self._settings.refresh_interval):
            try:
                self.run_once()
            except Exception:
                logger.exception("Vocabulary refresh from %s failed", self._path)

    def run_once(self, force: bool = False) -> Optional[IngestReport]:
        """
        Reload if the file changed since the last load (or when *force*).

        Returns the ingest report, or None when nothing was reloaded.
        """
        mtime = self._mtime()
        if mtime is None:
            logger.warning("Seed file %s is missing; keeping current vocabulary", self._path)
            return None
        if not force and self._last_mtime is not None and mtime == self._last_mtime:
            return None
        report = self._loader.reload(self._path)
        self._last_mtime = mtime
        return report

    def _mtime(self) -> Optional[float]:
        try:
            return self._path.stat().st_mtime
        except FileNotFoundError:
            return None
