"""Polling file watcher that reloads a collection when its file changes.

A change is detected from the file's modification time and size. Reloads go
through ``CollectionStore.load`` exactly like any other caller, so the
cache and validator behave the same for watched and unwatched files.
"""

import logging
import threading
from pathlib import Path
from typing import Callable, Optional, Tuple, Union

from taskvault.core.errors import TaskVaultError
from taskvault.core.models import TasksCollection
from taskvault.core.storage.store import CollectionStore

logger = logging.getLogger(__name__)

Signature = Optional[Tuple[int, int]]


class CollectionWatcher:
    """
    Watch one collection file and report reloads.

    Use ``check()`` to poll from your own loop, or ``start()`` to poll from a
    daemon thread every ``interval`` seconds. The thread shares the store's
    cache, so hosts that also load through the same store from other
    threads must serialize access themselves.

    Args:
        store: Store used for reloads
        path: File to watch
        on_change: Called with the freshly loaded collection
        on_error: Called with the exception when a reload fails
        interval: Seconds between polls in threaded mode
    """

    def __init__(
        self,
        store: CollectionStore,
        path: Union[str, Path],
        on_change: Callable[[TasksCollection], None],
        on_error: Optional[Callable[[Exception], None]] = None,
        interval: Optional[float] = None,
    ) -> None:
        self.store = store
        self.path = Path(path)
        self.on_change = on_change
        self.on_error = on_error
        self.interval = interval if interval is not None else store.config.watch_interval_seconds
        self._signature: Signature = self._current_signature()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def _current_signature(self) -> Signature:
        try:
            stat = self.path.stat()
        except OSError:
            return None
        return (stat.st_mtime_ns, stat.st_size)

    def check(self) -> bool:
        """
        Poll once.

        Returns:
            True if the file changed and was reloaded successfully
        """
        signature = self._current_signature()
        if signature == self._signature:
            return False
        self._signature = signature
        if signature is None:
            logger.warning("Watched file disappeared: %s", self.path)
            return False

        try:
            collection = self.store.load(self.path)
        except TaskVaultError as exc:
            logger.warning("Reload of %s failed: %s", self.path, exc)
            if self.on_error is not None:
                self.on_error(exc)
            return False

        logger.info("Reloaded %s (%d tasks)", self.path, len(collection.tasks))
        self.on_change(collection)
        return True

    def start(self) -> None:
        """Begin polling in a background daemon thread."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run,
            name=f"collection-watcher:{self.path.name}",
            daemon=True,
        )
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        """Stop the polling thread and wait for it to exit."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            try:
                self.check()
            except Exception:
                logger.exception("Unexpected error while watching %s", self.path)
