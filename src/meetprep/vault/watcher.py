"""Background watcher that turns vault changes into file events.

Runs a daemon thread that periodically snapshots the markdown files of the
vault and reports what was added, changed or deleted since the previous
snapshot.
"""

import logging
import threading
from collections.abc import Callable
from pathlib import Path

from meetprep.vault.models import FileEvent, FileEventKind
from meetprep.vault.walker import walk_vault

logger = logging.getLogger(__name__)

# (mtime_ns, size) per document key
Snapshot = dict[str, tuple[int, int]]


def take_snapshot(vault_root: Path) -> Snapshot:
    """Stat every markdown note in the vault."""
    snapshot: Snapshot = {}
    for file_path in walk_vault(vault_root):
        try:
            stat = file_path.stat()
        except OSError:
            # Deleted between listing and stat
            continue
        snapshot[str(file_path)] = (stat.st_mtime_ns, stat.st_size)
    return snapshot


def diff_snapshots(previous: Snapshot, current: Snapshot) -> list[FileEvent]:
    """Events that turn ``previous`` into ``current``, deletions first."""
    events = [
        FileEvent(FileEventKind.DELETE, path) for path in sorted(previous.keys() - current.keys())
    ]
    for path in sorted(current):
        if path not in previous:
            events.append(FileEvent(FileEventKind.ADD, path))
        elif previous[path] != current[path]:
            events.append(FileEvent(FileEventKind.CHANGE, path))
    return events


class VaultWatcher:
    """Polls a vault and reports file events to a callback.

    The watch thread is a daemon, so it automatically terminates when the
    main process exits. With an interval of 0 no thread is started and the
    owner calls poll() itself.
    """

    def __init__(
        self,
        vault_root: Path,
        on_event: Callable[[FileEvent], None],
        interval: float,
    ):
        """Initialize the watcher.

        Args:
            vault_root: Resolved vault directory.
            on_event: Called once per detected event, from the polling thread.
            interval: Poll interval in seconds, 0 to disable the thread.
        """
        if interval < 0:
            raise ValueError(f"Watch interval must not be negative, got {interval}")

        self._vault_root = vault_root
        self._on_event = on_event
        self._interval = interval
        self._snapshot: Snapshot = {}
        self._poll_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def prime(self) -> None:
        """Record the current state without emitting events."""
        with self._poll_lock:
            self._snapshot = take_snapshot(self._vault_root)

    def poll(self) -> list[FileEvent]:
        """Compare the vault with the last snapshot and emit the differences."""
        with self._poll_lock:
            current = take_snapshot(self._vault_root)
            events = diff_snapshots(self._snapshot, current)
            self._snapshot = current

        for event in events:
            try:
                self._on_event(event)
            except Exception:
                logger.exception("Error dispatching %s event for %s", event.kind.value, event.path)
        return events

    def start(self) -> None:
        """Start the background watch thread."""
        if self._interval == 0:
            logger.info("Vault watching disabled (interval 0)")
            return
        if self.running:
            logger.warning("Watch thread already running")
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._watch_loop,
            name="vault-watch",
            daemon=True,
        )
        self._thread.start()
        logger.info("Watching %s (interval: %.1fs)", self._vault_root, self._interval)

    def stop(self) -> None:
        """Stop the background watch thread.

        Blocks until the thread terminates (up to one interval).
        """
        if self._thread is None or not self._thread.is_alive():
            self._thread = None
            return

        self._stop_event.set()
        self._thread.join(timeout=self._interval + 1)
        if self._thread.is_alive():
            logger.warning("Watch thread did not stop cleanly")
        else:
            logger.info("Stopped watching %s", self._vault_root)
        self._thread = None

    def _watch_loop(self) -> None:
        """Main watch loop - runs in background thread."""
        logger.debug("Watch loop started")

        while not self._stop_event.is_set():
            # Sleep first, then poll (allows immediate shutdown on start)
            if self._stop_event.wait(timeout=self._interval):
                break

            try:
                events = self.poll()
                if events:
                    logger.debug("Detected %d vault changes", len(events))
            except Exception:
                logger.exception("Error while polling vault")

        logger.debug("Watch loop stopped")
