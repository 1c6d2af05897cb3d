"""Vault connection lifecycle: scan, index, watch, read."""

import logging
import threading
from concurrent.futures import CancelledError
from pathlib import Path

from meetprep.settings import SettingsStore
from meetprep.vault.errors import (
    PathOutsideVaultError,
    VaultError,
    VaultFileMissingError,
    VaultNotConnectedError,
    VaultParseError,
    VaultValidationError,
)
from meetprep.vault.events import ChangeQueue
from meetprep.vault.indexer import VaultIndexer
from meetprep.vault.models import (
    FileEvent,
    FileEventKind,
    IndexFailure,
    ScanReport,
    VaultFile,
    VaultState,
)
from meetprep.vault.parser import parse_vault_file
from meetprep.vault.walker import is_hidden, is_markdown, is_within, walk_vault
from meetprep.vault.watcher import VaultWatcher

logger = logging.getLogger(__name__)


class VaultManager:
    """
    Owns one vault connection and the index built from it.

    States: DISCONNECTED -> SCANNING -> WATCHING -> DISCONNECTED.

    The initial scan runs in connect(). After that every index mutation
    (watcher events and rescans) runs on a single ChangeQueue worker, so
    events for the same file are applied in arrival order.
    """

    def __init__(
        self,
        settings: SettingsStore | None = None,
        indexer: VaultIndexer | None = None,
        watch_interval: float = 2.0,
    ):
        """
        Initialize the manager.

        Args:
            settings: Where the vault path is persisted (in memory if omitted)
            indexer: Index to populate (a fresh one if omitted)
            watch_interval: Seconds between filesystem polls, 0 to disable
        """
        if watch_interval < 0:
            raise ValueError(f"Watch interval must not be negative, got {watch_interval}")

        self.settings = settings or SettingsStore()
        self.indexer = indexer or VaultIndexer()
        self._watch_interval = watch_interval
        self._vault_root: Path | None = None
        self._state = VaultState.DISCONNECTED
        self._watcher: VaultWatcher | None = None
        self._queue: ChangeQueue | None = None
        self._last_report: ScanReport | None = None
        self._connect_lock = threading.RLock()
        self._rescan_lock = threading.Lock()

    @property
    def state(self) -> VaultState:
        return self._state

    @property
    def vault_root(self) -> Path | None:
        return self._vault_root

    @property
    def last_report(self) -> ScanReport | None:
        return self._last_report

    # Connection lifecycle

    @staticmethod
    def validate_root(root_path: str | Path) -> Path:
        """Return the resolved vault root.

        Raises:
            VaultValidationError: If the path does not exist or is not a directory.
        """
        if not str(root_path).strip():
            raise VaultValidationError("No vault path given")
        path = Path(root_path).expanduser()
        if not path.exists():
            raise VaultValidationError(f"Vault path does not exist: {path}")
        if not path.is_dir():
            raise VaultValidationError(f"Selected path is not a directory: {path}")
        try:
            return path.resolve(strict=True)
        except OSError as e:
            raise VaultValidationError(f"Cannot resolve vault path {path}: {e}") from e

    def connect(self, root_path: str | Path) -> ScanReport:
        """
        Scan and index a vault, then start watching it.

        Validation happens before anything else; on a validation error any
        previously connected vault keeps its index and watcher.

        Raises:
            VaultValidationError: If ``root_path`` is not an existing directory.
        """
        root = self.validate_root(root_path)

        with self._connect_lock:
            self._stop_watching()
            previous_root = self._vault_root
            self._vault_root = root
            self._state = VaultState.SCANNING
            logger.info("Connecting vault %s", root)

            # Snapshot before scanning so edits made during the scan are seen
            watcher = VaultWatcher(root, self.handle_file_event, self._watch_interval)
            try:
                watcher.prime()
                report = self._scan(root)
            except Exception:
                self._vault_root = None
                self._state = VaultState.DISCONNECTED
                logger.exception("Scan of %s failed (previous vault: %s)", root, previous_root)
                raise

            self._persist_vault_path(str(root))
            self._queue = ChangeQueue(self._apply_event)
            self._queue.start()
            self._watcher = watcher
            watcher.start()
            self._state = VaultState.WATCHING
            return report

    def restore(self) -> ScanReport | None:
        """Reconnect the vault stored in settings, if any and still valid."""
        stored = self.settings.get_vault_path()
        if not stored:
            return None
        try:
            return self.connect(stored)
        except VaultValidationError as e:
            logger.warning("Stored vault is no longer available: %s", e)
            return None

    def disconnect(self) -> None:
        """Stop watching, drop the index and forget the vault path."""
        with self._connect_lock:
            self._stop_watching()
            self.indexer.clear()
            if self._vault_root is not None:
                logger.info("Disconnected vault %s", self._vault_root)
            self._vault_root = None
            self._last_report = None
            self._state = VaultState.DISCONNECTED
            self._persist_vault_path(None)

    def close(self) -> None:
        """Stop background threads and release the index."""
        with self._connect_lock:
            self._stop_watching()
            self.indexer.close()
            self._vault_root = None
            self._state = VaultState.DISCONNECTED

    def rescan(self) -> ScanReport:
        """
        Rebuild the index from disk.

        Runs on the change queue behind any pending events.

        Raises:
            VaultNotConnectedError: If no vault is connected, or the vault
                is disconnected before the rescan runs.
        """
        root = self._require_root()
        queue = self._queue
        if queue is None or not queue.running:
            return self._scan(root)
        try:
            future = queue.run(lambda: self._scan(root))
        except RuntimeError as e:
            # Stopped between the check and the submit
            raise VaultNotConnectedError("Vault was disconnected during rescan") from e
        try:
            return future.result()
        except CancelledError as e:
            raise VaultNotConnectedError("Vault was disconnected during rescan") from e

    def _stop_watching(self) -> None:
        if self._watcher is not None:
            self._watcher.stop()
            self._watcher = None
        if self._queue is not None:
            self._queue.stop(wait=True)
            self._queue = None

    def _persist_vault_path(self, path: str | None) -> None:
        try:
            self.settings.set_vault_path(path)
            if self._last_report is not None and path is not None:
                self.settings.set_last_vault_scan(self._last_report.scanned_at)
        except OSError as e:
            logger.warning("Could not persist vault settings: %s", e)

    def _require_root(self) -> Path:
        if self._vault_root is None:
            raise VaultNotConnectedError("No vault selected. Please connect a vault first.")
        return self._vault_root

    # Scanning

    def _scan(self, root: Path) -> ScanReport:
        """Parse every note under ``root`` and replace the index with them."""
        files: list[VaultFile] = []
        failures: list[IndexFailure] = []
        total = 0

        for file_path in walk_vault(root):
            total += 1
            try:
                files.append(parse_vault_file(file_path))
            except (VaultParseError, OSError) as e:
                logger.warning("Failed to parse file %s: %s", file_path, e)
                failures.append(IndexFailure(path=str(file_path), error=str(e)))

        index_report = self.indexer.index_all(files)
        failures.extend(index_report.failures)

        report = ScanReport(
            vault_path=str(root),
            total_files=total,
            indexed=index_report.indexed,
            failures=failures,
        )
        self._last_report = report
        logger.info(
            "Vault scan complete: %d of %d files indexed from %s",
            report.indexed,
            total,
            root,
        )
        return report

    # File events

    def handle_file_event(self, event: FileEvent) -> None:
        """Queue a filesystem event for serialized processing."""
        queue = self._queue
        if queue is None:
            logger.debug("No vault watching, ignoring %s for %s", event.kind.value, event.path)
            return
        queue.submit(event)

    def _apply_event(self, event: FileEvent) -> None:
        """Apply one event to the index. Runs on the queue worker."""
        root = self._vault_root
        if root is None:
            return

        if event.kind == FileEventKind.DELETE:
            if self.indexer.remove(event.path):
                logger.debug("Removed %s from index", event.path)
            return

        file_path = Path(event.path)
        if not is_markdown(file_path) or is_hidden(root, file_path):
            return
        if not is_within(root, file_path):
            logger.warning("Ignoring change outside vault directory: %s", event.path)
            return

        try:
            vault_file = parse_vault_file(file_path)
        except FileNotFoundError:
            # Deleted before we got to it
            self.indexer.remove(event.path)
            return
        except VaultParseError as e:
            logger.warning("Failed to handle %s for %s: %s", event.kind.value, event.path, e)
            self.indexer.remove(event.path)
            return

        self.indexer.index_one(vault_file)
        logger.debug("Indexed %s (%s)", event.path, event.kind.value)

    def drain(self, timeout: float | None = None) -> bool:
        """Wait until queued events have been applied."""
        queue = self._queue
        if queue is None:
            return True
        return queue.drain(timeout=timeout)

    def refresh(self, timeout: float | None = None) -> int:
        """Poll the filesystem once and wait for the resulting events.

        Returns the number of events detected.
        """
        watcher = self._watcher
        if watcher is None:
            return 0
        events = watcher.poll()
        self.drain(timeout=timeout)
        return len(events)

    # Reading

    def resolve_path(self, path: str | Path) -> Path:
        """
        Resolve a vault-relative or absolute path, enforcing containment.

        Raises:
            VaultNotConnectedError: If no vault is connected.
            PathOutsideVaultError: If the path normalizes outside the vault.
        """
        root = self._require_root()
        candidate = Path(path).expanduser()
        if not candidate.is_absolute():
            candidate = root / candidate
        if not is_within(root, candidate):
            raise PathOutsideVaultError(str(path))
        return candidate.resolve()

    def read_file(self, path: str | Path) -> str:
        """
        Read a note from the vault.

        If the file has disappeared, one full rescan is triggered (never two at
        once) and VaultFileMissingError is raised so the caller can retry.

        Raises:
            VaultNotConnectedError: If no vault is connected.
            PathOutsideVaultError: If the path is outside the vault.
            VaultFileMissingError: If the file no longer exists.
            VaultError: For any other read failure.
        """
        target = self.resolve_path(path)
        try:
            return target.read_text(encoding="utf-8")
        except FileNotFoundError:
            rescanned = self._rescan_after_missing(target)
            raise VaultFileMissingError(str(target), rescanned=rescanned) from None
        except UnicodeDecodeError as e:
            raise VaultParseError(str(target), f"invalid UTF-8 encoding: {e}") from e
        except OSError as e:
            raise VaultError(f"Failed to read file: {e}") from e

    def _rescan_after_missing(self, target: Path) -> bool:
        if not self._rescan_lock.acquire(blocking=False):
            logger.debug("Rescan already running, not starting another for %s", target)
            return False
        try:
            logger.warning("File not found: %s. Triggering vault rescan.", target)
            self.rescan()
            return True
        except VaultError as e:
            logger.warning("Rescan after missing file failed: %s", e)
            return False
        finally:
            self._rescan_lock.release()

    # Queries

    def search_files(self, query: str, limit: int = 10) -> list[tuple[VaultFile, float]]:
        """
        Full-text search over the connected vault.

        Raises:
            VaultNotConnectedError: If no vault is connected.
        """
        self._require_root()
        if not query.strip():
            return []
        results = []
        for hit in self.indexer.search(query, max_results=limit):
            vault_file = self.indexer.get_document(hit.path)
            if vault_file is not None:
                results.append((vault_file, hit.score))
        return results

    def status(self) -> dict:
        report = self._last_report
        return {
            "state": self._state.value,
            "vault_path": str(self._vault_root) if self._vault_root else None,
            "indexed_files": self.indexer.count(),
            "last_scan": report.scanned_at.isoformat() if report else None,
            "scan_errors": len(report.failures) if report else 0,
            "pending_events": self._queue.pending if self._queue else 0,
            "watching": bool(self._watcher and self._watcher.running),
        }
