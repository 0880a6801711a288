"""
File watchers and the supervisor owning them.

Two interchangeable change detection strategies are provided: a polling
thread comparing file signatures, and a native watcher built on watchdog
filesystem notifications. Both watch the containing directory and filter
events to the exact file.
"""

import functools
import logging
import os
import threading
from typing import Callable, Dict, List, Optional, Tuple

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from ...domain.interfaces import ChangeCallback, FileWatcher
from ...domain.models import FileSignature, WatchBackend, WatchRegistration
from ...infrastructure.exceptions import WatchError
from ...infrastructure.logging import reload_context
from ..configuration.models import StoreOptions

logger = logging.getLogger(__name__)

DEFAULT_STOP_TIMEOUT = 5.0

WatcherFactory = Callable[[str, ChangeCallback, StoreOptions, Optional[FileSignature]], FileWatcher]


def _watched_directory(path: str) -> str:
    return os.path.dirname(os.path.abspath(path))


class _SignatureTracker:
    """Remembers the last seen signature of a file to drop duplicate events."""

    def __init__(self, path: str, baseline: Optional[FileSignature]):
        self._path = path
        self._last = baseline if baseline is not None else FileSignature.of(path)
        self._lock = threading.Lock()

    def changed(self) -> bool:
        current = FileSignature.of(self._path)
        if current is None:
            # missing or mid-replacement, wait for the next event
            return False
        with self._lock:
            if current == self._last:
                return False
            self._last = current
            return True


class PollingFileWatcher(FileWatcher):
    """Polls the file signature from a background thread every ``interval`` seconds."""

    def __init__(
        self,
        path: str,
        on_change: ChangeCallback,
        interval: float = 1.0,
        baseline: Optional[FileSignature] = None
    ):
        super().__init__(path, on_change)
        self.interval = interval
        self._baseline = baseline
        self._tracker: Optional[_SignatureTracker] = None
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        """Start polling in a background thread."""
        if self._thread is not None:
            return

        directory = _watched_directory(self.path)
        if not os.path.isdir(directory):
            raise WatchError(
                f"Can't start monitoring properties {self.path}: directory {directory} does not exist",
                file_path=self.path,
                backend=WatchBackend.POLLING.value
            )

        self._tracker = _SignatureTracker(self.path, self._baseline)
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._poll_worker,
            name=f"PropertiesWatcher[{os.path.basename(self.path)}]",
            daemon=True
        )
        self._thread.start()

    def _poll_worker(self) -> None:
        """Background worker for change detection."""
        while not self._stop_event.wait(self.interval):
            try:
                if self._tracker.changed():
                    logger.info(f"Change detected for properties file {self.path}")
                    self._on_change(self.path)
            except Exception as e:
                logger.error(f"Error in properties monitoring for {self.path}: {e}")

    def stop(self, timeout: float = DEFAULT_STOP_TIMEOUT) -> None:
        """Stop polling and join the worker thread."""
        self._stop_event.set()
        thread = self._thread
        if thread is None:
            return
        if timeout > 0 and thread is not threading.current_thread():
            thread.join(timeout=timeout)
            if thread.is_alive():
                logger.warning(f"Properties watcher for {self.path} did not stop within {timeout}s")
        self._thread = None

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._stop_event.is_set()


class _FileEventHandler(FileSystemEventHandler):
    """Forwards events concerning one file to its watcher."""

    def __init__(self, watcher: 'NativeFileWatcher'):
        self._watcher = watcher

    def on_modified(self, event: FileSystemEvent) -> None:
        self._watcher._handle_event(event.src_path, event.is_directory)

    def on_created(self, event: FileSystemEvent) -> None:
        self._watcher._handle_event(event.src_path, event.is_directory)

    def on_moved(self, event: FileSystemEvent) -> None:
        # atomic replacement renames a temporary file onto the watched one
        self._watcher._handle_event(event.dest_path, event.is_directory)


class NativeFileWatcher(FileWatcher):
    """Event-driven watcher using the platform notification API through watchdog."""

    def __init__(
        self,
        path: str,
        on_change: ChangeCallback,
        baseline: Optional[FileSignature] = None
    ):
        super().__init__(path, on_change)
        self._directory = os.path.realpath(_watched_directory(path))
        self._target = os.path.join(self._directory, os.path.basename(path))
        self._baseline = baseline
        self._tracker: Optional[_SignatureTracker] = None
        self._observer: Optional[Observer] = None
        self._stopped = threading.Event()

    def start(self) -> None:
        """Schedule the containing directory on a watchdog observer."""
        if self._observer is not None:
            return

        if not os.path.isdir(self._directory):
            raise WatchError(
                f"Can't start monitoring properties {self.path}: directory {self._directory} does not exist",
                file_path=self.path,
                backend=WatchBackend.NATIVE.value
            )

        self._tracker = _SignatureTracker(self.path, self._baseline)
        observer = Observer()
        try:
            observer.schedule(_FileEventHandler(self), self._directory, recursive=False)
            observer.start()
        except OSError as e:
            raise WatchError(
                f"Can't start monitoring properties {self.path}",
                file_path=self.path,
                backend=WatchBackend.NATIVE.value,
                cause=e
            ) from e
        self._stopped.clear()
        self._observer = observer

    def _handle_event(self, event_path, is_directory: bool) -> None:
        if is_directory or self._stopped.is_set():
            return
        if os.path.normpath(os.fsdecode(event_path)) != self._target:
            return
        try:
            if self._tracker.changed():
                logger.info(f"Change detected for properties file {self.path}")
                self._on_change(self.path)
        except Exception as e:
            logger.error(f"Error in properties monitoring for {self.path}: {e}")

    def stop(self, timeout: float = DEFAULT_STOP_TIMEOUT) -> None:
        """Stop the observer and join its thread."""
        self._stopped.set()
        observer = self._observer
        if observer is None:
            return
        observer.stop()
        if timeout > 0 and observer is not threading.current_thread():
            observer.join(timeout=timeout)
            if observer.is_alive():
                logger.warning(f"Properties observer for {self.path} did not stop within {timeout}s")
        self._observer = None

    def is_running(self) -> bool:
        return self._observer is not None and self._observer.is_alive() and not self._stopped.is_set()


def create_watcher(
    path: str,
    on_change: ChangeCallback,
    options: StoreOptions,
    baseline: Optional[FileSignature] = None
) -> FileWatcher:
    """Create the watcher strategy selected by ``options.watch_backend``."""
    if options.watch_backend is WatchBackend.NATIVE:
        return NativeFileWatcher(path, on_change, baseline=baseline)
    return PollingFileWatcher(path, on_change, interval=options.poll_interval, baseline=baseline)


class WatchSupervisor:
    """
    Owns the active file watchers of a store.

    Every watcher reports changes through the supervisor, which takes the
    shared store lock and re-checks that the registration is still active
    before running the reload. ``stop_all`` deactivates registrations under
    the same lock, so once it returns no watcher-originated reload can start.
    """

    def __init__(
        self,
        on_change: ChangeCallback,
        lock: Optional[threading.RLock] = None,
        watcher_factory: Optional[WatcherFactory] = None,
        stop_timeout: float = DEFAULT_STOP_TIMEOUT
    ):
        self._on_change = on_change
        self._lock = lock or threading.RLock()
        self._watcher_factory = watcher_factory or create_watcher
        self._stop_timeout = stop_timeout
        self._watches: Dict[str, Tuple[WatchRegistration, FileWatcher]] = {}

    def watch(
        self,
        path: str,
        options: StoreOptions,
        baseline: Optional[FileSignature] = None
    ) -> WatchRegistration:
        """
        Start watching ``path``; a path already watched keeps its watcher.

        Args:
            path: Properties file to watch
            options: Options selecting backend and poll interval
            baseline: Signature taken before the initial load of the file

        Raises:
            WatchError: If the watch cannot be established
        """
        path = os.path.abspath(path)
        with self._lock:
            existing = self._watches.get(path)
            if existing is not None:
                return existing[0]

            registration = WatchRegistration(path)
            dispatch = functools.partial(self._dispatch, registration)
            watcher = self._watcher_factory(path, dispatch, options, baseline)
            try:
                watcher.start()
            except WatchError:
                registration.active = False
                raise
            except Exception as e:
                registration.active = False
                raise WatchError(
                    f"Can't start monitoring properties {path}",
                    file_path=path,
                    cause=e
                ) from e

            self._watches[path] = (registration, watcher)
            logger.info(f"Monitoring properties file {path} ({type(watcher).__name__})")
            return registration

    def _dispatch(self, registration: WatchRegistration, path: str) -> None:
        with self._lock:
            if not registration.active:
                logger.debug(f"Ignoring change of {path}: monitoring stopped")
                return
            with reload_context(path):
                self._on_change(path)

    def stop_all(self) -> None:
        """
        Stop every watcher. Safe to call repeatedly.

        Watcher threads are joined outside the lock so an in-flight dispatch
        can drain. When the caller already holds the store lock (a reload
        callback or binding target calling ``reset``), joining would only
        wait for threads blocked on that lock, so the watchers are signalled
        without joining; each one exits after its pending dispatch finds the
        registration inactive.
        """
        with self._lock:
            watches = list(self._watches.values())
            self._watches.clear()
            for registration, _ in watches:
                registration.active = False

        timeout = 0 if self._lock_held() else self._stop_timeout
        for _, watcher in watches:
            try:
                watcher.stop(timeout)
            except Exception as e:
                logger.error(f"Failed stopping properties monitor for {watcher.path}: {e}")

        if watches:
            logger.info("Properties monitoring stopped")

    def _lock_held(self) -> bool:
        # same ownership check threading.Condition performs on its lock
        is_owned = getattr(self._lock, '_is_owned', None)
        return bool(is_owned and is_owned())

    def is_watching(self, path: str) -> bool:
        with self._lock:
            return os.path.abspath(path) in self._watches

    def registrations(self) -> List[WatchRegistration]:
        with self._lock:
            return [registration for registration, _ in self._watches.values()]

    def __len__(self) -> int:
        with self._lock:
            return len(self._watches)
