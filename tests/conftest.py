"""
Shared fixtures for the hotprops test suite.
"""

import os
import time
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest

from hotprops.domain.interfaces import FileWatcher
from hotprops.framework.configuration import StoreOptions
from hotprops.framework.store import PropertyStore, dump


class RecordingWatcher(FileWatcher):
    """Watcher stand-in whose changes are triggered by the test."""

    def __init__(self, path, on_change, options=None, baseline=None, fail_start=False):
        super().__init__(path, on_change)
        self.options = options
        self.baseline = baseline
        self.fail_start = fail_start
        self.started = False
        self.stopped = False
        self.stop_timeout = None

    def start(self) -> None:
        if self.fail_start:
            raise OSError("inotify watch limit reached")
        self.started = True

    def stop(self, timeout: float = 5.0) -> None:
        self.stopped = True
        self.stop_timeout = timeout

    def is_running(self) -> bool:
        return self.started and not self.stopped

    def trigger(self) -> None:
        self._on_change(self.path)


class RecordingWatcherFactory:
    """Creates RecordingWatcher instances and keeps them for inspection."""

    def __init__(self):
        self.watchers: List[RecordingWatcher] = []
        self.failing_names = set()

    def __call__(self, path, on_change, options, baseline):
        fail_start = os.path.basename(path) in self.failing_names
        watcher = RecordingWatcher(path, on_change, options, baseline, fail_start)
        self.watchers.append(watcher)
        return watcher


@pytest.fixture
def write_properties(tmp_path: Path) -> Callable[..., str]:
    """Write a properties file from a dict (or raw text) and return its path."""
    def _write(name: str, content, directory: Optional[Path] = None) -> str:
        target = (directory or tmp_path) / name
        target.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, str):
            target.write_text(content, encoding='iso-8859-1')
        else:
            dump(content, target)
        return str(target)

    return _write


@pytest.fixture
def rewrite_properties() -> Callable[[str, Dict[str, str]], None]:
    """Rewrite a properties file making sure its modification time moves forward."""
    def _rewrite(path: str, entries: Dict[str, str]) -> None:
        before = os.stat(path)
        dump(entries, path)
        after = os.stat(path)
        if after.st_mtime_ns <= before.st_mtime_ns:
            os.utime(path, ns=(after.st_atime_ns, before.st_mtime_ns + 1_000_000_000))

    return _rewrite


@pytest.fixture
def wait_for() -> Callable[..., bool]:
    """Poll a predicate until it holds or the deadline passes."""
    def _wait_for(predicate: Callable[[], bool], timeout: float = 5.0, interval: float = 0.05) -> bool:
        deadline = time.time() + timeout
        while time.time() < deadline:
            if predicate():
                return True
            time.sleep(interval)
        return predicate()

    return _wait_for


@pytest.fixture
def store():
    """Store without hot reload, closed after the test."""
    property_store = PropertyStore(StoreOptions(hot_reload=False))
    yield property_store
    property_store.close()


@pytest.fixture
def watcher_factory() -> RecordingWatcherFactory:
    return RecordingWatcherFactory()


@pytest.fixture
def recording_store(watcher_factory):
    """Hot-reloading store whose watchers are triggered manually."""
    property_store = PropertyStore(StoreOptions(hot_reload=True), watcher_factory=watcher_factory)
    yield property_store
    property_store.close()


@pytest.fixture
def polling_store():
    """Hot-reloading store polling every 50 ms."""
    property_store = PropertyStore(StoreOptions(hot_reload=True, poll_interval=0.05))
    yield property_store
    property_store.close()
