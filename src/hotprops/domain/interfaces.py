"""
Core Domain Interfaces

Defines the contract file change detection strategies must implement.
"""

from abc import ABC, abstractmethod
from typing import Callable

# Invoked by a watcher with the watched path whenever a qualifying change is seen
ChangeCallback = Callable[[str], None]


class FileWatcher(ABC):
    """
    Watches a single properties file for modification.

    Implementations observe the containing directory and filter events to the
    exact file name. Lifecycle is Idle -> Watching (``start``) -> Stopped
    (``stop``); a stopped watcher is never restarted.
    """

    def __init__(self, path: str, on_change: ChangeCallback):
        self.path = path
        self._on_change = on_change

    @abstractmethod
    def start(self) -> None:
        """
        Begin watching.

        Raises:
            WatchError: If the watch backend cannot be established
        """
        pass

    @abstractmethod
    def stop(self, timeout: float = 5.0) -> None:
        """Stop watching and release the backing thread or handle; a zero timeout signals without joining."""
        pass

    @abstractmethod
    def is_running(self) -> bool:
        """Check whether the watcher is currently in the Watching state."""
        pass
