"""In-process write locks keyed by backing file path."""

from __future__ import annotations

from pathlib import Path
import threading
import weakref

_REGISTRY_LOCK = threading.Lock()
# Entries live only while some store holds the lock.
_PATH_LOCKS: weakref.WeakValueDictionary[Path, threading.RLock] = weakref.WeakValueDictionary()


def lock_for_path(location: Path) -> threading.RLock:
    """Return the shared lock guarding one backing file.

    Stores opened on the same resolved path share a single lock, so their
    read-modify-write cycles never interleave within a process.

    Args:
        location: Backing file path.

    Returns:
        Reentrant lock for the path.
    """
    key = location.expanduser().resolve()
    with _REGISTRY_LOCK:
        lock = _PATH_LOCKS.get(key)
        if lock is None:
            lock = threading.RLock()
            _PATH_LOCKS[key] = lock
        return lock
