"""
Template Cache - holds the most recently fetched block template.

A single slot guarded by a lock. The poller writes it, and the status reporter
reads it through a read-only view.
"""

import threading
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from template_bridge.core.template import BlockTemplate


class TemplateView(ABC):
    """Read-only access to the current block template."""

    @abstractmethod
    def get(self) -> Optional[BlockTemplate]:
        """
        Get the current template.

        Returns:
            The most recently cached template, or None if none was fetched yet
        """
        pass


class TemplateCache(TemplateView):
    """
    Single-slot cache for the latest block template.

    Thread-safe: the lock only guards a reference swap, so readers never see a
    partially written template and are never blocked by I/O.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._template: Optional[BlockTemplate] = None
        self._updated_at: Optional[datetime] = None
        self._updates = 0

    def get(self) -> Optional[BlockTemplate]:
        with self._lock:
            return self._template

    def set(self, template: BlockTemplate) -> None:
        """Replace the cached template unconditionally."""
        now = datetime.utcnow()
        with self._lock:
            self._template = template
            self._updated_at = now
            self._updates += 1

    @property
    def updated_at(self) -> Optional[datetime]:
        with self._lock:
            return self._updated_at

    @property
    def update_count(self) -> int:
        with self._lock:
            return self._updates

    def read_only(self) -> "ReadOnlyTemplateView":
        """Get a view of this cache that cannot modify it."""
        return ReadOnlyTemplateView(self)


class ReadOnlyTemplateView(TemplateView):
    """Wraps a cache and exposes only get()."""

    def __init__(self, cache: TemplateCache):
        self._cache = cache

    def get(self) -> Optional[BlockTemplate]:
        return self._cache.get()
