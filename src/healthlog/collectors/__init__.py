"""
Metric collectors for Healthlog.

Each collector produces the raw metrics bundle for one snapshot.
"""

from __future__ import annotations

from healthlog.collectors.base import BaseCollector
from healthlog.collectors.file import FileCollector
from healthlog.collectors.host import HostCollector

# Registry of all available collectors
COLLECTORS: dict[str, type[BaseCollector]] = {
    "host": HostCollector,
    "file": FileCollector,
}


def get_all_collectors() -> dict[str, type[BaseCollector]]:
    """Return all registered collectors."""
    return COLLECTORS.copy()


def get_collector(name: str) -> type[BaseCollector] | None:
    """Get a specific collector by name."""
    return COLLECTORS.get(name)


def list_collectors() -> list[str]:
    """List all available collector names."""
    return list(COLLECTORS.keys())


__all__ = [
    "BaseCollector",
    "HostCollector",
    "FileCollector",
    "get_all_collectors",
    "get_collector",
    "list_collectors",
    "COLLECTORS",
]
