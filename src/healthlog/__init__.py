"""
Healthlog - Versioned history of system-health snapshots.

Keeps a bounded binary log of periodic snapshots on removable storage,
compares consecutive runs and renders a compact timeline.
"""

__version__ = "0.3.0"
__author__ = "Sluggisty"

__all__ = ["__version__"]
