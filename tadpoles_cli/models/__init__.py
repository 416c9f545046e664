"""
Data Models Layer.

This package contains the Pydantic models and dataclasses that define the core
data structures used throughout the application: API records, configuration
and run statistics.
"""

from .config import ArchiveConfig
from .event import Event, Overview
from .stats import IngestStats

__all__ = ["ArchiveConfig", "Event", "IngestStats", "Overview"]
