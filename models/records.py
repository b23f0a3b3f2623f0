"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class Reading:
    """One sensor sample retained in a group log.

    ``timestamp`` is stamped at ingestion and ``alert`` is derived from the
    temperature at that moment; neither changes afterwards.
    """

    temperature: float
    humidity: float
    timestamp: datetime
    alert: bool
