"""Bounded, persisted, group-keyed store of sensor readings."""

from __future__ import annotations

import logging
import math
from collections import deque
from datetime import datetime, timezone
from functools import lru_cache
from numbers import Real
from threading import Lock
from typing import Any, Callable, Deque, Dict, List, Optional

from datastore.snapshot import JsonSnapshotBackend, build_default_backend
from models.records import Reading
from settings import get_settings

logger = logging.getLogger(__name__)


class GroupLogError(Exception):
    """Base class for errors raised by the group log store."""


class InvalidGroupNameError(GroupLogError, ValueError):
    pass


class InvalidReadingError(GroupLogError, ValueError):
    pass


class GroupAlreadyExistsError(GroupLogError, ValueError):
    pass


class GroupNotFoundError(GroupLogError, KeyError):
    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message for HTTP details.
        return str(self.args[0]) if self.args else ""


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # Integers too large for a float.
        return False


class GroupLogStore:
    """Owns every group and its readings for the lifetime of the process.

    Each group keeps at most ``max_logs_per_group`` readings; appending to a
    full group drops its oldest reading. Every mutation is followed by a
    snapshot handed to ``backend`` without waiting for the write.
    """

    def __init__(
        self,
        backend: JsonSnapshotBackend,
        max_logs_per_group: int = 20,
        alert_threshold: float = 20.0,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        if max_logs_per_group < 1:
            raise ValueError("max_logs_per_group must be at least 1.")
        self.backend = backend
        self.max_logs_per_group = max_logs_per_group
        self.alert_threshold = alert_threshold
        self._clock = clock
        self._lock = Lock()
        self._groups: Dict[str, Deque[Reading]] = {
            name: deque(readings, maxlen=max_logs_per_group)
            for name, readings in backend.load().items()
        }

    def create_group(self, name: Optional[str]) -> str:
        self._check_name(name)
        with self._lock:
            if name in self._groups:
                raise GroupAlreadyExistsError(f"Group {name!r} already exists.")
            self._groups[name] = deque(maxlen=self.max_logs_per_group)
            self._persist()
        logger.info("Group created", extra={"group": name})
        return name

    def delete_group(self, name: Optional[str]) -> None:
        self._check_name(name)
        with self._lock:
            if name not in self._groups:
                raise GroupNotFoundError(f"Group {name!r} does not exist.")
            removed = self._groups.pop(name)
            self._persist()
        logger.info("Group deleted", extra={"group": name, "log_count": len(removed)})

    def list_groups(self) -> List[str]:
        with self._lock:
            return list(self._groups)

    def ingest(self, group_name: str, temperature: Any, humidity: Any) -> Reading:
        """Record a reading, creating the group on first use."""
        if not (_is_number(temperature) and _is_number(humidity)):
            raise InvalidReadingError("temperature and humidity must be numbers.")
        self._check_name(group_name)

        with self._lock:
            # Stamped under the lock so each group stays in timestamp order.
            reading = Reading(
                temperature=temperature,
                humidity=humidity,
                timestamp=self._clock(),
                alert=temperature > self.alert_threshold,
            )
            readings = self._groups.get(group_name)
            if readings is None:
                readings = deque(maxlen=self.max_logs_per_group)
                self._groups[group_name] = readings
                logger.info("Group created on first reading", extra={"group": group_name})
            readings.append(reading)
            self._persist()
        if reading.alert:
            logger.info(
                "Temperature above alert threshold",
                extra={"group": group_name, "temperature": temperature, "alert": True},
            )
        return reading

    def get_logs(self, group_name: str) -> List[Reading]:
        """Return the retained readings of a group, oldest first."""
        with self._lock:
            readings = self._groups.get(group_name)
            if readings is None:
                raise GroupNotFoundError(f"Group {group_name!r} does not exist.")
            return list(readings)

    def shutdown(self) -> None:
        """Wait for outstanding snapshot writes and stop the writer."""
        self.backend.close()

    def _persist(self) -> None:
        # Caller holds the lock, so the snapshot is a consistent copy.
        self.backend.save(self._groups)

    @staticmethod
    def _check_name(name: Optional[str]) -> None:
        if not name:
            raise InvalidGroupNameError("Group name is required.")


@lru_cache
def build_default_store() -> GroupLogStore:
    """Factory that wires the store with the configured snapshot file."""
    settings = get_settings()
    return GroupLogStore(
        backend=build_default_backend(),
        max_logs_per_group=settings.max_logs_per_group,
        alert_threshold=settings.alert_threshold,
    )
