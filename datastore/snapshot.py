from __future__ import annotations

import json
import logging
import os
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from threading import Lock
from typing import Dict, List, Mapping, Optional, Sequence

from pydantic import ValidationError

from app.schemas import LogEntry, snapshot_adapter
from models.records import Reading
from settings import get_settings

logger = logging.getLogger(__name__)


class JsonSnapshotBackend:
    """Mirror of the group store in a single JSON document.

    Writes are handed to a single background worker, so they land in the
    order they were submitted and never overlap. Each write replaces the file
    atomically.
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = path
        self._executor: Optional[ThreadPoolExecutor] = None
        self._pending: set[Future[None]] = set()
        self._pending_lock = Lock()
        if path is not None:
            path.parent.mkdir(parents=True, exist_ok=True)
            self._executor = ThreadPoolExecutor(
                max_workers=1, thread_name_prefix="snapshot-writer"
            )

    def load(self) -> Dict[str, List[Reading]]:
        """Read the snapshot; any failure yields an empty store."""
        if self.path is None:
            return {}
        if not self.path.exists():
            logger.debug("No snapshot found, starting empty", extra={"path": self.path})
            return {}

        try:
            raw = self.path.read_text(encoding="utf-8") or "{}"
            document = snapshot_adapter.validate_python(json.loads(raw))
        except (OSError, ValueError, ValidationError) as exc:
            logger.warning(
                "Snapshot unreadable, starting empty",
                extra={"path": self.path, "reason": exc.__class__.__name__},
            )
            return {}

        groups: Dict[str, List[Reading]] = {}
        for name, entries in document.items():
            if not name:
                logger.warning(
                    "Skipping unnamed group in snapshot",
                    extra={"path": self.path, "log_count": len(entries)},
                )
                continue
            groups[name] = [entry.to_reading() for entry in entries]
        logger.info(
            "Snapshot loaded",
            extra={"path": self.path, "group_count": len(groups)},
        )
        return groups

    def serialize(self, groups: Mapping[str, Sequence[Reading]]) -> str:
        payload = {
            name: [LogEntry.from_reading(reading).model_dump(mode="json") for reading in readings]
            for name, readings in groups.items()
        }
        return json.dumps(payload, indent=2)

    def save(self, groups: Mapping[str, Sequence[Reading]]) -> None:
        """Serialize now, write in the background. Never raises write errors."""
        if self._executor is None:
            return
        document = self.serialize(groups)
        future = self._executor.submit(self._write, self.path, document)
        with self._pending_lock:
            self._pending.add(future)
        future.add_done_callback(self._on_write_done)

    def flush(self) -> None:
        """Block until every submitted write has completed."""
        with self._pending_lock:
            pending = list(self._pending)
        for future in pending:
            # Failures were already reported by the done callback.
            future.exception()

    def close(self) -> None:
        if self._executor is None:
            return
        self.flush()
        self._executor.shutdown(wait=True)

    @staticmethod
    def _write(path: Path, document: str) -> None:
        tmp_path = path.with_name(f"{path.name}.tmp")
        tmp_path.write_text(document, encoding="utf-8")
        os.replace(tmp_path, path)

    def _on_write_done(self, future: Future[None]) -> None:
        with self._pending_lock:
            self._pending.discard(future)
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.error(
                "Snapshot write failed",
                extra={"path": self.path, "reason": repr(exc)},
            )


def build_default_backend(path: Optional[str] = None) -> JsonSnapshotBackend:
    settings = get_settings()
    data_path = settings.data_path if path is None else path
    return JsonSnapshotBackend(path=Path(data_path) if data_path else None)
