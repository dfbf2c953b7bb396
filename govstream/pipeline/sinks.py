"""File sinks for governed records.

Each record is serialized to one JSON line and appended to the primary file
and, optionally, the fallback file and a console stream. Appends to the same
path are serialized with a per-path lock that RotationManager shares, so a
rotation never interleaves with a write.

The fallback "encoding" is base64 text. It is NOT encryption and provides
no confidentiality; it only keeps the fallback file from being read at a
glance.
"""

from __future__ import annotations

import base64
import json
import logging
import threading
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, TextIO

logger = logging.getLogger("govstream.sinks")

# Characters UTF-8 cannot encode (lone surrogates from os.fsdecode) are written
# as \uXXXX escapes, which are still valid inside a JSON string
ENCODE_ERRORS = "backslashreplace"


class PathLocks:
    """Registry of one lock per resolved file path.

    The registry also records when this process created each sink file.
    Most platforms keep no creation time that survives appends, so this is
    the file age rotation measures.
    """

    def __init__(self) -> None:
        self._locks: dict[Path, threading.Lock] = {}
        self._created: dict[Path, datetime] = {}
        self._guard = threading.Lock()

    @staticmethod
    def key(path: str | Path) -> Path:
        """Normalize a path to its lock key."""
        return Path(path).expanduser().absolute()

    def get(self, path: str | Path) -> threading.Lock:
        """Get (creating if needed) the lock for a path."""
        key = self.key(path)
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    def mark_created(self, path: str | Path, when: datetime) -> None:
        """Record that a file was created at ``when``."""
        with self._guard:
            self._created[self.key(path)] = when

    def created_at(self, path: str | Path) -> datetime | None:
        """Creation time recorded for a file, if this process created it."""
        with self._guard:
            return self._created.get(self.key(path))

    def forget(self, path: str | Path) -> None:
        """Drop the recorded creation time (after the file is rotated away)."""
        with self._guard:
            self._created.pop(self.key(path), None)

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


# Process-wide registry, so providers writing the same file share its lock
DEFAULT_LOCKS = PathLocks()


def serialize_record(record: dict[str, Any]) -> str:
    """Serialize a governed record to its canonical JSON line (no newline)."""
    return json.dumps(record, default=str, ensure_ascii=False)


def encode_fallback_line(payload: str) -> str:
    """Encode a serialized record for the fallback sink (base64, NOT encryption)."""
    return base64.b64encode(payload.encode("utf-8", errors=ENCODE_ERRORS)).decode("ascii")


def decode_fallback_line(line: str) -> dict[str, Any]:
    """Decode one fallback sink line back to the governed record.

    Args:
        line: A base64 line from an encoded fallback file

    Returns:
        The governed record

    Raises:
        ValueError: If the line is not a valid encoded record
    """
    try:
        payload = base64.b64decode(line.strip(), validate=True).decode("utf-8")
        return json.loads(payload)
    except (ValueError, UnicodeDecodeError) as e:
        raise ValueError(f"Not an encoded fallback record: {e}") from e


class SinkWriter:
    """Appends governed records to the primary and fallback files.

    Write failures are contained per sink: a failing sink is logged and the
    remaining sinks are still written. Nothing is retried.
    """

    def __init__(
        self,
        primary_path: str | Path,
        fallback_path: str | Path | None = None,
        fallback_encoded: bool = True,
        locks: PathLocks | None = None,
        stream: TextIO | None = None,
    ):
        """Initialize the writer.

        Args:
            primary_path: Governed primary file
            fallback_path: Optional secondary file
            fallback_encoded: Store base64 text in the fallback file
            locks: Per-path lock registry (process-wide registry if None)
            stream: Optional console stream echoing every plaintext record
        """
        self.primary_path = Path(primary_path)
        self.fallback_path = Path(fallback_path) if fallback_path is not None else None
        self.fallback_encoded = fallback_encoded
        self.locks = locks if locks is not None else DEFAULT_LOCKS
        self.stream = stream
        self._stream_lock = threading.Lock()

    @property
    def paths(self) -> list[Path]:
        """Configured sink paths, primary first."""
        paths = [self.primary_path]
        if self.fallback_path is not None:
            paths.append(self.fallback_path)
        return paths

    def write(self, record: dict[str, Any], payload: str | None = None) -> list[Path]:
        """Write a record to every configured sink.

        Args:
            record: Governed record
            payload: Pre-serialized record (serialized here if omitted)

        Returns:
            Paths whose write failed (empty on full success)
        """
        if payload is None:
            payload = serialize_record(record)

        failed: list[Path] = []
        if not self._append(self.primary_path, payload):
            failed.append(self.primary_path)

        if self.fallback_path is not None:
            if not self._append(self.fallback_path, payload, encoded=self.fallback_encoded):
                failed.append(self.fallback_path)

        if self.stream is not None:
            self._echo(payload)

        return failed

    def _append(self, path: Path, payload: str, encoded: bool = False) -> bool:
        """Append one line under the path lock. Returns False on failure."""
        try:
            line = encode_fallback_line(payload) if encoded else payload
            with self.locks.get(path):
                created = not path.exists()
                path.parent.mkdir(parents=True, exist_ok=True)
                with open(path, "a", encoding="utf-8", errors=ENCODE_ERRORS) as f:
                    f.write(line + "\n")
                if created:
                    self.locks.mark_created(path, datetime.now(UTC))
            return True
        except (OSError, ValueError) as e:
            logger.error(f"Failed to write governed record to {path}: {e}")
            return False

    def _echo(self, payload: str) -> None:
        try:
            with self._stream_lock:
                self.stream.write(payload + "\n")
                self.stream.flush()
        except (OSError, ValueError) as e:
            logger.error(f"Failed to echo governed record to console: {e}")


__all__ = [
    "DEFAULT_LOCKS",
    "PathLocks",
    "SinkWriter",
    "serialize_record",
    "encode_fallback_line",
    "decode_fallback_line",
]
