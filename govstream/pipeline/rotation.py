"""Size/age based rotation of sink files.

Rotation is pull-based: RotationManager acts only when called, either by a
RotationWorker pass or by the ``govstream rotate`` command. The check and
the rename run under the same per-path lock SinkWriter holds while
appending, so a rotation never loses or splits a write.
"""

from __future__ import annotations

import glob
import logging
import threading
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

from .config import RotationPolicy
from .sinks import DEFAULT_LOCKS, PathLocks

if TYPE_CHECKING:
    from .provider import LoggingProvider

logger = logging.getLogger("govstream.rotation")

ARCHIVE_SUFFIX = ".archive"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class RotationManager:
    """Archives sink files that exceed a size or age threshold."""

    def __init__(
        self,
        locks: PathLocks | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize the manager.

        Args:
            locks: Per-path lock registry shared with the SinkWriter
                (process-wide registry if None)
            clock: Returns the current UTC time (overridable for tests)
        """
        self.locks = locks if locks is not None else DEFAULT_LOCKS
        self._clock = clock or _utcnow

    def file_created_at(self, path: Path) -> datetime:
        """When a file was created.

        Uses the time recorded when a SinkWriter created the file. Files that
        existed before this process fall back to the platform creation time,
        else the modification time.
        """
        recorded = self.locks.created_at(path)
        if recorded is not None:
            return recorded
        st = path.stat()
        ts = getattr(st, "st_birthtime", None) or st.st_mtime
        return datetime.fromtimestamp(ts, UTC)

    def archive_path(self, path: Path, now: datetime) -> Path:
        """Pick an unused timestamp-suffixed archive name for a file."""
        stamp = now.strftime("%Y%m%d%H%M%S")
        candidate = path.with_name(f"{path.name}.{stamp}{ARCHIVE_SUFFIX}")
        counter = 1
        while candidate.exists():
            candidate = path.with_name(f"{path.name}.{stamp}-{counter}{ARCHIVE_SUFFIX}")
            counter += 1
        return candidate

    def should_rotate(self, path: Path, policy: RotationPolicy, now: datetime) -> bool:
        """Check the size and age thresholds for an existing file."""
        size = path.stat().st_size
        if size > policy.max_size_bytes:
            return True
        age_minutes = (now - self.file_created_at(path)).total_seconds() / 60
        return age_minutes > policy.max_age_minutes

    def check_and_rotate(self, path: str | Path, policy: RotationPolicy) -> Path | None:
        """Rotate a file if it exceeds the policy thresholds.

        Args:
            path: Sink file
            policy: Rotation thresholds

        Returns:
            Archive path if the file was rotated, None otherwise
        """
        path = Path(path)
        archive: Path | None = None

        with self.locks.get(path):
            try:
                if not path.is_file():
                    return None
                now = self._clock()
                if not self.should_rotate(path, policy, now):
                    return None
                archive = self.archive_path(path, now)
                path.rename(archive)
                self.locks.forget(path)
            except FileNotFoundError:
                return None
            except OSError as e:
                logger.error(f"Failed to rotate {path}: {e}")
                return None

        logger.info(f"Rotated {path} to {archive.name}")

        if policy.max_archives is not None:
            self.cleanup_archives(path, policy.max_archives)

        return archive

    def rotate_all(self, paths: Iterable[str | Path], policy: RotationPolicy) -> dict[Path, Path]:
        """Run check_and_rotate for several files.

        Returns:
            Mapping of rotated file -> archive path
        """
        rotated: dict[Path, Path] = {}
        for path in paths:
            archive = self.check_and_rotate(path, policy)
            if archive is not None:
                rotated[Path(path)] = archive
        return rotated

    def list_archives(self, path: str | Path) -> list[Path]:
        """List archives of a file, newest first."""
        path = Path(path)
        pattern = f"{glob.escape(path.name)}.*{ARCHIVE_SUFFIX}"
        return sorted(
            path.parent.glob(pattern),
            key=lambda p: p.stat().st_mtime,
            reverse=True,
        )

    def cleanup_archives(self, path: str | Path, max_archives: int) -> list[Path]:
        """Remove the oldest archives beyond ``max_archives``.

        Returns:
            Removed archive paths
        """
        removed: list[Path] = []
        try:
            archives = self.list_archives(path)
        except OSError as e:
            logger.warning(f"Failed to list archives of {path}: {e}")
            return removed

        for old in archives[max_archives:]:
            try:
                old.unlink()
                removed.append(old)
                logger.debug(f"Removed old archive: {old}")
            except OSError as e:
                logger.warning(f"Failed to remove old archive {old}: {e}")
        return removed


class RotationWorker:
    """Background thread that periodically rotates a provider's sink files.

    The worker waits on a stop event between passes, so ``stop()`` takes
    effect while it is waiting as well as between iterations.
    """

    def __init__(self, provider: LoggingProvider, interval_seconds: float = 60.0):
        self.provider = provider
        self.interval_seconds = max(0.01, float(interval_seconds))
        self._log = provider.get_logger("govstream.RotationWorker")
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the rotation thread (no-op if already running)."""
        if self.is_running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="govstream-rotation", daemon=True)
        self._thread.start()

    def stop(self, timeout: float = 2.0) -> None:
        """Signal the thread to stop and wait for it."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

    def run_once(self) -> dict[Path, Path]:
        """Run one rotation pass over the provider's sinks."""
        rotated = self.provider.rotate()
        for path, archive in rotated.items():
            self._log.info("Rotated log file {file} to {archive}", str(path), str(archive))
        return rotated

    def _loop(self) -> None:
        while not self._stop.wait(self.interval_seconds):
            try:
                self.run_once()
            except Exception as e:
                logger.warning(f"Rotation pass failed: {e}")


__all__ = [
    "ARCHIVE_SUFFIX",
    "RotationManager",
    "RotationWorker",
]
