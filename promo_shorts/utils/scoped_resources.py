"""Cleanup registry for job-scoped temporary files."""

import threading
import uuid
from pathlib import Path
from typing import Any, Optional


class ScopedResources:
    """
    Collects temporary files as they are acquired and releases them all at once.

    A job creates one registry, every download or synthesized audio file is
    registered the moment it is created, and ``release_all`` is called on every
    exit path. Releasing is idempotent and thread-safe, so both the compositor
    and the orchestrator may drain the same registry.
    """

    def __init__(self, scratch_dir: Path, job_id: str, logger: Optional[Any] = None):
        self.scratch_dir = Path(scratch_dir)
        self.job_id = job_id
        self.token = uuid.uuid4().hex[:8]
        self.logger = logger
        self._paths: list[Path] = []
        self._lock = threading.Lock()

    def path_for(self, stem: str, suffix: str) -> Path:
        """
        Return a path in the scratch directory and register it.

        Names carry the job id plus a per-registry token, so two jobs created
        in the same millisecond never share a file.
        """
        self.scratch_dir.mkdir(parents=True, exist_ok=True)
        path = self.scratch_dir / f"{stem}-{self.job_id}-{self.token}{suffix}"
        self.register(path)
        return path

    def register(self, path: Path) -> Path:
        with self._lock:
            if path not in self._paths:
                self._paths.append(path)
        return path

    def forget(self, path: Path) -> None:
        """Stop tracking a file, e.g. after it was moved to its public location."""
        with self._lock:
            if path in self._paths:
                self._paths.remove(path)

    def release_all(self) -> int:
        """
        Delete every registered file that still exists.

        Returns:
            Number of files removed
        """
        with self._lock:
            paths, self._paths = self._paths, []

        removed = 0
        for path in paths:
            try:
                if path.exists():
                    path.unlink()
                    removed += 1
            except OSError as e:
                if self.logger:
                    self.logger.warning(f"Could not remove temporary file {path}: {e}")
        if removed and self.logger:
            self.logger.debug(f"Released {removed} temporary file(s)")
        return removed

    def __enter__(self) -> "ScopedResources":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release_all()
