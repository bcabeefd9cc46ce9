"""Documentation publishing.

Uploads the generated site to the release server and, when enabled, a
tarball of it to the downloads area.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from shipit.core.config import ReleaseConfig
from shipit.core.result import Err, Ok, Result
from shipit.platform.process import ProcessError
from shipit.services.executor import CommandExecutor
from shipit.services.remote import RemoteServer

__all__ = ["DocsError", "DocsPublisher"]


@dataclass(frozen=True, slots=True)
class DocsError:
    message: str


@dataclass(frozen=True, slots=True)
class DocsPublisher:
    config: ReleaseConfig
    remote: RemoteServer
    executor: CommandExecutor

    def archive_path(self, version: str) -> Path:
        name = f"{self.config.project_name}-docs-{version}.tgz"
        return self.config.repo_root / "target" / "release" / name

    def archive(self, version: str) -> Result[Path, ProcessError]:
        """tar + gzip the docs site."""
        target = self.archive_path(version)
        if not self.executor.dry_run:
            target.parent.mkdir(parents=True, exist_ok=True)
        result = self.executor.stream(
            ["tar", "-czf", str(target), "-C", str(self.config.docs_source), "."]
        )
        if isinstance(result, Err):
            return result
        return Ok(target)

    def publish(self, version: str) -> Result[None, ProcessError | DocsError]:
        source = self.config.docs_source
        if not self.executor.dry_run and not source.is_dir():
            return Err(DocsError(f"docs not found at {source}"))

        project = self.config.project_name
        synced = self.remote.sync_dir(source, self.remote.docs_dir(project, version))
        if isinstance(synced, Err):
            return synced

        if not self.config.docs.archive:
            return Ok(None)

        archived = self.archive(version)
        if isinstance(archived, Err):
            return archived
        return self.remote.upload_file(archived.value, self.remote.downloads_dir())
