"""Release server access over ssh and rsync.

The server hosts a git-tracked web root at `path`. Docs are rsync'ed into
`<path>/docs/<project>/<version>/`, archives into `<path>/downloads/`, and
the release is recorded by a commit inside that checkout.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass
from pathlib import Path

from shipit.core.result import Result
from shipit.platform.process import ProcessError
from shipit.platform.process import run as run_process
from shipit.services.executor import CommandExecutor

__all__ = ["RemoteServer"]

_PROBE_TIMEOUT_SECONDS = 30.0

_SSH_OPTIONS = ("-o", "BatchMode=yes")


@dataclass(frozen=True, slots=True)
class RemoteServer:
    """Remote release server.

    Attributes:
        server: ssh host (may include user@)
        path: Web root on the server, relative to the login directory or absolute
        executor: Runs the mutating commands (honours dry-run)
    """

    server: str
    path: str
    executor: CommandExecutor

    def probe(self) -> Result[str, ProcessError]:
        """Check the server accepts a non-interactive ssh login.

        Runs even in dry-run mode; it changes nothing.
        """
        return run_process(
            ["ssh", *_SSH_OPTIONS, self.server, "true"],
            cwd=self.executor.cwd,
            timeout=_PROBE_TIMEOUT_SECONDS,
        )

    def docs_dir(self, project: str, version: str) -> str:
        return f"{self.path}/docs/{project}/{version}"

    def downloads_dir(self) -> str:
        return f"{self.path}/downloads"

    def sync_dir(self, source: Path, remote_dir: str) -> Result[None, ProcessError]:
        """Mirror the contents of `source` into `remote_dir` (created if missing)."""
        return self.executor.stream(
            [
                "rsync",
                "-rlz",
                "--delete",
                "--rsync-path",
                f"mkdir -p {shlex.quote(remote_dir)} && rsync",
                f"{source}/",
                f"{self.server}:{remote_dir}/",
            ]
        )

    def upload_file(self, source: Path, remote_dir: str) -> Result[None, ProcessError]:
        return self.executor.stream(
            [
                "rsync",
                "-z",
                "--rsync-path",
                f"mkdir -p {shlex.quote(remote_dir)} && rsync",
                str(source),
                f"{self.server}:{remote_dir}/",
            ]
        )

    def commit_release(self, project: str, version: str) -> Result[None, ProcessError]:
        """Commit everything uploaded to the server-side checkout."""
        message = f"Release {project} {version}"
        script = " && ".join(
            [
                f"cd {shlex.quote(self.path)}",
                "git add .",
                f"git commit -m {shlex.quote(message)}",
            ]
        )
        return self.executor.stream(["ssh", *_SSH_OPTIONS, self.server, script])
