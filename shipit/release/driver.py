"""Release driver.

Runs the release from preflight to the server-side commit:

    preflight -> tree guard -> version -> probe -> clean -> compat report
      -> publish -> policy check -> push origin -> docs -> server commit

Preflight and the tree guard fail without recovery: nothing has been
changed yet, and a signal there only bails out. Everything after the tree
is cleaned runs under the coordinator's signal traps and failure policies.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from functools import partial

from shipit.core.config import ReleaseConfig
from shipit.core.result import Err, Ok, Result
from shipit.git.repository import GitError, Repository
from shipit.output.console import ConsoleProtocol, Style
from shipit.release.errors import ReleaseError
from shipit.release.recovery import FailurePolicy, RecoveryCoordinator
from shipit.services.build_tool import BuildTool
from shipit.services.checkers.preflight import PreflightChecker
from shipit.services.docs import DocsPublisher
from shipit.services.executor import CommandExecutor
from shipit.services.remote import RemoteServer
from shipit.services.tree import WorkingTreeGuard

__all__ = ["ReleaseDriver", "ReleaseReport", "Step"]

TRY = FailurePolicy.TRY
IMPORTANT = FailurePolicy.IMPORTANT


def _empty_steps() -> list[str]:
    return []


@dataclass
class ReleaseReport:
    """What a finished (or dry) run did."""

    project: str
    version: str
    dry_run: bool = False
    completed: list[str] = field(default_factory=_empty_steps)


@dataclass(frozen=True, slots=True)
class Step:
    name: str
    policy: FailurePolicy
    run: Callable[[], Result[object, object]]


class ReleaseDriver:
    """Orchestrates one release.

    Collaborators default to the real implementations and can be replaced
    in tests.
    """

    def __init__(
        self,
        config: ReleaseConfig,
        console: ConsoleProtocol,
        *,
        dry_run: bool = False,
        repo: Repository | None = None,
        checker: PreflightChecker | None = None,
        coordinator: RecoveryCoordinator | None = None,
    ) -> None:
        self.config = config
        self.console = console
        self.dry_run = dry_run
        self.repo = repo or Repository(config.repo_root)
        self.checker = checker or PreflightChecker(config)
        self.coordinator = coordinator or RecoveryCoordinator(self.repo, console)

        executor = CommandExecutor(cwd=config.repo_root, console=console, dry_run=dry_run)
        self.build = BuildTool(config, executor)
        self.remote = RemoteServer(config.server, config.path, executor)
        self.docs = DocsPublisher(config, self.remote, executor)
        self.tree = WorkingTreeGuard(self.repo, console, dry_run=dry_run)

    def run(self) -> Result[ReleaseReport, ReleaseError]:
        """Run the whole release.

        Raises:
            ReleaseAborted: A termination signal arrived. Once the tree has
                been cleaned, recovery has already run.
        """
        self.console.header(f"Releasing {self.config.project_name}")
        self.console.print(f"server: {self.config.server}", Style.DIM)
        self.console.print(f"path:   {self.config.path}", Style.DIM)
        if self.dry_run:
            self.console.info("dry run: mutating commands are printed, not executed")

        with self.coordinator.abort_on_signals():
            checked = self.preflight()
            if isinstance(checked, Err):
                return checked

            cleaned = self.prepare_tree()
            if isinstance(cleaned, Err):
                return cleaned

            with self.coordinator.trap_signals():
                return self.release()

    def preflight(self) -> Result[None, ReleaseError]:
        """Check tools and the repository before touching anything."""
        self.console.header("Preflight")
        failed = False
        for check in self.checker.check_all():
            if check.ok:
                self.console.success(f"{check.name}: {check.message}")
                continue
            failed = True
            self.console.error(f"{check.name}: {check.message}")
            if check.hint:
                self.console.print(f"hint: {check.hint}", Style.DIM)

        if failed:
            return Err(ReleaseError(kind="missing_dependency", message="preflight checks failed"))

        if not self.repo.exists():
            error = ReleaseError(
                kind="precondition",
                message=f"{self.repo.path} is not a git repository",
            )
            self.console.error(error.message)
            return Err(error)
        return Ok(None)

    def prepare_tree(self) -> Result[None, ReleaseError]:
        self.console.header("Working tree")
        committed = self.tree.ensure_committed()
        if isinstance(committed, Err):
            return committed
        return self.tree.confirm_and_clean()

    def release(self) -> Result[ReleaseReport, ReleaseError]:
        """Version check, build, publish and push under failure policies."""
        self.console.header("Resolve version")
        resolved = self.coordinator.guard("Resolve version", self.build.version, TRY)
        if isinstance(resolved, Err):
            return resolved
        version = resolved.value

        checked = self.check_version(version)
        if isinstance(checked, Err):
            return checked

        report = ReleaseReport(
            project=self.config.project_name, version=version, dry_run=self.dry_run
        )
        for step in self.steps(version):
            self.console.header(step.name)
            outcome = self.coordinator.guard(step.name, step.run, step.policy)
            if isinstance(outcome, Err):
                return outcome
            report.completed.append(step.name)

        if self.dry_run:
            self.console.success(f"dry run of {report.project} {version} complete")
        else:
            self.console.success(f"released {report.project} {version}")
        return Ok(report)

    def check_version(self, version: str) -> Result[None, ReleaseError]:
        """Reject versions that do not look like a tagged release.

        Length is only a heuristic: tagged versions are short ("10.2.1")
        while untagged builds get a describe suffix ("10.2.1+3-abcdef12").
        """
        limit = self.config.max_version_length
        if len(version) <= limit:
            self.console.success(f"version {version}")
            return Ok(None)

        error = ReleaseError(
            kind="precondition",
            message=f"version '{version}' is longer than {limit} characters",
            hint="is HEAD on a release tag?",
        )
        self.console.error(error.pretty())
        return Err(error)

    def steps(self, version: str) -> list[Step]:
        project = self.config.project_name
        return [
            Step("Probe release server", TRY, self.remote.probe),
            Step("Clean build", TRY, self.build.clean),
            Step("Binary compatibility report", TRY, self.build.compat_report),
            Step("Publish signed artifacts", IMPORTANT, self.build.publish),
            Step("License policy check", IMPORTANT, self.build.policy_check),
            Step("Push to origin", IMPORTANT, self.push_origin),
            Step("Publish documentation", IMPORTANT, partial(self.docs.publish, version)),
            Step(
                "Commit release on server",
                IMPORTANT,
                partial(self.remote.commit_release, project, version),
            ),
        ]

    def push_origin(self) -> Result[None, GitError]:
        """Push tags and HEAD. The phase flips before the first byte leaves."""
        self.coordinator.enter_post_push()
        if self.dry_run:
            self.console.print("[dry-run] git push origin --tags", Style.DIM)
            self.console.print("[dry-run] git push origin HEAD", Style.DIM)
            return Ok(None)

        tags = self.repo.push_tags()
        if isinstance(tags, Err):
            return tags
        return self.repo.push_head()
