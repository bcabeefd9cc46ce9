"""Release configuration.

A `ReleaseConfig` is assembled once per run and then passed explicitly to
every component. Sources, highest precedence first:

1. CLI flags (`--server`, `--path`)
2. `release.toml` in the repository root (or `--config FILE`)
3. Built-in defaults

Extra build-tool flags come from the `SHIPIT_BUILD_FLAGS` environment
variable and are shell-split.

Example release.toml:

    [release]
    server = "downloads.example.org"
    path = "www"
    max_version_length = 6
    min_java_major = 8

    [build]
    executable = "sbt"
    cross_build = true
    publish_task = "publishSigned"

    [docs]
    project = "akka-http"
    source_dir = "docs/target/paradox/site/main"
"""

from __future__ import annotations

import shlex
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_bool, get_int, get_str, get_table

__all__ = [
    "BUILD_FLAGS_ENV",
    "CONFIG_FILE_NAME",
    "DEFAULT_PATH",
    "DEFAULT_SERVER",
    "BuildConfig",
    "ConfigError",
    "DocsConfig",
    "ReleaseConfig",
    "load_config",
    "parse_build_flags",
    "resolve_config",
]

DEFAULT_SERVER = "downloads.example.org"
DEFAULT_PATH = "www"

# Release versions are short ("10.2.1"); a describe-style version such as
# "10.2.1+12-3f2a9c1e" means HEAD is not on a tag.
DEFAULT_MAX_VERSION_LENGTH = 6
DEFAULT_MIN_JAVA_MAJOR = 8

BUILD_FLAGS_ENV = "SHIPIT_BUILD_FLAGS"
CONFIG_FILE_NAME = "release.toml"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when configuration cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class BuildConfig:
    """Build tool executable and the tasks the release invokes.

    `docs_task` runs after publishing; an empty string skips it.
    """

    executable: str = "sbt"
    cross_build: bool = True
    version_task: str = "version"
    clean_task: str = "clean"
    compat_task: str = "mimaReportBinaryIssues"
    publish_task: str = "publishSigned"
    policy_task: str = "whitesourceCheckPolicies"
    docs_task: str = "docs/paradox"


@dataclass(frozen=True, slots=True)
class DocsConfig:
    """Where generated documentation lives and how it is named remotely.

    `project` defaults to the repository directory name when empty.
    """

    source_dir: str = "docs/target/paradox/site/main"
    project: str = ""
    archive: bool = True


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Immutable settings for one release run."""

    repo_root: Path
    server: str = DEFAULT_SERVER
    path: str = DEFAULT_PATH
    build: BuildConfig = field(default_factory=BuildConfig)
    docs: DocsConfig = field(default_factory=DocsConfig)
    max_version_length: int = DEFAULT_MAX_VERSION_LENGTH
    min_java_major: int = DEFAULT_MIN_JAVA_MAJOR
    extra_build_flags: tuple[str, ...] = ()

    @property
    def project_name(self) -> str:
        return self.docs.project or self.repo_root.name

    @property
    def docs_source(self) -> Path:
        return self.repo_root / self.docs.source_dir

    @classmethod
    def from_dict(cls, data: Mapping[str, object], repo_root: Path) -> ReleaseConfig:
        """Create a config from parsed TOML, falling back to defaults per key."""
        release: StrDict = get_table(data, "release") or {}
        build: StrDict = get_table(data, "build") or {}
        docs: StrDict = get_table(data, "docs") or {}

        default_build = BuildConfig()
        default_docs = DocsConfig()

        cross_build = get_bool(build, "cross_build")
        docs_task = build.get("docs_task")  # "" disables docs generation
        archive = get_bool(docs, "archive")
        max_version_length = get_int(release, "max_version_length")
        min_java_major = get_int(release, "min_java_major")

        return cls(
            repo_root=repo_root,
            server=get_str(release, "server") or DEFAULT_SERVER,
            path=get_str(release, "path") or DEFAULT_PATH,
            max_version_length=DEFAULT_MAX_VERSION_LENGTH
            if max_version_length is None
            else max_version_length,
            min_java_major=DEFAULT_MIN_JAVA_MAJOR if min_java_major is None else min_java_major,
            build=BuildConfig(
                executable=get_str(build, "executable") or default_build.executable,
                cross_build=default_build.cross_build if cross_build is None else cross_build,
                version_task=get_str(build, "version_task") or default_build.version_task,
                clean_task=get_str(build, "clean_task") or default_build.clean_task,
                compat_task=get_str(build, "compat_task") or default_build.compat_task,
                publish_task=get_str(build, "publish_task") or default_build.publish_task,
                policy_task=get_str(build, "policy_task") or default_build.policy_task,
                docs_task=docs_task if isinstance(docs_task, str) else default_build.docs_task,
            ),
            docs=DocsConfig(
                source_dir=get_str(docs, "source_dir") or default_docs.source_dir,
                project=get_str(docs, "project") or "",
                archive=default_docs.archive if archive is None else archive,
            ),
        )

    def with_overrides(
        self,
        *,
        server: str | None = None,
        path: str | None = None,
        extra_build_flags: tuple[str, ...] | None = None,
    ) -> ReleaseConfig:
        """Return a copy with CLI / environment overrides applied."""
        return replace(
            self,
            server=server or self.server,
            path=path or self.path,
            extra_build_flags=self.extra_build_flags
            if extra_build_flags is None
            else extra_build_flags,
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def load_config(path: Path, repo_root: Path) -> Result[ReleaseConfig, ConfigError]:
    """Load a release.toml file.

    Args:
        path: TOML file to read.
        repo_root: Repository the release runs in.

    Returns:
        Ok(ReleaseConfig) on success, Err(ConfigError) on failure.
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    config = ReleaseConfig.from_dict(result.value, repo_root)
    for key, value in (
        ("max_version_length", config.max_version_length),
        ("min_java_major", config.min_java_major),
    ):
        if value < 1:
            return Err(ConfigError(f"{key} must be positive, got {value}", path=path))
    return Ok(config)


def parse_build_flags(raw: str | None) -> Result[tuple[str, ...], ConfigError]:
    """Shell-split the extra build flags environment value."""
    if not raw:
        return Ok(())
    try:
        return Ok(tuple(shlex.split(raw)))
    except ValueError as e:
        return Err(ConfigError(f"Invalid {BUILD_FLAGS_ENV}: {e}"))


def resolve_config(
    repo_root: Path,
    *,
    config_path: Path | None = None,
    server: str | None = None,
    path: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> Result[ReleaseConfig, ConfigError]:
    """Build the effective config for a run.

    An explicit `config_path` must exist; the implicit `release.toml` is
    optional.
    """
    if config_path is not None:
        loaded = load_config(config_path, repo_root)
    else:
        implicit = repo_root / CONFIG_FILE_NAME
        loaded = load_config(implicit, repo_root) if implicit.is_file() else Ok(
            ReleaseConfig(repo_root=repo_root)
        )
    if isinstance(loaded, Err):
        return loaded

    env = environ if environ is not None else {}
    flags = parse_build_flags(env.get(BUILD_FLAGS_ENV))
    if isinstance(flags, Err):
        return flags

    return Ok(loaded.value.with_overrides(server=server, path=path, extra_build_flags=flags.value))
