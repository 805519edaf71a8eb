"""Typed loading of release.toml.

The file is optional. When present at the repository root (or passed with
--config) it overrides the defaults below:

    remote = "upstream"
    trunk = "main"
    changelog_dir = "changelogs"

    [packaging]
    command = ["make", "release"]
    publish = true

    [validator]
    command = ["go", "run", "./hack/release-tools/chk_version.go"]
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_bool, get_str, get_str_list, get_table

__all__ = [
    "CONFIG_FILE_NAME",
    "ConfigError",
    "PackagingConfig",
    "ReleaseSettings",
    "ValidatorConfig",
    "load_settings",
    "resolve_settings",
]

CONFIG_FILE_NAME = "release.toml"

DEFAULT_REMOTE = "upstream"
DEFAULT_TRUNK = "main"
DEFAULT_CHANGELOG_DIR = "changelogs"
DEFAULT_PACKAGING_COMMAND = ("make", "release")
DEFAULT_VALIDATOR_VERSION_ENV = "RELEASE_VERSION"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when release.toml cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class PackagingConfig:
    """How the packaging tool is invoked.

    Attributes:
        command: Build directive, run once from the repository root.
        publish: Value of the PUBLISH flag handed to the tool.
    """

    command: tuple[str, ...] = DEFAULT_PACKAGING_COMMAND
    publish: bool = True


@dataclass(frozen=True, slots=True)
class ValidatorConfig:
    """External version validator.

    When command is None the built-in semantic version validator is used.
    Otherwise the command is run with --verify, then without arguments to
    emit KEY=value components. The version is handed over in the
    environment variable named by version_env.
    """

    command: tuple[str, ...] | None = None
    version_env: str = DEFAULT_VALIDATOR_VERSION_ENV


@dataclass(frozen=True, slots=True)
class ReleaseSettings:
    """Repository-level release settings."""

    remote: str = DEFAULT_REMOTE
    trunk: str = DEFAULT_TRUNK
    changelog_dir: str = DEFAULT_CHANGELOG_DIR
    packaging: PackagingConfig = field(default_factory=PackagingConfig)
    validator: ValidatorConfig = field(default_factory=ValidatorConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ReleaseSettings:
        """Create settings from a mapping (parsed TOML)."""
        packaging: StrDict = get_table(data, "packaging") or {}
        validator: StrDict = get_table(data, "validator") or {}

        publish = get_bool(packaging, "publish")
        return cls(
            remote=get_str(data, "remote") or DEFAULT_REMOTE,
            trunk=get_str(data, "trunk") or DEFAULT_TRUNK,
            changelog_dir=get_str(data, "changelog_dir") or DEFAULT_CHANGELOG_DIR,
            packaging=PackagingConfig(
                command=get_str_list(packaging, "command") or DEFAULT_PACKAGING_COMMAND,
                publish=True if publish is None else publish,
            ),
            validator=ValidatorConfig(
                command=get_str_list(validator, "command"),
                version_env=get_str(validator, "version_env") or DEFAULT_VALIDATOR_VERSION_ENV,
            ),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
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


def load_settings(path: Path) -> Result[ReleaseSettings, ConfigError]:
    """Load and parse release settings from a TOML file.

    Args:
        path: Path to release.toml

    Returns:
        Ok(ReleaseSettings) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    settings = ReleaseSettings.from_dict(result.value)
    if "/" in settings.remote or " " in settings.remote:
        return Err(ConfigError(f"Invalid remote name: {settings.remote!r}", path=path))
    return Ok(settings)


def resolve_settings(
    repo_root: Path, explicit: Path | None = None
) -> Result[ReleaseSettings, ConfigError]:
    """Resolve settings for a repository.

    An explicit path must exist. Without one, release.toml at the repository
    root is used when present, and defaults otherwise.
    """
    if explicit is not None:
        return load_settings(explicit)

    default_path = repo_root / CONFIG_FILE_NAME
    if not default_path.is_file():
        return Ok(ReleaseSettings())
    return load_settings(default_path)
