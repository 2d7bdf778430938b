"""TOML config loading for uidsl.toml."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

CONFIG_NAME = "uidsl.toml"


class ConfigError(ValueError):
    """A uidsl.toml value has the wrong type."""


@dataclass
class ProjectConfig:
    name: str = "untitled"


@dataclass
class CheckConfig:
    include: list[str] = field(default_factory=lambda: ["**/*.uidl"])


@dataclass
class DiagnosticsConfig:
    context_lines: int = 2
    color: bool = True


@dataclass
class FormatConfig:
    indent: int = 4


@dataclass
class UidslConfig:
    project: ProjectConfig = field(default_factory=ProjectConfig)
    check: CheckConfig = field(default_factory=CheckConfig)
    diagnostics: DiagnosticsConfig = field(default_factory=DiagnosticsConfig)
    format: FormatConfig = field(default_factory=FormatConfig)


def _typed(table: dict, section: str, key: str, expected: type, default):
    value = table.get(key, default)
    # bool is an int subclass; keep them apart
    if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
        raise ConfigError(
            f"[{section}] {key} must be {expected.__name__}, got {type(value).__name__}"
        )
    return value


def find_config(start_path: Path | None = None) -> Path:
    """Walk up directories to find uidsl.toml. Raises FileNotFoundError."""
    path = (start_path or Path.cwd()).resolve()
    if path.is_file():
        path = path.parent
    while True:
        candidate = path / CONFIG_NAME
        if candidate.exists():
            return candidate
        parent = path.parent
        if parent == path:
            raise FileNotFoundError(f"No {CONFIG_NAME} found in any parent directory")
        path = parent


def load_config(path: Path) -> UidslConfig:
    """Parse a uidsl.toml file into a UidslConfig."""
    with open(path, "rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"{path}: {e}") from e

    config = UidslConfig()

    if "project" in data:
        prj = data["project"]
        config.project = ProjectConfig(
            name=_typed(prj, "project", "name", str, "untitled"),
        )

    if "check" in data:
        chk = data["check"]
        include = _typed(chk, "check", "include", list, ["**/*.uidl"])
        if not all(isinstance(p, str) for p in include):
            raise ConfigError("[check] include must be a list of glob strings")
        config.check = CheckConfig(include=include)

    if "diagnostics" in data:
        dgn = data["diagnostics"]
        config.diagnostics = DiagnosticsConfig(
            context_lines=_typed(dgn, "diagnostics", "context_lines", int, 2),
            color=_typed(dgn, "diagnostics", "color", bool, True),
        )

    if "format" in data:
        fmt = data["format"]
        config.format = FormatConfig(
            indent=_typed(fmt, "format", "indent", int, 4),
        )

    return config


def load_project_config(start_path: Path | None = None) -> tuple[UidslConfig, Path | None]:
    """Config for the project containing ``start_path``, or defaults if none.

    Returns the config together with the directory it was found in.
    """
    try:
        config_path = find_config(start_path)
    except FileNotFoundError:
        return UidslConfig(), None
    return load_config(config_path), config_path.parent
