"""Configuration loading for the day timeline."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Mapping, TypeVar

__all__ = [
    "ConfigError",
    "InvalidConfigurationError",
    "TimelineSettings",
    "load_env_file",
    "parse_bool",
]

_T = TypeVar("_T")


class ConfigError(RuntimeError):
    """Raised when configuration values are malformed."""


class InvalidConfigurationError(ConfigError, ValueError):
    """Raised when configuration values are well-formed but unusable for layout."""


def load_env_file(env_file: str | Path | None = None) -> None:
    """Load environment variables from ``env_file`` if provided.

    When ``env_file`` is :data:`None`, the loader looks for a ``.env`` file in the
    current working directory. Existing environment variables are never overwritten.
    """

    path = Path(env_file) if env_file is not None else Path.cwd() / ".env"
    if not path.exists() or not path.is_file():
        return

    for key, value in _iter_env_entries(path):
        os.environ.setdefault(key, value)


def _iter_env_entries(path: Path) -> Iterable[tuple[str, str]]:
    for raw_line in path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            raise ConfigError(
                f"Invalid line in {path.name!r}: {raw_line!r}. Expected KEY=VALUE format."
            )
        key, raw_value = line.split("=", 1)
        key = key.strip()
        value = raw_value.strip().strip('"').strip("'")
        if not key:
            raise ConfigError(f"Environment variable key is missing in line: {raw_line!r}")
        yield key, value


def parse_bool(value: str) -> bool:
    """Parse the usual spellings of a boolean flag, raising :class:`ValueError` otherwise."""

    lowered = value.strip().lower()
    if lowered in {"1", "true", "yes", "on"}:
        return True
    if lowered in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"not a boolean: {value!r}")


@dataclass
class TimelineSettings:
    """Layout settings shared by the packer, the timeline and the renderer."""

    start_hour: int = 0
    end_hour: int = 24
    usable_width: float = 421.0
    hour_height: float = 100.0
    label_margin: float = 59.0
    gutter: float = 0.0
    format_24h: bool = True

    @property
    def canvas_height(self) -> float:
        return (self.end_hour - self.start_hour) * self.hour_height

    def validate(self) -> "TimelineSettings":
        if not 0 <= self.start_hour < self.end_hour <= 24:
            raise InvalidConfigurationError(
                f"Visible hours must satisfy 0 <= start < end <= 24, got {self.start_hour}-{self.end_hour}."
            )
        if self.usable_width <= 0:
            raise InvalidConfigurationError(f"Usable width must be positive, got {self.usable_width}.")
        if self.hour_height <= 0:
            raise InvalidConfigurationError(f"Hour height must be positive, got {self.hour_height}.")
        if self.label_margin < 0 or self.gutter < 0:
            raise InvalidConfigurationError("Label margin and gutter must not be negative.")
        return self

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "TimelineSettings":
        """Build settings from ``TIMELINE_*`` environment variables."""

        env = os.environ if environ is None else environ
        defaults = cls()

        def read(key: str, convert: Callable[[str], _T], default: _T) -> _T:
            raw = env.get(key)
            if raw is None or raw.strip() == "":
                return default
            try:
                return convert(raw.strip())
            except ValueError as exc:
                raise ConfigError(f"Invalid value for {key}: {raw!r}") from exc

        return cls(
            start_hour=read("TIMELINE_START_HOUR", int, defaults.start_hour),
            end_hour=read("TIMELINE_END_HOUR", int, defaults.end_hour),
            usable_width=read("TIMELINE_WIDTH", float, defaults.usable_width),
            hour_height=read("TIMELINE_HOUR_HEIGHT", float, defaults.hour_height),
            label_margin=read("TIMELINE_LABEL_MARGIN", float, defaults.label_margin),
            gutter=read("TIMELINE_GUTTER", float, defaults.gutter),
            format_24h=read("TIMELINE_FORMAT_24H", parse_bool, defaults.format_24h),
        )
