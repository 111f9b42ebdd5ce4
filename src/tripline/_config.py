"""Assertion configuration and loading it from pyproject.toml."""

from __future__ import annotations

import logging
import tomllib
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any, Self

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ._errors import ConfigError
from ._format import FormatManager

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ._format import Formatter, Removable

logger = logging.getLogger(__name__)

DEFAULT_CIRCULAR_MSG = "[<Circular>]"


def _default_circular_msg() -> str:
    return DEFAULT_CIRCULAR_MSG


class FormatOptions(BaseModel):
    """Options controlling how values and messages are rendered."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    finalize: bool = False
    finalize_fn: Callable[[str], str] | None = None
    max_props: int = Field(default=8, ge=0)
    max_format_depth: int = Field(default=50, ge=1)


class AssertOptions(BaseModel):
    """The recognised assertion options."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    is_verbose: bool = False
    full_stack: bool = False
    def_assert_msg: str = "assertion failure"
    def_fatal_msg: str = "fatal assertion failure"
    format: FormatOptions = Field(default_factory=FormatOptions)
    circular_msg: Callable[[], str] = _default_circular_msg
    max_compare_depth: int = Field(default=100, ge=1)


class Config:
    """Assertion options together with the custom formatters that apply to them.

    Option values are read as attributes (`cfg.def_assert_msg`, `cfg.format.max_props`).
    A clone takes a copy of the option values, while formatters registered on the
    original stay visible to the clone through its parent format manager.
    """

    __slots__ = ("_format_mgr", "_options")

    def __init__(self, options: AssertOptions | None = None, format_mgr: FormatManager | None = None) -> None:
        self._options = options if options is not None else AssertOptions()
        self._format_mgr = format_mgr if format_mgr is not None else FormatManager()

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return getattr(self._options, name)

    def __repr__(self) -> str:
        return f"Config({self._options!r})"

    @property
    def options(self) -> AssertOptions:
        return self._options

    @property
    def format_mgr(self) -> FormatManager:
        return self._format_mgr

    def update(self, values: Mapping[str, Any] | None = None, **kwargs: Any) -> Self:
        """Merge new option values into this configuration.

        A `format` mapping is merged into the current format options instead of
        replacing them.

        Raises:
            ValueError: If an option is unknown or its value is invalid.

        """
        merged = {**(values or {}), **kwargs}
        for key, value in merged.items():
            if key == "format" and isinstance(value, Mapping):
                for format_key, format_value in value.items():
                    setattr(self._options.format, format_key, format_value)
            else:
                setattr(self._options, key, value)
        return self

    def reset(self) -> None:
        """Restore the default options and drop the custom formatters of this configuration."""
        self._options = AssertOptions()
        self._format_mgr.reset()

    def clone(self, overrides: Mapping[str, Any] | None = None) -> Config:
        cloned = Config(
            self._options.model_copy(update={"format": self._options.format.model_copy()}),
            FormatManager(parent=self._format_mgr),
        )
        if overrides:
            cloned.update(overrides)
        return cloned

    def add_formatter(self, formatter: Formatter | Sequence[Formatter]) -> Removable:
        return self._format_mgr.add_formatter(formatter)


assert_config = Config()
"""The process wide default configuration, cloned by every new root context."""


def find_pyproject_toml(start_dir: Path | None = None) -> Path | None:
    """Find pyproject.toml by walking up from start_dir.

    Args:
        start_dir: Starting directory. Defaults to current working directory.

    Returns:
        Path to pyproject.toml if found, None otherwise.

    """
    current = (start_dir if start_dir is not None else Path.cwd()).resolve()

    while True:
        candidate = current / "pyproject.toml"
        if candidate.is_file():
            return candidate
        if current.parent == current:
            return None
        current = current.parent


def load_config(pyproject_path: Path) -> AssertOptions:
    """Load and validate [tool.tripline] options from pyproject.toml.

    Only plain values can be configured from TOML, `finalize_fn` and `circular_msg`
    keep their defaults.

    Raises:
        ConfigError: If the file is not valid TOML or an option is invalid.

    """
    with pyproject_path.open("rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            msg = f"Invalid TOML in {pyproject_path}: {e}"
            raise ConfigError(msg) from e

    section = data.get("tool", {}).get("tripline", {})
    if not isinstance(section, dict):
        msg = "Invalid [tool.tripline] configuration. Expected a table."
        raise ConfigError(msg)

    format_section = section.get("format")
    for key in ("finalize_fn", "circular_msg"):
        if key in section or (isinstance(format_section, dict) and key in format_section):
            msg = f"Invalid [tool.tripline].{key}: callables cannot be configured from TOML"
            raise ConfigError(msg)

    try:
        options = AssertOptions.model_validate(section)
    except ValidationError as e:
        errors = "; ".join(f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in e.errors())
        msg = f"Invalid [tool.tripline] configuration in {pyproject_path}: {errors}"
        raise ConfigError(msg) from e

    logger.debug(f"Loaded [tool.tripline] from {pyproject_path}: {section}")
    return options


def configure_from_pyproject(start_dir: Path | None = None) -> AssertOptions | None:
    """Apply [tool.tripline] from the nearest pyproject.toml to `assert_config`.

    Returns:
        The loaded options, or None if no pyproject.toml was found.

    """
    pyproject_path = find_pyproject_toml(start_dir)
    if pyproject_path is None:
        logger.debug("No pyproject.toml found, keeping the default configuration")
        return None

    options = load_config(pyproject_path)
    assert_config.update(options.model_dump(exclude_unset=True))
    return options
