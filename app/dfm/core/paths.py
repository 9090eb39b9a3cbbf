"""Path management for dfm.

This module provides the XDG configuration directory, discovery of the
dfm directory and the small path helpers the engine relies on: joining,
containment checks and conversion to target-relative paths.

XDG defaults:
- Config: ~/.config/dfm/
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "dfm"

# Name of the per-machine configuration file inside the dfm directory
CONFIG_FILENAME = ".dfm.toml"

# Environment variable that selects the dfm directory
DFM_DIR_ENV = "DFM_DIR"


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get XDG directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the application-specific directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Get the user configuration directory path.

    Returns:
        Path to ~/.config/dfm/ (or XDG_CONFIG_HOME/dfm/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_theme_path() -> Path:
    """Get the user theme file path.

    Returns:
        Path to ~/.config/dfm/theme.toml.
    """
    return get_config_dir() / "theme.toml"


def get_dfm_dir(explicit: str | Path | None = None) -> Path:
    """Determine the dfm directory.

    Priority:
    1. Explicit value (from --dfm-dir)
    2. DFM_DIR environment variable
    3. Current working directory

    Args:
        explicit: Directory given on the command line, if any.

    Returns:
        Absolute path to the dfm directory.
    """
    if explicit:
        return Path(os.path.abspath(explicit))
    env = os.environ.get(DFM_DIR_ENV)
    if env:
        return Path(os.path.abspath(env))
    return Path.cwd()


def get_config_path(dfm_dir: Path) -> Path:
    """Get the configuration file path inside a dfm directory.

    Args:
        dfm_dir: The dfm directory.

    Returns:
        Path to DFM_DIR/.dfm.toml.
    """
    return dfm_dir / CONFIG_FILENAME


def path_join(*components: str) -> str:
    """Join path components, letting a later absolute component win.

    Empty components are ignored and the result is normalized, so
    ``path_join("/a", "")`` is ``"/a"``.

    Args:
        components: Path components to join.

    Returns:
        Normalized joined path, or "" when there are no components.
    """
    parts = [c for c in components if c]
    if not parts:
        return ""
    return os.path.normpath(os.path.join(*parts))


def is_within(path: str, root: str) -> bool:
    """Check whether ``path`` lies strictly beneath ``root``.

    Both arguments must be absolute and normalized. The root itself is
    not considered to be within the root.

    Args:
        path: Absolute candidate path.
        root: Absolute root directory.

    Returns:
        True if path is a descendant of root.
    """
    root = root.rstrip(os.sep) or os.sep
    prefix = root if root == os.sep else root + os.sep
    return path.startswith(prefix) and path != root


def relative_to(path: str, root: str) -> str:
    """Convert an absolute path beneath ``root`` to a relative one.

    Args:
        path: Absolute path inside root.
        root: Absolute root directory.

    Returns:
        Path relative to root, using "/" separators.

    Raises:
        ValueError: If path is not beneath root.
    """
    if not is_within(path, root):
        msg = f"{path} is not within {root}"
        raise ValueError(msg)
    return os.path.relpath(path, root)


def is_under(relative: str, prefix: str) -> bool:
    """Check whether a relative path equals or lies beneath a prefix.

    A prefix of "." matches every path.

    Args:
        relative: Target-relative path.
        prefix: Target-relative prefix.

    Returns:
        True if relative is prefix or one of its descendants.
    """
    if prefix in ("", "."):
        return True
    return relative == prefix or relative.startswith(prefix.rstrip("/") + "/")
