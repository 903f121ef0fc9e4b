"""Per-platform resolution of the model state file location.

The state file lives in each platform's per-user state directory:

- Unix-like: ``$XDG_STATE_HOME/opencode/model.json``, falling back to
  ``~/.local/state/opencode/model.json``
- macOS: ``~/Library/Application Support/opencode/model.json``
- Windows: ``%LOCALAPPDATA%\\opencode\\model.json``

Resolution is a pure function of the platform identifier and the
environment. It never touches the filesystem; a missing directory is
created by the storage layer on save.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path, PurePath, PurePosixPath, PureWindowsPath
from typing import Mapping, Optional, Type

__all__ = [
    "APP_DIR_NAME",
    "STATE_FILE_NAME",
    "resolve_state_dir",
    "resolve_state_path",
]

APP_DIR_NAME = "opencode"
STATE_FILE_NAME = "model.json"

_WINDOWS_PLATFORMS = ("win32", "cygwin")
_MACOS_PLATFORMS = ("darwin",)


def _path_flavour(platform: str) -> Type[PurePath]:
    """Concrete Path when resolving for the running host, pure otherwise."""
    is_windows = platform in _WINDOWS_PLATFORMS
    if is_windows == (os.name == "nt"):
        return Path
    return PureWindowsPath if is_windows else PurePosixPath


def _home(environ: Mapping[str, str], flavour: Type[PurePath]) -> PurePath:
    home = environ.get("HOME") or environ.get("USERPROFILE")
    if home:
        return flavour(home)
    return flavour(Path.home())


def resolve_state_dir(platform: Optional[str] = None, environ: Optional[Mapping[str, str]] = None) -> PurePath:
    """Return the opencode state directory for a platform.

    Args:
        platform: A ``sys.platform`` style identifier. Defaults to the
            running platform. Unknown values are treated as Unix-like.
        environ: Environment mapping. Defaults to ``os.environ``.

    Returns:
        The directory that holds the state file.
    """
    if platform is None:
        platform = sys.platform
    if environ is None:
        environ = os.environ

    flavour = _path_flavour(platform)

    if platform in _WINDOWS_PLATFORMS:
        local_app_data = environ.get("LOCALAPPDATA")
        if local_app_data:
            base = flavour(local_app_data)
        else:
            base = _home(environ, flavour) / "AppData" / "Local"
        return base / APP_DIR_NAME

    if platform in _MACOS_PLATFORMS:
        return _home(environ, flavour) / "Library" / "Application Support" / APP_DIR_NAME

    state_home = environ.get("XDG_STATE_HOME")
    # Relative values are invalid per XDG and are ignored
    if state_home and PurePosixPath(state_home).is_absolute():
        return flavour(state_home) / APP_DIR_NAME
    return _home(environ, flavour) / ".local" / "state" / APP_DIR_NAME


def resolve_state_path(platform: Optional[str] = None, environ: Optional[Mapping[str, str]] = None) -> PurePath:
    """Return the absolute path of ``model.json`` for a platform."""
    return resolve_state_dir(platform, environ) / STATE_FILE_NAME
