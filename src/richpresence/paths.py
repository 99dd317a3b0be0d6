"""Path helpers for configuration and local IPC endpoints."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from platformdirs import user_config_dir

if TYPE_CHECKING:
    from collections.abc import Mapping

# Consulted in order; unset or empty values are skipped.
SOCKET_DIR_ENV_VARS = ("XDG_RUNTIME_DIR", "TMPDIR", "TMP", "TEMP")
FALLBACK_SOCKET_DIR = "/tmp"

PIPE_NAMESPACE = "\\\\.\\pipe\\"


def get_config_dir() -> Path:
    """Get the config directory for richpresence."""
    return Path(user_config_dir("richpresence"))


def get_config_path() -> Path:
    """Get the path to the main config file."""
    return get_config_dir() / "config.toml"


def get_socket_dirs(environ: Mapping[str, str] | None = None) -> list[str]:
    """Return candidate directories that may hold the peer's Unix sockets.

    Environment directories come first, ``/tmp`` last. A directory that
    appears twice is only returned once.
    """
    env = os.environ if environ is None else environ
    dirs: list[str] = []
    for name in SOCKET_DIR_ENV_VARS:
        value = env.get(name, "")
        if not value:
            continue
        value = value.rstrip("/") or "/"
        if value not in dirs:
            dirs.append(value)
    if FALLBACK_SOCKET_DIR not in dirs:
        dirs.append(FALLBACK_SOCKET_DIR)
    return dirs


__all__ = [
    "FALLBACK_SOCKET_DIR",
    "PIPE_NAMESPACE",
    "SOCKET_DIR_ENV_VARS",
    "get_config_dir",
    "get_config_path",
    "get_socket_dirs",
]
