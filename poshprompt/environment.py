"""Segment properties, the runtime environment and a small in-memory cache."""

from __future__ import annotations

import getpass
import ntpath
import os
import re
import shutil
import socket
import sys
import time
import urllib.request
from dataclasses import dataclass, field
from typing import Any, Mapping

WINDOWS_PLATFORM = "windows"
DARWIN_PLATFORM = "darwin"
LINUX_PLATFORM = "linux"


class CommandError(Exception):
    """Raised when an external command cannot be resolved or run."""


@dataclass
class Properties:
    """Typed access to a segment's configured values."""

    values: dict[str, Any] = field(default_factory=dict)
    foreground: str = ""

    def get_string(self, key, default):
        value = self.values.get(key)
        return value if isinstance(value, str) else default

    def get_bool(self, key, default):
        value = self.values.get(key)
        return value if isinstance(value, bool) else default

    def get_int(self, key, default):
        value = self.values.get(key)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return default
        return int(value)

    def get_float(self, key, default):
        value = self.values.get(key)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return default
        return float(value)

    def get_color(self, key, default):
        value = self.values.get(key)
        return value if isinstance(value, str) and value else default

    def get_key_value_map(self, key, default):
        value = self.values.get(key)
        if not isinstance(value, Mapping):
            return default
        return {str(k): str(v) for k, v in value.items()}


class MemoryCache:
    """Key/value store whose entries expire after a number of minutes."""

    def __init__(self):
        self._entries: dict[str, tuple[str, float]] = {}

    def get(self, key):
        """Return the cached value, or None when missing or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires = entry
        if time.monotonic() >= expires:
            del self._entries[key]
            return None
        return value

    def set(self, key, value, ttl):
        self._entries[key] = (value, time.monotonic() + ttl * 60)


def _detect_goos() -> str:
    if sys.platform.startswith("win"):
        return WINDOWS_PLATFORM
    if sys.platform == "darwin":
        return DARWIN_PLATFORM
    if sys.platform.startswith("linux"):
        return LINUX_PLATFORM
    return sys.platform


def _read_text(path: str) -> str:
    try:
        with open(path, encoding="utf-8", errors="replace") as handle:
            return handle.read()
    except OSError:
        return ""


@dataclass
class Environment:
    """The machine state segments read; every field may be fixed up front."""

    environ: Mapping[str, str] = field(default_factory=lambda: dict(os.environ))
    cwd: str | None = None
    home: str | None = None
    path_separator: str = os.sep
    goos: str | None = None
    platform: str | None = None
    wsl: bool | None = None
    shell_name: str | None = None
    user: str | None = None
    host: str | None = None
    root: bool | None = None
    stack: int = 0
    working_dir_arg: str = ""
    commands: Mapping[tuple[str, ...], str] | None = None
    folders: frozenset[str] | None = None
    window_titles: Mapping[str, str] = field(default_factory=dict)
    memory: MemoryCache = field(default_factory=MemoryCache)

    def getenv(self, key):
        return self.environ.get(key, "")

    def getcwd(self):
        return self.cwd if self.cwd is not None else os.getcwd()

    def home_dir(self):
        return self.home if self.home is not None else os.path.expanduser("~")

    def get_path_separator(self):
        return self.path_separator

    def get_runtime_goos(self):
        return self.goos if self.goos is not None else _detect_goos()

    def get_platform(self):
        if self.platform is not None:
            return self.platform
        match = re.search(r"^ID=\"?([^\"\n]*)\"?", _read_text("/etc/os-release"), re.M)
        return match.group(1) if match else ""

    def is_wsl(self):
        if self.wsl is not None:
            return self.wsl
        return "microsoft" in _read_text("/proc/version").lower()

    def run_command(self, command, *args):
        """Return the recorded output of a command; running programs is not allowed."""
        key = (command, *args)
        if self.commands is not None and key in self.commands:
            return self.commands[key]
        raise CommandError(f"command not available: {' '.join(key)}")

    def has_command(self, command):
        if self.commands is not None:
            return any(key[0] == command for key in self.commands)
        return shutil.which(command) is not None

    def has_folder(self, folder):
        if self.folders is not None:
            return folder in self.folders
        return os.path.isdir(os.path.join(self.getcwd(), folder))

    def get_shell_name(self):
        if self.shell_name is not None:
            return self.shell_name
        shell = os.path.basename(self.getenv("SHELL"))
        return os.path.splitext(shell)[0]

    def get_current_user(self):
        return self.user if self.user is not None else getpass.getuser()

    def get_host_name(self):
        return self.host if self.host is not None else socket.gethostname()

    def is_running_as_root(self):
        if self.root is not None:
            return self.root
        geteuid = getattr(os, "geteuid", None)
        return geteuid is not None and geteuid() == 0

    def do_get(self, url, timeout):
        """Fetch a URL; the timeout is in milliseconds."""
        with urllib.request.urlopen(url, timeout=timeout / 1000) as response:
            return response.read()

    def cache(self):
        return self.memory

    def stack_count(self):
        return self.stack

    def get_window_title(self, image_name, window_title_regex):
        title = self.window_titles.get(image_name)
        if title is None or not re.search(window_title_regex, title):
            raise CommandError(f"no window found for {image_name}")
        return title

    def pswd(self):
        return self.working_dir_arg


def _volume_name(path: str, env) -> str:
    if env.get_runtime_goos() == WINDOWS_PLATFORM:
        return ntpath.splitdrive(path)[0]
    return ""


def base(path, env):
    """Return the last element of a path, using the environment's separator."""
    if path == "/":
        return path
    sep = env.get_path_separator()
    volume = _volume_name(path, env)
    while path and path[-1] == sep:
        path = path[:-1]
    if volume == path:
        return path
    path = path[len(_volume_name(path, env)):]
    index = path.rfind(sep) if sep else -1
    if index >= 0:
        path = path[index + 1:]
    return path or sep