"""The segment that shows the current working directory."""

from __future__ import annotations

from poshprompt.environment import (
    DARWIN_PLATFORM,
    WINDOWS_PLATFORM,
    CommandError,
    Properties,
    base,
)

STYLE = "style"
ENABLE_HYPERLINK = "enable_hyperlink"
FOLDER_SEPARATOR_ICON = "folder_separator_icon"
HOME_ICON = "home_icon"
FOLDER_ICON = "folder_icon"
WINDOWS_REGISTRY_ICON = "windows_registry_icon"
MIXED_THRESHOLD = "mixed_threshold"
MAPPED_LOCATIONS = "mapped_locations"
MAPPED_LOCATIONS_ENABLED = "mapped_locations_enabled"
STACK_COUNT_ENABLED = "stack_count_enabled"
MAX_DEPTH = "max_depth"

AGNOSTER = "agnoster"
AGNOSTER_FULL = "agnoster_full"
AGNOSTER_SHORT = "agnoster_short"
SHORT = "short"
FULL = "full"
FOLDER = "folder"
MIXED = "mixed"
LETTER = "letter"

_POWERSHELL_PREFIX = "Microsoft.PowerShell.Core\\FileSystem::"


def _split(text: str, sep: str) -> list[str]:
    """Split like a separator-based split, where an empty separator splits characters."""
    if sep == "":
        return list(text)
    return text.split(sep)


class PathSegment:
    """Shows the working directory in one of several styles."""

    def __init__(self, props=None, env=None):
        self.props = props if props is not None else Properties()
        self.env = env

    def enabled(self):
        return True

    def string(self):
        cwd = self.env.getcwd()
        style = self.props.get_string(STYLE, AGNOSTER)
        renderers = {
            AGNOSTER: self._agnoster_path,
            AGNOSTER_FULL: self._agnoster_full_path,
            AGNOSTER_SHORT: self._agnoster_short_path,
            MIXED: self._mixed_path,
            LETTER: self._letter_path,
            SHORT: self._full_path,
            FULL: self._full_path,
            FOLDER: self._folder_path,
        }
        renderer = renderers.get(style)
        if renderer is None:
            return f"Path style: {style} is not available"
        formatted = self._format_windows_drive(renderer())
        if self.props.get_bool(ENABLE_HYPERLINK, False):
            if self.env.is_wsl():
                try:
                    cwd = self.env.run_command("wslpath", "-m", cwd)
                except CommandError:
                    cwd = ""
            return f"[{formatted}](file://{cwd})"
        if self.props.get_bool(STACK_COUNT_ENABLED, False) and self.env.stack_count() > 0:
            return f"{self.env.stack_count()} {formatted}"
        return formatted

    # --- styles -------------------------------------------------------------

    def _format_windows_drive(self, pwd: str) -> str:
        if self.env.get_runtime_goos() != WINDOWS_PLATFORM or not pwd.endswith(":"):
            return pwd
        return pwd + "\\"

    def _mixed_path(self) -> str:
        pwd = self._pwd()
        sep = self.env.get_path_separator()
        parts = _split(pwd, sep)
        threshold = int(self.props.get_float(MIXED_THRESHOLD, 4))
        last = len(parts) - 1
        pieces = []
        for index, part in enumerate(parts):
            if not part:
                continue
            folder = part
            if len(part) > threshold and index not in (0, last):
                folder = self.props.get_string(FOLDER_ICON, "..")
            separator = "" if index == 0 else self.props.get_string(FOLDER_SEPARATOR_ICON, sep)
            pieces.append(separator + folder)
        return "".join(pieces)

    def _agnoster_path(self) -> str:
        pwd = self._pwd()
        depth = self._path_depth(pwd)
        folder_icon = self.props.get_string(FOLDER_ICON, "..")
        separator = self.props.get_string(FOLDER_SEPARATOR_ICON, self.env.get_path_separator())
        pieces = [self._root_location()]
        pieces.extend(separator + folder_icon for _ in range(1, depth))
        if depth > 0:
            pieces.append(separator + base(pwd, self.env))
        return "".join(pieces)

    def _letter_path(self) -> str:
        pwd = self._pwd()
        sep = self.env.get_path_separator()
        parts = _split(pwd, sep)
        if not parts:
            return ""
        separator = self.props.get_string(FOLDER_SEPARATOR_ICON, sep)
        pieces = []
        for folder in parts[:-1]:
            if not folder:
                continue
            letter = folder[:2] if folder.startswith(".") and len(folder) > 1 else folder[:1]
            pieces.append(letter + separator)
        pieces.append(parts[-1])
        return "".join(pieces)

    def _agnoster_full_path(self) -> str:
        pwd = self._pwd()
        if len(pwd) > 1 and pwd[0] == self.env.get_path_separator():
            pwd = pwd[1:]
        return self._replace_folder_separators(pwd)

    def _agnoster_short_path(self) -> str:
        pwd = self._pwd()
        depth = self._path_depth(pwd)
        max_depth = max(self.props.get_int(MAX_DEPTH, 1), 1)
        if depth <= max_depth:
            return self._agnoster_full_path()
        sep = self.env.get_path_separator()
        folder_separator = self.props.get_string(FOLDER_SEPARATOR_ICON, sep)
        folder_icon = self.props.get_string(FOLDER_ICON, "..")
        parts = _split(pwd, sep)
        tail = "".join(folder_separator + part for part in parts[len(parts) - max_depth:])
        return f"{self._root_location()}{folder_separator}{folder_icon}{tail}"

    def _full_path(self) -> str:
        return self._replace_folder_separators(self._pwd())

    def _folder_path(self) -> str:
        return self._replace_folder_separators(base(self._pwd(), self.env))

    # --- helpers ------------------------------------------------------------

    def _pwd(self) -> str:
        pwd = self.env.pswd() or self.env.getcwd()
        return self._replace_mapped_locations(pwd)

    def _normalize(self, input_path: str) -> str:
        normalized = input_path
        if normalized.startswith("~"):
            normalized = self.env.home_dir() + normalized[1:]
        normalized = normalized.replace("\\", "/")
        if self.env.get_runtime_goos() in (WINDOWS_PLATFORM, DARWIN_PLATFORM):
            normalized = normalized.lower()
        return normalized

    def _replace_mapped_locations(self, pwd: str) -> str:
        if pwd.startswith(_POWERSHELL_PREFIX):
            pwd = pwd.replace(_POWERSHELL_PREFIX, "", 1)
        mapped: dict[str, str] = {}
        if self.props.get_bool(MAPPED_LOCATIONS_ENABLED, True):
            registry_icon = self.props.get_string(WINDOWS_REGISTRY_ICON, "\uF013")
            mapped["HKCU:"] = registry_icon
            mapped["HKLM:"] = registry_icon
            mapped[self._normalize(self.env.home_dir())] = self.props.get_string(HOME_ICON, "~")
        custom = self.props.get_key_value_map(MAPPED_LOCATIONS, {})
        for key, value in custom.items():
            mapped[self._normalize(key)] = value
        # reverse order so a mapped sub folder wins over its mapped parent
        normalized_pwd = self._normalize(pwd)
        for key in sorted(mapped, reverse=True):
            if normalized_pwd.startswith(key):
                return mapped[key] + pwd[len(key):]
        return pwd

    def _replace_folder_separators(self, pwd: str) -> str:
        default_separator = self.env.get_path_separator()
        if pwd == default_separator:
            return pwd
        folder_separator = self.props.get_string(FOLDER_SEPARATOR_ICON, default_separator)
        if folder_separator == default_separator:
            return pwd
        return pwd.replace(default_separator, folder_separator)

    def _root_location(self) -> str:
        sep = self.env.get_path_separator()
        pwd = self._pwd()
        if sep and pwd.startswith(sep):
            pwd = pwd[len(sep):]
        parts = _split(pwd, sep)
        return parts[0] if parts else ""

    def _path_depth(self, pwd: str) -> int:
        return sum(1 for part in _split(pwd, self.env.get_path_separator()) if part) - 1