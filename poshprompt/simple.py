"""Segments that show a single piece of machine or shell state."""

from __future__ import annotations

import datetime as _dt

from poshprompt.environment import (
    DARWIN_PLATFORM,
    LINUX_PLATFORM,
    WINDOWS_PLATFORM,
    CommandError,
    Properties,
)
from poshprompt.gotemplate import TemplateError, TextTemplate, go_time_format

SEGMENT_TEMPLATE = "template"
ROOT_ICON = "root_icon"
MAPPED_SHELL_NAMES = "mapped_shell_names"
TEXT_PROPERTY = "text"
TIME_FORMAT = "time_format"
POSH_GIT_ENV = "POSH_GIT_STATUS"

MACOS = "macos"
LINUX = "linux"
WINDOWS = "windows"
WSL = "wsl"
WSL_SEPARATOR = "wsl_separator"
DISPLAY_DISTRO_NAME = "display_distro_name"

_DISTRO_ICONS = {
    "alpine": "\uF300",
    "aosc": "\uF301",
    "arch": "\uF303",
    "centos": "\uF304",
    "coreos": "\uF305",
    "debian": "\uF306",
    "devuan": "\uF307",
    "raspbian": "\uF315",
    "elementary": "\uF309",
    "fedora": "\uF30a",
    "gentoo": "\uF30d",
    "mageia": "\uF310",
    "manjaro": "\uF312",
    "mint": "\uF30e",
    "nixos": "\uF313",
    "opensuse": "\uF314",
    "sabayon": "\uF317",
    "slackware": "\uF319",
    "ubuntu": "\uF31b",
}


class _Segment:
    def __init__(self, props=None, env=None):
        self.props = props if props is not None else Properties()
        self.env = env


class Root(_Segment):
    """Shows an icon when running as root."""

    def enabled(self):
        return self.env.is_running_as_root()

    def string(self):
        return self.props.get_string(ROOT_ICON, "\uF0E7")


class PoshGit(_Segment):
    """Shows a git status computed by the shell."""

    def __init__(self, props=None, env=None):
        super().__init__(props, env)
        self.git_status = ""

    def enabled(self):
        self.git_status = self.env.getenv(POSH_GIT_ENV).strip()
        return self.git_status != ""

    def string(self):
        return self.git_status


class Shell(_Segment):
    """Shows the shell name, optionally mapped to custom text."""

    def enabled(self):
        return True

    def string(self):
        mapped = self.props.get_key_value_map(MAPPED_SHELL_NAMES, {})
        name = self.env.get_shell_name()
        for key, value in mapped.items():
            if name.casefold() == key.casefold():
                return value
        return name


class Terraform(_Segment):
    """Shows the active terraform workspace."""

    def __init__(self, props=None, env=None):
        super().__init__(props, env)
        self.workspace_name = ""

    def enabled(self):
        command = "terraform"
        if not self.env.has_command(command) or not self.env.has_folder(".terraform"):
            return False
        try:
            self.workspace_name = self.env.run_command(command, "workspace", "show")
        except CommandError:
            self.workspace_name = ""
        return True

    def string(self):
        return self.workspace_name


class Text(_Segment):
    """Shows configured text, rendered as a template."""

    def __init__(self, props=None, env=None):
        super().__init__(props, env)
        self.content = ""

    def enabled(self):
        source = self.props.get_string(TEXT_PROPERTY, "!!text property not defined!!")
        self.content = TextTemplate(source, self, self.env).render_plain_context(None)
        return len(self.content) > 0

    def string(self):
        return self.content


class Tempus(_Segment):
    """Shows the current time."""

    def __init__(self, props=None, env=None, current_date=None):
        super().__init__(props, env)
        self.current_date = current_date
        self.template_text = ""

    def enabled(self):
        if self.current_date is None:
            self.current_date = _dt.datetime.now()
        source = self.props.get_string(SEGMENT_TEMPLATE, "")
        if source:
            try:
                self.template_text = TextTemplate(source, self, self.env).render()
            except TemplateError as exc:
                self.template_text = str(exc)
            return len(self.template_text) > 0
        return True

    def string(self):
        if self.template_text:
            return self.template_text
        layout = self.props.get_string(TIME_FORMAT, "15:04:05")
        return go_time_format(self.current_date, layout)


class OsInfo(_Segment):
    """Shows an icon or name for the operating system."""

    def __init__(self, props=None, env=None):
        super().__init__(props, env)
        self.os_name = ""

    def enabled(self):
        return True

    def string(self):
        goos = self.env.get_runtime_goos()
        if goos == WINDOWS_PLATFORM:
            self.os_name = WINDOWS_PLATFORM
            return self.props.get_string(WINDOWS, "\uE62A")
        if goos == DARWIN_PLATFORM:
            self.os_name = DARWIN_PLATFORM
            return self.props.get_string(MACOS, "\uF179")
        if goos == LINUX_PLATFORM:
            wsl = self.env.getenv("WSL_DISTRO_NAME")
            platform = self.env.get_platform()
            if not wsl:
                self.os_name = platform
                return self._distro_name(platform, "")
            self.os_name = wsl
            return (
                self.props.get_string(WSL, "WSL")
                + self.props.get_string(WSL_SEPARATOR, " - ")
                + self._distro_name(platform, wsl)
            )
        self.os_name = goos
        return goos

    def _distro_name(self, distro: str, default_name: str) -> str:
        display = self.props.get_bool(DISPLAY_DISTRO_NAME, False)
        if display and default_name:
            return default_name
        if display:
            return distro
        if distro in _DISTRO_ICONS:
            return self.props.get_string(distro, _DISTRO_ICONS[distro])
        return self.props.get_string(LINUX, "\uF17C")