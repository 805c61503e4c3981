"""The segment that shows the user and host name."""

from __future__ import annotations

from poshprompt.environment import Properties
from poshprompt.gotemplate import TemplateError, TextTemplate

SEGMENT_TEMPLATE = "template"
DISPLAY_DEFAULT = "display_default"
USER_INFO_SEPARATOR = "user_info_separator"
USER_COLOR = "user_color"
HOST_COLOR = "host_color"
DISPLAY_HOST = "display_host"
DISPLAY_USER = "display_user"
SSH_ICON = "ssh_icon"
DEFAULT_USER_NAME = "default_user_name"
DEFAULT_USER_ENV_VAR = "POSH_SESSION_DEFAULT_USER"

_SSH_VARIABLES = ("SSH_CONNECTION", "SSH_CLIENT")


class Session:
    """Shows user@host, hidden for the default user when configured so."""

    def __init__(self, props=None, env=None):
        self.props = props if props is not None else Properties()
        self.env = env
        self.user_name = ""
        self.default_user_name = ""
        self.computer_name = ""
        self.ssh_session = False
        self.root = False
        self.template_text = ""

    def enabled(self):
        self.user_name = self._user_name()
        self.computer_name = self._computer_name()
        self.ssh_session = self._active_ssh_session()
        self.default_user_name = self._default_user()
        source = self.props.get_string(SEGMENT_TEMPLATE, "")
        if source:
            self.root = self.env.is_running_as_root()
            try:
                self.template_text = TextTemplate(source, self, self.env).render()
            except TemplateError as exc:
                self.template_text = str(exc)
            return len(self.template_text) > 0
        show_default = self.props.get_bool(DISPLAY_DEFAULT, True)
        return show_default or self.default_user_name != self.user_name

    def string(self):
        if self.template_text:
            return self.template_text
        separator = ""
        if self.props.get_bool(DISPLAY_HOST, True) and self.props.get_bool(DISPLAY_USER, True):
            separator = self.props.get_string(USER_INFO_SEPARATOR, "@")
        ssh_icon = self.props.get_string(SSH_ICON, "\uF817 ") if self.ssh_session else ""
        user_color = self.props.get_color(USER_COLOR, self.props.foreground)
        host_color = self.props.get_color(HOST_COLOR, self.props.foreground)
        user = f"<{user_color}>{self.user_name}</>" if user_color else self.user_name
        host = f"<{host_color}>{self.computer_name}</>" if host_color else self.computer_name
        return f"{ssh_icon}{user}{separator}{host}"

    def _computer_name(self) -> str:
        if not self.props.get_bool(DISPLAY_HOST, True):
            return ""
        try:
            name = self.env.get_host_name()
        except OSError:
            name = "unknown"
        return name.strip()

    def _user_name(self) -> str:
        if not self.props.get_bool(DISPLAY_USER, True):
            return ""
        name = self.env.get_current_user().strip()
        if self.env.get_runtime_goos() == "windows" and "\\" in name:
            name = name.split("\\")[1]
        return name

    def _default_user(self) -> str:
        return self.env.getenv(DEFAULT_USER_ENV_VAR) or self.props.get_string(DEFAULT_USER_NAME, "")

    def _active_ssh_session(self) -> bool:
        return any(self.env.getenv(key) for key in _SSH_VARIABLES)