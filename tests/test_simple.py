import datetime as dt

import pytest

from poshprompt.environment import Environment, Properties
from poshprompt.simple import OsInfo, PoshGit, Root, Shell, Tempus, Terraform, Text


@pytest.mark.parametrize(
    "expected,goos,wsl,platform,display",
    [
        ("WSL at \uf306", "linux", "debian", "debian", False),
        ("WSL at burps", "linux", "burps", "debian", True),
        ("\uf306", "linux", "", "debian", False),
        ("debian", "linux", "", "debian", True),
        ("windows", "windows", "", "", False),
        ("darwin", "darwin", "", "", False),
        ("unknown", "unknown", "", "", False),
    ],
)
def test_os_info(expected, goos, wsl, platform, display):
    env = Environment(environ={"WSL_DISTRO_NAME": wsl}, goos=goos, platform=platform)
    props = Properties(values={
        "wsl": "WSL", "wsl_separator": " at ", "display_distro_name": display,
        "windows": "windows", "macos": "darwin",
    })
    segment = OsInfo(props, env)
    assert segment.string() == expected
    assert segment.os_name == (wsl or platform or goos)


@pytest.mark.parametrize(
    "prompt,expected,enabled",
    [("my prompt", "my prompt", True), ("   my prompt", "my prompt", True), ("", "", False)],
)
def test_posh_git(prompt, expected, enabled):
    segment = PoshGit(None, Environment(environ={"POSH_GIT_STATUS": prompt}))
    assert segment.enabled() is enabled
    assert segment.string() == expected


def test_root_icon():
    segment = Root(Properties(values={"root_icon": "#"}), Environment(environ={}, root=True))
    assert segment.enabled() is True
    assert segment.string() == "#"
    assert Root(None, Environment(environ={}, root=False)).enabled() is False


def test_write_current_shell():
    segment = Shell(Properties(), Environment(environ={}, shell_name="zsh"))
    assert segment.string() == "zsh"


@pytest.mark.parametrize("shell,expected", [("zsh", "zsh"), ("PS", "PS"), ("PWSH", "PS")])
def test_use_mapped_shell_names(shell, expected):
    props = Properties(values={"mapped_shell_names": {"pwsh": "PS"}})
    assert Shell(props, Environment(environ={}, shell_name=shell)).string() == expected


def make_terraform(has_command, has_folder, workspace=""):
    commands = {("terraform", "workspace", "show"): workspace} if has_command else {}
    folders = frozenset({".terraform"}) if has_folder else frozenset()
    return Terraform(Properties(), Environment(environ={}, commands=commands, folders=folders))


@pytest.mark.parametrize("has_command,has_folder", [(False, False), (True, False), (False, True)])
def test_terraform_disabled(has_command, has_folder):
    assert make_terraform(has_command, has_folder).enabled() is False


def test_terraform_enabled():
    segment = make_terraform(True, True, "default")
    assert segment.enabled() is True
    assert segment.string() == "default"


@pytest.mark.parametrize(
    "text,expected,disabled",
    [
        ("hello", "hello", False),
        ("{{ .Env.HELLO }} world", "hello world", False),
        ("{{ .Env.HELLO }} world from {{ .Shell }}", "hello world from terminal", False),
        ("{{ .Env.HELLO }} world in {{ .Folder }}", "hello world in posh", False),
        ("{{ .Env.HELLO }} {{ .User }}", "hello Posh", False),
        ("", "", True),
        ("{{ .Env.WORLD }}", "", True),
    ],
)
def test_text_segment(text, expected, disabled):
    env = Environment(
        environ={"HELLO": "hello", "WORLD": ""}, cwd="/usr/home/posh", home="/usr/home",
        path_separator="/", goos="linux", root=True, shell_name="terminal",
        user="Posh", host="MyHost",
    )
    segment = Text(Properties(values={"text": text}), env)
    assert (not segment.enabled()) is disabled
    assert segment.string() == expected


@pytest.mark.parametrize(
    "template,expected",
    [
        ("", "13:05:09"),
        ('{{.CurrentDate | date "15:04:05"}}', "13:05:09"),
        ('{{.CurrentDate | date "January 02, 2006 15:04:05" | lower }}',
         "september 17, 2021 13:05:09"),
    ],
)
def test_time_segment_template(template, expected):
    moment = dt.datetime(2021, 9, 17, 13, 5, 9)
    segment = Tempus(Properties(values={"template": template}), Environment(environ={}), moment)
    assert segment.enabled() is True
    assert segment.string() == expected


def test_time_segment_bad_template_shows_error():
    segment = Tempus(Properties(values={"template": "{{ if }"}), Environment(environ={}),
                     dt.datetime(2021, 1, 1))
    assert segment.enabled() is True
    assert segment.string() == "invalid template text"