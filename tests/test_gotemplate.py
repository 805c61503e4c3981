import datetime as dt
from dataclasses import dataclass

import pytest

from poshprompt.environment import Environment
from poshprompt.gotemplate import TemplateError, TextTemplate, go_time_format


@dataclass
class One:
    text: str


@dataclass
class Two:
    text: str = ""
    text2: str = ""


def env_with(values=None):
    return Environment(environ=values or {}, goos="linux", path_separator="/")


@pytest.mark.parametrize(
    "template,context,expected",
    [
        ("{{.Text}} world", One("hello"), "hello world"),
        ("{{ if .Text }}{{.Text}} world{{end}}", One("hello"), "hello world"),
        ("{{ if .Text }}{{.Text}} {{end}}world", One(""), "world"),
        ("{{.Text}}{{ if .Text2 }} {{.Text2}}{{end}}", Two("hello", "world"), "hello world"),
        ("{{.Text}}{{ if .Text2 }} {{.Text2}}{{end}}", Two("hello"), "hello"),
        ("{{.Text}} {{.Text2}}", Two("hello", "world"), "hello world"),
        (
            '{{ if contains "hell" .Text }}{{.Text}} {{end}}{{.Text2}}',
            Two("hello", "world"),
            "hello world",
        ),
    ],
)
def test_render_template(template, context, expected):
    assert TextTemplate(template, context, env_with()).render() == expected


def test_invalid_property_errors():
    with pytest.raises(TemplateError, match="unable to create text based on template"):
        TextTemplate("{{.Durp}} world", One("hello"), env_with()).render()


def test_invalid_template_errors():
    with pytest.raises(TemplateError, match="invalid template text"):
        TextTemplate("{{ if .Text }} world", One("hello"), env_with()).render()


@pytest.mark.parametrize(
    "template,context,environ,expected",
    [
        ("{{.Env.HELLO}} {{.World}}", {"World": "world"}, {"HELLO": "hello"}, "hello world"),
        ("{{.Env.HELLO }} world{{ .Text}}", None, {"HELLO": "hello"}, "hello world"),
        ("{{.Env.HELLO}} world {{ .Text }}", One("posh"), {"HELLO": "hello"}, "hello world posh"),
        ("{{.Text}} world", One("hello"), {}, "hello world"),
        ("{{.Text}} world", {"Text": "hello"}, {}, "hello world"),
        ("{{.Text}} world", {}, {}, " world"),
    ],
)
def test_render_template_env_var(template, context, environ, expected):
    assert TextTemplate(template, context, env_with(environ)).render() == expected


def test_else_branch_and_trim_markers():
    tmpl = TextTemplate("{{ if .Text -}}  yes {{- else }}no{{ end }}", One(""), env_with())
    assert tmpl.render() == "no"
    tmpl = TextTemplate("{{ if .Text -}}  yes {{- else }}no{{ end }}", One("x"), env_with())
    assert tmpl.render() == "yes"


def test_render_plain_context():
    env = Environment(
        environ={}, cwd="/usr/home/posh", home="/usr/home", path_separator="/",
        goos="linux", root=True, shell_name="terminal", user="Posh", host="MyHost",
    )
    tmpl = TextTemplate("{{.User}}@{{.Host}} {{.Path}} {{.Folder}} {{.Shell}}", None, env)
    assert tmpl.render_plain_context(None) == "Posh@MyHost ~/posh posh terminal"


def test_render_plain_context_returns_error_text():
    env = Environment(environ={}, cwd="/", home="/h", path_separator="/", goos="linux",
                      root=False, shell_name="sh", user="u", host="h")
    assert TextTemplate("{{ if }", None, env).render_plain_context({}) == "invalid template text"


def test_go_time_format():
    moment = dt.datetime(2021, 9, 17, 13, 5, 9)
    assert go_time_format(moment, "15:04:05") == "13:05:09"
    assert go_time_format(moment, "January 02, 2006") == "September 17, 2021"
    assert go_time_format(moment, "3:04PM") == "1:05PM"