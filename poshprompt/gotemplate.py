"""A text template engine with the syntax of Go templates and common helpers."""

from __future__ import annotations

import datetime as _dt
import json
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from poshprompt.environment import base

INVALID_TEMPLATE = "invalid template text"
INCORRECT_TEMPLATE = "unable to create text based on template"
_ENV_REGEX = re.compile(r"\.Env\.(?P<ENV>[^ \.}]*)")
_NO_VALUE = "<no value>"


class TemplateError(Exception):
    """Raised when a template cannot be parsed or executed."""


class _ParseError(Exception):
    pass


class _ExecError(Exception):
    pass


class _Record(dict):
    """A map built from an object's public attributes; keys are normalized."""


def _normalize(name: str) -> str:
    return name.replace("_", "").lower()


# --- time formatting -------------------------------------------------------

_MONTHS = ["January", "February", "March", "April", "May", "June", "July",
           "August", "September", "October", "November", "December"]
_DAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
_LAYOUT_ELEMENTS = sorted(
    ["January", "Monday", "2006", "-07:00:00", "-0700", "-07:00", "Z07:00", "Z0700",
     "Jan", "Mon", "MST", "-07", "002", "_2", "01", "02", "03", "04", "05", "06",
     "15", "PM", "pm", ".000000000", ".000000", ".000", "1", "2", "3", "4", "5"],
    key=len,
    reverse=True,
)


def _offset(moment: _dt.datetime, element: str) -> str:
    delta = moment.utcoffset() or _dt.timedelta(0)
    seconds = int(delta.total_seconds())
    if element.startswith("Z") and seconds == 0:
        return "Z"
    sign = "-" if seconds < 0 else "+"
    seconds = abs(seconds)
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    body = element.lstrip("Z-")
    if body == "07":
        return f"{sign}{hours:02d}"
    if body == "0700":
        return f"{sign}{hours:02d}{minutes:02d}"
    if body == "07:00:00":
        return f"{sign}{hours:02d}:{minutes:02d}:{secs:02d}"
    return f"{sign}{hours:02d}:{minutes:02d}"


def _render_element(moment: _dt.datetime, element: str) -> str:
    hour12 = moment.hour % 12 or 12
    simple = {
        "January": _MONTHS[moment.month - 1],
        "Jan": _MONTHS[moment.month - 1][:3],
        "Monday": _DAYS[moment.weekday()],
        "Mon": _DAYS[moment.weekday()][:3],
        "2006": f"{moment.year:04d}",
        "06": f"{moment.year % 100:02d}",
        "01": f"{moment.month:02d}",
        "1": str(moment.month),
        "02": f"{moment.day:02d}",
        "_2": f"{moment.day:2d}",
        "2": str(moment.day),
        "002": f"{moment.timetuple().tm_yday:03d}",
        "15": f"{moment.hour:02d}",
        "03": f"{hour12:02d}",
        "3": str(hour12),
        "04": f"{moment.minute:02d}",
        "4": str(moment.minute),
        "05": f"{moment.second:02d}",
        "5": str(moment.second),
        "PM": "PM" if moment.hour >= 12 else "AM",
        "pm": "pm" if moment.hour >= 12 else "am",
        "MST": moment.tzname() or "UTC",
    }
    if element in simple:
        return simple[element]
    if element.startswith("."):
        digits = f"{moment.microsecond:06d}000"
        return "." + digits[: len(element) - 1]
    return _offset(moment, element)


def go_time_format(moment, layout):
    """Format a datetime using a reference-time layout such as "15:04:05"."""
    out = []
    pos = 0
    while pos < len(layout):
        for element in _LAYOUT_ELEMENTS:
            if layout.startswith(element, pos):
                out.append(_render_element(moment, element))
                pos += len(element)
                break
        else:
            out.append(layout[pos])
            pos += 1
    return "".join(out)


# --- helpers ----------------------------------------------------------------

def _truth(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, (bool, int, float, str, list, tuple, dict)):
        return bool(value)
    return True


def _to_text(value: Any) -> str:
    if value is None:
        return _NO_VALUE
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else repr(value)
    if isinstance(value, (list, tuple)):
        return "[" + " ".join(_to_text(v) for v in value) + "]"
    if isinstance(value, Mapping):
        return "map[" + " ".join(f"{k}:{_to_text(v)}" for k, v in value.items()) + "]"
    return str(value)


def _date(layout: str, moment: Any) -> str:
    if not isinstance(moment, _dt.datetime):
        raise TypeError("date expects a datetime")
    return go_time_format(moment, layout)


def _compare(op: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    return lambda a, b: op(a, b)


def _and(*args):
    result = None
    for result in args:
        if not _truth(result):
            return result
    return result


def _or(*args):
    result = None
    for result in args:
        if _truth(result):
            return result
    return result


_FUNCS: dict[str, Callable[..., Any]] = {
    "eq": lambda first, *rest: any(first == other for other in rest),
    "ne": _compare(lambda a, b: a != b),
    "lt": _compare(lambda a, b: a < b),
    "le": _compare(lambda a, b: a <= b),
    "gt": _compare(lambda a, b: a > b),
    "ge": _compare(lambda a, b: a >= b),
    "not": lambda value: not _truth(value),
    "and": _and,
    "or": _or,
    "len": len,
    "print": lambda *args: "".join(_to_text(a) for a in args),
    "contains": lambda substr, text: substr in text,
    "hasPrefix": lambda prefix, text: text.startswith(prefix),
    "hasSuffix": lambda suffix, text: text.endswith(suffix),
    "lower": lambda text: text.lower(),
    "upper": lambda text: text.upper(),
    "title": lambda text: text.title(),
    "trim": lambda text: text.strip(),
    "replace": lambda old, new, text: text.replace(old, new),
    "default": lambda fallback, given=None: given if _truth(given) else fallback,
    "date": _date,
    "now": _dt.datetime.now,
}

# --- parsing ----------------------------------------------------------------

_ACTION = re.compile(r"\{\{(-\s)?(.*?)(\s-)?\}\}", re.S)
_LEXEME = re.compile(
    r"""\s*(?:
    (?P<str>"(?:[^"\\]|\\.)*") |
    (?P<raw>`[^`]*`) |
    (?P<pipe>\|) |
    (?P<lp>\() |
    (?P<rp>\)) |
    (?P<field>(?:\$)?(?:\.[A-Za-z_]\w*)+|\.|\$) |
    (?P<num>-?\d+(?:\.\d+)?) |
    (?P<ident>[A-Za-z_]\w*)
    )""",
    re.X,
)


@dataclass
class _Text:
    text: str


@dataclass
class _Action:
    pipeline: list


@dataclass
class _Branch:
    kind: str
    pipeline: list
    body: list
    else_body: list = field(default_factory=list)


def _split(source: str) -> list[tuple[str, str]]:
    items: list[tuple[str, str]] = []
    pos = 0
    trim_next = False
    for match in _ACTION.finditer(source):
        text = source[pos:match.start()]
        if trim_next:
            text = text.lstrip()
        if match.group(1):
            text = text.rstrip()
        if text:
            items.append(("text", text))
        content = match.group(2).strip()
        if not (content.startswith("/*") and content.endswith("*/")):
            items.append(("action", content))
        trim_next = bool(match.group(3))
        pos = match.end()
    text = source[pos:]
    if trim_next:
        text = text.lstrip()
    if "{{" in text:
        raise _ParseError("unclosed action")
    if text:
        items.append(("text", text))
    return items


def _make_arg(kind: str, value: str) -> tuple:
    if kind == "str":
        return ("const", json.loads(value))
    if kind == "raw":
        return ("const", value[1:-1])
    if kind == "num":
        return ("const", float(value) if "." in value else int(value))
    if kind == "field":
        root = value.startswith("$")
        rest = value[1:] if root else value
        names = [n for n in rest.split(".") if n]
        return ("field", "$" if root else ".", names)
    if value in ("true", "false"):
        return ("const", value == "true")
    if value == "nil":
        return ("const", None)
    if value not in _FUNCS:
        raise _ParseError(f"function {value} not defined")
    return ("func", value)


def _parse_pipeline(lexemes: list, index: int, nested: bool) -> tuple[list, int]:
    commands: list[list] = []
    current: list[tuple] = []
    while index < len(lexemes):
        kind, value = lexemes[index]
        if kind == "pipe":
            if not current:
                raise _ParseError("missing command")
            commands.append(current)
            current = []
            index += 1
        elif kind == "rp":
            if not nested:
                raise _ParseError("unexpected )")
            break
        elif kind == "lp":
            sub, index = _parse_pipeline(lexemes, index + 1, True)
            if index >= len(lexemes) or lexemes[index][0] != "rp":
                raise _ParseError("unclosed (")
            current.append(("pipe", sub))
            index += 1
        else:
            current.append(_make_arg(kind, value))
            index += 1
    if not current:
        raise _ParseError("missing command")
    commands.append(current)
    return commands, index


def _pipeline(source: str) -> list:
    source = source.strip()
    lexemes = []
    pos = 0
    while pos < len(source):
        match = _LEXEME.match(source, pos)
        if not match or match.end() == pos:
            raise _ParseError(f"bad input in {source!r}")
        pos = match.end()
        lexemes.append((match.lastgroup, match.group(match.lastgroup)))
    commands, index = _parse_pipeline(lexemes, 0, False)
    if index != len(lexemes):
        raise _ParseError("unexpected )")
    return commands


def _keyword(content: str) -> tuple[str, str]:
    word, _, rest = content.partition(" ")
    return word, rest


def _parse_branch(kind: str, rest: str, items: list, pos: int) -> tuple[_Branch, int]:
    node = _Branch(kind, _pipeline(rest), [])
    node.body, pos, word, tail = _parse_list(items, pos, {"else", "end"})
    if word == "else":
        inner, inner_rest = _keyword(tail.strip())
        if inner in ("if", "with"):
            nested, pos = _parse_branch(inner, inner_rest, items, pos)
            node.else_body = [nested]
            return node, pos
        node.else_body, pos, word, _ = _parse_list(items, pos, {"end"})
    if word != "end":
        raise _ParseError(f"unclosed {kind}")
    return node, pos


def _parse_list(items: list, pos: int, stops: set[str]) -> tuple[list, int, str | None, str]:
    nodes: list = []
    while pos < len(items):
        kind, content = items[pos]
        pos += 1
        if kind == "text":
            nodes.append(_Text(content))
            continue
        word, rest = _keyword(content)
        if word in ("end", "else"):
            if word not in stops:
                raise _ParseError(f"unexpected {word}")
            return nodes, pos, word, rest
        if word in ("if", "with", "range"):
            node, pos = _parse_branch(word, rest, items, pos)
            nodes.append(node)
        else:
            nodes.append(_Action(_pipeline(content)))
    return nodes, pos, None, ""


def _parse(source: str) -> list:
    nodes, _, word, _ = _parse_list(_split(source), 0, set())
    if word is not None:
        raise _ParseError("unexpected keyword")
    return nodes


# --- execution --------------------------------------------------------------

def _public_attributes(obj: Any) -> dict[str, Any]:
    values = {}
    for name in dir(obj):
        if name.startswith("_"):
            continue
        value = getattr(obj, name, None)
        if callable(value):
            continue
        values[name] = value
    return values


def _lookup(obj: Any, name: str) -> Any:
    if obj is None:
        raise _ExecError(f"nil data; no entry for key {name}")
    if isinstance(obj, Mapping):
        if name in obj:
            return obj[name]
        if isinstance(obj, _Record):
            return obj.get(_normalize(name))
        return None
    if isinstance(obj, (str, int, float, bool, list, tuple, _dt.datetime)):
        raise _ExecError(f"can't evaluate field {name}")
    wanted = _normalize(name)
    for attr, value in _public_attributes(obj).items():
        if _normalize(attr) == wanted:
            return value
    raise _ExecError(f"can't evaluate field {name}")


_UNSET = object()


def _eval_arg(arg: tuple, dot: Any, root: Any) -> Any:
    kind = arg[0]
    if kind == "const":
        return arg[1]
    if kind == "field":
        value = root if arg[1] == "$" else dot
        for name in arg[2]:
            value = _lookup(value, name)
        return value
    if kind == "func":
        return _call(arg[1], [])
    return _eval_pipeline(arg[1], dot, root)


def _call(name: str, args: list) -> Any:
    try:
        return _FUNCS[name](*args)
    except (TypeError, ValueError, AttributeError) as exc:
        raise _ExecError(f"error calling {name}: {exc}") from exc


def _eval_pipeline(commands: list, dot: Any, root: Any) -> Any:
    value = _UNSET
    for command in commands:
        head = command[0]
        if head[0] == "func":
            args = [_eval_arg(arg, dot, root) for arg in command[1:]]
            if value is not _UNSET:
                args.append(value)
            value = _call(head[1], args)
        else:
            if len(command) > 1 or value is not _UNSET:
                raise _ExecError("can't give argument to non-function")
            value = _eval_arg(head, dot, root)
    return value


def _execute(nodes: list, dot: Any, root: Any, out: list[str]) -> None:
    for node in nodes:
        if isinstance(node, _Text):
            out.append(node.text)
        elif isinstance(node, _Action):
            out.append(_to_text(_eval_pipeline(node.pipeline, dot, root)))
        else:
            value = _eval_pipeline(node.pipeline, dot, root)
            if node.kind == "range" and _truth(value):
                items = value.values() if isinstance(value, Mapping) else value
                for item in items:
                    _execute(node.body, item, root, out)
            elif node.kind != "range" and _truth(value):
                _execute(node.body, value if node.kind == "with" else dot, root, out)
            else:
                _execute(node.else_body, dot, root, out)


@dataclass
class TextTemplate:
    """A template bound to a context object and an environment."""

    template: str
    context: Any = None
    env: Any = None

    def render(self):
        """Render the template; raise TemplateError when it fails."""
        try:
            nodes = _parse(self.template)
        except (_ParseError, json.JSONDecodeError) as exc:
            raise TemplateError(INVALID_TEMPLATE) from exc
        if ".Env" in self.template:
            self._load_env_vars()
        out: list[str] = []
        try:
            _execute(nodes, self.context, self.context, out)
        except _ExecError as exc:
            raise TemplateError(INCORRECT_TEMPLATE) from exc
        return "".join(out).replace(_NO_VALUE, "")

    def render_plain_context(self, context):
        """Render with the common prompt values; errors become the text."""
        context = {} if context is None else context
        env = self.env
        context["Root"] = env.is_running_as_root()
        cwd = env.getcwd().replace(env.home_dir(), "~", 1)
        context["Path"] = cwd
        context["Folder"] = base(cwd, env)
        context["Shell"] = env.get_shell_name()
        context["User"] = env.get_current_user()
        try:
            context["Host"] = env.get_host_name()
        except OSError:
            context["Host"] = ""
        self.context = context
        try:
            return self.render()
        except TemplateError as exc:
            return str(exc)

    def _load_env_vars(self) -> None:
        context = self.context
        if isinstance(context, dict) and not isinstance(context, _Record) and all(
            isinstance(k, str) for k in context
        ):
            merged = context
        elif context is not None and not isinstance(
            context, (Mapping, str, int, float, bool, list, tuple)
        ):
            merged = _Record(
                (_normalize(k), v) for k, v in _public_attributes(context).items()
            )
        else:
            merged = {}
        merged["Env"] = {
            m.group("ENV"): self.env.getenv(m.group("ENV"))
            for m in _ENV_REGEX.finditer(self.template)
        }
        self.context = merged