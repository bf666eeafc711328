"""Action templates: literal text with ``{{ pipeline }}`` actions.

The dialect is the small action language CI step inputs for release tooling
are usually written in:

    {{add . 1}}                          data plus one
    {{.Major}}.{{.Minor}}.{{inc .Patch}} field access and a helper
    release/{{.Year}}-w{{printf "%02d" (Week .)}}
    {{. | add 10}}                       pipe: left value becomes the last argument

Operands are ``.`` (the data), field chains (``.A.B``), integer and
double-quoted string literals, parenthesised pipelines, and function names.
``{{-`` and ``-}}`` trim whitespace around an action.

Field ``Name`` resolves to key/attribute ``Name`` or its snake_case form
(``YearDay`` -> ``year_day``); zero-argument methods are called. Names that
start with an underscore are never resolved.

Anything that goes wrong raises ``TemplateError``.
"""

from __future__ import annotations

import inspect
import json
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Protocol

__all__ = [
    "ActionTemplateRenderer",
    "TemplateError",
    "TemplateFunction",
    "TemplateRenderer",
]

TemplateFunction = Callable[..., object]


class TemplateError(Exception):
    """Template could not be parsed or evaluated."""


class TemplateRenderer(Protocol):
    """Renders a template source against one data value."""

    def render(self, source: str, data: object) -> str: ...


_ACTION_RE = re.compile(r"\{\{(-\s)?(.*?)(\s-)?\}\}", re.DOTALL)
_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
    |(?P<string>"(?:[^"\\]|\\.)*")
    |(?P<number>-?\d+)
    |(?P<field>(?:\.[A-Za-z_][A-Za-z0-9_]*)+)
    |(?P<dot>\.)
    |(?P<ident>[A-Za-z_][A-Za-z0-9_]*)
    |(?P<punct>[()|])
    """,
    re.VERBOSE,
)


@dataclass(frozen=True, slots=True)
class _Token:
    kind: str
    text: str


@dataclass(frozen=True, slots=True)
class _Literal:
    value: object


@dataclass(frozen=True, slots=True)
class _Dot:
    pass


@dataclass(frozen=True, slots=True)
class _Field:
    names: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class _Call:
    name: str
    args: tuple[_Node, ...]


@dataclass(frozen=True, slots=True)
class _Pipeline:
    commands: tuple[_Node, ...]


_Node = _Literal | _Dot | _Field | _Call | _Pipeline


def _tokenize(body: str) -> list[_Token]:
    tokens: list[_Token] = []
    pos = 0
    while pos < len(body):
        m = _TOKEN_RE.match(body, pos)
        if m is None:
            raise TemplateError(f"unexpected character {body[pos]!r} in action {{{{{body}}}}}")
        pos = m.end()
        kind = m.lastgroup or ""
        if kind != "ws":
            tokens.append(_Token(kind, m.group()))
    return tokens


class _Parser:
    def __init__(self, tokens: list[_Token], source: str) -> None:
        self._tokens = tokens
        self._pos = 0
        self._source = source

    def parse(self) -> _Pipeline:
        if not self._tokens:
            raise TemplateError(f"empty action in {self._source!r}")
        pipeline = self._pipeline()
        if self._peek() is not None:
            raise TemplateError(f"unexpected {self._peek_text()!r} in {self._source!r}")
        return pipeline

    def _peek(self) -> _Token | None:
        return self._tokens[self._pos] if self._pos < len(self._tokens) else None

    def _peek_text(self) -> str:
        tok = self._peek()
        return tok.text if tok else "end of action"

    def _next(self) -> _Token:
        tok = self._peek()
        if tok is None:
            raise TemplateError(f"unexpected end of action in {self._source!r}")
        self._pos += 1
        return tok

    def _pipeline(self) -> _Pipeline:
        commands = [self._command()]
        while (tok := self._peek()) is not None and tok.text == "|":
            self._next()
            commands.append(self._command())
        return _Pipeline(tuple(commands))

    def _command(self) -> _Node:
        operands: list[_Node] = []
        while (tok := self._peek()) is not None and tok.text not in {"|", ")"}:
            operands.append(self._operand())
        if not operands:
            raise TemplateError(f"missing command before {self._peek_text()!r} in {self._source!r}")

        head = operands[0]
        if isinstance(head, _Call) and not head.args:
            return _Call(head.name, tuple(operands[1:]))
        if len(operands) > 1:
            raise TemplateError(f"cannot call a non-function in {self._source!r}")
        return head

    def _operand(self) -> _Node:
        tok = self._next()
        match tok.kind:
            case "dot":
                return _Dot()
            case "field":
                return _Field(tuple(tok.text[1:].split(".")))
            case "number":
                return _Literal(int(tok.text))
            case "string":
                try:
                    return _Literal(json.loads(tok.text))
                except json.JSONDecodeError as e:
                    raise TemplateError(f"bad string literal {tok.text}: {e}") from e
            case "ident":
                if tok.text in {"true", "false"}:
                    return _Literal(tok.text == "true")
                return _Call(tok.text, ())
            case _:
                if tok.text == "(":
                    inner = self._pipeline()
                    closing = self._next()
                    if closing.text != ")":
                        raise TemplateError(f"unclosed '(' in {self._source!r}")
                    return inner
                raise TemplateError(f"unexpected {tok.text!r} in {self._source!r}")


def _snake_case(name: str) -> str:
    s1 = re.sub(r"(.)([A-Z][a-z]+)", r"\1_\2", name)
    return re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s1).lower()


def _resolve_field(obj: object, name: str) -> object:
    if name.startswith("_"):
        raise TemplateError(f"can't access private field {name}")

    candidates = (name, _snake_case(name))
    if isinstance(obj, Mapping):
        for key in candidates:
            if key in obj:
                return obj[key]
    else:
        for attr in candidates:
            if hasattr(obj, attr):
                value = getattr(obj, attr)
                if inspect.ismethod(value) or inspect.isbuiltin(value):
                    try:
                        return value()
                    except Exception as e:
                        raise TemplateError(f"error calling {name}: {e}") from e
                return value
    raise TemplateError(f"can't evaluate field {name} in type {type(obj).__name__}")


def _format_value(value: object) -> str:
    if value is None:
        return "<no value>"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class ActionTemplateRenderer:
    """Default ``TemplateRenderer``: pipeline actions with a function table."""

    def __init__(self, functions: Mapping[str, TemplateFunction] | None = None) -> None:
        from relforge.template.functions import DEFAULT_FUNCTIONS

        self._functions: dict[str, TemplateFunction] = {**DEFAULT_FUNCTIONS, **(functions or {})}

    def render(self, source: str, data: object) -> str:
        out: list[str] = []
        pos = 0
        trim_next = False
        for m in _ACTION_RE.finditer(source):
            text = source[pos : m.start()]
            if trim_next:
                text = text.lstrip()
            if m.group(1):
                text = text.rstrip()
            out.append(text)

            pipeline = _Parser(_tokenize(m.group(2)), source).parse()
            out.append(_format_value(self._eval(pipeline, data)))

            trim_next = bool(m.group(3))
            pos = m.end()

        tail = source[pos:]
        if "{{" in tail:
            raise TemplateError(f"unclosed action in {source!r}")
        out.append(tail.lstrip() if trim_next else tail)
        return "".join(out)

    def _eval(self, node: _Node, data: object, piped: tuple[object, ...] = ()) -> object:
        match node:
            case _Pipeline(commands=commands):
                if piped:
                    raise TemplateError("can only pipe into a function")
                value: tuple[object, ...] = ()
                for command in commands:
                    value = (self._eval(command, data, value),)
                return value[0]
            case _Call(name=name, args=args):
                return self._call(name, [*(self._eval(a, data) for a in args), *piped])
            case _:
                if piped:
                    raise TemplateError("can only pipe into a function")
                match node:
                    case _Literal(value=literal):
                        return literal
                    case _Dot():
                        return data
                    case _Field(names=names):
                        current = data
                        for name in names:
                            current = _resolve_field(current, name)
                        return current
        raise TemplateError(f"cannot evaluate {node!r}")

    def _call(self, name: str, args: list[object]) -> object:
        fn = self._functions.get(name)
        if fn is None:
            raise TemplateError(f'function "{name}" not defined')
        try:
            inspect.signature(fn).bind(*args)
        except TypeError as e:
            raise TemplateError(f"wrong number of args for {name}: got {len(args)}") from e
        try:
            return fn(*args)
        except TemplateError:
            raise
        except Exception as e:
            raise TemplateError(f"error calling {name}: {e}") from e
