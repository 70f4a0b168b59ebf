# mediaremote/control/applescript_values.py

"""Converts between Python values and AppleScript source text.

`render()` produces literals to embed in a script; `parse()` reads what
`osascript -s s` prints, which is the result in source form, e.g.

    {name:"Cog", frontmost:false, current entry:«class ???? » ...}
    window id 1204 of application "Cog"
    «constant ****kPSP»
"""

import os
import re
from collections.abc import Mapping, Sequence
from typing import Any

from .base import Constant, ObjectReference

_NUMBER = re.compile(r"-?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_RECORD_KEY = re.compile(r"\s*([A-Za-z_][A-Za-z0-9_ ]*?)\s*:(?!=)")
_APPLICATION_SUFFIX = re.compile(r"\s+of\s+application\s+(\"[^\"]*\"|id\s+\"[^\"]*\")\s*$")


class ParseError(ValueError):
    pass


def quote(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def specifier(path: Sequence[str]) -> str:
    """Renders an object path (outermost first) as an AppleScript reference, e.g. `title of current entry`."""
    return " of ".join(reversed(path))


def render(value: Any) -> str:
    if value is None:
        return "missing value"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Constant):
        return str(value).strip()
    if isinstance(value, str):
        return quote(value)
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, os.PathLike):
        return f"POSIX file {quote(os.fspath(value))}"
    if isinstance(value, ObjectReference):
        return specifier(value.path) if value.path else "it"
    if isinstance(value, Mapping):
        return "{" + ", ".join(f"{key}:{render(item)}" for key, item in value.items()) + "}"
    if isinstance(value, Sequence):
        return "{" + ", ".join(render(item) for item in value) + "}"
    raise TypeError(f"Cannot express {type(value).__name__} {value!r} in AppleScript")


class _Parser:
    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def error(self, message: str) -> ParseError:
        return ParseError(f"{message} at offset {self.pos} in {self.text!r}")

    def skip_space(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos].isspace():
            self.pos += 1

    def peek(self) -> str:
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def value(self) -> Any:
        self.skip_space()
        char = self.peek()
        if char == "{":
            return self.collection()
        if char == '"':
            return self.string()
        if char == "«":
            return self.chevron()
        match = _NUMBER.match(self.text, self.pos)
        if match and self._at_boundary(match.end()):
            self.pos = match.end()
            literal = match.group()
            return float(literal) if any(c in literal for c in ".eE") else int(literal)
        return self.bare()

    def _at_boundary(self, index: int) -> bool:
        rest = self.text[index:].lstrip()
        return rest == "" or rest[0] in ",}"

    def string(self) -> str:
        self.pos += 1
        chars = []
        while self.pos < len(self.text):
            char = self.text[self.pos]
            if char == "\\":
                escaped = self.text[self.pos + 1:self.pos + 2]
                chars.append({"n": "\n", "r": "\r", "t": "\t"}.get(escaped, escaped))
                self.pos += 2
                continue
            if char == '"':
                self.pos += 1
                return "".join(chars)
            chars.append(char)
            self.pos += 1
        raise self.error("Unterminated string")

    def chevron(self) -> Constant:
        end = self.text.find("»", self.pos)
        if end < 0:
            raise self.error("Unterminated «»")
        body = self.text[self.pos + 1:end]
        self.pos = end + 1
        # «constant ****kPSP» names a four-character code; anything else is kept verbatim.
        if body.startswith("constant ****"):
            return Constant(body[len("constant ****"):])
        return Constant(body)

    def collection(self) -> list | dict:
        self.pos += 1
        self.skip_space()
        if self.peek() == "}":
            self.pos += 1
            return []
        is_record = _RECORD_KEY.match(self.text, self.pos) is not None
        items: list[Any] = []
        record: dict[str, Any] = {}
        while True:
            if is_record:
                key_match = _RECORD_KEY.match(self.text, self.pos)
                if key_match is None:
                    raise self.error("Expected a record key")
                self.pos = key_match.end()
                record[key_match.group(1)] = self.value()
            else:
                items.append(self.value())
            self.skip_space()
            char = self.peek()
            self.pos += 1
            if char == "}":
                return record if is_record else items
            if char != ",":
                raise self.error("Expected ',' or '}'")

    def bare(self) -> Any:
        start = self.pos
        depth = 0
        while self.pos < len(self.text):
            char = self.text[self.pos]
            if char == '"':
                self.string()
                continue
            if char == "«":
                self.chevron()
                continue
            if char == "{":
                depth += 1
            elif char == "}":
                if depth == 0:
                    break
                depth -= 1
            elif char == "," and depth == 0:
                break
            self.pos += 1
        word = self.text[start:self.pos].strip()
        if not word:
            raise self.error("Expected a value")
        if word == "missing value":
            return None
        if word in ("true", "false"):
            return word == "true"
        if word.startswith("application "):
            return ObjectReference(())
        suffix = _APPLICATION_SUFFIX.search(word)
        if suffix is not None:
            return ObjectReference(tuple(reversed(_split_of(word[:suffix.start()]))))
        if word.startswith("date "):
            return self._reparse_string(word[len("date "):])
        return Constant(word)

    @staticmethod
    def _reparse_string(text: str) -> str:
        return _Parser(text).string()


def _split_of(reference: str) -> list[str]:
    """Splits `a of b of c` on top-level `of`, leaving quoted text alone."""
    parts, current, in_quote = [], [], False
    tokens = re.split(r'(")', reference)
    for token in tokens:
        if token == '"':
            in_quote = not in_quote
            current.append(token)
            continue
        if in_quote:
            current.append(token)
            continue
        pieces = re.split(r"\s+of\s+", token)
        current.append(pieces[0])
        for piece in pieces[1:]:
            parts.append("".join(current).strip())
            current = [piece]
    parts.append("".join(current).strip())
    return [part for part in parts if part]


def parse(text: str) -> Any:
    """Parses one value printed by `osascript -s s`. Empty output (a command with no result) is None."""
    if not text.strip():
        return None
    parser = _Parser(text.strip())
    result = parser.value()
    parser.skip_space()
    if parser.pos != len(parser.text):
        raise parser.error("Unexpected trailing text")
    return result
