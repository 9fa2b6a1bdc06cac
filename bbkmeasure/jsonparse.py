"""JSON text parser producing :class:`~bbkmeasure.jsonvalue.Json` values."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from bbkmeasure.jsonvalue import Json

MAX_DEPTH = 200
_INT_DIGITS = 9  # decimal digits that always fit in a 32-bit signed int
_WHITESPACE = " \r\n\t"
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
_SIMPLE_ESCAPES = {
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    '"': '"',
    "\\": "\\",
    "/": "/",
}


class JsonParse(enum.Enum):
    """Parsing strategy: strict JSON, or JSON with C-style comments."""

    STANDARD = "standard"
    COMMENTS = "comments"


class JsonParseError(ValueError):
    """Raised when JSON text cannot be parsed."""


@dataclass
class MultiParse:
    """Result of :func:`parse_multi`.

    ``values`` holds every value parsed successfully, ``stop_pos`` the offset
    just after the last of them (and any whitespace or comments following it),
    and ``error`` the message of the failure that stopped parsing, if any.
    """

    values: list[Json] = field(default_factory=list)
    stop_pos: int = 0
    error: str = ""

    @property
    def ok(self) -> bool:
        return not self.error


def _esc(ch: str) -> str:
    """Format a character for an error message."""
    code = ord(ch)
    if 0x20 <= code <= 0x7F:
        return f"'{ch}' ({code})"
    return f"({code})"


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


class _Parser:
    def __init__(self, text: str, strategy: JsonParse) -> None:
        self.text = text
        self.pos = 0
        self.strategy = strategy

    def _char(self, pos: int) -> str:
        return self.text[pos] if pos < len(self.text) else "\0"

    @property
    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def _consume_whitespace(self) -> None:
        while not self.at_end and self.text[self.pos] in _WHITESPACE:
            self.pos += 1

    def _consume_comment(self) -> bool:
        text = self.text
        if self._char(self.pos) != "/":
            return False
        self.pos += 1
        if self.at_end:
            raise JsonParseError("unexpected end of input after start of comment")
        ch = text[self.pos]
        if ch == "/":
            end = text.find("\n", self.pos + 1)
            self.pos = len(text) if end < 0 else end
            return True
        if ch == "*":
            end = text.find("*/", self.pos + 1)
            if end < 0:
                raise JsonParseError("unexpected end of input inside multi-line comment")
            self.pos = end + 2
            return True
        raise JsonParseError("malformed comment")

    def consume_garbage(self) -> None:
        self._consume_whitespace()
        if self.strategy is JsonParse.COMMENTS:
            while self._consume_comment():
                self._consume_whitespace()

    def _next_token(self) -> str:
        self.consume_garbage()
        if self.at_end:
            raise JsonParseError("unexpected end of input")
        ch = self.text[self.pos]
        self.pos += 1
        return ch

    def _parse_string(self) -> str:
        text = self.text
        out: list[str] = []
        pending = -1  # last \u code point, held back to pair surrogates

        def flush() -> None:
            nonlocal pending
            if pending >= 0:
                out.append(chr(pending))
            pending = -1

        while True:
            if self.at_end:
                raise JsonParseError("unexpected end of input in string")
            ch = text[self.pos]
            self.pos += 1

            if ch == '"':
                flush()
                return "".join(out)
            if ord(ch) <= 0x1F:
                raise JsonParseError(f"unescaped {_esc(ch)} in string")
            if ch != "\\":
                flush()
                out.append(ch)
                continue

            if self.at_end:
                raise JsonParseError("unexpected end of input in string")
            ch = text[self.pos]
            self.pos += 1

            if ch == "u":
                digits = text[self.pos:self.pos + 4]
                if len(digits) < 4 or not set(digits) <= _HEX_DIGITS:
                    raise JsonParseError("bad \\u escape: " + digits)
                codepoint = int(digits, 16)
                if 0xD800 <= pending <= 0xDBFF and 0xDC00 <= codepoint <= 0xDFFF:
                    out.append(chr((((pending - 0xD800) << 10) | (codepoint - 0xDC00)) + 0x10000))
                    pending = -1
                else:
                    flush()
                    pending = codepoint
                self.pos += 4
                continue

            flush()
            replacement = _SIMPLE_ESCAPES.get(ch)
            if replacement is None:
                raise JsonParseError("invalid escape character " + _esc(ch))
            out.append(replacement)

    def _parse_number(self) -> Json:
        start = self.pos
        char = self._char
        if char(self.pos) == "-":
            self.pos += 1

        if char(self.pos) == "0":
            self.pos += 1
            if _is_digit(char(self.pos)):
                raise JsonParseError("leading 0s not permitted in numbers")
        elif "1" <= char(self.pos) <= "9":
            self.pos += 1
            while _is_digit(char(self.pos)):
                self.pos += 1
        else:
            raise JsonParseError("invalid " + _esc(char(self.pos)) + " in number")

        if char(self.pos) not in ".eE" and self.pos - start <= _INT_DIGITS:
            return Json(int(self.text[start:self.pos]))

        if char(self.pos) == ".":
            self.pos += 1
            if not _is_digit(char(self.pos)):
                raise JsonParseError("at least one digit required in fractional part")
            while _is_digit(char(self.pos)):
                self.pos += 1

        if char(self.pos) in ("e", "E"):
            self.pos += 1
            if char(self.pos) in ("+", "-"):
                self.pos += 1
            if not _is_digit(char(self.pos)):
                raise JsonParseError("at least one digit required in exponent")
            while _is_digit(char(self.pos)):
                self.pos += 1

        return Json(float(self.text[start:self.pos]))

    def _expect(self, expected: str, result: Json) -> Json:
        self.pos -= 1
        found = self.text[self.pos:self.pos + len(expected)]
        if found != expected:
            raise JsonParseError(f"parse error: expected {expected}, got {found}")
        self.pos += len(expected)
        return result

    def parse_value(self, depth: int = 0) -> Json:
        if depth > MAX_DEPTH:
            raise JsonParseError("exceeded maximum nesting depth")

        ch = self._next_token()

        if ch == "-" or _is_digit(ch):
            self.pos -= 1
            return self._parse_number()
        if ch == "t":
            return self._expect("true", Json(True))
        if ch == "f":
            return self._expect("false", Json(False))
        if ch == "n":
            return self._expect("null", Json(None))
        if ch == '"':
            return Json(self._parse_string())
        if ch == "{":
            return self._parse_object(depth)
        if ch == "[":
            return self._parse_array(depth)
        raise JsonParseError("expected value, got " + _esc(ch))

    def _parse_object(self, depth: int) -> Json:
        data: dict[str, Json] = {}
        ch = self._next_token()
        if ch == "}":
            return Json(data)
        while True:
            if ch != '"':
                raise JsonParseError("expected '\"' in object, got " + _esc(ch))
            key = self._parse_string()
            ch = self._next_token()
            if ch != ":":
                raise JsonParseError("expected ':' in object, got " + _esc(ch))
            data[key] = self.parse_value(depth + 1)
            ch = self._next_token()
            if ch == "}":
                return Json(data)
            if ch != ",":
                raise JsonParseError("expected ',' in object, got " + _esc(ch))
            ch = self._next_token()

    def _parse_array(self, depth: int) -> Json:
        items: list[Json] = []
        ch = self._next_token()
        if ch == "]":
            return Json(items)
        while True:
            self.pos -= 1
            items.append(self.parse_value(depth + 1))
            ch = self._next_token()
            if ch == "]":
                return Json(items)
            if ch != ",":
                raise JsonParseError("expected ',' in list, got " + _esc(ch))
            self._next_token()


def parse(text: str | None, strategy: JsonParse = JsonParse.STANDARD) -> Json:
    """Parse a single JSON value; raise :class:`JsonParseError` on failure."""
    if text is None:
        raise JsonParseError("null input")
    parser = _Parser(text, strategy)
    result = parser.parse_value()
    parser.consume_garbage()
    if not parser.at_end:
        raise JsonParseError("unexpected trailing " + _esc(text[parser.pos]))
    return result


def parse_multi(text: str, strategy: JsonParse = JsonParse.STANDARD) -> MultiParse:
    """Parse consecutive JSON values separated by whitespace (or comments)."""
    parser = _Parser(text, strategy)
    outcome = MultiParse()
    try:
        while not parser.at_end:
            outcome.values.append(parser.parse_value())
            parser.consume_garbage()
            outcome.stop_pos = parser.pos
    except JsonParseError as exc:
        outcome.error = str(exc)
    return outcome