from __future__ import annotations

from collections.abc import Iterable
import os

_GO_ESCAPES = {
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
    "\\": "\\\\",
    '"': '\\"',
}


def ensure_unique_string(preferred_string, current_strings):
    test_string = preferred_string
    current_strings_set = set(current_strings)

    tries = 1

    while test_string in current_strings_set:
        tries += 1
        test_string = f"{preferred_string}_{tries}"

    return test_string


def go_quote(value: str) -> str:
    """Quote a string the way Go's strconv.Quote does."""
    result = ""
    for char in value:
        if char in _GO_ESCAPES:
            result += _GO_ESCAPES[char]
        elif char.isprintable():
            result += char
        elif ord(char) < 0x80:
            result += f"\\x{ord(char):02x}"
        elif ord(char) < 0x10000:
            result += f"\\u{ord(char):04x}"
        else:
            result += f"\\U{ord(char):08x}"
    return f'"{result}"'


def go_int_slice(values: Iterable[int] | None) -> str:
    """Render a list of ints as a Go []int literal (Go's %#v format)."""
    if values is None:
        return "[]int(nil)"
    return "[]int{" + ", ".join(str(v) for v in values) + "}"


def _is_separator(char: str) -> bool:
    if char.isascii():
        if char.isalnum() or char == "_":
            return False
        return True
    if char.isalnum():
        return False
    return char.isspace()


def title_case(value: str) -> str:
    """Upper-case the first letter of each word, like Go's strings.Title.

    Letters, digits and underscores belong to a word, so ``say_hello``
    becomes ``Say_hello``. Applying it twice gives the same result.
    """
    result = ""
    prev = " "
    for char in value:
        if _is_separator(prev):
            upper = char.upper()
            result += upper if len(upper) == 1 else char
        else:
            result += char
        prev = char
    return result


def _is_ascii_lower(char: str) -> bool:
    return "a" <= char <= "z"


def _is_ascii_digit(char: str) -> bool:
    return "0" <= char <= "9"


def camel_case(value: str) -> str:
    """Return the Go field name protoc-gen-go derives from a proto name.

    ``foo_bar`` becomes ``FooBar``, a leading underscore becomes ``X``.
    """
    if not value:
        return ""
    result = ""
    i = 0
    if value[0] == "_":
        result += "X"
        i += 1
    while i < len(value):
        char = value[i]
        if char == "_" and i + 1 < len(value) and _is_ascii_lower(value[i + 1]):
            i += 1
            continue
        if _is_ascii_digit(char):
            result += char
            i += 1
            continue
        if _is_ascii_lower(char):
            char = char.upper()
        result += char
        while i + 1 < len(value) and _is_ascii_lower(value[i + 1]):
            i += 1
            result += value[i]
        i += 1
    return result


def sanitize_package_name(value: str) -> str:
    """Turn a proto package or path element into a Go package identifier."""
    return value.replace(".", "_").replace("-", "_").replace("/", "_")


def get_bool_env(var, default=False):
    value = os.getenv(var, default)
    if isinstance(value, str):
        value = value.lower()
        if value in ["1", "true"]:
            return True
        if value in ["0", "false"]:
            return False
    return bool(value)
