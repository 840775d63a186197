import os
from typing import NamedTuple, Optional

from .errors import InvalidIdentifier

DEFAULT_SEPARATORS = ":."
DISPLAY_SEPARATOR = ":"
# internal separator between name and index in filenames
FILENAME_SEPARATOR = "_"


class StashId(NamedTuple):
    name: str
    index: Optional[int] = None

    def __str__(self):
        if self.index is None:
            return self.name
        return format_id(self.name, self.index)


def _parse_index(text: str, raw: str) -> int:
    # str.isdigit() would let through things like superscripts
    if not text or not all("0" <= c <= "9" for c in text):
        raise InvalidIdentifier(
            f"Invalid stash identifier '{raw}': index must be a non-negative integer, got '{text}'"
        )
    return int(text)


def parse_id(text: str, separators: str = DEFAULT_SEPARATORS) -> StashId:
    """
    Parse a user supplied identifier such as "foo:3", "foo.3", ":3" or "foo".

    The string is split on the last separator character found, everything
    before it is the name and everything after it the index. Without a
    separator the whole string is the name and the index is left unset,
    meaning "the newest entry".
    """
    pos = max(text.rfind(sep) for sep in separators)
    if pos < 0:
        return StashId(text, None)
    return StashId(text[:pos], _parse_index(text[pos + 1:], text))


def validate_name(name: str, separators: str = DEFAULT_SEPARATORS) -> str:
    forbidden = set(separators) | {"/", os.sep, "\0"}
    bad = sorted(c for c in forbidden if c in name)
    if bad or name in (".", ".."):
        raise InvalidIdentifier(
            f"Invalid stash name '{name}': names can't contain any of {bad or [name]}"
        )
    return name


def to_filename(name: str, index: int) -> str:
    return f"{name}{FILENAME_SEPARATOR}{index}"


def from_filename(filename: str) -> Optional[StashId]:
    # bare numbers were written by the old numeric-only stack
    if filename.isascii() and filename.isdigit():
        return StashId("", int(filename))

    name, sep, index = filename.rpartition(FILENAME_SEPARATOR)
    if not sep or not index.isascii() or not index.isdigit():
        return None
    return StashId(name, int(index))


def format_id(name: str, index: int) -> str:
    return f"{name}{DISPLAY_SEPARATOR}{index}"
