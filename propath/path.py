"""
path.py

Property path parser. Converts path text to an immutable PropertyPath.
No graph access, no side effects, deterministic output.

Grammar::

    path    := segment ( '.' name | keyed )*
    segment := name | keyed
    name    := [A-Za-z_][A-Za-z0-9_]*
    keyed   := '[' ( quoted | bare ) ']'

Quoted keys may contain dots and brackets: ``settings['log.level']``.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional, Tuple, Union

from propath.errors import MalformedPathError


@dataclass(frozen=True)
class NameSegment:
    """A plain property name: ``spouse`` in ``spouse.name``."""
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class KeySegment:
    """A bracketed key or index: ``[0]``, ``['log.level']``."""
    key: str
    quoted: bool = False

    @property
    def index(self) -> Optional[int]:
        """The key as a list index, or None if it is not an integer."""
        if self.quoted:
            return None
        try:
            return int(self.key)
        except ValueError:
            return None

    def __str__(self) -> str:
        if self.quoted:
            return f"[{self.key!r}]"
        return f"[{self.key}]"


Segment = Union[NameSegment, KeySegment]


@dataclass(frozen=True)
class PropertyPath:
    """An immutable, parsed property path."""
    text: str
    segments: Tuple[Segment, ...]

    def __len__(self) -> int:
        return len(self.segments)

    def __iter__(self):
        return iter(self.segments)

    def __str__(self) -> str:
        return _render(self.segments)

    @property
    def last(self) -> Segment:
        return self.segments[-1]

    @property
    def parent(self) -> Optional["PropertyPath"]:
        """The path without its final segment, or None for a one-segment path."""
        if len(self.segments) < 2:
            return None
        head = self.segments[:-1]
        return PropertyPath(text=_render(head), segments=head)

    @property
    def names(self) -> List[str]:
        """Segment names and keys in order."""
        return [s.name if isinstance(s, NameSegment) else s.key for s in self.segments]

    def prefix(self, count: int) -> str:
        """Render the first ``count`` segments, for error reporting."""
        return _render(self.segments[:count])


def _render(segments: Tuple[Segment, ...]) -> str:
    parts = []
    for segment in segments:
        if isinstance(segment, NameSegment) and parts:
            parts.append(".")
        parts.append(str(segment))
    return "".join(parts)


class PathParser:
    """Tokenizes a property path string into segments."""

    QUOTES = ("'", '"')

    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.segments: List[Segment] = []

    def parse(self) -> PropertyPath:
        """Parse the whole path."""
        if not isinstance(self.text, str):
            raise MalformedPathError(repr(self.text), None, "path must be a string")
        if not self.text:
            raise self._error("path is empty")

        self._read_segment()

        while not self._at_end():
            ch = self._peek()
            if ch == '.':
                self._advance()
                if self._at_end():
                    raise self._error("path cannot end with '.'")
                if self._peek() == '[':
                    raise self._error("unexpected '.' before '['", self.pos - 1)
                self.segments.append(self._read_name())
            elif ch == '[':
                self.segments.append(self._read_key())
            else:
                raise self._error(f"unexpected character '{ch}'")

        return PropertyPath(text=self.text, segments=tuple(self.segments))

    def _read_segment(self):
        if self._peek() == '[':
            self.segments.append(self._read_key())
        else:
            self.segments.append(self._read_name())

    def _read_name(self) -> NameSegment:
        start = self.pos
        if self._at_end():
            raise self._error("expected property name")

        ch = self._peek()
        if ch == '.':
            raise self._error("empty property name")
        if not (ch.isalpha() or ch == '_'):
            raise self._error(f"unexpected character '{ch}'")

        while not self._at_end():
            ch = self._peek()
            if ch.isalnum() or ch == '_':
                self._advance()
            else:
                break

        return NameSegment(self.text[start:self.pos])

    def _read_key(self) -> KeySegment:
        open_pos = self.pos
        self._advance()  # skip '['

        if self._at_end():
            raise self._error("unterminated '['", open_pos)

        if self._peek() in self.QUOTES:
            quote = self._advance()
            quote_pos = self.pos - 1
            end = self.text.find(quote, self.pos)
            if end == -1:
                raise self._error(f"unterminated quote {quote}", quote_pos)
            key = self.text[self.pos:end]
            self.pos = end + 1
            if self._at_end() or self._peek() != ']':
                raise self._error("expected ']' after quoted key")
            self._advance()
            return KeySegment(key, quoted=True)

        end = self.text.find(']', self.pos)
        if end == -1:
            raise self._error("unterminated '['", open_pos)
        key = self.text[self.pos:end].strip()
        if not key:
            raise self._error("empty key", open_pos)
        for quote in self.QUOTES:
            if quote in key:
                raise self._error(f"unbalanced quote {quote} in key", open_pos)
        self.pos = end + 1
        return KeySegment(key)

    # === Helper methods ===

    def _at_end(self) -> bool:
        return self.pos >= len(self.text)

    def _peek(self) -> str:
        return self.text[self.pos]

    def _advance(self) -> str:
        ch = self.text[self.pos]
        self.pos += 1
        return ch

    def _error(self, reason: str, position: Optional[int] = None) -> MalformedPathError:
        return MalformedPathError(
            self.text, self.pos if position is None else position, reason
        )


@lru_cache(maxsize=1024)
def _parse_cached(text: str) -> PropertyPath:
    return PathParser(text).parse()


def parse_path(text: Union[str, PropertyPath]) -> PropertyPath:
    """
    Parse property path text into a PropertyPath.

    Args:
        text: Path string such as ``"spouse.name"`` or ``"tags[0]"``.
              An already-parsed PropertyPath is returned unchanged.

    Returns:
        PropertyPath

    Raises:
        MalformedPathError: If the path is not well formed
    """
    if isinstance(text, PropertyPath):
        return text
    if not isinstance(text, str):
        raise MalformedPathError(repr(text), None, "path must be a string")
    return _parse_cached(text)
