"""Rectangles and compact bitmap fonts for monochrome displays."""

from dataclasses import dataclass, replace
from typing import ClassVar

from .intmath import clip, trunc_div


@dataclass
class Rect:
    """An axis-aligned rectangle given by origin and size."""

    x: int = 0
    y: int = 0
    w: int = 0
    h: int = 0

    def r(self) -> int:
        """Right edge (exclusive)."""
        return self.x + self.w

    def b(self) -> int:
        """Bottom edge (exclusive)."""
        return self.y + self.h

    def cx(self) -> int:
        """Horizontal centre, truncated."""
        return self.x + trunc_div(self.w, 2)

    def cy(self) -> int:
        """Vertical centre, truncated."""
        return self.y + trunc_div(self.h, 2)


def clip_rect(rect: Rect, w: int, h: int) -> Rect:
    """Clip ``rect`` to the area ``[0, w) x [0, h)``; the result may be empty."""
    right, bottom = rect.r(), rect.b()
    x = clip(0, w, rect.x)
    y = clip(0, h, rect.y)
    return replace(rect, x=x, y=y, w=clip(0, w, right) - x, h=clip(0, h, bottom) - y)


@dataclass(frozen=True)
class Glyph:
    """Where a character's bitmap starts and how wide it is."""

    BLANK: ClassVar[int] = 1 << 0

    offset: int
    width: int
    flags: int = 0

    def is_blank(self) -> bool:
        """Whether the glyph has no pixels to draw."""
        return (self.flags & self.BLANK) != 0


@dataclass(frozen=True)
class TinyFont:
    """A fixed-height bitmap font covering a contiguous range of characters.

    Each glyph's rows are ``(width + 7) // 8`` bytes, least significant bit leftmost.
    """

    height: int
    code_offset: int
    num_chars: int
    spacing: int
    bitmap: bytes
    glyphs: tuple[Glyph, ...]

    def _index(self, c: str) -> int:
        return ord(c) - self.code_offset

    def contains_char(self, c: str) -> bool:
        """Whether ``c`` lies in the font's range and has a non-zero width."""
        index = self._index(c)
        if not (0 <= index < self.num_chars and index < len(self.glyphs)):
            return False
        return self.glyphs[index].width > 0

    def glyph(self, c: str) -> Glyph:
        """The glyph for ``c``; raises ValueError when ``c`` is outside the font."""
        index = self._index(c)
        if not (0 <= index < self.num_chars and index < len(self.glyphs)):
            raise ValueError(f"character {c!r} is outside the font")
        return self.glyphs[index]