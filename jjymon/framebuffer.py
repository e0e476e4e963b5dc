"""Page-organised monochrome frame buffer for an SSD1309-style OLED."""

from collections.abc import Sequence
from enum import IntEnum

from . import fixed12
from .graphics import Rect, TinyFont, clip_rect
from .intmath import trunc_div

PAGE_H = 8


class Pen(IntEnum):
    """Drawing colour."""

    BLACK = 0
    WHITE = 1


class FrameBuffer:
    """Back buffer for drawing and front buffer for display, in 8-pixel pages.

    Each byte covers one column of a page; bit ``n`` is row ``n`` of that page.
    """

    def __init__(self, width: int = 128, height: int = 64) -> None:
        if (width, height) not in ((128, 64), (128, 32)):
            raise ValueError("supported sizes are 128x64 and 128x32")
        self.width = width
        self.height = height
        self.num_pages = (height + PAGE_H - 1) // PAGE_H
        self._back = bytearray(width * self.num_pages)
        self._front = bytearray(width * self.num_pages)

    def _seg_index(self, x: int, y: int) -> int:
        return (y // PAGE_H) * self.width + x

    def clear(self, fill: int = 0x00) -> None:
        """Set every byte of the back buffer to ``fill``."""
        self._back[:] = bytes([fill & 0xFF]) * len(self._back)

    def get_pixel(self, x: int, y: int) -> Pen:
        """Colour of a back-buffer pixel; raises IndexError outside the screen."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) is outside the screen")
        lit = self._back[self._seg_index(x, y)] >> (y % PAGE_H) & 1
        return Pen.WHITE if lit else Pen.BLACK

    def set_pixel(self, x: int, y: int, pen: Pen = Pen.WHITE) -> None:
        """Set one pixel; pixels outside the screen are ignored."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            return
        mask = 1 << (y % PAGE_H)
        index = self._seg_index(x, y)
        if pen == Pen.BLACK:
            self._back[index] &= ~mask & 0xFF
        else:
            self._back[index] |= mask

    def fill_rect(self, x: int, y: int, w: int, h: int, pen: Pen = Pen.WHITE) -> None:
        """Fill a rectangle, clipped to the screen."""
        rect = clip_rect(Rect(x, y, w, h), self.width, self.height)
        if rect.w <= 0 or rect.h <= 0:
            return
        bottom = rect.b()
        first_page = rect.y // PAGE_H
        final_page = (bottom - 1) // PAGE_H
        first_seg = ~((1 << (rect.y % PAGE_H)) - 1) & 0xFF
        final_seg = ((1 << (((bottom + PAGE_H - 1) % PAGE_H) + 1)) - 1) & 0xFF
        if first_page == final_page:
            first_seg &= final_seg

        for page in range(first_page, final_page + 1):
            if page == first_page:
                mask = first_seg
            elif page == final_page:
                mask = final_seg
            else:
                mask = 0xFF
            start = page * self.width + rect.x
            end = start + rect.w
            if mask == 0xFF:
                fill = 0x00 if pen == Pen.BLACK else 0xFF
                self._back[start:end] = bytes([fill]) * rect.w
            elif pen == Pen.BLACK:
                keep = ~mask & 0xFF
                self._back[start:end] = bytes(b & keep for b in self._back[start:end])
            else:
                self._back[start:end] = bytes(b | mask for b in self._back[start:end])

    def draw_rect(self, x: int, y: int, w: int, h: int, pen: Pen = Pen.WHITE) -> None:
        """Draw a rectangle outline covering ``w + 1`` by ``h + 1`` pixels."""
        self.fill_rect(x, y, w + 1, 1, pen)
        self.fill_rect(x, y + 1, 1, h - 1, pen)
        self.fill_rect(x + w, y + 1, 1, h - 1, pen)
        self.fill_rect(x, y + h, w + 1, 1, pen)

    def draw_line(self, x0: int, y0: int, x1: int, y1: int, pen: Pen = Pen.WHITE) -> None:
        """Draw a line between integer points, excluding the end point."""
        one = fixed12.ONE
        self.draw_line_f(x0 * one, y0 * one, x1 * one, y1 * one, pen)

    def draw_line_f(self, x0f: int, y0f: int, x1f: int, y1f: int, pen: Pen = Pen.WHITE) -> None:
        """Draw a line between fixed-point coordinates, excluding the end point."""
        dxf = x1f - x0f
        dyf = y1f - y0f
        if abs(dxf) > abs(dyf):
            xi = fixed12.to_int(x0f)
            n = abs(fixed12.to_int(x1f) - xi)
            step = 1 if dxf >= 0 else -1
            for i in range(n):
                self.set_pixel(xi, fixed12.to_int(y0f + trunc_div(dyf * i, n)), pen)
                xi += step
        else:
            yi = fixed12.to_int(y0f)
            n = abs(fixed12.to_int(y1f) - yi)
            step = 1 if dyf >= 0 else -1
            for i in range(n):
                self.set_pixel(fixed12.to_int(x0f + trunc_div(dxf * i, n)), yi, pen)
                yi += step

    def fill_ellipse_f(self, x: int, y: int, w: int, h: int, pen: Pen = Pen.WHITE) -> None:
        """Fill the ellipse inscribed in a fixed-point rectangle."""
        one = fixed12.ONE
        rectf = Rect(x, y, w, h)
        right = trunc_div(rectf.r() + one - 1, one)
        bottom = trunc_div(rectf.b() + one - 1, one)
        left = trunc_div(rectf.x, one)
        top = trunc_div(rectf.y, one)
        dest = clip_rect(Rect(left, top, right - left, bottom - top), self.width, self.height)
        if dest.w <= 0 or dest.h <= 0:
            return
        rxf = trunc_div(rectf.w, 2)
        ryf = trunc_div(rectf.h, 2)
        if rxf <= 0 or ryf <= 0:
            return
        cxf = rectf.x + rxf
        cyf = rectf.y + ryf

        # Test pixel centres, hence the half-pixel offset.
        for py in range(dest.y, dest.b()):
            yf = py * one + one // 2
            rdy = trunc_div((yf - cyf) * one, ryf)
            rdy2 = rdy * rdy
            for px in range(dest.x, dest.r()):
                xf = px * one + one // 2
                rdx = trunc_div((xf - cxf) * one, rxf)
                if rdx * rdx + rdy2 < one * one:
                    self.set_pixel(px, py, pen)

    def draw_image(self, x0: int, y0: int, image: bytes) -> None:
        """Draw an image whose first four bytes hold width and height, little endian."""
        if len(image) < 4:
            raise ValueError("image header is four bytes")
        w = image[0] | (image[1] << 8)
        h = image[2] | (image[3] << 8)
        stride = (w + 7) // 8
        if len(image) - 4 < stride * h:
            raise ValueError("image data is shorter than its header says")
        self.blit(x0, y0, memoryview(image)[4:], 0, 0, w, h, stride)

    def blit(
        self,
        dx0: int,
        dy0: int,
        src: Sequence[int],
        sx0: int,
        sy0: int,
        w: int,
        h: int,
        stride: int,
    ) -> None:
        """Copy set bits of a 1-bit bitmap as white pixels; clear bits are skipped."""
        for y in range(h):
            row = (sy0 + y) * stride
            for x in range(w):
                sx = sx0 + x
                if src[row + sx // 8] >> (sx % 8) & 1:
                    self.set_pixel(dx0 + x, dy0 + y, Pen.WHITE)

    def draw_char(self, font: TinyFont, x: int, y: int, c: str) -> int:
        """Draw one character; returns its width, or 0 if the font lacks it."""
        if not font.contains_char(c):
            return 0
        glyph = font.glyph(c)
        if not glyph.is_blank():
            src = memoryview(font.bitmap)[glyph.offset :]
            self.blit(x, y, src, 0, 0, glyph.width, font.height, (glyph.width + 7) // 8)
        return glyph.width

    def draw_string(self, font: TinyFont, x: int, y: int, text: str) -> int:
        """Draw a string; returns the x position after its last character."""
        for c in text:
            x += self.draw_char(font, x, y, c) + font.spacing
        return x

    def commit(self) -> None:
        """Copy the back buffer to the front buffer."""
        self._front[:] = self._back

    def pages(self) -> list[bytes]:
        """The front buffer split into pages, as sent to the display."""
        return [
            bytes(self._front[p * self.width : (p + 1) * self.width])
            for p in range(self.num_pages)
        ]