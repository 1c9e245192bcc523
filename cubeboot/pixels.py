"""Pixel format conversions used by the image decoder."""

from __future__ import annotations

import struct
from typing import Tuple

_U16 = 0xFFFF
_U32 = 0xFFFFFFFF


def _f32(value: float) -> float:
    """Round to single precision."""
    return struct.unpack("<f", struct.pack("<f", value))[0]


_K_R = _f32(1.371)
_K_G_CR = _f32(0.698)
_K_G_CB = _f32(0.336)
_K_B = _f32(1.732)


def _check_u8(*values: int) -> None:
    for value in values:
        if not 0 <= value <= 0xFF:
            raise ValueError(f"channel value {value} is outside 0..255")


def _clamp(value: int, low: int = 0, high: int = 255) -> int:
    return max(low, min(high, value))


def rgb8_to_rgb565(r: int, g: int, b: int) -> int:
    """Pack 8-bit channels into a 16-bit RGB565 value."""
    _check_u8(r, g, b)
    return (((r & 0xF8) << 8) | ((g & 0xFC) << 3) | (b >> 3)) & _U16


def rgb8_to_rgb5a3(r: int, g: int, b: int, a: int) -> int:
    """Pack 8-bit channels into RGB5A3: RGB555 when opaque, else ARGB3444."""
    _check_u8(r, g, b, a)
    if (a & 0xE0) == 0xE0:
        value = 0x8000 | ((r & 0xF8) << 7) | ((g & 0xF8) << 2) | (b >> 3)
    else:
        value = ((a & 0xE0) << 7) | ((r & 0xF0) << 4) | (g & 0xF0) | ((b & 0xF0) >> 4)
    return value & _U16


def rgb8_to_ycbycr(r1: int, g1: int, b1: int, r2: int, g2: int, b2: int) -> int:
    """Convert two RGB pixels to one packed Y1 Cb Y2 Cr word."""
    _check_u8(r1, g1, b1, r2, g2, b2)

    def convert(r: int, g: int, b: int) -> Tuple[int, int, int]:
        y = (299 * r + 587 * g + 114 * b) // 1000
        cb = (-16874 * r - 33126 * g + 50000 * b + 12800000) // 100000
        cr = (50000 * r - 41869 * g - 8131 * b + 12800000) // 100000
        return y, cb, cr

    y1, cb1, cr1 = convert(r1, g1, b1)
    y2, cb2, cr2 = convert(r2, g2, b2)
    cb = (cb1 + cb2) >> 1
    cr = (cr1 + cr2) >> 1
    return ((y1 << 24) | (cb << 16) | (y2 << 8) | cr) & _U32


def ycbycr_to_rgb8(ycbycr: int) -> Tuple[int, int, int, int, int, int]:
    """Expand a packed Y1 Cb Y2 Cr word into two RGB pixels."""
    if not 0 <= ycbycr <= _U32:
        raise ValueError(f"{ycbycr} is not a 32-bit value")
    y1, cb, y2, cr = ycbycr.to_bytes(4, "big")
    dcr = cr - 128
    dcb = cb - 128
    r = int(_f32(_K_R * dcr))
    g = int(_f32(_f32(-_K_G_CR * dcr) - _f32(_K_G_CB * dcb)))
    b = int(_f32(_K_B * dcb))
    return (
        _clamp(y1 + r), _clamp(y1 + g), _clamp(y1 + b),
        _clamp(y2 + r), _clamp(y2 + g), _clamp(y2 + b),
    )


def coords_rgba8(x: int, y: int, w: int) -> int:
    """Byte offset of the alpha/red pair of pixel (x, y) in a 4x4 tiled RGBA8 texture."""
    if x < 0 or y < 0 or w < 0:
        raise ValueError("coordinates and width must not be negative")
    return (((((y >> 2) * (w >> 2) + (x >> 2)) << 5) + ((y & 3) << 2) + (x & 3)) << 1) & _U32