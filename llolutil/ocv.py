"""Image type codes, ranges and sizes with their text forms."""

from __future__ import annotations

from dataclasses import dataclass

CV_8U = 0
CV_8S = 1
CV_16U = 2
CV_16S = 3
CV_32S = 4
CV_32F = 5
CV_64F = 6

CV_CN_SHIFT = 3
CV_MAT_DEPTH_MASK = (1 << CV_CN_SHIFT) - 1

DEPTH_OF_DTYPE = {
    "uint8": CV_8U,
    "int8": CV_8S,
    "uint16": CV_16U,
    "int16": CV_16S,
    "int32": CV_32S,
    "float32": CV_32F,
    "float64": CV_64F,
}

_DEPTH_NAMES = {
    CV_8U: "8U",
    CV_8S: "8S",
    CV_16U: "16U",
    CV_16S: "16S",
    CV_32S: "32S",
    CV_32F: "32F",
    CV_64F: "64F",
}


def make_type(depth: int, channels: int = 1) -> int:
    """Combine a depth and a channel count into a type code."""
    return (depth & CV_MAT_DEPTH_MASK) + ((channels - 1) << CV_CN_SHIFT)


def cv_type_str(type_: int) -> str:
    """Text form of a type code, e.g. ``"8UC1"``."""
    depth = type_ & CV_MAT_DEPTH_MASK
    chans = (1 + (type_ >> CV_CN_SHIFT)) & 0xFF
    return f"{_DEPTH_NAMES.get(depth, 'User')}C{chr(ord('0') + chans)}"


def _trunc_div(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return -q if (a < 0) != (b < 0) else q


@dataclass(frozen=True)
class CvRange:
    """Half-open integer range [start, end)."""

    start: int
    end: int

    def __mul__(self, d: int) -> CvRange:
        return CvRange(self.start * d, self.end * d)

    def __truediv__(self, d: int) -> CvRange:
        return CvRange(_trunc_div(self.start, d), _trunc_div(self.end, d))


@dataclass(frozen=True)
class CvSize:
    """Width and height of an image."""

    width: int
    height: int

    def __truediv__(self, other: CvSize) -> CvSize:
        return CvSize(
            _trunc_div(self.width, other.width),
            _trunc_div(self.height, other.height),
        )


def repr_mat(mat) -> str:
    """Shape and depth of an image array of shape (rows, cols[, channels])."""
    if mat.ndim not in (2, 3):
        raise ValueError(f"expected a 2 or 3 dimensional array, got {mat.ndim}")
    try:
        depth = DEPTH_OF_DTYPE[mat.dtype.name]
    except KeyError:
        raise ValueError(f"unsupported element type {mat.dtype.name}") from None
    rows, cols = mat.shape[:2]
    channels = mat.shape[2] if mat.ndim == 3 else 1
    return f"(hwc=({rows},{cols},{channels}), depth={depth})"


def repr_size(size: CvSize) -> str:
    return f"(h={size.height}, w={size.width})"


def repr_range(rng: CvRange) -> str:
    return f"[{rng.start},{rng.end})"