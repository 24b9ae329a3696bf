"""Small numeric helpers: angles, approximations and running moments."""

from __future__ import annotations

import math

import numpy as np

NAN = float("nan")
PI = math.pi
TAU = 2.0 * math.pi


def hat3(w) -> np.ndarray:
    """Skew-symmetric matrix S such that S @ v == cross(w, v)."""
    x, y, z = (float(c) for c in w)
    return np.array(
        [
            [0.0, -z, y],
            [z, 0.0, -x],
            [-y, x, 0.0],
        ]
    )


def sq(x):
    return x * x


def deg2rad(deg: float) -> float:
    return deg / 180.0 * math.pi


def rad2deg(rad: float) -> float:
    return rad / math.pi * 180.0


class SinCos:
    """Precomputed sine and cosine of an angle."""

    def __init__(self, rad: float = 0.0) -> None:
        self.sin = math.sin(rad)
        self.cos = math.cos(rad)

    def __repr__(self) -> str:
        return f"SinCos(sin={self.sin!r}, cos={self.cos!r})"


def asin_approx(x: float) -> float:
    """Polynomial approximation of asin."""
    x2 = x * x
    return x * (1 + x2 * (1 / 6.0 + x2 * (3.0 / 40.0 + x2 * 5.0 / 112.0)))


def atan2_approx(y: float, x: float) -> float:
    """A fast approximation of atan2."""
    abs_y = abs(y) + 1e-10
    if x < 0.0:
        r = (x + abs_y) / (abs_y - x)
        angle = math.pi / 4 * 3
    else:
        r = (x - abs_y) / (x + abs_y)
        angle = math.pi / 4
    angle += (0.1963 * r * r - 0.9817) * r
    return -angle if y < 0.0 else angle


class MeanVar:
    """Running mean and per-component variance."""

    def __init__(self, dim: int = 3) -> None:
        self.n = 0
        self.mean = np.zeros(dim)
        self._var_sum = np.zeros(dim)

    def var(self) -> np.ndarray:
        """Sample variance; meaningful once ``ok()``."""
        with np.errstate(divide="ignore", invalid="ignore"):
            return self._var_sum / (self.n - 1)

    def ok(self) -> bool:
        return self.n > 1

    def add(self, x) -> None:
        x = np.asarray(x, dtype=float)
        self.n += 1
        dx = x - self.mean
        dx_n = dx / self.n
        self.mean = self.mean + dx_n
        self._var_sum = self._var_sum + (self.n - 1.0) * dx_n * dx

    def reset(self) -> None:
        self.n = 0
        self.mean = np.zeros_like(self.mean)
        self._var_sum = np.zeros_like(self._var_sum)


class MeanCovar:
    """Running mean and covariance."""

    def __init__(self, dim: int = 3) -> None:
        self.n = 0
        self.mean = np.zeros(dim)
        self._covar_sum = np.zeros((dim, dim))

    def covar(self) -> np.ndarray:
        """Sample covariance; meaningful once ``ok()``."""
        with np.errstate(divide="ignore", invalid="ignore"):
            return self._covar_sum / (self.n - 1)

    def ok(self) -> bool:
        return self.n > 1

    def add(self, x) -> None:
        x = np.asarray(x, dtype=float)
        self.n += 1
        dx = x - self.mean
        dx_n = dx / self.n
        self.mean = self.mean + dx_n
        self._covar_sum = self._covar_sum + np.outer((self.n - 1.0) * dx_n, dx)

    def reset(self) -> None:
        self.n = 0
        self.mean = np.zeros_like(self.mean)
        self._covar_sum = np.zeros_like(self._covar_sum)


def make_right_handed(eigvals, eigvecs) -> tuple[np.ndarray, np.ndarray]:
    """Return eigenvalues and eigenvectors whose axes form a right-handed frame.

    If the eigenvector columns form a reflection, the first two columns and
    the matching eigenvalues are swapped.
    """
    vals = np.array(eigvals, dtype=float)
    vecs = np.array(eigvecs, dtype=float)
    hand = np.dot(np.cross(vecs[:, 0], vecs[:, 1]), vecs[:, 2])
    if hand < 0:
        vecs[:, [0, 1]] = vecs[:, [1, 0]]
        vals[[0, 1]] = vals[[1, 0]]
    return vals, vecs


def matrix_sqrt_utu(a) -> np.ndarray:
    """Upper-triangular U with A = U^T U, using the upper triangle of A."""
    a = np.asarray(a, dtype=float)
    sym = np.triu(a) + np.triu(a, 1).T
    return np.linalg.cholesky(sym).T


def wrap_cols(c: int, cols: int) -> int:
    """Wrap a column index that is at most one width negative."""
    return c + cols if c < 0 else c