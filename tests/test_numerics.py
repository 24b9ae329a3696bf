import math

import numpy as np
import pytest

from llolutil.numerics import (
    MeanCovar,
    MeanVar,
    SinCos,
    asin_approx,
    atan2_approx,
    deg2rad,
    hat3,
    make_right_handed,
    matrix_sqrt_utu,
    rad2deg,
    sq,
    wrap_cols,
)


@pytest.mark.parametrize(
    "deg, rad",
    [
        (0.0, 0.0),
        (90.0, math.pi / 2.0),
        (180.0, math.pi),
        (360.0, math.pi * 2),
        (-180.0, -math.pi),
    ],
)
def test_angle_conversion(deg, rad):
    assert deg2rad(deg) == pytest.approx(rad)
    assert rad2deg(rad) == pytest.approx(deg)


def test_matrix_sqrt_utu():
    rng = np.random.default_rng(0)
    x = rng.uniform(-1, 1, size=(3, 100))
    a = x @ x.T
    u = matrix_sqrt_utu(a)
    assert np.allclose(u.T @ u, a)
    assert np.allclose(u, np.triu(u))


def test_matrix_sqrt_utu_rejects_indefinite():
    with pytest.raises(np.linalg.LinAlgError):
        matrix_sqrt_utu(np.diag([1.0, -1.0, 1.0]))


@pytest.mark.parametrize("count", range(3, 50, 10))
def test_mean_var(count):
    rng = np.random.default_rng(count)
    x = rng.uniform(-1, 1, size=(3, count))
    mv = MeanVar()
    for col in x.T:
        mv.add(col)
    assert mv.ok()
    assert np.allclose(mv.var(), x.var(axis=1, ddof=1))
    assert np.allclose(mv.mean, x.mean(axis=1))


@pytest.mark.parametrize("count", range(3, 50, 10))
def test_mean_covar(count):
    rng = np.random.default_rng(100 + count)
    x = rng.uniform(-1, 1, size=(3, count))
    mc = MeanCovar()
    for col in x.T:
        mc.add(col)
    assert mc.ok()
    assert np.allclose(mc.covar(), np.cov(x))
    assert np.allclose(mc.mean, x.mean(axis=1))


def test_mean_var_reset_and_ok():
    mv = MeanVar()
    assert not mv.ok()
    mv.add([1.0, 2.0, 3.0])
    assert not mv.ok()
    mv.add([2.0, 2.0, 2.0])
    assert mv.ok()
    mv.reset()
    assert mv.n == 0
    assert np.array_equal(mv.mean, np.zeros(3))


def test_mean_covar_reset():
    mc = MeanCovar()
    mc.add([1.0, 0.0, 0.0])
    mc.add([0.0, 1.0, 0.0])
    mc.reset()
    assert not mc.ok()
    assert np.array_equal(mc.mean, np.zeros(3))
    mc.add([5.0, 5.0, 5.0])
    assert np.array_equal(mc.mean, np.array([5.0, 5.0, 5.0]))


@pytest.mark.parametrize(
    "c, cols, expected",
    [
        (0 - 64, 64, 0),
        (1 - 64, 64, 1),
        (63 - 64, 64, 63),
        (0 - 2, 64, 62),
        (1 - 2, 64, 63),
        (2 - 2, 64, 0),
        (63 - 2, 64, 61),
    ],
)
def test_wrap_cols(c, cols, expected):
    assert wrap_cols(c, cols) == expected


def test_hat3_matches_cross():
    w = np.array([0.3, -1.2, 2.0])
    v = np.array([1.5, 0.2, -0.7])
    s = hat3(w)
    assert np.allclose(s @ v, np.cross(w, v))
    assert np.allclose(s, -s.T)


def test_sq():
    assert sq(3) == 9
    assert sq(-1.5) == pytest.approx(2.25)


def test_sincos():
    sc = SinCos(math.pi / 2)
    assert sc.sin == pytest.approx(1.0)
    assert sc.cos == pytest.approx(0.0, abs=1e-12)
    default = SinCos()
    assert default.sin == 0.0
    assert default.cos == 1.0


@pytest.mark.parametrize("x", [-0.5, -0.1, 0.0, 0.2, 0.4])
def test_asin_approx_close(x):
    assert asin_approx(x) == pytest.approx(math.asin(x), abs=1e-3)


@pytest.mark.parametrize(
    "y, x", [(1.0, 1.0), (1.0, -1.0), (-1.0, -1.0), (-2.0, 0.5), (0.3, 4.0), (0.0, 1.0)]
)
def test_atan2_approx_close(y, x):
    assert atan2_approx(y, x) == pytest.approx(math.atan2(y, x), abs=0.011)


def test_make_right_handed_fixes_reflection():
    vals = np.array([1.0, 2.0, 3.0])
    vecs = np.diag([1.0, 1.0, -1.0])
    new_vals, new_vecs = make_right_handed(vals, vecs)
    assert np.linalg.det(new_vecs) > 0
    assert np.array_equal(new_vals, np.array([2.0, 1.0, 3.0]))
    assert np.array_equal(new_vecs[:, 0], vecs[:, 1])
    assert np.array_equal(vals, np.array([1.0, 2.0, 3.0]))


def test_make_right_handed_keeps_rotation():
    vals = np.array([1.0, 2.0, 3.0])
    vecs = np.eye(3)
    new_vals, new_vecs = make_right_handed(vals, vecs)
    assert np.array_equal(new_vals, vals)
    assert np.array_equal(new_vecs, vecs)