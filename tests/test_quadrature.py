import math

import numpy as np
import pytest

from pycdo.integration import quadrature as q

REF_TET = np.array([[0, 0, 0], [1, 0, 0], [0, 1, 0], [0, 0, 1]], dtype=float)


def monomial_on_ref_tet(a, b, c):
    # ∫_T x^a y^b z^c dV = a! b! c! / (a+b+c+3)!
    return math.factorial(a) * math.factorial(b) * math.factorial(c) / math.factorial(a + b + c + 3)


def integrate(rule, func, corners=REF_TET):
    vol = q.voltet(*corners)
    pts, wts = rule(*corners, vol)
    return float((func(pts[0]) * wts[0]).sum())


def test_reference_volume():
    assert np.isclose(q.voltet(*REF_TET), 1 / 6)


def test_volume_is_unsigned():
    swapped = REF_TET[[1, 0, 2, 3]]
    assert np.isclose(q.voltet(*swapped), 1 / 6)


def test_batched_volumes_broadcast_a_common_apex():
    xa = np.array([[0, 0, 0], [2, 0, 0]], dtype=float)
    xb = np.array([[1, 0, 0], [3, 0, 0]], dtype=float)
    xc = np.array([[0, 1, 0], [2, 2, 0]], dtype=float)
    apex = np.array([0.0, 0.0, 1.0])
    vols = q.tet_volumes(xa, xb, xc, apex)
    assert vols.shape == (2,)
    assert np.allclose(vols, [1 / 6, 2 / 6])


@pytest.mark.parametrize("abc", [(0, 0, 0), (1, 0, 0), (0, 2, 0), (1, 1, 1), (3, 0, 0), (2, 0, 1)])
def test_five_point_rule_exact_up_to_cubics(abc):
    a, b, c = abc
    val = integrate(q.tet_5pts, lambda X: X[:, 0] ** a * X[:, 1] ** b * X[:, 2] ** c)
    assert np.isclose(val, monomial_on_ref_tet(a, b, c), rtol=1e-12, atol=1e-15)


@pytest.mark.parametrize("abc", [(0, 0, 0), (1, 0, 0), (2, 0, 0), (1, 1, 0), (0, 1, 1)])
def test_ten_point_rule_exact_up_to_quadratics(abc):
    a, b, c = abc
    val = integrate(q.tet_10pts, lambda X: X[:, 0] ** a * X[:, 1] ** b * X[:, 2] ** c)
    assert np.isclose(val, monomial_on_ref_tet(a, b, c), rtol=1e-12, atol=1e-15)


def test_ten_point_rule_not_exact_for_cubics():
    val = integrate(q.tet_10pts, lambda X: X[:, 0] ** 3)
    assert abs(val - monomial_on_ref_tet(3, 0, 0)) > 1e-4


def test_weights_sum_to_volume():
    corners = REF_TET * 2.0 + 1.0
    vol = q.voltet(*corners)
    for rule in (q.tet_5pts, q.tet_10pts):
        _, wts = rule(*corners, vol)
        assert np.isclose(wts.sum(), 8 / 6)
