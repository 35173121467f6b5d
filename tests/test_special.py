import math

import pytest
from scipy import special

from hiring_oracle.special import incomplete_beta, inverse_incomplete_beta, log_gamma


def test_log_gamma_known_values():
    assert log_gamma(1) == pytest.approx(0.0, abs=1e-12)
    assert log_gamma(2) == pytest.approx(0.0, abs=1e-12)
    assert log_gamma(0.5) == pytest.approx(math.log(math.sqrt(math.pi)), rel=1e-12)


@pytest.mark.parametrize("z", [0.1, 0.3, 0.5, 1.5, 3.0, 7.25, 22.0, 104.0])
def test_log_gamma_matches_scipy(z):
    assert log_gamma(z) == pytest.approx(special.gammaln(z), rel=1e-9, abs=1e-12)


def test_incomplete_beta_bounds():
    assert incomplete_beta(0.0, 2, 3) == 0.0
    assert incomplete_beta(1.0, 2, 3) == 1.0


@pytest.mark.parametrize("x,a,b", [
    (0.3, 2, 2),
    (0.7, 2, 2),
    (0.5, 0.5, 0.5),
    (0.75, 82, 22),
    (0.85, 82, 22),
    (0.1, 1, 9),
    (0.9, 9, 1),
])
def test_incomplete_beta_matches_scipy(x, a, b):
    assert incomplete_beta(x, a, b) == pytest.approx(special.betainc(a, b, x), abs=1e-8)


def test_incomplete_beta_closed_form():
    # I_x(2, 2) = 3x^2 - 2x^3
    for x in (0.1, 0.3, 0.5, 0.8):
        assert incomplete_beta(x, 2, 2) == pytest.approx(3 * x ** 2 - 2 * x ** 3, abs=1e-10)
    # I_x(1, b) = 1 - (1-x)^b
    assert incomplete_beta(0.2, 1, 4) == pytest.approx(1 - 0.8 ** 4, abs=1e-10)


def test_incomplete_beta_symmetry():
    assert incomplete_beta(0.35, 3, 5) == pytest.approx(1 - incomplete_beta(0.65, 5, 3), abs=1e-10)


@pytest.mark.parametrize("p,a,b", [
    (0.025, 82, 22),
    (0.975, 82, 22),
    (0.025, 2, 2),
    (0.5, 7, 3),
    (0.975, 4, 40),
])
def test_inverse_incomplete_beta_matches_scipy(p, a, b):
    assert inverse_incomplete_beta(p, a, b) == pytest.approx(special.betaincinv(a, b, p), abs=1e-6)


def test_inverse_incomplete_beta_edges():
    assert inverse_incomplete_beta(0.0, 2, 2) == 0.0
    assert inverse_incomplete_beta(1.0, 2, 2) == 1.0
    assert inverse_incomplete_beta(0.5, 3, 3) == pytest.approx(0.5, abs=1e-6)
