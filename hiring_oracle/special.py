"""Special functions behind the Beta posterior statistics.

All routines are pure float math with hard iteration caps: when a loop does
not converge the best approximation reached so far is returned.
"""

import math

# Lanczos coefficients for g=7, n=9
LANCZOS_G = 7
LANCZOS_COEFFICIENTS = (
    0.99999999999980993,
    676.5203681218851,
    -1259.1392167224028,
    771.32342877765313,
    -176.61502916214059,
    12.507343278686905,
    -0.13857109526572012,
    9.9843695780195716e-6,
    1.5056327351493116e-7,
)

CONTINUED_FRACTION_MAX_TERMS = 200
CONTINUED_FRACTION_TOLERANCE = 1e-10
LENTZ_TINY = 1e-30

BISECTION_MAX_ITERATIONS = 100
BISECTION_TOLERANCE = 1e-10


def log_gamma(z: float) -> float:
    """ln Γ(z) via the Lanczos approximation.

    Uses the reflection formula Γ(z)Γ(1-z) = π/sin(πz) below 0.5.
    """
    if z < 0.5:
        return math.log(math.pi / math.sin(math.pi * z)) - log_gamma(1 - z)

    z -= 1
    x = LANCZOS_COEFFICIENTS[0]
    for i in range(1, LANCZOS_G + 2):
        x += LANCZOS_COEFFICIENTS[i] / (z + i)
    t = z + LANCZOS_G + 0.5
    return 0.5 * math.log(2 * math.pi) + (z + 0.5) * math.log(t) - t + math.log(x)


def log_beta(a: float, b: float) -> float:
    return log_gamma(a) + log_gamma(b) - log_gamma(a + b)


def incomplete_beta(x: float, a: float, b: float) -> float:
    """Regularized incomplete beta I_x(a, b).

    Evaluated with Lentz's continued fraction. Above (a+1)/(a+b+2) the
    fraction converges slowly, so the symmetric form 1 - I_{1-x}(b, a) is
    used instead.
    """
    if x <= 0:
        return 0.0
    if x >= 1:
        return 1.0

    if x > (a + 1) / (a + b + 2):
        return 1.0 - incomplete_beta(1 - x, b, a)

    front = math.exp(math.log(x) * a + math.log(1 - x) * b - log_beta(a, b)) / a

    f = 1.0
    c = 1.0
    d = 0.0

    for m in range(CONTINUED_FRACTION_MAX_TERMS + 1):
        if m == 0:
            numerator = 1.0
        elif m % 2 == 0:
            k = m // 2
            numerator = (k * (b - k) * x) / ((a + 2 * k - 1) * (a + 2 * k))
        else:
            k = (m - 1) // 2
            numerator = -((a + k) * (a + b + k) * x) / ((a + 2 * k) * (a + 2 * k + 1))

        d = 1 + numerator * d
        if abs(d) < LENTZ_TINY:
            d = LENTZ_TINY
        d = 1 / d

        c = 1 + numerator / c
        if abs(c) < LENTZ_TINY:
            c = LENTZ_TINY

        delta = c * d
        f *= delta

        if abs(delta - 1) < CONTINUED_FRACTION_TOLERANCE:
            break

    return min(1.0, max(0.0, front * (f - 1)))


def inverse_incomplete_beta(p: float, a: float, b: float) -> float:
    """Find x with I_x(a, b) = p by bisection, starting from the mean a/(a+b)."""
    if p <= 0:
        return 0.0
    if p >= 1:
        return 1.0

    low, high = 0.0, 1.0
    x = a / (a + b)

    for _ in range(BISECTION_MAX_ITERATIONS):
        fx = incomplete_beta(x, a, b)
        if abs(fx - p) < BISECTION_TOLERANCE:
            break
        if fx < p:
            low = x
        else:
            high = x
        x = (low + high) / 2

    return x
