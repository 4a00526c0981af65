"""Digamma (psi) function, the logarithmic derivative of gamma."""

import math

from pynumerics.core.precision import EULER_GAMMA, almost_equal_relative


def digamma(x: float) -> float:
    """
    Digamma function psi(x) = d/dx ln Gamma(x).

    Non-positive arguments are reflected with psi(1-x) - pi cot(pi x).
    Integers up to 10 use the harmonic sum; everything else is pushed to
    x >= 10 by recurrence and finished with the asymptotic series in 1/x^2.

    Args:
        x: Real argument

    Returns:
        psi(x); NaN at zero and the negative integers
    """
    x = float(x)
    if math.isnan(x) or x == -math.inf:
        return math.nan
    if x == math.inf:
        return math.inf

    reflection_term = 0.0
    negative = x <= 0

    if negative:
        p = math.floor(x)
        if almost_equal_relative(p, x):
            return math.nan

        reflection_term = x - p
        if reflection_term != 0.5:
            if reflection_term > 0.5:
                p += 1.0
                reflection_term = x - p
            reflection_term = math.pi / math.tan(math.pi * reflection_term)
        else:
            reflection_term = 0.0

        x = 1.0 - x

    if x <= 10.0 and x.is_integer():
        y = math.fsum(1.0 / i for i in range(1, int(x))) - EULER_GAMMA
    else:
        s = x
        w = 0.0
        while s < 10.0:
            w += 1.0 / s
            s += 1.0

        if s < 1.0e17:
            z = 1.0 / (s * s)
            polv = 8.33333333333333333333e-2
            polv = polv * z - 2.10927960927960927961e-2
            polv = polv * z + 7.57575757575757575758e-3
            polv = polv * z - 4.16666666666666666667e-3
            polv = polv * z + 3.96825396825396825397e-3
            polv = polv * z - 8.33333333333333333333e-3
            polv = polv * z + 8.33333333333333333333e-2
            y = z * polv
        else:
            y = 0.0

        y = math.log(s) - 0.5 / s - y - w

    if negative:
        return y - reflection_term
    return y
