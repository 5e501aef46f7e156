"""Gauss-Legendre quadrature tables on [-1, 1].

Each table is a tuple of (weight, abscissa) pairs. The weights sum to 2 and an
n-point table integrates polynomials up to degree 2n-1 exactly. To integrate
over [0, 1] map the abscissa x to t = 0.5 * (x + 1) and scale the sum by 0.5.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Callable, Tuple

import numpy as np

QuadratureCoeffs = Tuple[Tuple[float, float], ...]


@lru_cache(maxsize=None)
def gauss_legendre_coeffs(order: int) -> QuadratureCoeffs:
    """
    Gauss-Legendre (weight, abscissa) pairs for the given number of nodes.

    Tables are built once per order and shared afterwards.

    Args:
        order: number of nodes, at least 1

    Returns:
        QuadratureCoeffs: (weight, abscissa) pairs sorted by abscissa

    Raises:
        ValueError: If order is smaller than 1
    """
    if order < 1:
        raise ValueError(f"Quadrature order must be at least 1, got {order}")
    abscissae, weights = np.polynomial.legendre.leggauss(order)
    return tuple((float(w), float(x)) for w, x in zip(weights, abscissae))


GAUSS_LEGENDRE_COEFFS_5: QuadratureCoeffs = gauss_legendre_coeffs(5)
GAUSS_LEGENDRE_COEFFS_7: QuadratureCoeffs = gauss_legendre_coeffs(7)
GAUSS_LEGENDRE_COEFFS_9: QuadratureCoeffs = gauss_legendre_coeffs(9)
GAUSS_LEGENDRE_COEFFS_11: QuadratureCoeffs = gauss_legendre_coeffs(11)
GAUSS_LEGENDRE_COEFFS_24: QuadratureCoeffs = gauss_legendre_coeffs(24)


def integrate_unit(func: Callable[[float], float], coeffs: QuadratureCoeffs) -> float:
    """
    Integrate _func_ over [0, 1] with the given quadrature table.

    Args:
        func: function of the parameter t in [0, 1]
        coeffs: (weight, abscissa) pairs on [-1, 1]

    Returns:
        float: the quadrature estimate of the integral
    """
    return 0.5 * sum(w * func(0.5 * (x + 1.0)) for w, x in coeffs)
