"""Single segment arclength estimates by quadrature of the speed function."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Union

from arcest.bezier import BezierCurve
from arcest.quadrature import QuadratureCoeffs, gauss_legendre_coeffs, integrate_unit

# Five-node rule with nodes t = 0, 0.5 -+ 0.5*sqrt(3/7), 0.5, 1 applied to the
# speed of a cubic. Inner node coefficients include the node weight 49/180.
_ARCLEN5_END_FACTOR: float = 0.15
_ARCLEN5_MID_FACTOR: float = 0.26666666666666666
_ARCLEN5_INNER: tuple = (-0.558983582205757, 0.325650248872424, 0.208983582205757, 0.024349751127576)


def gauss_arclen(curve: BezierCurve, coeffs: QuadratureCoeffs) -> float:
    """
    Arclength of a curve by Gauss-Legendre quadrature of its speed |B'(t)| over [0, 1].

    Args:
        curve: curve of any degree
        coeffs: (weight, abscissa) pairs on [-1, 1]

    Returns:
        float: the length estimate
    """
    deriv = curve.derivative()
    return integrate_unit(lambda t: deriv.eval(t).norm(), coeffs)


###############################################################################
# ArclenEvaluator
###############################################################################
class ArclenEvaluator(ABC):
    """Length estimate of a single curve segment without any subdivision."""

    name: str = "arclen"

    @abstractmethod
    def evaluate(self, curve: BezierCurve) -> float:
        """Return the length estimate of _curve_."""

    def __call__(self, curve: BezierCurve) -> float:
        return self.evaluate(curve)

    def __repr__(self):
        return f"{type(self).__name__}()"


class ClosedFormArclen5(ArclenEvaluator):
    """
    Closed form five-node length estimate of a cubic.

    The speed is sampled at both end points, at t=0.5 and at the two inner
    Gauss-Lobatto nodes; all node weights are folded into fixed combinations of
    the control points, so no derivative curve needs to be built.
    This is the cheapest evaluator, exact for speed functions of degree <= 7.
    """

    name = "closed_form_5"

    def evaluate(self, curve: BezierCurve) -> float:
        if curve.degree != 3:
            raise ValueError(f"Closed form five-node arclength requires a cubic, got degree {curve.degree}")
        p0, p1, p2, p3 = curve.points
        c0, c1, c2, c3 = _ARCLEN5_INNER

        v0 = (p1 - p0).norm() * _ARCLEN5_END_FACTOR
        v1 = (p0 * c0 + p1 * c1 + p2 * c2 + p3 * c3).norm()
        v2 = (p3 - p0 + p2 - p1).norm() * _ARCLEN5_MID_FACTOR
        v3 = (p0 * -c3 - p1 * c2 - p2 * c1 - p3 * c0).norm()
        v4 = (p3 - p2).norm() * _ARCLEN5_END_FACTOR

        return v0 + v1 + v2 + v3 + v4


class GaussArclen(ArclenEvaluator):
    """N-node Gauss-Legendre length estimate of a curve of any degree."""

    def __init__(self, coeffs: Union[int, QuadratureCoeffs]):
        """
        Args:
            coeffs: number of nodes or an explicit (weight, abscissa) table
        """
        if isinstance(coeffs, int):
            coeffs = gauss_legendre_coeffs(coeffs)
        self.coeffs: QuadratureCoeffs = tuple(coeffs)
        self.name = f"gauss_{self.order}"

    @property
    def order(self) -> int:
        """int: number of quadrature nodes"""
        return len(self.coeffs)

    def evaluate(self, curve: BezierCurve) -> float:
        return gauss_arclen(curve, self.coeffs)

    def __repr__(self):
        return f"GaussArclen({self.order})"
