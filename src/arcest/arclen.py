"""Error bounded adaptive arclength of cubic Bezier curves.

A segment is accepted when its estimated quadrature error is below its share
of the accuracy budget; otherwise it is split in half and each half gets half
of the budget, so the budgets of all accepted leaves sum up to the requested
accuracy. A depth cap guarantees termination on degenerate input (cusps,
zero length segments, NaN coordinates).

The total error is bounded by the requested accuracy only if the chosen
ErrorEstimator really is an upper bound of the local quadrature error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from scipy import integrate

from arcest.arclen_eval import ArclenEvaluator, ClosedFormArclen5, GaussArclen
from arcest.bezier import BezierCurve
from arcest.consts import DEFAULT_ACCURACY, MAX_DEPTH, REFERENCE_ACCURACY, SPLIT_PARAMETER
from arcest.error_estimate import (
    BoundedEstimator,
    ControlPolygonEstimator,
    ErrNormEstimator,
    ErrorEstimator,
    MaxCurvatureEstimator,
    MidpointDerivativeEstimator,
)
from arcest.quadrature import (
    GAUSS_LEGENDRE_COEFFS_7,
    GAUSS_LEGENDRE_COEFFS_9,
    GAUSS_LEGENDRE_COEFFS_11,
    GAUSS_LEGENDRE_COEFFS_24,
)

logger = logging.getLogger(__name__)


###############################################################################
# Methods
###############################################################################

# Pairs of (error estimator, evaluator). Each estimator is tuned for the rule
# it is paired with; "gauss11" and "reference" deliberately pair the 9-node
# estimator with a more accurate rule, which overshoots the requested accuracy.
ARCLEN_METHODS: Dict[str, Callable[[], Tuple[ErrorEstimator, ArclenEvaluator]]] = {
    "conservative": lambda: (ControlPolygonEstimator(), ClosedFormArclen5()),
    "gauss5": lambda: (MidpointDerivativeEstimator(), ClosedFormArclen5()),
    "gauss7": lambda: (ErrNormEstimator.for_order(7), GaussArclen(GAUSS_LEGENDRE_COEFFS_7)),
    "gauss9": lambda: (ErrNormEstimator.for_order(9), GaussArclen(GAUSS_LEGENDRE_COEFFS_9)),
    "gauss11": lambda: (ErrNormEstimator.for_order(9), GaussArclen(GAUSS_LEGENDRE_COEFFS_11)),
    "gauss9_bounded": lambda: (
        BoundedEstimator(MaxCurvatureEstimator(coefficient=5e-8)),
        GaussArclen(GAUSS_LEGENDRE_COEFFS_9),
    ),
    "gauss11_bounded": lambda: (
        BoundedEstimator(MaxCurvatureEstimator(coefficient=8e-9)),
        GaussArclen(GAUSS_LEGENDRE_COEFFS_11),
    ),
    "reference": lambda: (ErrNormEstimator.for_order(9), GaussArclen(GAUSS_LEGENDRE_COEFFS_24)),
}

DEFAULT_METHOD: str = "conservative"


###############################################################################
# ArclenResult
###############################################################################
@dataclass(frozen=True)
class ArclenResult:
    """
    Outcome of an adaptive arclength computation.

    Attributes:
        length (float): Sum of the length estimates of all leaves.
        leaf_count (int): Number of accepted leaves.
        max_depth_reached (int): Deepest recursion level of any leaf.
        capped_leaf_count (int): Leaves accepted only because the depth cap was hit.
    """

    length: float
    leaf_count: int = 1
    max_depth_reached: int = 0
    capped_leaf_count: int = 0

    def merge(self, other: ArclenResult) -> ArclenResult:
        """Combine the results of two sibling segments."""
        return ArclenResult(
            length=self.length + other.length,
            leaf_count=self.leaf_count + other.leaf_count,
            max_depth_reached=max(self.max_depth_reached, other.max_depth_reached),
            capped_leaf_count=self.capped_leaf_count + other.capped_leaf_count,
        )

    def __float__(self):
        return float(self.length)


###############################################################################
# AdaptiveArclength
###############################################################################
class AdaptiveArclength:
    """Recursive subdivision driver, parametrized by error estimator and evaluator."""

    def __init__(
        self,
        estimator: Optional[ErrorEstimator] = None,
        evaluator: Optional[ArclenEvaluator] = None,
        max_depth: int = MAX_DEPTH,
    ):
        """
        Args:
            estimator: local error estimate, defaults to the control polygon bound
            evaluator: leaf length estimate, defaults to the closed form five-node rule
            max_depth: recursion depth at which segments are accepted unconditionally

        Raises:
            ValueError: If max_depth is negative
        """
        if max_depth < 0:
            raise ValueError(f"max_depth must not be negative, got {max_depth}")
        self.estimator: ErrorEstimator = estimator if estimator is not None else ControlPolygonEstimator()
        self.evaluator: ArclenEvaluator = evaluator if evaluator is not None else ClosedFormArclen5()
        self.max_depth = max_depth

    @classmethod
    def from_method(cls, method: str = DEFAULT_METHOD, max_depth: int = MAX_DEPTH) -> AdaptiveArclength:
        """
        Create a driver from a named estimator/evaluator pairing (see ARCLEN_METHODS).

        Raises:
            KeyError: If the method is unknown
        """
        if method not in ARCLEN_METHODS:
            raise KeyError(f"Unknown arclength method {method!r}, available: {sorted(ARCLEN_METHODS)}")
        estimator, evaluator = ARCLEN_METHODS[method]()
        return cls(estimator, evaluator, max_depth)

    def compute(self, curve: BezierCurve, accuracy: float = DEFAULT_ACCURACY) -> ArclenResult:
        """
        Compute the arclength of _curve_ with the given total accuracy.

        Args:
            curve: the cubic curve
            accuracy: total error budget, smaller values need more subdivisions

        Returns:
            ArclenResult: length and subdivision statistics
        """
        result = self._arclen(curve, accuracy, 0)
        logger.debug(
            "Arclength %.15g with %s/%s: %d leaves, depth %d",
            result.length,
            self.estimator.name,
            self.evaluator.name,
            result.leaf_count,
            result.max_depth_reached,
        )
        if result.capped_leaf_count:
            logger.warning(
                "Depth cap %d reached on %d of %d leaves, accuracy %g is not guaranteed for %s",
                self.max_depth,
                result.capped_leaf_count,
                result.leaf_count,
                accuracy,
                curve,
            )
        return result

    def arclen(self, curve: BezierCurve, accuracy: float = DEFAULT_ACCURACY) -> float:
        """Arclength of _curve_ with the given total accuracy."""
        return self.compute(curve, accuracy).length

    def _arclen(self, curve: BezierCurve, accuracy: float, depth: int) -> ArclenResult:
        if depth >= self.max_depth:
            return ArclenResult(self.evaluator.evaluate(curve), 1, depth, 1)
        if self.estimator.estimate(curve) < accuracy:
            return ArclenResult(self.evaluator.evaluate(curve), 1, depth, 0)

        first, second = curve.subdivide(SPLIT_PARAMETER)
        half = accuracy * 0.5
        return self._arclen(first, half, depth + 1).merge(self._arclen(second, half, depth + 1))

    def __repr__(self):
        return f"AdaptiveArclength({self.estimator!r}, {self.evaluator!r}, max_depth={self.max_depth})"


###############################################################################
# ArclenConfig
###############################################################################
@dataclass(frozen=True)
class ArclenConfig:
    """Serializable choice of arclength method and depth cap.

    Attributes:
        method: Name of an entry in ARCLEN_METHODS.
        max_depth: Recursion depth cap.
    """

    method: str = DEFAULT_METHOD
    max_depth: int = MAX_DEPTH

    def __post_init__(self):
        if self.method not in ARCLEN_METHODS:
            raise KeyError(f"Unknown arclength method {self.method!r}, available: {sorted(ARCLEN_METHODS)}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must not be negative, got {self.max_depth}")

    def build(self) -> AdaptiveArclength:
        """Create the configured driver."""
        return AdaptiveArclength.from_method(self.method, self.max_depth)

    def to_dict(self) -> dict:
        """Convert the config to a dictionary for serialization."""
        return {
            "method": self.method,
            "max_depth": self.max_depth,
        }

    @classmethod
    def from_dict(cls, data: dict) -> ArclenConfig:
        """Create an ArclenConfig from a dictionary."""
        return cls(
            method=data.get("method", DEFAULT_METHOD),
            max_depth=int(data.get("max_depth", MAX_DEPTH)),
        )


###############################################################################
# Functions
###############################################################################
def arclen(
    curve: BezierCurve,
    accuracy: float = DEFAULT_ACCURACY,
    method: str = DEFAULT_METHOD,
    max_depth: int = MAX_DEPTH,
) -> float:
    """
    Arclength of a cubic curve by adaptive subdivision.

    Args:
        curve: the cubic curve
        accuracy: total error budget
        method: name of an entry in ARCLEN_METHODS
        max_depth: recursion depth cap

    Returns:
        float: the length estimate
    """
    return AdaptiveArclength.from_method(method, max_depth).arclen(curve, accuracy)


def reference_arclen(curve: BezierCurve, accuracy: float = REFERENCE_ACCURACY) -> float:
    """
    High accuracy arclength by adaptive Gauss-Kronrod integration of the speed (scipy.integrate.quad).

    Independent of the subdivision code above, meant as ground truth in tests.

    Args:
        curve: curve of any degree
        accuracy: absolute error tolerance handed to quad

    Returns:
        float: the arclength
    """
    deriv = curve.derivative()
    length, _abserr = integrate.quad(lambda t: deriv.eval(t).norm(), 0.0, 1.0, epsabs=accuracy, epsrel=0.0, limit=200)
    return float(length)
