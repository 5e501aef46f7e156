"""Local error estimates for single segment arclength quadrature.

Every estimator maps a cubic segment to a non-negative number meant as an upper
bound of |true length - quadrature estimate|, computed without knowing the true
length. The adaptive subdivision accepts a segment once its estimate drops
below the segment's share of the accuracy budget.

Degenerate geometry never raises: a zero denominator gives inf (subdivide
further) unless the whole segment collapses to a point, which gives 0.0.
NaN input gives NaN, which never compares below a budget and therefore also
forces subdivision until the depth cap is hit.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Optional, Tuple

import numpy as np

from arcest.bezier import BezierCurve
from arcest.consts import CONTROL_POLYGON_ERROR_FACTOR, CURVATURE_SAMPLES, MIN_SPEED_SAMPLES
from arcest.quadrature import GAUSS_LEGENDRE_COEFFS_9, GAUSS_LEGENDRE_COEFFS_11, QuadratureCoeffs


###############################################################################
# Helpers
###############################################################################
def chord_length(curve: BezierCurve) -> float:
    """Distance between start and end point of the segment."""
    return curve.chord_length()


def control_polygon_length(curve: BezierCurve) -> float:
    """Length of the control polygon of the segment."""
    return curve.control_polygon_length()


def cubic_errnorm(curve: BezierCurve) -> float:
    """Squared L2 norm of the second derivative of a cubic over [0, 1]."""
    deriv2 = curve.derivative().derivative()
    start = deriv2.start
    delta = deriv2.end - start
    return start.norm_squared() + start.dot(delta) + delta.norm_squared() * (1.0 / 3.0)


def _lengths(curve: BezierCurve) -> Tuple[float, float]:
    """Chord length and control polygon length."""
    return curve.chord_length(), curve.control_polygon_length()


def _gap(chord: float, polygon: float) -> float:
    """Control polygon length minus chord length, rounding noise clamped to 0 (NaN is kept)."""
    gap = polygon - chord
    if gap < 0.0:
        return 0.0
    return gap


def _pow(base: float, exponent: float) -> float:
    """base**exponent for base >= 0 that returns inf instead of raising on overflow."""
    if math.isnan(base):
        return math.nan
    if base <= 0.0:
        return 0.0
    try:
        return base**exponent
    except OverflowError:
        return math.inf


def _div(numerator: float, denominator: float) -> float:
    """numerator / denominator that returns inf, nan or 0.0 instead of raising on a zero denominator."""
    if denominator != 0.0:
        return numerator / denominator
    if math.isnan(numerator):
        return math.nan
    if numerator == 0.0:
        return 0.0
    return math.copysign(math.inf, numerator)


###############################################################################
# ErrorEstimator
###############################################################################
class ErrorEstimator(ABC):
    """Strategy interface for local quadrature error estimates."""

    name: str = "estimator"

    @abstractmethod
    def estimate(self, curve: BezierCurve) -> float:
        """Return the estimated quadrature error of _curve_."""

    def __call__(self, curve: BezierCurve) -> float:
        return self.estimate(curve)

    def __repr__(self):
        return f"{type(self).__name__}()"


class ControlPolygonEstimator(ErrorEstimator):
    """
    Fallback bound: (control polygon length - chord length) * factor.

    Never negative, zero for evenly spaced straight segments and shrinking
    quickly under subdivision of smooth segments.
    """

    name = "control_polygon"

    def __init__(self, factor: float = CONTROL_POLYGON_ERROR_FACTOR):
        self.factor = factor

    def estimate(self, curve: BezierCurve) -> float:
        chord, polygon = _lengths(curve)
        return _gap(chord, polygon) * self.factor

    def __repr__(self):
        return f"ControlPolygonEstimator(factor={self.factor})"


class MidpointDerivativeEstimator(ErrorEstimator):
    """
    Second and third derivative at t=0.5 relative to the mean segment length.

    Calibrated for the closed form five-node evaluator.
    """

    name = "midpoint_derivative"

    def __init__(self, coefficient: float = 7e-8, power: int = 5):
        self.coefficient = coefficient
        self.power = power

    def estimate(self, curve: BezierCurve) -> float:
        chord, polygon = _lengths(curve)
        if polygon + chord == 0.0:
            return 0.0
        deriv2 = curve.derivative().derivative()
        deriv3 = deriv2.derivative()
        inv_mean = 2.0 / (polygon + chord)
        base = deriv3.eval(0.5).norm() * inv_mean + 5.0 * deriv2.eval(0.5).norm() * inv_mean
        return self.coefficient * _pow(base, self.power) * polygon


class ErrNormEstimator(ErrorEstimator):
    """
    coefficient * (2 * |B''|^2 / chord^2)^power * polygon length

    where |B''|^2 is the squared L2 norm of the second derivative. The
    presets returned by for_order() are tuned for 7, 9 and 11 node rules.
    """

    PRESETS = {
        7: (8e-9, 6),
        9: (1e-10, 8),
        11: (1e-12, 11),
    }

    def __init__(self, coefficient: float, power: int):
        self.coefficient = coefficient
        self.power = power
        self.name = f"errnorm_{power}"

    @classmethod
    def for_order(cls, order: int) -> ErrNormEstimator:
        """
        Estimator tuned for a Gauss-Legendre rule with _order_ nodes.

        Raises:
            KeyError: If no preset exists for the order
        """
        if order not in cls.PRESETS:
            raise KeyError(f"No errnorm preset for order {order}, available: {sorted(cls.PRESETS)}")
        coefficient, power = cls.PRESETS[order]
        return cls(coefficient, power)

    def estimate(self, curve: BezierCurve) -> float:
        chord, polygon = _lengths(curve)
        if chord == 0.0:
            return 0.0 if polygon == 0.0 else math.inf
        ratio = _div(2.0 * cubic_errnorm(curve), chord * chord)
        return self.coefficient * _pow(ratio, self.power) * polygon

    def __repr__(self):
        return f"ErrNormEstimator(coefficient={self.coefficient}, power={self.power})"


class MaxCurvatureEstimator(ErrorEstimator):
    """coefficient * (max |curvature| * polygon length)^3 * polygon length"""

    name = "max_curvature"

    def __init__(self, coefficient: float = 5e-8, samples: int = CURVATURE_SAMPLES):
        self.coefficient = coefficient
        self.samples = samples

    def max_curvature(self, curve: BezierCurve) -> float:
        """
        Maximum absolute curvature over samples+1 uniformly spaced parameters.

        Zero speed at a sample gives inf, non-finite control points give nan.
        """
        if not all(point.is_finite() for point in curve.points):
            return math.nan
        result = 0.0
        for i in range(self.samples + 1):
            curvature = curve.curvature(i / self.samples)
            if math.isnan(curvature):
                # cusp
                return math.inf
            result = max(result, abs(curvature))
        return result

    def estimate(self, curve: BezierCurve) -> float:
        polygon = curve.control_polygon_length()
        if polygon == 0.0:
            return 0.0
        ks = self.max_curvature(curve) * polygon
        return _pow(ks, 3) * polygon * self.coefficient

    def __repr__(self):
        return f"MaxCurvatureEstimator(coefficient={self.coefficient}, samples={self.samples})"


class LocalErrorIntegralEstimator(ErrorEstimator):
    """
    Quadrature of the local error density |B''|^6 / |B'|^5.

    Evaluating this is about as costly as the length estimate itself.
    """

    name = "local_error_integral"

    def __init__(self, coeffs: QuadratureCoeffs = GAUSS_LEGENDRE_COEFFS_11, coefficient: float = 1.0):
        self.coeffs = coeffs
        self.coefficient = coefficient

    def estimate(self, curve: BezierCurve) -> float:
        deriv = curve.derivative()
        deriv2 = deriv.derivative()
        total = 0.0
        for w, x in self.coeffs:
            t = 0.5 * (x + 1.0)
            speed = deriv.eval(t).norm()
            accel_sq = deriv2.eval(t).norm_squared()
            if speed == 0.0:
                if accel_sq == 0.0:
                    continue
                return math.inf
            total += w * _div(_pow(accel_sq, 3), _pow(speed, 5))
        return self.coefficient * total


class TanhLocalErrorEstimator(ErrorEstimator):
    """Quadrature of tanh(gain * |B''| / |B'|)^power * |B'|, times scale."""

    name = "tanh_local_error"

    def __init__(
        self,
        coeffs: QuadratureCoeffs = GAUSS_LEGENDRE_COEFFS_9,
        power: int = 10,
        gain: float = 0.1,
        scale: float = 3.0,
    ):
        self.coeffs = coeffs
        self.power = power
        self.gain = gain
        self.scale = scale

    def estimate(self, curve: BezierCurve) -> float:
        deriv = curve.derivative()
        deriv2 = deriv.derivative()
        total = 0.0
        for w, x in self.coeffs:
            t = 0.5 * (x + 1.0)
            speed = deriv.eval(t).norm()
            if speed == 0.0:
                continue
            accel = deriv2.eval(t).norm()
            total += w * math.tanh(self.gain * accel / speed) ** self.power * speed
        return total * self.scale


class SpeedVarianceEstimator(ErrorEstimator):
    """
    Relative variance of the squared speed, raised to _exponent_, times polygon length.

    A segment with constant speed has zero variance and is integrated exactly.
    """

    name = "speed_variance"

    def __init__(self, coeffs: QuadratureCoeffs = GAUSS_LEGENDRE_COEFFS_9, exponent: float = 3.5):
        self.coeffs = coeffs
        self.exponent = exponent

    def estimate(self, curve: BezierCurve) -> float:
        polygon = curve.control_polygon_length()
        deriv = curve.derivative()
        mean_v2 = 0.0
        mean_v4 = 0.0
        for w, x in self.coeffs:
            speed_sq = deriv.eval(0.5 * (x + 1.0)).norm_squared()
            mean_v2 += w * speed_sq
            mean_v4 += w * speed_sq * speed_sq
        mean_v2 *= 0.5
        mean_v4 *= 0.5
        if mean_v2 == 0.0:
            return 0.0
        variance = _div(mean_v4 - mean_v2 * mean_v2, mean_v2 * mean_v2)
        return _pow(variance, self.exponent) * polygon


class MinSpeedEstimator(ErrorEstimator):
    """
    (1 - min speed^2 / mean length^2)^power * coefficient * (polygon - chord)

    The minimum speed is searched on a dense uniform grid with NumPy.
    """

    name = "min_speed"

    def __init__(self, samples: int = MIN_SPEED_SAMPLES, power: int = 11, coefficient: float = 2e-3):
        self.samples = samples
        self.power = power
        self.coefficient = coefficient

    def min_speed_squared(self, curve: BezierCurve) -> float:
        """Minimum of |B'(t)|^2 over samples+1 uniformly spaced parameters."""
        velocities = curve.derivative().sample(self.samples)
        return float(np.min(np.einsum("ij,ij->i", velocities, velocities)))

    def estimate(self, curve: BezierCurve) -> float:
        chord, polygon = _lengths(curve)
        mean_length = 0.5 * (polygon + chord)
        if mean_length == 0.0:
            return 0.0
        ratio = 1.0 - _div(self.min_speed_squared(curve), mean_length * mean_length)
        return _pow(ratio, self.power) * self.coefficient * _gap(chord, polygon)


class AccelRatioEstimator(ErrorEstimator):
    """min(coefficient * (quadrature of |B''|^2 / |B'|^2)^power, cap) * (polygon - chord)"""

    name = "accel_ratio"

    def __init__(
        self,
        coeffs: QuadratureCoeffs = GAUSS_LEGENDRE_COEFFS_9,
        coefficient: float = 1e-9,
        power: int = 4,
        cap: float = 0.03,
    ):
        self.coeffs = coeffs
        self.coefficient = coefficient
        self.power = power
        self.cap = cap

    def estimate(self, curve: BezierCurve) -> float:
        chord, polygon = _lengths(curve)
        deriv = curve.derivative()
        deriv2 = deriv.derivative()
        total = 0.0
        for w, x in self.coeffs:
            t = 0.5 * (x + 1.0)
            speed_sq = deriv.eval(t).norm_squared()
            accel_sq = deriv2.eval(t).norm_squared()
            if speed_sq == 0.0:
                if accel_sq == 0.0:
                    continue
                total = math.inf
                break
            total += w * accel_sq / speed_sq
        scaled = _pow(total, self.power) * self.coefficient
        if not scaled < self.cap and not math.isnan(scaled):
            scaled = self.cap
        return scaled * _gap(chord, polygon)


class BoundedEstimator(ErrorEstimator):
    """
    The smaller of a sharp heuristic and a fallback bound.

    A NaN heuristic resolves to the fallback.
    """

    def __init__(self, heuristic: ErrorEstimator, fallback: Optional[ErrorEstimator] = None):
        self.heuristic = heuristic
        self.fallback = fallback if fallback is not None else ControlPolygonEstimator()
        self.name = f"{heuristic.name}_bounded"

    def estimate(self, curve: BezierCurve) -> float:
        heuristic = self.heuristic.estimate(curve)
        fallback = self.fallback.estimate(curve)
        if heuristic < fallback:
            return heuristic
        return fallback

    def __repr__(self):
        return f"BoundedEstimator({self.heuristic!r}, {self.fallback!r})"
