"""Bezier curve algebra: evaluation, derivatives, subdivision and transformation."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from arcest.consts import APPROX_ATOL, APPROX_RTOL
from arcest.geom import GeomMath
from arcest.vec2 import Vec2

PointLike = Union[Vec2, Sequence[float]]


###############################################################################
# BezierCurve
###############################################################################
@dataclass(frozen=True)
class BezierCurve:
    """
    Bezier curve of arbitrary degree given by its control points.

    The degree is carried at runtime (number of control points - 1) so that the
    derivative chain cubic -> quadratic -> linear -> constant stays well defined.
    Taking the derivative of a constant (degree 0) curve gives the zero constant.

    Attributes:
        points (Tuple[Vec2, ...]): The control points, at least one.
    """

    points: Tuple[Vec2, ...]

    def __post_init__(self):
        points = tuple(Vec2.from_point(point) for point in self.points)
        if not points:
            raise ValueError("A Bezier curve requires at least one control point.")
        object.__setattr__(self, "points", points)

    @staticmethod
    def from_points(points: Iterable[PointLike]) -> BezierCurve:
        """
        Create a curve from control points, using CubicBezier for four points.

        Args:
            points: Control points as Vec2 or (x, y) sequences

        Returns:
            BezierCurve: the curve, a CubicBezier if exactly four points are given
        """
        points = tuple(points)
        if len(points) == 4:
            return CubicBezier(*points)
        return BezierCurve(points)

    @staticmethod
    def from_array(points: NDArray[np.float64]) -> BezierCurve:
        """Create a curve from an array of shape (n, 2) (further columns are ignored)."""
        return BezierCurve.from_points((float(row[0]), float(row[1])) for row in points)

    def to_array(self) -> NDArray[np.float64]:
        """The control points as array of shape (degree+1, 2)."""
        return np.array([point.to_tuple() for point in self.points], dtype=np.float64)

    @property
    def degree(self) -> int:
        """int: The degree of the curve (number of control points - 1)."""
        return len(self.points) - 1

    @property
    def start(self) -> Vec2:
        """Vec2: The start point B(0)."""
        return self.points[0]

    @property
    def end(self) -> Vec2:
        """Vec2: The end point B(1)."""
        return self.points[-1]

    def eval(self, t: float) -> Vec2:
        """
        Evaluate the curve at parameter _t_ using de Casteljau's algorithm.

        Any real t is accepted, values outside [0, 1] extrapolate the curve.
        """
        points = self.points
        while len(points) > 1:
            points = [a.lerp(b, t) for a, b in zip(points, points[1:])]
        return points[0]

    def blossom(self, params: Sequence[float]) -> Vec2:
        """
        Evaluate the blossom (polar form) of the curve.

        Args:
            params: exactly _degree_ parameter values

        Returns:
            Vec2: the blossom value, blossom((t, t, ..., t)) equals eval(t)

        Raises:
            ValueError: If the number of parameters differs from the degree
        """
        if len(params) != self.degree:
            raise ValueError(f"Blossom of a degree {self.degree} curve needs {self.degree} parameters")
        points = self.points
        for u in params:
            points = [a.lerp(b, u) for a, b in zip(points, points[1:])]
        return points[0]

    def derivative(self) -> BezierCurve:
        """
        The derivative (hodograph) curve, one degree lower.

        For a cubic this is the quadratic with control points
        3*(p1-p0), 3*(p2-p1), 3*(p3-p2).
        """
        degree = self.degree
        if degree == 0:
            return BezierCurve((Vec2(0.0, 0.0),))
        return BezierCurve.from_points(
            (self.points[i + 1] - self.points[i]).scale(degree) for i in range(degree)
        )

    def subdivide(self, t: float = 0.5) -> Tuple[BezierCurve, BezierCurve]:
        """
        Split the curve at parameter _t_ using de Casteljau's algorithm.

        Returns:
            Tuple[BezierCurve, BezierCurve]: the parts covering [0, t] and [t, 1]
        """
        points = self.points
        left = [points[0]]
        right = [points[-1]]
        while len(points) > 1:
            points = [a.lerp(b, t) for a, b in zip(points, points[1:])]
            left.append(points[0])
            right.append(points[-1])
        right.reverse()
        return BezierCurve.from_points(left), BezierCurve.from_points(right)

    def subsegment(self, t0: float, t1: float) -> BezierCurve:
        """
        The part of the curve between _t0_ and _t1_, reparametrized over [0, 1].

        Control point i of the result is the blossom with (degree - i) times t0
        and i times t1. If t0 > t1 the result runs backwards.

        Args:
            t0 (float): parameter mapped to 0
            t1 (float): parameter mapped to 1

        Returns:
            BezierCurve: the sub-segment with the same degree
        """
        degree = self.degree
        return BezierCurve.from_points(
            self.blossom([t0] * (degree - i) + [t1] * i) for i in range(degree + 1)
        )

    def reversed(self) -> BezierCurve:
        """The same curve traversed from end to start."""
        return BezierCurve.from_points(reversed(self.points))

    def transform(self, affine_trafo: Sequence[Union[int, float]]) -> BezierCurve:
        """
        Transform the curve using the given affine transformation [a00, a01, a10, a11, b0, b1].

        Bezier curves are affine invariant, so transforming the control points
        transforms every point of the curve.

        Args:
            affine_trafo (List[float]): Affine transformation [a00, a01, a10, a11, b0, b1]

        Returns:
            BezierCurve: The transformed curve
        """
        affine_trafo = GeomMath.check_affine(affine_trafo)
        return BezierCurve.from_points(GeomMath.transform_point(affine_trafo, point) for point in self.points)

    def chord_length(self) -> float:
        """Distance between start and end point."""
        return (self.end - self.start).norm()

    def control_polygon_length(self) -> float:
        """Sum of the lengths of the control polygon edges, an upper bound of the arclength."""
        return sum((b - a).norm() for a, b in zip(self.points, self.points[1:]))

    def curvature(self, t: float) -> float:
        """
        Signed curvature at parameter _t_.

        Where the speed vanishes the curvature is undefined and nan is returned.
        """
        deriv = self.derivative()
        velocity = deriv.eval(t)
        acceleration = deriv.derivative().eval(t)
        speed_sq = velocity.norm_squared()
        denominator = speed_sq * math.sqrt(speed_sq)
        if denominator == 0.0:
            return math.nan
        return velocity.cross(acceleration) / denominator

    def sample(self, steps: int) -> NDArray[np.float64]:
        """
        Evaluate the curve at steps+1 uniformly spaced parameters in [0, 1].

        Uses vectorized de Casteljau steps on all parameters at once.

        Args:
            steps: Number of segments to divide the parameter range into

        Returns:
            NDArray[np.float64] of shape (steps+1, 2) containing the curve points

        Raises:
            ValueError: If steps is smaller than 1
        """
        if steps < 1:
            raise ValueError(f"At least one step is required, got {steps}")
        t = np.linspace(0.0, 1.0, steps + 1, dtype=np.float64).reshape(-1, 1, 1)
        levels = np.broadcast_to(self.to_array(), (steps + 1, len(self.points), 2))
        while levels.shape[1] > 1:
            levels = (1.0 - t) * levels[:, :-1] + t * levels[:, 1:]
        return np.ascontiguousarray(levels[:, 0, :])

    def approx_equal(self, other: BezierCurve, rtol: float = APPROX_RTOL, atol: float = APPROX_ATOL) -> bool:
        """Check if two curves have approximately equal control points.

        Args:
            other: Another BezierCurve to compare with
            rtol: Relative tolerance for floating point comparison
            atol: Absolute tolerance for floating point comparison

        Returns:
            True if degree matches and all control points are approximately equal
        """
        if not isinstance(other, BezierCurve):
            return False
        if self.degree != other.degree:
            return False
        return all(a.approx_equal(b, rtol, atol) for a, b in zip(self.points, other.points))

    def __str__(self):
        points = ", ".join(f"({point.x}, {point.y})" for point in self.points)
        return f"{type(self).__name__}({points})"


###############################################################################
# CubicBezier
###############################################################################
class CubicBezier(BezierCurve):
    """
    Cubic Bezier curve
        B(t) = (1-t)^3*P0 + 3*(1-t)^2*t*P1 + 3*(1-t)*t^2*P2 + t^3*P3
    """

    def __init__(self, p0: PointLike, p1: PointLike, p2: PointLike, p3: PointLike):
        super().__init__((p0, p1, p2, p3))

    def __post_init__(self):
        super().__post_init__()
        if len(self.points) != 4:
            raise ValueError(f"A cubic Bezier curve requires 4 control points, got {len(self.points)}")

    @property
    def p0(self) -> Vec2:
        """Vec2: start point"""
        return self.points[0]

    @property
    def p1(self) -> Vec2:
        """Vec2: first control point"""
        return self.points[1]

    @property
    def p2(self) -> Vec2:
        """Vec2: second control point"""
        return self.points[2]

    @property
    def p3(self) -> Vec2:
        """Vec2: end point"""
        return self.points[3]

    def eval(self, t: float) -> Vec2:
        """Evaluate the curve at parameter _t_ using the Bernstein polynomials."""
        p0, p1, p2, p3 = self.points
        omt = 1.0 - t
        omt2 = omt * omt
        t2 = t * t
        b0 = omt2 * omt
        b1 = 3.0 * omt2 * t
        b2 = 3.0 * omt * t2
        b3 = t2 * t
        return Vec2(
            b0 * p0.x + b1 * p1.x + b2 * p2.x + b3 * p3.x,
            b0 * p0.y + b1 * p1.y + b2 * p2.y + b3 * p3.y,
        )
