"""Immutable 2D vector used for control points and derivative values."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, Tuple, Union

from arcest.consts import APPROX_ATOL, APPROX_RTOL


@dataclass(frozen=True)
class Vec2:
    """
    A 2D vector with value semantics.

    All operations return new vectors. None of them raise on NaN or infinite
    components, the non-finite values simply propagate.

    Attributes:
        x (float): The x-component.
        y (float): The y-component.
    """

    x: float = 0.0
    y: float = 0.0

    @classmethod
    def from_point(cls, point: Union[Vec2, Sequence[Union[int, float]]]) -> Vec2:
        """
        Create a Vec2 from a Vec2 or any (x, y) sequence (tuple, list, numpy row).

        Args:
            point: Vec2 or sequence holding at least two numbers

        Returns:
            Vec2: the vector (a Vec2 input is returned as is)
        """
        if isinstance(point, Vec2):
            return point
        return cls(float(point[0]), float(point[1]))

    def to_tuple(self) -> Tuple[float, float]:
        """The vector as Tuple (x, y)."""
        return (self.x, self.y)

    def add(self, other: Vec2) -> Vec2:
        """Component-wise sum."""
        return Vec2(self.x + other.x, self.y + other.y)

    def sub(self, other: Vec2) -> Vec2:
        """Component-wise difference."""
        return Vec2(self.x - other.x, self.y - other.y)

    def scale(self, factor: float) -> Vec2:
        """Vector multiplied by a scalar."""
        return Vec2(self.x * factor, self.y * factor)

    def dot(self, other: Vec2) -> float:
        """Dot product."""
        return self.x * other.x + self.y * other.y

    def cross(self, other: Vec2) -> float:
        """2D cross product (determinant of the two vectors)."""
        return self.x * other.y - self.y * other.x

    def norm(self) -> float:
        """Euclidean length."""
        return math.hypot(self.x, self.y)

    def norm_squared(self) -> float:
        """Squared Euclidean length."""
        return self.x * self.x + self.y * self.y

    def lerp(self, other: Vec2, t: float) -> Vec2:
        """Linear interpolation, t=0 gives self and t=1 gives other."""
        return Vec2(self.x + t * (other.x - self.x), self.y + t * (other.y - self.y))

    def is_finite(self) -> bool:
        """True if both components are finite."""
        return math.isfinite(self.x) and math.isfinite(self.y)

    def approx_equal(self, other: Vec2, rtol: float = APPROX_RTOL, atol: float = APPROX_ATOL) -> bool:
        """Check if two vectors are approximately equal within numerical tolerances.

        Args:
            other: Another Vec2 to compare with
            rtol: Relative tolerance for floating point comparison
            atol: Absolute tolerance for floating point comparison

        Returns:
            True if both components are approximately equal, False otherwise
        """
        if not isinstance(other, Vec2):
            return False
        return math.isclose(self.x, other.x, rel_tol=rtol, abs_tol=atol) and math.isclose(
            self.y, other.y, rel_tol=rtol, abs_tol=atol
        )

    def __add__(self, other: Vec2) -> Vec2:
        return self.add(other)

    def __sub__(self, other: Vec2) -> Vec2:
        return self.sub(other)

    def __mul__(self, factor: float) -> Vec2:
        return self.scale(factor)

    def __rmul__(self, factor: float) -> Vec2:
        return self.scale(factor)

    def __neg__(self) -> Vec2:
        return Vec2(-self.x, -self.y)

    def __iter__(self):
        yield self.x
        yield self.y

    def __str__(self):
        return f"Vec2({self.x}, {self.y})"
