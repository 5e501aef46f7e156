"""Affine transformations of 2D points"""

from __future__ import annotations

import math
from typing import Optional, Sequence, Tuple, Union

from arcest.vec2 import Vec2

AffineTrafo = Tuple[float, float, float, float, float, float]


###############################################################################
# GeomMath
###############################################################################
class GeomMath:
    """Class to provide various static methods related to affine transformations.

    An affine transformation is a list of 6 floats [a00, a01, a10, a11, b0, b1]:
        | x' | = | a00 a01 b0 |   | x |
        | y' | = | a10 a11 b1 | * | y |
        | 1  | = |  0   0  1  |   | 1 |
    This is the same ordering shapely uses for affine_transform().
    """

    IDENTITY: AffineTrafo = (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)

    @staticmethod
    def check_affine(affine_trafo: Sequence[Union[int, float]]) -> AffineTrafo:
        """
        Validate an affine transformation and return it as tuple of floats.

        Args:
            affine_trafo (Tuple/List[float]): Affine transformation - [a00, a01, a10, a11, b0, b1]

        Returns:
            AffineTrafo: the transformation as tuple of 6 floats

        Raises:
            ValueError: If the transformation does not have exactly 6 elements
        """
        if len(affine_trafo) != 6:
            raise ValueError(f"Affine transformation needs 6 elements, got {len(affine_trafo)}")
        a00, a01, a10, a11, b0, b1 = (float(value) for value in affine_trafo)
        return (a00, a01, a10, a11, b0, b1)

    @staticmethod
    def transform_point(
        affine_trafo: Sequence[Union[int, float]], point: Union[Vec2, Sequence[Union[int, float]]]
    ) -> Vec2:
        """
        Perform an affine transformation on the given 2D point.

        Args:
            affine_trafo (Tuple/List[float]): Affine transformation - [a00, a01, a10, a11, b0, b1]
            point (Vec2 or Tuple/List[float]): 2D point - (x, y)

        Returns:
            Vec2: the transformed point
        """
        x, y = Vec2.from_point(point)
        x_new = float(affine_trafo[0] * x + affine_trafo[1] * y + affine_trafo[4])
        y_new = float(affine_trafo[2] * x + affine_trafo[3] * y + affine_trafo[5])
        return Vec2(x_new, y_new)

    @staticmethod
    def translation(dx: float, dy: float) -> AffineTrafo:
        """Affine transformation moving every point by (dx, dy)."""
        return (1.0, 0.0, 0.0, 1.0, float(dx), float(dy))

    @staticmethod
    def rotation(angle: float, origin: Tuple[float, float] = (0.0, 0.0)) -> AffineTrafo:
        """
        Affine transformation rotating counter-clockwise by _angle_ (radians) around _origin_.

        Args:
            angle (float): rotation angle in radians
            origin (Tuple[float, float]): center of the rotation

        Returns:
            AffineTrafo: the rotation
        """
        cos_a = math.cos(angle)
        sin_a = math.sin(angle)
        ox, oy = origin
        return (
            cos_a,
            -sin_a,
            sin_a,
            cos_a,
            ox - cos_a * ox + sin_a * oy,
            oy - sin_a * ox - cos_a * oy,
        )

    @staticmethod
    def scaling(sx: float, sy: Optional[float] = None) -> AffineTrafo:
        """Affine transformation scaling by sx in x-direction and sy (default: sx) in y-direction."""
        if sy is None:
            sy = sx
        return (float(sx), 0.0, 0.0, float(sy), 0.0, 0.0)

    @staticmethod
    def compose(first: Sequence[Union[int, float]], second: Sequence[Union[int, float]]) -> AffineTrafo:
        """
        Combine two affine transformations into one.

        The result applies _first_ and then _second_, i.e.
            transform_point(compose(a, b), p) == transform_point(b, transform_point(a, p))

        Args:
            first (Tuple/List[float]): transformation applied first
            second (Tuple/List[float]): transformation applied second

        Returns:
            AffineTrafo: the combined transformation
        """
        a00, a01, a10, a11, b0, b1 = GeomMath.check_affine(first)
        c00, c01, c10, c11, d0, d1 = GeomMath.check_affine(second)
        return (
            c00 * a00 + c01 * a10,
            c00 * a01 + c01 * a11,
            c10 * a00 + c11 * a10,
            c10 * a01 + c11 * a11,
            c00 * b0 + c01 * b1 + d0,
            c10 * b0 + c11 * b1 + d1,
        )
