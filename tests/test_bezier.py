"""Test module for BezierCurve and CubicBezier in arcest.bezier

The tests are run using pytest.
These tests ensure that evaluation, the derivative chain, subdivision,
sub-segments and transformations keep working after changes and refactoring.
"""

import math

import numpy as np
import pytest
import shapely.geometry

from arcest.bezier import BezierCurve, CubicBezier
from arcest.geom import GeomMath
from arcest.vec2 import Vec2

ARCH = CubicBezier((0.0, 0.0), (0.0, 1.0), (1.0, 1.0), (1.0, 0.0))
WAVE = CubicBezier((0.0, 0.0), (5.0, 20.0), (15.0, -20.0), (20.0, 0.0))
PARAMS = [0.0, 0.1, 0.25, 0.5, 0.73, 1.0]


###############################################################################
# Construction Tests
###############################################################################


class TestBezierConstruction:
    """Test class for creating curves."""

    def test_cubic_points(self):
        """Test that CubicBezier converts points to Vec2 and exposes p0..p3."""
        curve = CubicBezier((0, 0), [1, 2], np.array([3.0, 4.0]), Vec2(5.0, 6.0))

        assert curve.degree == 3
        assert curve.p0 == Vec2(0.0, 0.0)
        assert curve.p1 == Vec2(1.0, 2.0)
        assert curve.p2 == Vec2(3.0, 4.0)
        assert curve.p3 == Vec2(5.0, 6.0)
        assert curve.start == curve.p0
        assert curve.end == curve.p3

    def test_from_points_returns_cubic_for_four_points(self):
        """Test that the factory picks CubicBezier for four control points only."""
        assert isinstance(BezierCurve.from_points([(0, 0), (1, 1), (2, 0), (3, 1)]), CubicBezier)

        quadratic = BezierCurve.from_points([(0, 0), (1, 1), (2, 0)])
        assert not isinstance(quadratic, CubicBezier)
        assert quadratic.degree == 2

    def test_empty_curve_raises(self):
        """A curve without control points is rejected."""
        with pytest.raises(ValueError):
            BezierCurve(())

    def test_array_round_trip(self):
        """Test conversion to and from numpy arrays."""
        array = WAVE.to_array()

        assert array.shape == (4, 2)
        assert array.dtype == np.float64
        assert BezierCurve.from_array(array) == WAVE

    def test_value_semantics(self):
        """Curves compare by value and are immutable."""
        assert ARCH == CubicBezier((0.0, 0.0), (0.0, 1.0), (1.0, 1.0), (1.0, 0.0))
        assert ARCH != WAVE

        with pytest.raises(AttributeError):
            ARCH.points = ()  # type: ignore[misc]


###############################################################################
# Evaluation Tests
###############################################################################


class TestBezierEval:
    """Test class for curve evaluation."""

    def test_eval_end_points(self):
        """B(0) is the start point and B(1) the end point."""
        assert WAVE.eval(0.0) == WAVE.p0
        assert WAVE.eval(1.0) == WAVE.p3

    def test_eval_midpoint(self):
        """Test evaluation against the Bernstein weights 1/8, 3/8, 3/8, 1/8."""
        assert ARCH.eval(0.5).approx_equal(Vec2(0.5, 0.75))

    @pytest.mark.parametrize("t", PARAMS + [-0.5, 1.5])
    def test_cubic_eval_matches_de_casteljau(self, t):
        """The cubic Bernstein evaluation equals the general de Casteljau evaluation."""
        assert WAVE.eval(t).approx_equal(BezierCurve.eval(WAVE, t))

    def test_blossom_diagonal_is_eval(self):
        """The blossom with equal arguments is the curve point."""
        assert WAVE.blossom([0.3, 0.3, 0.3]).approx_equal(WAVE.eval(0.3))

    def test_blossom_argument_count(self):
        """The blossom requires exactly degree arguments."""
        with pytest.raises(ValueError):
            WAVE.blossom([0.1, 0.2])

    def test_sample(self):
        """Test vectorized sampling against single evaluations."""
        points = WAVE.sample(10)

        assert points.shape == (11, 2)
        assert np.allclose(points[0], WAVE.p0.to_tuple())
        assert np.allclose(points[-1], WAVE.p3.to_tuple())
        for i, t in enumerate(np.linspace(0.0, 1.0, 11)):
            assert np.allclose(points[i], WAVE.eval(t).to_tuple())

    def test_sample_invalid_steps(self):
        """At least one step is required."""
        with pytest.raises(ValueError):
            WAVE.sample(0)

    def test_sample_constant_curve(self):
        """A degree 0 curve samples to its single point."""
        points = BezierCurve(((2.0, 3.0),)).sample(4)

        assert points.shape == (5, 2)
        assert np.allclose(points, [[2.0, 3.0]] * 5)


###############################################################################
# Derivative Tests
###############################################################################


class TestBezierDerivative:
    """Test class for the derivative chain."""

    def test_first_derivative_points(self):
        """The derivative of a cubic is the quadratic 3*(p1-p0), 3*(p2-p1), 3*(p3-p2)."""
        deriv = ARCH.derivative()

        assert deriv.degree == 2
        assert deriv.points == (Vec2(0.0, 3.0), Vec2(3.0, 0.0), Vec2(0.0, -3.0))

    def test_derivative_chain_degrees(self):
        """cubic -> quadratic -> linear -> constant -> constant zero."""
        curve = WAVE
        degrees = []
        for _ in range(5):
            curve = curve.derivative()
            degrees.append(curve.degree)

        assert degrees == [2, 1, 0, 0, 0]
        assert curve.points == (Vec2(0.0, 0.0),)

    def test_third_derivative_constant(self):
        """The third derivative of a cubic is 6*(p3 - 3*p2 + 3*p1 - p0)."""
        third = WAVE.derivative().derivative().derivative()
        p0, p1, p2, p3 = WAVE.points
        expected = (p3 - p2 * 3.0 + p1 * 3.0 - p0) * 6.0

        assert third.degree == 0
        assert third.eval(0.2).approx_equal(expected)

    @pytest.mark.parametrize("t", [0.1, 0.5, 0.9])
    def test_derivative_matches_finite_difference(self, t):
        """The derivative curve agrees with a central difference of the curve."""
        h = 1e-6
        numeric = (WAVE.eval(t + h) - WAVE.eval(t - h)) * (0.5 / h)

        assert numeric.approx_equal(WAVE.derivative().eval(t), rtol=1e-6, atol=1e-5)

    def test_curvature_of_arch(self):
        """Curvature at the apex of the arch is -8/3 (clockwise turn)."""
        assert ARCH.curvature(0.5) == pytest.approx(-8.0 / 3.0)
        assert ARCH.curvature(0.0) == pytest.approx(-2.0 / 3.0)

    def test_curvature_of_line(self):
        """A straight segment has zero curvature."""
        line = CubicBezier((0.0, 0.0), (1.0, 1.0), (2.0, 2.0), (3.0, 3.0))

        assert line.curvature(0.4) == 0.0

    def test_curvature_at_zero_speed(self):
        """Curvature is undefined (nan) where the speed vanishes."""
        curve = CubicBezier((0.0, 0.0), (0.0, 0.0), (1.0, 1.0), (2.0, 0.0))

        assert math.isnan(curve.curvature(0.0))


###############################################################################
# Subdivision Tests
###############################################################################


class TestBezierSubdivision:
    """Test class for subdivide and subsegment."""

    @pytest.mark.parametrize("split", [0.5, 0.3])
    def test_subdivide_reproduces_curve(self, split):
        """Both parts reproduce the original curve on their parameter ranges."""
        left, right = WAVE.subdivide(split)

        assert isinstance(left, CubicBezier)
        assert isinstance(right, CubicBezier)
        assert left.end == right.start
        for s in PARAMS:
            assert left.eval(s).approx_equal(WAVE.eval(s * split))
            assert right.eval(s).approx_equal(WAVE.eval(split + s * (1.0 - split)))

    def test_subdivide_end_points(self):
        """The outer end points are kept exactly."""
        left, right = WAVE.subdivide()

        assert left.start == WAVE.start
        assert right.end == WAVE.end

    def test_subdivide_quadratic(self):
        """Subdivision works for other degrees as well."""
        quadratic = BezierCurve.from_points([(0, 0), (1, 2), (2, 0)])
        left, right = quadratic.subdivide()

        assert left.degree == right.degree == 2
        assert left.end.approx_equal(Vec2(1.0, 1.0))

    @pytest.mark.parametrize("t0,t1", [(0.0, 1.0), (0.2, 0.7), (0.5, 0.5), (0.9, 0.1)])
    def test_subsegment_reparametrizes(self, t0, t1):
        """The sub-segment evaluated at s equals the curve at t0 + s*(t1-t0)."""
        segment = WAVE.subsegment(t0, t1)

        for s in PARAMS:
            assert segment.eval(s).approx_equal(WAVE.eval(t0 + s * (t1 - t0)))

    def test_subsegment_full_range(self):
        """The full range gives back the original curve."""
        assert WAVE.subsegment(0.0, 1.0).approx_equal(WAVE)

    def test_subsegment_composition(self):
        """Nested sub-segments equal the sub-segment of the composed range."""
        nested = WAVE.subsegment(0.2, 0.8).subsegment(0.25, 0.5)

        assert nested.approx_equal(WAVE.subsegment(0.35, 0.5))

    def test_subsegment_reversed(self):
        """Swapping the range reverses the curve."""
        assert WAVE.subsegment(1.0, 0.0).approx_equal(WAVE.reversed())

    def test_subsegment_matches_subdivide(self):
        """Sub-segments over [0, t] and [t, 1] equal the subdivision parts."""
        left, right = WAVE.subdivide(0.4)

        assert WAVE.subsegment(0.0, 0.4).approx_equal(left)
        assert WAVE.subsegment(0.4, 1.0).approx_equal(right)


###############################################################################
# Transform and Length Helper Tests
###############################################################################


class TestBezierTransform:
    """Test class for affine transformation and length helpers."""

    @pytest.mark.parametrize("t", PARAMS)
    def test_transform_commutes_with_eval(self, t):
        """Transforming the control points transforms every curve point."""
        trafo = GeomMath.compose(GeomMath.rotation(0.4), (1.5, 0.2, -0.3, 0.8, 2.0, -1.0))

        transformed = WAVE.transform(trafo)

        assert isinstance(transformed, CubicBezier)
        assert transformed.eval(t).approx_equal(GeomMath.transform_point(trafo, WAVE.eval(t)))

    def test_transform_rotation_of_cubic(self):
        """Rotating a cubic keeps its type and the distances between its control points."""
        rotated = ARCH.transform(GeomMath.rotation(0.5))

        assert isinstance(rotated, CubicBezier)
        assert rotated.start == Vec2(0.0, 0.0)
        assert rotated.chord_length() == pytest.approx(ARCH.chord_length())
        assert rotated.control_polygon_length() == pytest.approx(ARCH.control_polygon_length())

    def test_transform_invalid(self):
        """An affine transformation needs 6 elements."""
        with pytest.raises(ValueError):
            WAVE.transform([1, 0, 0, 1])

    def test_chord_and_control_polygon_length(self):
        """Test chord and control polygon length of the arch."""
        assert ARCH.chord_length() == 1.0
        assert ARCH.control_polygon_length() == 3.0

    def test_polyline_length_between_chord_and_polygon(self):
        """The length of a fine polyline lies between chord and control polygon length."""
        polyline = shapely.geometry.LineString(WAVE.sample(200))

        assert WAVE.chord_length() <= polyline.length <= WAVE.control_polygon_length()

    def test_reversed(self):
        """Test reversal of the control points."""
        assert WAVE.reversed().points == tuple(reversed(WAVE.points))
        assert WAVE.reversed().eval(0.3).approx_equal(WAVE.eval(0.7))

    def test_str(self):
        """Test the string representation."""
        assert str(ARCH) == "CubicBezier((0.0, 0.0), (0.0, 1.0), (1.0, 1.0), (1.0, 0.0))"
