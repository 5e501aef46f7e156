"""Test module for arcest.arclen_eval

The tests are run using pytest.
"""

import math

import pytest

from arcest.arclen import reference_arclen
from arcest.arclen_eval import ClosedFormArclen5, GaussArclen, gauss_arclen
from arcest.bezier import BezierCurve, CubicBezier
from arcest.geom import GeomMath
from arcest.quadrature import GAUSS_LEGENDRE_COEFFS_7, GAUSS_LEGENDRE_COEFFS_24

STRAIGHT = CubicBezier((0.0, 0.0), (1.0 / 3.0, 0.0), (2.0 / 3.0, 0.0), (1.0, 0.0))
ARCH = CubicBezier((0.0, 0.0), (0.0, 1.0), (1.0, 1.0), (1.0, 0.0))
SMOOTH = CubicBezier((0.0, 0.0), (1.0, 2.0), (3.0, 2.0), (4.0, 0.0))

EVALUATORS = [ClosedFormArclen5(), GaussArclen(5), GaussArclen(9), GaussArclen(24)]


def lobatto5_arclen(curve):
    """Five-node Gauss-Lobatto rule on [0, 1] applied to the speed, built from the derivative curve."""
    offset = 0.5 * math.sqrt(3.0 / 7.0)
    nodes = [0.0, 0.5 - offset, 0.5, 0.5 + offset, 1.0]
    weights = [1.0 / 20.0, 49.0 / 180.0, 16.0 / 45.0, 49.0 / 180.0, 1.0 / 20.0]
    deriv = curve.derivative()
    return sum(w * deriv.eval(t).norm() for w, t in zip(weights, nodes))


###############################################################################
# Evaluator Tests
###############################################################################


class TestArclenEvaluators:
    """Test class for single segment length estimates."""

    @pytest.mark.parametrize("evaluator", EVALUATORS, ids=repr)
    def test_straight_segment(self, evaluator):
        """An evenly spaced straight cubic has constant speed and is integrated exactly."""
        assert evaluator(STRAIGHT) == pytest.approx(1.0, rel=1e-14)

    @pytest.mark.parametrize("evaluator", EVALUATORS, ids=repr)
    def test_arch_is_exact(self, evaluator):
        """The arch has the polynomial speed 1.5*(1 + (1-2t)^2), its length is exactly 2."""
        assert evaluator.evaluate(ARCH) == pytest.approx(2.0, rel=1e-14)

    @pytest.mark.parametrize("evaluator", EVALUATORS, ids=repr)
    def test_point_curve(self, evaluator):
        """A curve collapsed to a point has length 0."""
        point = CubicBezier((1.0, 1.0), (1.0, 1.0), (1.0, 1.0), (1.0, 1.0))

        assert evaluator(point) == pytest.approx(0.0, abs=1e-14)

    @pytest.mark.parametrize("evaluator", EVALUATORS, ids=repr)
    def test_scales_linearly(self, evaluator):
        """Scaling the curve scales the estimate."""
        scaled = SMOOTH.transform(GeomMath.scaling(3.5))

        assert evaluator(scaled) == pytest.approx(3.5 * evaluator(SMOOTH), rel=1e-13)

    @pytest.mark.parametrize(
        "curve",
        [
            SMOOTH,
            CubicBezier((0.0, 0.0), (2.0, 1.0), (-1.0, 1.0), (1.0, 0.0)),
            CubicBezier((0, 0), (0, 0), (1, 1), (1, 0)),
        ],
    )
    def test_closed_form_matches_lobatto_rule(self, curve):
        """The closed form five-node estimate equals the Lobatto rule evaluated via derivatives."""
        assert ClosedFormArclen5()(curve) == pytest.approx(lobatto5_arclen(curve), rel=1e-12)

    def test_closed_form_requires_cubic(self):
        """The closed form uses the four control points of a cubic."""
        quadratic = BezierCurve.from_points([(0, 0), (1, 1), (2, 0)])

        with pytest.raises(ValueError):
            ClosedFormArclen5().evaluate(quadratic)

    def test_gauss_on_other_degrees(self):
        """The generic rule works for curves of any degree."""
        line = BezierCurve.from_points([(0, 0), (3, 4)])
        quadratic = BezierCurve.from_points([(0, 0), (1, 0), (2, 0)])

        assert GaussArclen(5)(line) == pytest.approx(5.0)
        assert GaussArclen(5)(quadratic) == pytest.approx(2.0)

    def test_high_order_matches_reference(self):
        """The 24-node rule on a smooth curve agrees with the adaptive reference."""
        assert GaussArclen(GAUSS_LEGENDRE_COEFFS_24)(SMOOTH) == pytest.approx(reference_arclen(SMOOTH), abs=1e-9)

    def test_accuracy_improves_with_order(self):
        """More nodes give a better estimate on a curve with non-polynomial speed."""
        reference = reference_arclen(SMOOTH)

        error_5 = abs(GaussArclen(5)(SMOOTH) - reference)
        error_24 = abs(GaussArclen(24)(SMOOTH) - reference)

        assert error_24 <= error_5

    def test_gauss_arclen_function(self):
        """The function form equals the evaluator."""
        assert gauss_arclen(SMOOTH, GAUSS_LEGENDRE_COEFFS_7) == GaussArclen(7)(SMOOTH)

    def test_order_and_name(self):
        """Test evaluator metadata."""
        evaluator = GaussArclen(GAUSS_LEGENDRE_COEFFS_7)

        assert evaluator.order == 7
        assert evaluator.name == "gauss_7"
        assert repr(evaluator) == "GaussArclen(7)"
        assert ClosedFormArclen5.name == "closed_form_5"
