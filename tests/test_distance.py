from __future__ import annotations

import pytest

from hotel_listing.hotels import DistanceEvaluator, Excluded, GeoPoint, Matched, compute_distance

PARIS = GeoPoint(48.8566, 2.3522)
NEAR_PARIS = GeoPoint(48.8580, 2.3540)
LONDON = GeoPoint(51.5074, -0.1278)


def test_identical_points_are_zero_apart() -> None:
    assert compute_distance(PARIS.lat, PARIS.lng, PARIS.lat, PARIS.lng) == 0.0
    assert compute_distance(45.0, 7.0, 45.0, 7.0) == 0.0


def test_distance_is_symmetric() -> None:
    evaluator = DistanceEvaluator()
    assert evaluator.evaluate(PARIS, LONDON) == pytest.approx(evaluator.evaluate(LONDON, PARIS), abs=1e-9)
    assert evaluator.evaluate(PARIS, NEAR_PARIS) == pytest.approx(evaluator.evaluate(NEAR_PARIS, PARIS), abs=1e-9)


def test_one_degree_of_latitude_is_constant_km() -> None:
    assert compute_distance(0.0, 0.0, 1.0, 0.0) == pytest.approx(111.111, rel=1e-9)


def test_antipodal_points_do_not_break_acos() -> None:
    assert compute_distance(0.0, 0.0, 0.0, 180.0) == pytest.approx(111.111 * 180, rel=1e-9)


def test_paris_to_london_is_a_few_hundred_km() -> None:
    assert 330 < DistanceEvaluator().evaluate(PARIS, LONDON) < 360


def test_check_against_radius() -> None:
    evaluator = DistanceEvaluator()

    near = evaluator.check(PARIS, NEAR_PARIS, 5)
    far = evaluator.check(PARIS, LONDON, 5)

    assert isinstance(near, Matched)
    assert near.value < 5
    assert isinstance(far, Excluded)


def test_radius_boundary_is_inclusive() -> None:
    evaluator = DistanceEvaluator()
    origin = GeoPoint(0.0, 0.0)
    target = GeoPoint(1.0, 0.0)
    exact = evaluator.evaluate(origin, target)

    assert isinstance(evaluator.check(origin, target, exact), Matched)
    assert isinstance(evaluator.check(origin, target, exact - 0.001), Excluded)
