"""
Tests for the periapsis radius bisection search.

The Jupiter flyby speed grows with periapsis radius only below the radius
where the turn angle equals the incoming flight angle (about 1e10 m for
turn sign +1), and for turn sign -1 only above about 2e8 m. The fixtures
below stay inside those intervals and check it before searching.
"""
import unittest

from scipy.optimize import brentq

from gravassist import (
    ORBIT_TO_SATURN,
    TARGET_SPEED,
    ConfigurationError,
    EncounterModel,
    EncounterState,
    SearchStatus,
    check_monotonic,
    expected_iterations,
    find_radius,
    find_radius_both_signs,
    iterate_bisection,
)

PLUS_INTERVAL = (7.1492e7, 5e9)
MINUS_INTERVAL = (2e8, 1e10)
PRECISION = 1e-3


class TestMonotonicFixtures(unittest.TestCase):

    def setUp(self):
        self.model = EncounterModel(EncounterState.jupiter_assist())

    def test_supported_intervals_are_monotonic(self):
        self.assertTrue(check_monotonic(self.model, *PLUS_INTERVAL, turn_sign=1))
        self.assertTrue(check_monotonic(self.model, *MINUS_INTERVAL, turn_sign=1))
        self.assertTrue(check_monotonic(self.model, *MINUS_INTERVAL, turn_sign=-1))

    def test_speed_peaks_beyond_supported_interval(self):
        self.assertFalse(check_monotonic(self.model, 7.1492e7, 1e16, turn_sign=1))


class TestExpectedIterations(unittest.TestCase):

    def test_values(self):
        self.assertEqual(expected_iterations(0.0, 1024.0, 1.0), 10)
        self.assertEqual(expected_iterations(0.0, 1000.0, 1.0), 10)
        self.assertEqual(expected_iterations(0.0, 0.5, 1.0), 0)


class TestFindRadius(unittest.TestCase):

    def setUp(self):
        self.model = EncounterModel(EncounterState.jupiter_assist())

    def test_converges_turn_sign_plus(self):
        result = find_radius(self.model, TARGET_SPEED, *PLUS_INTERVAL, PRECISION, turn_sign=1)

        self.assertTrue(result.converged)
        self.assertIs(result.status, SearchStatus.CONVERGED)
        self.assertLessEqual(abs(self.model(result.radius, 1) - TARGET_SPEED), PRECISION)
        self.assertLessEqual(result.iterations, expected_iterations(*PLUS_INTERVAL, PRECISION) + 1)
        self.assertEqual(result.turn_sign, 1)

        root = brentq(lambda r: self.model(r, 1) - TARGET_SPEED, *PLUS_INTERVAL, xtol=1e-3)
        self.assertAlmostEqual(result.radius, root, delta=1e3)

    def test_converges_turn_sign_minus(self):
        result = find_radius(self.model, TARGET_SPEED, *MINUS_INTERVAL, PRECISION, turn_sign=-1)

        self.assertTrue(result.converged)
        self.assertLessEqual(abs(self.model(result.radius, -1) - TARGET_SPEED), PRECISION)
        self.assertLessEqual(result.iterations, expected_iterations(*MINUS_INTERVAL, PRECISION) + 1)

        root = brentq(lambda r: self.model(r, -1) - TARGET_SPEED, *MINUS_INTERVAL, xtol=1e-3)
        self.assertAlmostEqual(result.radius, root, delta=1e4)

    def test_default_turn_sign_comes_from_state(self):
        minus_model = EncounterModel(EncounterState.jupiter_assist(turn_sign=-1))
        implicit = find_radius(minus_model, TARGET_SPEED, *MINUS_INTERVAL, PRECISION)
        explicit = find_radius(self.model, TARGET_SPEED, *MINUS_INTERVAL, PRECISION, turn_sign=-1)
        self.assertIsNone(implicit.turn_sign)
        self.assertEqual(implicit.radius, explicit.radius)

    def test_target_above_range(self):
        result = find_radius(self.model, 25000.0, *PLUS_INTERVAL, PRECISION, turn_sign=1)

        self.assertFalse(result.converged)
        self.assertIs(result.status, SearchStatus.NO_ROOT)
        self.assertAlmostEqual(result.radius, PLUS_INTERVAL[1], delta=PRECISION)
        self.assertLessEqual(result.iterations, expected_iterations(*PLUS_INTERVAL, PRECISION) + 1)

    def test_target_below_range(self):
        result = find_radius(self.model, 5000.0, *PLUS_INTERVAL, PRECISION, turn_sign=1)

        self.assertIs(result.status, SearchStatus.NO_ROOT)
        self.assertAlmostEqual(result.radius, PLUS_INTERVAL[0], delta=PRECISION)
        self.assertEqual(result.value, self.model(result.radius, 1))

    def test_trace(self):
        seen = []
        result = find_radius(self.model, TARGET_SPEED, *PLUS_INTERVAL, PRECISION, turn_sign=1,
                             verbose=True, on_iteration=seen.append)

        self.assertEqual(len(result.trace), result.iterations)
        self.assertEqual(list(result.trace), seen)
        self.assertEqual([r.index for r in result.trace], list(range(result.iterations)))

        previous = None
        for record in result.trace:
            interval = record.interval
            self.assertLessEqual(interval.min, interval.max)
            self.assertEqual(record.candidate_radius, interval.midpoint)
            self.assertEqual(record.residual, record.evaluated_value - TARGET_SPEED)
            if previous is not None:
                self.assertGreaterEqual(interval.min, previous.min)
                self.assertLessEqual(interval.max, previous.max)
                self.assertLess(interval.width, previous.width)
            previous = interval

        last = result.trace[-1]
        self.assertEqual(result.radius, last.candidate_radius)

    def test_no_trace_unless_verbose(self):
        result = find_radius(self.model, TARGET_SPEED, *PLUS_INTERVAL, PRECISION, turn_sign=1)
        self.assertEqual(result.trace, ())

    def test_repeatable(self):
        first = find_radius(self.model, TARGET_SPEED, *PLUS_INTERVAL, PRECISION, turn_sign=1, verbose=True)
        second = find_radius(self.model, TARGET_SPEED, *PLUS_INTERVAL, PRECISION, turn_sign=1, verbose=True)
        self.assertEqual(first, second)

    def test_safety_bound(self):
        result = find_radius(self.model, TARGET_SPEED, *PLUS_INTERVAL, PRECISION, turn_sign=1,
                             max_iterations=3)
        self.assertIs(result.status, SearchStatus.SAFETY_BOUND)
        self.assertEqual(result.iterations, 3)

    def test_decreasing_model(self):
        def mirrored(radius, turn_sign):
            return -self.model(radius, turn_sign)

        result = find_radius(mirrored, -TARGET_SPEED, *PLUS_INTERVAL, PRECISION, turn_sign=1,
                             increasing=False)
        reference = find_radius(self.model, TARGET_SPEED, *PLUS_INTERVAL, PRECISION, turn_sign=1)
        self.assertTrue(result.converged)
        self.assertEqual(result.radius, reference.radius)

    def test_apoapsis_target(self):
        model = EncounterModel(EncounterState.jupiter_assist(), output='apoapsis')
        self.assertTrue(check_monotonic(model, 1e8, 1.5e9, turn_sign=1))

        result = find_radius(model, ORBIT_TO_SATURN, 1e8, 1.5e9, precision=1e3, turn_sign=1,
                             width_tolerance=1e-3)
        self.assertTrue(result.converged)
        self.assertLessEqual(abs(model(result.radius, 1) - ORBIT_TO_SATURN), 1e3)

    def test_invalid_configuration(self):
        with self.assertRaises(ConfigurationError):
            find_radius(self.model, TARGET_SPEED, 1e8, 1e9, 0.0)
        with self.assertRaises(ConfigurationError):
            find_radius(self.model, TARGET_SPEED, 1e9, 1e9, PRECISION)
        with self.assertRaises(ConfigurationError):
            find_radius(self.model, TARGET_SPEED, 2e9, 1e9, PRECISION)
        with self.assertRaises(ConfigurationError):
            find_radius(self.model, TARGET_SPEED, -1e9, 1e9, PRECISION)
        with self.assertRaises(ConfigurationError):
            find_radius(self.model, TARGET_SPEED, 1e8, 1e9, PRECISION, max_iterations=0)
        with self.assertRaises(ConfigurationError):
            find_radius(self.model, TARGET_SPEED, 1e8, 1e9, PRECISION, turn_sign=2)


class TestFindRadiusBothSigns(unittest.TestCase):

    def setUp(self):
        self.model = EncounterModel(EncounterState.jupiter_assist())

    def test_both_signs_converge(self):
        results = find_radius_both_signs(self.model, TARGET_SPEED, *MINUS_INTERVAL, PRECISION,
                                         max_iterations=200)

        self.assertEqual(list(results), [1, -1])
        for sign, result in results.items():
            self.assertTrue(result.converged)
            self.assertEqual(result.turn_sign, sign)
            self.assertLessEqual(abs(self.model(result.radius, sign) - TARGET_SPEED), PRECISION)

        # The retrograde turn needs a much wider flyby.
        self.assertGreater(results[-1].radius, results[1].radius)

    def test_iteration_cap(self):
        results = find_radius_both_signs(self.model, TARGET_SPEED, *MINUS_INTERVAL, PRECISION,
                                         max_iterations=5, verbose=True)

        for result in results.values():
            self.assertIs(result.status, SearchStatus.ITERATION_CAP)
            self.assertFalse(result.converged)
            self.assertEqual(result.iterations, 5)
            self.assertEqual(result.radius, result.trace[-1].candidate_radius)
            self.assertGreater(result.radius, MINUS_INTERVAL[0])
            self.assertLess(result.radius, MINUS_INTERVAL[1])

    def test_requires_cap(self):
        with self.assertRaises(ConfigurationError):
            find_radius_both_signs(self.model, TARGET_SPEED, *MINUS_INTERVAL, PRECISION,
                                   max_iterations=0)


def test_iterate_bisection_is_lazy():
    calls = []

    def model(radius, turn_sign):
        calls.append(radius)
        return radius

    records = iterate_bisection(model, target=3.0, min_radius=0.0, max_radius=8.0, precision=1e-6)
    assert calls == []

    first = next(records)
    assert first.index == 0
    assert first.candidate_radius == 4.0
    assert calls == [4.0]

    second = next(records)
    assert second.interval.max == 4.0
    assert second.candidate_radius == 2.0


def test_iterate_bisection_returns_status():
    records = iterate_bisection(lambda r, s: r, target=4.0, min_radius=0.0, max_radius=8.0,
                                precision=1e-6)
    assert len(list(records)) == 1

    records = iterate_bisection(lambda r, s: r, target=4.0, min_radius=0.0, max_radius=8.0,
                                precision=1e-6)
    next(records)
    try:
        next(records)
    except StopIteration as stop:
        assert stop.value is SearchStatus.CONVERGED
    else:
        raise AssertionError("generator should have finished")
