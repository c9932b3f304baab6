"""Tests for the gravassist command-line interface."""
import io
import os
import tempfile
import unittest
from contextlib import redirect_stdout

from gravassist import EncounterState, OrbitParameters, SUN_MASS
from gravassist.__main__ import main


def run_cli(*argv):
    buffer = io.StringIO()
    with redirect_stdout(buffer):
        code = main(list(argv))
    return code, buffer.getvalue()


class TestEncounterCommand(unittest.TestCase):

    def test_success(self):
        code, out = run_cli('encounter', '--min', '7.1492e7', '--max', '5e9', '--precision', '0.001')
        self.assertEqual(code, 0)
        self.assertIn("COMPUTATION SUCCESSFUL", out)
        self.assertIn("radius:", out)
        self.assertIn("height:", out)

    def test_unreachable_target(self):
        code, out = run_cli('encounter', '--min', '7.1492e7', '--max', '5e9', '--target', '25000')
        self.assertEqual(code, 1)
        self.assertIn("COMPUTATION FAILED", out)
        self.assertIn("closest approximation", out)

    def test_verbose_prints_iterations(self):
        code, out = run_cli('encounter', '--min', '7.1492e7', '--max', '5e9', '-v')
        self.assertEqual(code, 0)
        self.assertIn("iteration / expected iters:", out)
        self.assertIn("current precision / desired precision:", out)

    def test_both_signs(self):
        code, out = run_cli('encounter', '--min', '2e8', '--max', '1e10',
                            '--both-signs', '--max-iterations', '200')
        self.assertEqual(code, 0)
        self.assertIn("(turn sign +1)", out)
        self.assertIn("(turn sign -1)", out)

    def test_both_signs_requires_cap(self):
        with self.assertRaises(SystemExit):
            run_cli('encounter', '--both-signs')

    def test_apoapsis_output(self):
        code, out = run_cli('encounter', '--output', 'apoapsis', '--min', '1e8', '--max', '1.5e9',
                            '--precision', '1000', '--width-tolerance', '1e-3')
        self.assertEqual(code, 0)
        self.assertIn("apoapsis:", out)

    def test_config_file(self):
        state = EncounterState.jupiter_assist(turn_sign=-1)
        with tempfile.TemporaryDirectory() as tmp_dir:
            path = os.path.join(tmp_dir, 'state.json')
            state.save(path)
            code, out = run_cli('encounter', '--config', path, '--min', '2e8', '--max', '1e10')
        self.assertEqual(code, 0)
        self.assertIn("COMPUTATION SUCCESSFUL", out)

    def test_invalid_interval(self):
        code, _ = run_cli('encounter', '--min', '5e9', '--max', '1e8')
        self.assertEqual(code, 2)


class TestTransitCommand(unittest.TestCase):

    def test_angles(self):
        code, out = run_cli('transit', '-e', '0.5', '-a', '2e11', '--mass', '1.989e30',
                            '--angles', '0', '90', '--degrees', '-n', '1000')
        self.assertEqual(code, 0)
        self.assertIn("RESULTS:", out)
        self.assertIn("distance:", out)
        self.assertIn("days", out)

    def test_radii(self):
        code, out = run_cli('transit', '-e', '0.5', '-a', '2e11', '--mass', '1.989e30',
                            '--radii', '1.5e11', '2.5e11', '--inbound-f', '-n', '500')
        self.assertEqual(code, 0)
        self.assertIn("time:", out)

    def test_config_file(self):
        orbit = OrbitParameters(eccentricity=0.2, semi_major_axis=1.5e11, central_mass=SUN_MASS)
        with tempfile.TemporaryDirectory() as tmp_dir:
            path = os.path.join(tmp_dir, 'orbit.json')
            orbit.save(path)
            code, out = run_cli('transit', '--config', path, '--angles', '-1', '1', '-n', '100')
        self.assertEqual(code, 0)
        self.assertIn("RESULTS:", out)

    def test_zero_divisions(self):
        code, _ = run_cli('transit', '-e', '0.5', '-a', '2e11', '--mass', '1.989e30',
                          '--angles', '0', '1', '-n', '0')
        self.assertEqual(code, 2)

    def test_parabola(self):
        code, _ = run_cli('transit', '-e', '1.0', '-a', '2e11', '--mass', '1.989e30',
                          '--angles', '0', '1', '-n', '10')
        self.assertEqual(code, 2)

    def test_missing_orbit(self):
        with self.assertRaises(SystemExit):
            run_cli('transit', '--angles', '0', '1', '-n', '10')


if __name__ == '__main__':
    unittest.main()
