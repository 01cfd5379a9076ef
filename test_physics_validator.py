import io
import unittest
from contextlib import redirect_stdout

from engine_model import EngineConfiguration, ValveTiming
from physics_validator import PhysicsValidator


class TestPhysicsValidator(unittest.TestCase):

    def test_default_engine_passes_every_check(self):
        validator = PhysicsValidator(samples=500)
        results = validator.run_tests()
        failed = [name for name, passed in results.items() if not passed]
        self.assertEqual(failed, [])

    def test_report(self):
        validator = PhysicsValidator(samples=100)
        buf = io.StringIO()
        with redirect_stdout(buf):
            ok = validator.print_report(validator.run_tests())
        self.assertTrue(ok)
        self.assertIn("9/9 checks passed", buf.getvalue())

    def test_detects_shifted_intake_timing(self):
        cfg = EngineConfiguration(intake=ValveTiming(center=100.0, duration=240.0))
        results = PhysicsValidator(config=cfg, samples=100).run_tests()
        self.assertFalse(results["intake_lift_peak_and_edge"])
        self.assertTrue(results["range_invariant"])


if __name__ == "__main__":
    unittest.main()
