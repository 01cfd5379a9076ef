import numpy as np
import constants as c
from engine_model import EngineModel, Stroke, ValveType


class PhysicsValidator:
    """Runs the kinematic invariants against live EngineModel instances."""

    def __init__(self, config=None, samples=10_000, seed=0):
        self.config = config
        self.samples = samples
        self.rng = np.random.default_rng(seed)
        self.tolerance = 1e-9

        # Expected values for the stock 1-3-4-2 layout
        self.reference_targets = {
            "stroke_boundaries": {
                179.999: Stroke.INTAKE,
                180.0: Stroke.COMPRESSION,
                359.999: Stroke.COMPRESSION,
                360.0: Stroke.POWER,
            },
            "scenario_rpm": 6.0,
            "scenario_dt": 5.0,
            "scenario_angle": 180.0,
        }

    def _engine(self):
        return EngineModel(config=self.config)

    def run_tests(self):
        """Runs the automated battery of kinematic tests and returns a health report."""
        results = {
            "angle_wrap": self._test_angle_wrap(),
            "advance_zero_noop": self._test_advance_zero(),
            "periodicity_720": self._test_periodicity(),
            "tdc_at_zero": self._test_tdc(),
            "stroke_boundaries": self._test_stroke_boundaries(),
            "intake_lift_peak_and_edge": self._test_valve_lift_peak(),
            "range_invariant": self._test_range_invariant(),
            "scenario_advance": self._test_scenario_advance(),
            "scenario_stopped": self._test_scenario_stopped(),
        }
        return results

    def print_report(self, results):
        print("\n" + "=" * 50)
        print(f"{'KINEMATICS HEALTH REPORT':^50}")
        print("=" * 50)
        for name, passed in results.items():
            print(f"{name:<35} {'PASS' if passed else 'FAIL':>10}")
        print("-" * 50)
        print(f"{sum(results.values())}/{len(results)} checks passed")
        return all(results.values())

    # ----------------------------------------------------------------------
    def _test_angle_wrap(self):
        engine = self._engine()
        for angle in self.rng.uniform(-1e6, 1e6, size=200):
            wrapped = engine.set_angle(angle)
            if not (0.0 <= wrapped < c.THETA_MAX):
                return False
            expected = angle % c.THETA_MAX
            if expected >= c.THETA_MAX:
                expected = 0.0
            if not np.isclose(wrapped, expected, atol=1e-6):
                return False
        return True

    def _test_advance_zero(self):
        engine = self._engine()
        engine.set_angle(123.456)
        engine.set_speed(3000)
        engine.advance(0.0)
        return engine.crank_angle == 123.456

    def _test_periodicity(self):
        engine = self._engine()
        for angle in self.rng.uniform(0.0, c.THETA_MAX, size=50):
            for i in range(engine.config.cylinder_count):
                engine.set_angle(angle)
                side, front = engine.piston_position_side(i), engine.piston_position_front(i)
                engine.set_angle(angle + c.THETA_MAX)
                if not np.isclose(side, engine.piston_position_side(i), atol=1e-9):
                    return False
                if not np.isclose(front, engine.piston_position_front(i), atol=1e-9):
                    return False
        return True

    def _test_tdc(self):
        engine = self._engine()
        engine.set_angle(0.0)
        return engine.piston_position_front(0) == 0.0 and engine.piston_position_side(0) == 0.0

    def _test_stroke_boundaries(self):
        engine = self._engine()
        for angle, expected in self.reference_targets["stroke_boundaries"].items():
            engine.set_angle(angle)
            if engine.stroke(0) is not expected:
                return False
        return True

    def _test_valve_lift_peak(self):
        engine = self._engine()
        engine.set_angle(90.0)
        peak = engine.valve_lift(0, ValveType.INTAKE)
        engine.set_angle(210.0)
        edge = engine.valve_lift(0, ValveType.INTAKE)
        return peak == 1.0 and edge == 0.0

    def _test_range_invariant(self):
        engine = self._engine()
        lo, hi = -self.tolerance, 1.0 + self.tolerance
        for angle in self.rng.uniform(-10_000.0, 10_000.0, size=self.samples):
            engine.set_angle(angle)
            for i in range(engine.config.cylinder_count):
                values = (
                    engine.piston_position_side(i),
                    engine.piston_position_front(i),
                    engine.valve_lift(i, ValveType.INTAKE),
                    engine.valve_lift(i, ValveType.EXHAUST),
                )
                if any(not lo <= v <= hi for v in values):
                    return False
        return True

    def _test_scenario_advance(self):
        engine = self._engine()
        engine.set_speed(self.reference_targets["scenario_rpm"])
        engine.advance(self.reference_targets["scenario_dt"])
        return (
            np.isclose(engine.crank_angle, self.reference_targets["scenario_angle"])
            and engine.stroke(0) is Stroke.COMPRESSION
        )

    def _test_scenario_stopped(self):
        engine = self._engine()
        engine.set_angle(42.0)
        engine.set_speed(0.0)
        engine.advance(1.0)
        return engine.crank_angle == 42.0
