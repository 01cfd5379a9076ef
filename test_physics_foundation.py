import unittest
import numpy as np
import physics_functions as pf
import constants as c


class TestPhysicsFoundation(unittest.TestCase):

    def test_wrap_angle_scalar(self):
        self.assertEqual(pf.wrap_angle(0.0), 0.0)
        self.assertEqual(pf.wrap_angle(720.0), 0.0)
        self.assertEqual(pf.wrap_angle(-90.0), 630.0)
        self.assertEqual(pf.wrap_angle(1440.0 + 45.0), 45.0)
        self.assertIsInstance(pf.wrap_angle(10.0), float)

    def test_wrap_angle_tiny_negative_stays_below_period(self):
        """-1e-20 mod 720 rounds to 720.0 in floating point; it must fold back to 0."""
        wrapped = pf.wrap_angle(-1e-20)
        self.assertGreaterEqual(wrapped, 0.0)
        self.assertLess(wrapped, c.THETA_MAX)

    def test_wrap_angle_keeps_nan(self):
        """A NaN must not be folded into TDC."""
        self.assertTrue(np.isnan(pf.wrap_angle(float("nan"))))
        with np.errstate(invalid="ignore"):
            self.assertTrue(np.isnan(pf.wrap_angle(float("inf"))))

    def test_wrap_angle_array(self):
        wrapped = pf.wrap_angle(np.array([-720.0, -1e-20, 359.5, 1000.0]))
        np.testing.assert_allclose(wrapped, [0.0, 0.0, 359.5, 280.0])
        self.assertTrue(np.all(wrapped < c.THETA_MAX))

    def test_engine_speed_conversion(self):
        """1 RPM is 6 degrees per second."""
        self.assertEqual(pf.eng_speed_deg(1.0), 6.0)
        self.assertEqual(pf.eng_speed_deg(6.0), 36.0)

    def test_cam_runs_at_half_speed(self):
        self.assertEqual(pf.cam_angle(0.0), 0.0)
        self.assertEqual(pf.cam_angle(500.0), 250.0)
        self.assertEqual(pf.cam_angle(719.0), 359.5)

    def test_side_position_dead_centers(self):
        """Verify the slider-crank math hits exactly 0 at TDC and 1 at BDC."""
        self.assertEqual(pf.piston_position_side(0.0, c.RADIUS_CRANK, c.LEN_CONROD), 0.0)
        self.assertAlmostEqual(
            pf.piston_position_side(180.0, c.RADIUS_CRANK, c.LEN_CONROD), 1.0, places=12
        )

    def test_side_position_rod_angularity(self):
        """At 90° the piston is past mid-stroke because of rod angularity."""
        side = pf.piston_position_side(90.0, c.RADIUS_CRANK, c.LEN_CONROD)
        front = pf.piston_position_front(90.0)
        self.assertAlmostEqual(front, 0.5, places=12)
        self.assertGreater(side, 0.5)

        expected = (c.LEN_CONROD + c.RADIUS_CRANK - np.sqrt(c.LEN_CONROD**2 - c.RADIUS_CRANK**2)) / (
            2 * c.RADIUS_CRANK
        )
        self.assertAlmostEqual(side, expected, places=12)

    def test_front_position_dead_centers(self):
        self.assertEqual(pf.piston_position_front(0.0), 0.0)
        self.assertEqual(pf.piston_position_front(180.0), 1.0)

    def test_positions_periodic(self):
        thetas = np.linspace(-1000.0, 1000.0, 97)
        for period in (360.0, 720.0):
            np.testing.assert_allclose(
                pf.piston_position_side(thetas, c.RADIUS_CRANK, c.LEN_CONROD),
                pf.piston_position_side(thetas + period, c.RADIUS_CRANK, c.LEN_CONROD),
                atol=1e-9,
            )
            np.testing.assert_allclose(
                pf.piston_position_front(thetas), pf.piston_position_front(thetas + period), atol=1e-9
            )

    def test_piston_height_limits(self):
        self.assertEqual(pf.piston_height(0.0, 40.0, 150.0), 190.0)
        self.assertAlmostEqual(pf.piston_height(180.0, 40.0, 150.0), 110.0, places=9)

    def test_crank_pin_and_rod_angle(self):
        x, y = pf.crank_pin_position(0.0, 40.0)
        self.assertEqual((x, y), (0.0, 40.0))

        x, y = pf.crank_pin_position(90.0, 40.0)
        self.assertAlmostEqual(x, 40.0, places=9)
        self.assertAlmostEqual(y, 0.0, places=9)

        self.assertEqual(pf.rod_angle(0.0, 40.0, 150.0), 0.0)
        self.assertAlmostEqual(pf.rod_angle(90.0, 40.0, 150.0), np.degrees(np.arcsin(40.0 / 150.0)))
        self.assertAlmostEqual(pf.rod_angle(180.0, 40.0, 150.0), 0.0, places=9)

    def test_valve_lift_peak_and_edges(self):
        self.assertEqual(pf.valve_lift(90.0, 90.0, 240.0), 1.0)
        self.assertEqual(pf.valve_lift(210.0, 90.0, 240.0), 0.0)
        self.assertEqual(pf.valve_lift(400.0, 90.0, 240.0), 0.0)
        self.assertAlmostEqual(pf.valve_lift(150.0, 90.0, 240.0), np.cos(np.pi / 4.0), places=12)

    def test_valve_lift_wraps_round_the_cycle(self):
        """Intake opens late in the exhaust stroke: 700° is 110° before a 90° centerline."""
        lift = pf.valve_lift(700.0, 90.0, 240.0)
        self.assertAlmostEqual(lift, np.cos(110.0 / 120.0 * np.pi / 2.0), places=12)

        # exhaust (center 630) still open just after TDC at the start of intake
        self.assertAlmostEqual(pf.valve_lift(0.0, 630.0, 240.0), np.cos(np.pi * 3.0 / 8.0), places=12)

    def test_valve_lift_vectorized(self):
        lift = pf.valve_lift(np.arange(0.0, 720.0), 90.0, 240.0)
        self.assertEqual(lift.shape, (720,))
        self.assertEqual(lift.max(), 1.0)
        self.assertGreaterEqual(lift.min(), 0.0)
        # 239 degrees off the seat on the 1° grid: (-30, 210) exclusive
        self.assertEqual(int(np.count_nonzero(lift)), 239)

    def test_stroke_index_boundaries(self):
        self.assertEqual(pf.stroke_index(0.0), 0)
        self.assertEqual(pf.stroke_index(179.999), 0)
        self.assertEqual(pf.stroke_index(180.0), 1)
        self.assertEqual(pf.stroke_index(359.999), 1)
        self.assertEqual(pf.stroke_index(360.0), 2)
        self.assertEqual(pf.stroke_index(540.0), 3)
        self.assertEqual(pf.stroke_index(719.999), 3)
        np.testing.assert_array_equal(pf.stroke_index(np.array([10.0, 200.0, 400.0, 600.0])), [0, 1, 2, 3])


if __name__ == "__main__":
    unittest.main()
