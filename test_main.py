import io
import os
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout

import main
from engine_model import EngineModel
from driver_input import DriverInput


class TestSimulationManager(unittest.TestCase):

    def test_run_fixed_step(self):
        engine = EngineModel()
        driver = DriverInput(engine, rpm=10.0)
        system = main.SimulationManager(driver, engine)
        driver.toggle_play()

        system.run(seconds=1.0, fps=10.0)
        self.assertEqual(system.frame_count, 10)
        self.assertAlmostEqual(engine.crank_angle, 60.0, places=9)

    def test_run_frame_returns_polled_data(self):
        engine = EngineModel()
        driver = DriverInput(engine, mode="scrub")
        system = main.SimulationManager(driver, engine)
        driver.toggle_play()

        driver_dict, engine_data = system.run_frame(1.0)
        self.assertFalse(driver_dict["paused"])
        self.assertEqual(engine_data["theta"], 90.0)


class TestMain(unittest.TestCase):

    def test_validate_mode(self):
        buf = io.StringIO()
        with redirect_stdout(buf):
            code = main.main(["--mode", "validate"])
        self.assertEqual(code, 0)
        self.assertIn("KINEMATICS HEALTH REPORT", buf.getvalue())

    def test_rpm_argument_must_be_non_negative(self):
        self.assertEqual(main.parse_args(["--rpm", "12.5"]).rpm, 12.5)
        for bad in ("-5", "nan", "fast"):
            with self.subTest(bad=bad):
                with redirect_stderr(io.StringIO()):
                    with self.assertRaises(SystemExit):
                        main.parse_args(["--rpm", bad])

    def test_debug_run(self):
        buf = io.StringIO()
        with redirect_stdout(buf):
            code = main.main(["--debug", "--seconds", "1", "--fps", "20", "--rpm", "30"])
        self.assertEqual(code, 0)
        self.assertIn("20 frames", buf.getvalue())
        self.assertIn("crank at 180.0°", buf.getvalue())

    def test_logged_run_writes_csv(self):
        cwd = os.getcwd()
        with tempfile.TemporaryDirectory() as tmp:
            os.chdir(tmp)
            try:
                with redirect_stdout(io.StringIO()):
                    main.main(["--no-dashboard", "--seconds", "0.5", "--fps", "10"])
                with open("engine_log.csv") as f:
                    lines = f.read().splitlines()
            finally:
                os.chdir(cwd)
        self.assertEqual(len(lines), 1 + 5)


if __name__ == "__main__":
    unittest.main()
