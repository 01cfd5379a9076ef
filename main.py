# main.py
#
# MIT License
#
# Copyright (c) 2025 Chris Cullin

import argparse
import math
import sys
import time

import constants as c
from engine_model import EngineModel
from driver_input import DriverInput
from logger import Logger
from physics_validator import PhysicsValidator


def non_negative_float(text):
    try:
        value = float(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number: {text!r}") from None
    if not math.isfinite(value) or value < 0.0:
        raise argparse.ArgumentTypeError(f"must be a finite number >= 0, got {text}")
    return value


def parse_args(argv=None):
    parser = argparse.ArgumentParser()
    parser.add_argument("--mode", choices=["manual", "sweep", "scrub", "validate"], default="manual")
    parser.add_argument("--rpm", type=non_negative_float, default=None)
    parser.add_argument("--seconds", type=float, default=c.RUN_SECONDS)
    parser.add_argument("--fps", type=float, default=c.FRAME_RATE)
    parser.add_argument("--view", choices=["side", "front"], default="side")
    parser.add_argument("--realtime", action="store_true", default=False)
    parser.add_argument("--no-dashboard", action="store_true", default=False)
    parser.add_argument("--debug", action="store_true", default=False)
    return parser.parse_args(argv)


class SimulationManager:
    def __init__(self, driver, engine, logger=None, dashboard_manager=None):
        self.driver = driver
        self.engine = engine
        self.logger = logger
        self.dashboard_manager = dashboard_manager
        self.frame_count = 0

    @property
    def stop_simulation(self):
        return self.dashboard_manager.stopped if self.dashboard_manager else False

    def run_frame(self, dt):
        # 1. input controller moves the model (or not, while paused)
        self.driver.frame(dt)

        # 2. renderers and logger poll the model once
        driver_dict = self.driver.get_driver_dict()
        engine_data_dict = self.engine.get_engine_data()

        if self.logger:
            self.logger.log(driver_dict, engine_data_dict)
        if self.dashboard_manager:
            self.dashboard_manager.update(driver_dict, engine_data_dict)
            self.dashboard_manager.draw()

        self.frame_count += 1
        return driver_dict, engine_data_dict

    def run(self, seconds, fps, realtime=False):
        frames = int(seconds * fps)
        frame_dt = 1.0 / fps
        last_time = time.perf_counter()

        while self.frame_count < frames and not self.stop_simulation:
            if realtime:
                time.sleep(frame_dt)
                now = time.perf_counter()
                dt, last_time = now - last_time, now
            else:
                dt = frame_dt
            self.run_frame(dt)


def main(argv=None):
    args = parse_args(argv)

    if args.mode == "validate":
        validator = PhysicsValidator()
        ok = validator.print_report(validator.run_tests())
        return 0 if ok else 1

    engine = EngineModel()
    driver = DriverInput(engine, mode=args.mode, rpm=args.rpm)

    logger = None
    dashboard_manager = None

    if not args.debug:
        logger = Logger(driver.get_driver_dict(), engine.get_engine_data())
        if not args.no_dashboard:
            from dashboard_manager import DashboardManager
            dashboard_manager = DashboardManager(engine, view_mode=args.view)

    system = SimulationManager(driver, engine, logger, dashboard_manager)
    driver.toggle_play()  # press "Play"

    try:
        system.run(args.seconds, args.fps, realtime=args.realtime)

    except KeyboardInterrupt:
        print("\nSimulation stopped by user")

    finally:
        if logger:
            logger.close()
        if dashboard_manager:
            dashboard_manager.close()
        print(f"Simulation complete: {system.frame_count} frames, "
              f"crank at {engine.crank_angle:.1f}°, {engine.rpm:.1f} RPM.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
