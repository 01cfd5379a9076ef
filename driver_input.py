# driver_input.py
#
# MIT License
#
# Copyright (c) 2025 Chris Cullin

import constants as c
from engine_model import FixedKeyDictionary, require_finite
import driver_strategies as strategies


class DriverInput:
    """
    Play / pause / reset controls in front of an EngineModel.
    Apart from the frame loop this is the only thing that calls the model's setters.
    """

    def __init__(self, engine, mode="manual", rpm=None):
        self.engine = engine
        self.mode = mode
        self.paused = True
        self.elapsed = 0.0  # seconds of un-paused simulation

        if rpm is not None:
            rpm = require_finite("rpm", rpm)
            if rpm < 0.0:
                raise ValueError(f"rpm must be >= 0, got {rpm}")
        self.strategy = self._create_strategy(mode, rpm)
        self.rpm = self.strategy.start_rpm

        self.driver_dict = FixedKeyDictionary({
            "mode": self.mode,
            "paused": self.paused,
            "rpm_setpoint": self.rpm,
            "elapsed_s": self.elapsed,
        })

    # ---------------------------------------------------------------------------------
    def get_driver_dict(self):
        self.driver_dict.update(
            {
                "mode"          : self.mode,
                "paused"        : self.paused,
                "rpm_setpoint"  : self.rpm,
                "elapsed_s"     : self.elapsed,
            }
        )
        return self.driver_dict

    # ---------------------------------------------------------------------------------
    def _create_strategy(self, mode, rpm=None):
        if mode == "manual":
            return strategies.ManualStrategy() if rpm is None else strategies.ManualStrategy(rpm)
        elif mode == "sweep":
            return strategies.SweepStrategy() if rpm is None else strategies.SweepStrategy(start_rpm=rpm)
        elif mode == "scrub":
            return strategies.ScrubStrategy()
        else:
            raise ValueError(f"Unknown driver mode '{mode}'")

    # ---------------------------------------------------------------------------------
    # controls
    # ---------------------------------------------------------------------------------
    def set_rpm(self, rpm):
        self.rpm = self.engine.set_speed(rpm)
        return self.rpm

    def set_angle(self, angle):
        return self.engine.set_angle(angle)

    def toggle_play(self):
        self.paused = not self.paused
        if not self.paused and self.engine.rpm == 0 and self.rpm == 0:
            # Default to some RPM if playing from a standstill
            self.set_rpm(c.PLAY_RPM)
        return self.paused

    def reset(self):
        self.engine.set_angle(0.0)
        self.engine.set_speed(0.0)
        self.paused = True
        self.elapsed = 0.0
        self.strategy = self._create_strategy(self.mode)
        self.rpm = 0.0

    # ---------------------------------------------------------------------------------
    def frame(self, dt):
        """
        One animation frame. While paused the model is only read, never advanced.
        Returns the snapshot the renderers should draw.
        """
        dt = require_finite("dt", dt)
        if dt < 0.0:
            raise ValueError(f"dt must be >= 0, got {dt}")
        if self.paused:
            return self.engine.snapshot()

        self.elapsed += dt
        rpm, angle = self.strategy.driver_update(self, dt)
        if rpm != self.engine.rpm:
            self.set_rpm(rpm)
        if angle is not None:
            self.set_angle(angle)

        self.engine.advance(dt)
        return self.engine.snapshot()
