# driver_strategies.py
#
# MIT License
#
# Copyright (c) 2025 Chris Cullin

import constants as c


# =============================================================================
# Strategy classes, one per driver mode
# =============================================================================

class BaseStrategy:
    start_rpm = 0.0

    def driver_update(self, driver, dt):
        """Return (rpm, angle). angle is None unless the strategy seeks the crank."""
        return driver.rpm, None

    def get_telemetry(self):
        """Return dict of extra keys for dashboard"""
        return {"mode": self.__class__.__name__.replace("Strategy", "").lower()}


class ManualStrategy(BaseStrategy):
    """ Holds whatever RPM the user last set """

    def __init__(self, rpm=c.PLAY_RPM):
        self.start_rpm = rpm


class SweepStrategy(BaseStrategy):
    """ Ramps RPM linearly from start_rpm up to the slider limit """

    def __init__(self, start_rpm=c.PLAY_RPM, rpm_per_s=c.SWEEP_RPM_PER_S, rpm_limit=c.RPM_LIMIT):
        self.start_rpm = start_rpm
        self.rpm_per_s = rpm_per_s
        self.rpm_limit = rpm_limit

    def driver_update(self, driver, dt):
        rpm = min(self.start_rpm + self.rpm_per_s * driver.elapsed, self.rpm_limit)
        return rpm, None

    def get_telemetry(self):
        telemetry = super().get_telemetry()
        telemetry["rpm_limit"] = self.rpm_limit
        return telemetry


class ScrubStrategy(BaseStrategy):
    """ Engine stopped, crank angle stepped directly like dragging the angle slider """

    def __init__(self, deg_per_s=90.0):
        self.start_rpm = 0.0
        self.deg_per_s = deg_per_s

    def driver_update(self, driver, dt):
        angle = driver.engine.crank_angle + self.deg_per_s * dt
        return 0.0, angle
