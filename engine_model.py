# engine_model.py
#
# MIT License
#
# Copyright (c) 2025 Chris Cullin


import numpy as np
import physics_functions as pf
import constants as c
import math

import collections.abc
from dataclasses import dataclass, field
from enum import Enum


class FixedKeyDictionary(dict):
    """A dictionary that only allows assignments or updates to predefined keys."""

    def __init__(self, *args, **kwargs):
        # We allow keys to be set ONLY during the initial super().__init__ call
        super().__init__(*args, **kwargs)
        self._valid_keys = set(self.keys())
        self._is_initialized = True

    def __setitem__(self, key, value):
        if hasattr(self, "_is_initialized") and key not in self._valid_keys:
            raise KeyError(
                f"Attempted to assign a new key '{key}'. "
                f"Only existing keys ({sorted(self._valid_keys)}) are allowed."
            )
        super().__setitem__(key, value)

    def update(self, other=None, **kwargs):
        """Overrides dict.update() to enforce key restriction."""
        if hasattr(self, "_is_initialized"):
            if other:
                if isinstance(other, collections.abc.Mapping):
                    incoming_keys = other.keys()
                else:
                    # sequence of (key, value) pairs
                    other = list(other)
                    incoming_keys = [k for k, v in other]

                for key in incoming_keys:
                    if key not in self._valid_keys:
                        raise KeyError(
                            f"Attempted to update with a new key '{key}' from other. "
                            f"Only existing keys are allowed."
                        )

            for key in kwargs:
                if key not in self._valid_keys:
                    raise KeyError(
                        f"Attempted to update with a new key '{key}' from kwargs. "
                        f"Only existing keys are allowed."
                    )

        if other is None:
            super().update(**kwargs)
        else:
            super().update(other, **kwargs)

    def setdefault(self, key, default=None):
        """Overrides dict.setdefault() to enforce key restriction."""
        if hasattr(self, "_is_initialized") and key not in self._valid_keys:
            raise KeyError(
                f"Attempted to set a new key '{key}' using setdefault. "
                f"Only existing keys are allowed."
            )
        return super().setdefault(key, default)


def require_finite(name, value):
    """Raises ValueError for NaN/inf (or non-numeric) input, otherwise returns a float."""
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a real number, got {value!r}") from None
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite, got {value}")
    return value


# =================================================================
# Closed sets: strokes and valves
# =================================================================
class Stroke(str, Enum):
    INTAKE = "Intake"
    COMPRESSION = "Compression"
    POWER = "Power"
    EXHAUST = "Exhaust"


STROKE_ORDER = (Stroke.INTAKE, Stroke.COMPRESSION, Stroke.POWER, Stroke.EXHAUST)


class ValveType(str, Enum):
    INTAKE = "intake"
    EXHAUST = "exhaust"

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(
                f"Unknown valve type {value!r}, expected one of {[v.value for v in cls]}"
            ) from None


def stroke_display_tag(stroke):
    """Display colour for a stroke; anything unrecognised gets the neutral default."""
    name = stroke.value if isinstance(stroke, Stroke) else stroke
    return c.STROKE_TAGS.get(name, c.DEFAULT_STROKE_TAG)


# =================================================================
# Configuration (immutable)
# =================================================================
@dataclass(frozen=True)
class ValveTiming:
    center: float  # cycle degrees at peak lift
    duration: float  # crank degrees off the seat

    def __post_init__(self):
        object.__setattr__(self, "center", require_finite("center", self.center))
        object.__setattr__(self, "duration", require_finite("duration", self.duration))
        if not 0.0 <= self.center < c.THETA_MAX:
            raise ValueError(
                f"Valve center must be in [0, {c.THETA_MAX:.0f}), got {self.center}"
            )
        if not 0.0 < self.duration <= c.THETA_MAX:
            raise ValueError(
                f"Valve duration must be in (0, {c.THETA_MAX:.0f}], got {self.duration}"
            )


def _default_timing(valve):
    return ValveTiming(**c.VALVE_TIMING[valve])


@dataclass(frozen=True)
class EngineConfiguration:
    cylinder_count: int = c.NUM_CYL
    stroke_length: float = c.STROKE
    connecting_rod_length: float = c.LEN_CONROD
    piston_phase_offsets: tuple = c.PISTON_OFFSETS
    stroke_cycle_phase_offsets: tuple = c.STROKE_OFFSETS
    intake: ValveTiming = field(default_factory=lambda: _default_timing("intake"))
    exhaust: ValveTiming = field(default_factory=lambda: _default_timing("exhaust"))

    def __post_init__(self):
        if isinstance(self.cylinder_count, bool) or not isinstance(self.cylinder_count, int):
            raise ValueError(f"cylinder_count must be an integer, got {self.cylinder_count!r}")
        if self.cylinder_count < 1:
            raise ValueError(f"cylinder_count must be >= 1, got {self.cylinder_count}")

        stroke_length = require_finite("stroke_length", self.stroke_length)
        rod_length = require_finite("connecting_rod_length", self.connecting_rod_length)
        if stroke_length <= 0.0 or rod_length <= 0.0:
            raise ValueError("stroke_length and connecting_rod_length must be positive")
        # sqrt(l^2 - (r sin)^2) must stay real for every crank angle
        if rod_length <= stroke_length / 2.0:
            raise ValueError(
                f"connecting_rod_length ({rod_length}) must exceed the crank radius "
                f"({stroke_length / 2.0})"
            )
        object.__setattr__(self, "stroke_length", stroke_length)
        object.__setattr__(self, "connecting_rod_length", rod_length)

        for name in ("piston_phase_offsets", "stroke_cycle_phase_offsets"):
            offsets = tuple(
                require_finite(name, offset) for offset in getattr(self, name)
            )
            if len(offsets) != self.cylinder_count:
                raise ValueError(
                    f"{name} needs {self.cylinder_count} entries, got {len(offsets)}"
                )
            object.__setattr__(self, name, offsets)

    @property
    def crank_radius(self):
        return self.stroke_length / 2.0

    def timing_for(self, valve_type):
        valve_type = ValveType.parse(valve_type)
        return self.intake if valve_type is ValveType.INTAKE else self.exhaust


@dataclass(frozen=True)
class EngineSnapshot:
    """One consistent read of the mutable state, taken once per frame."""

    crank_angle: float
    rpm: float
    running: bool
    cam_angle: float


class EngineModel:
    def __init__(self, config=None, rpm=0.0):
        # =================================================================
        # 1. Geometry & timing (fixed for the life of the model)
        # =================================================================
        self.config = config if config is not None else EngineConfiguration()
        self.theta_list = np.arange(c.THETA_MIN, c.THETA_MAX, c.THETA_DELTA)

        # =================================================================
        # 2. State
        # =================================================================
        self._crank_angle = 0.0  # 0–720°
        self._rpm = 0.0
        self.set_speed(rpm)

        # =================================================================
        # 3. One cycle of every cylinder, precomputed per crank degree
        # =================================================================
        self.profile = self._build_cycle_profile()

        n = self.config.cylinder_count
        self.engine_data_dict = FixedKeyDictionary({
            "theta": self._crank_angle,
            "cam_angle": self.cam_angle(),
            "RPM": self._rpm,
            "running": self.running,
            "stroke": [Stroke.INTAKE] * n,
            "piston_side": [0.0] * n,
            "piston_front": [0.0] * n,
            "intake_lift": [0.0] * n,
            "exhaust_lift": [0.0] * n,
        })

    # ----------------------------------------------------------------------
    @property
    def crank_angle(self):
        return self._crank_angle

    @property
    def rpm(self):
        return self._rpm

    @property
    def running(self):
        return self._rpm > 0.0

    # =================================================================
    # STATE CHANGES
    # =================================================================
    def advance(self, dt):
        """
        Moves the crank forward by rpm * 6 * dt degrees.
        A stopped engine, or dt == 0, leaves the angle untouched.
        """
        dt = require_finite("dt", dt)
        if dt < 0.0:
            raise ValueError(f"dt must be >= 0, got {dt}")
        if not self.running or dt == 0.0:
            return self._crank_angle

        # rpm * 6 * dt can still overflow to inf
        delta_theta = require_finite("delta_theta", pf.eng_speed_deg(self._rpm) * dt)
        theta = require_finite("crank_angle", self._crank_angle + delta_theta)
        self._crank_angle = pf.wrap_angle(theta)
        return self._crank_angle

    def set_angle(self, angle):
        """Seeks the crank to `angle` (any real), stored reduced into [0, 720)."""
        angle = require_finite("angle", angle)
        self._crank_angle = pf.wrap_angle(angle)
        return self._crank_angle

    def set_speed(self, rpm):
        """Sets the crank speed; negative RPM is rejected and the old speed kept."""
        rpm = require_finite("rpm", rpm)
        if rpm < 0.0:
            raise ValueError(f"rpm must be >= 0, got {rpm}")
        self._rpm = rpm
        return self._rpm

    # =================================================================
    # QUERIES
    # =================================================================
    def cam_angle(self):
        return pf.cam_angle(self._crank_angle)

    def snapshot(self):
        return EngineSnapshot(
            crank_angle=self._crank_angle,
            rpm=self._rpm,
            running=self.running,
            cam_angle=self.cam_angle(),
        )

    def _check_cylinder(self, cylinder_index):
        if isinstance(cylinder_index, bool) or not isinstance(
            cylinder_index, (int, np.integer)
        ):
            raise ValueError(f"Cylinder index must be an integer, got {cylinder_index!r}")
        if not 0 <= cylinder_index < self.config.cylinder_count:
            raise ValueError(
                f"Cylinder index {cylinder_index} out of range "
                f"[0, {self.config.cylinder_count})"
            )
        return int(cylinder_index)

    def _piston_theta(self, cylinder_index):
        i = self._check_cylinder(cylinder_index)
        return self._crank_angle + self.config.piston_phase_offsets[i]

    def cycle_angle(self, cylinder_index):
        """Where this cylinder is inside its own 720° four-stroke cycle."""
        i = self._check_cylinder(cylinder_index)
        return pf.wrap_angle(self._crank_angle + self.config.stroke_cycle_phase_offsets[i])

    # ----------------------------------------------------------------------
    def piston_position_side(self, cylinder_index):
        """Side view (full kinematic): 0 at TDC, 1 at BDC."""
        return pf.piston_position_side(
            self._piston_theta(cylinder_index),
            self.config.crank_radius,
            self.config.connecting_rod_length,
        )

    def piston_position_front(self, cylinder_index):
        """Front view (orthographic projection): 0 at TDC, 1 at BDC."""
        return pf.piston_position_front(self._piston_theta(cylinder_index))

    def piston_height(self, cylinder_index):
        return pf.piston_height(
            self._piston_theta(cylinder_index),
            self.config.crank_radius,
            self.config.connecting_rod_length,
        )

    def crank_pin_position(self, cylinder_index):
        return pf.crank_pin_position(
            self._piston_theta(cylinder_index), self.config.crank_radius
        )

    def rod_angle(self, cylinder_index):
        return pf.rod_angle(
            self._piston_theta(cylinder_index),
            self.config.crank_radius,
            self.config.connecting_rod_length,
        )

    def cylinder_cam_angle(self, cylinder_index):
        i = self._check_cylinder(cylinder_index)
        return pf.cam_angle(self._crank_angle + self.config.stroke_cycle_phase_offsets[i])

    # ----------------------------------------------------------------------
    def valve_lift(self, cylinder_index, valve_type):
        """Valve lift 0 (seated) to 1 (peak) for ValveType.INTAKE / 'intake' or exhaust."""
        timing = self.config.timing_for(valve_type)
        return pf.valve_lift(
            self.cycle_angle(cylinder_index), timing.center, timing.duration
        )

    def stroke(self, cylinder_index):
        return STROKE_ORDER[pf.stroke_index(self.cycle_angle(cylinder_index))]

    @staticmethod
    def stroke_display_tag(stroke):
        return stroke_display_tag(stroke)

    # ----------------------------------------------------------------------
    def get_engine_data(self):
        """Everything a renderer needs for one frame, read from a single snapshot."""
        cylinders = range(self.config.cylinder_count)
        self.engine_data_dict.update({
            "theta": self._crank_angle,
            "cam_angle": self.cam_angle(),
            "RPM": self._rpm,
            "running": self.running,
            "stroke": [self.stroke(i) for i in cylinders],
            "piston_side": [self.piston_position_side(i) for i in cylinders],
            "piston_front": [self.piston_position_front(i) for i in cylinders],
            "intake_lift": [self.valve_lift(i, ValveType.INTAKE) for i in cylinders],
            "exhaust_lift": [self.valve_lift(i, ValveType.EXHAUST) for i in cylinders],
        })
        return self.engine_data_dict

    def cycle_profile(self):
        return self.profile

    # ----------------------------------------------------------------------
    def _build_cycle_profile(self):
        """Per-cylinder traces over one cycle, shape (cylinders, 720)."""
        cfg = self.config
        piston_theta = self.theta_list[np.newaxis, :] + np.asarray(
            cfg.piston_phase_offsets
        )[:, np.newaxis]
        cycle_theta = pf.wrap_angle(
            self.theta_list[np.newaxis, :]
            + np.asarray(cfg.stroke_cycle_phase_offsets)[:, np.newaxis]
        )

        return {
            "theta": self.theta_list,
            "piston_side": pf.piston_position_side(
                piston_theta, cfg.crank_radius, cfg.connecting_rod_length
            ),
            "piston_front": pf.piston_position_front(piston_theta),
            "intake_lift": pf.valve_lift(
                cycle_theta, cfg.intake.center, cfg.intake.duration
            ),
            "exhaust_lift": pf.valve_lift(
                cycle_theta, cfg.exhaust.center, cfg.exhaust.duration
            ),
            "stroke_index": pf.stroke_index(cycle_theta),
        }
