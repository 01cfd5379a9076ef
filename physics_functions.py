# physics_functions.py
#
# MIT License
#
# Copyright (c) 2025 Chris Cullin

import numpy as np
import constants as c


def _to_output(value):
    """Returns a python float for 0-d results so scalar callers never see numpy arrays."""
    value = np.asarray(value, dtype=float)
    if value.ndim == 0:
        return float(value)
    return value


def wrap_angle(theta, period=c.THETA_MAX):
    """
    Reduces an angle (or array of angles) into [0, period).

    np.mod already keeps the sign of the divisor, but a tiny negative input can round
    up to exactly `period`, so that case is folded back to 0.
    """
    wrapped = np.mod(theta, period)
    if np.ndim(wrapped) == 0:
        wrapped = float(wrapped)
        return 0.0 if wrapped >= period else wrapped
    wrapped[wrapped >= period] = 0.0
    return wrapped


def eng_speed_deg(rpm):
    """Converts RPM (Revolutions Per Minute) to angular speed in degrees per second."""
    return rpm * c.RPM_TO_DEG_PER_S


def cam_angle(crank_angle):
    """Camshaft angle in [0, 360): the cam turns once per 720° crank cycle."""
    return wrap_angle(crank_angle * c.CAM_RATIO, c.DEG_PER_REV)


# --- Geometric Functions ---


def piston_height(theta, r_crank, l_conrod):
    """
    Distance from the crank axis to the wrist pin along the bore.

    :param theta: crank angle(s) in degrees, 0 = TDC
    :param r_crank: crank radius (half stroke)
    :param l_conrod: connecting rod length, must exceed r_crank

    Slider-crank geometry: x = r*cos(theta) + sqrt(l^2 - (r*sin(theta))^2)
    """
    theta_rad = np.deg2rad(theta)
    x = r_crank * np.cos(theta_rad) + np.sqrt(
        l_conrod * l_conrod - (r_crank * np.sin(theta_rad)) ** 2
    )
    return _to_output(x)


def piston_position_side(theta, r_crank, l_conrod):
    """
    Normalized piston travel from the full slider-crank model.
    0 = TDC (x = l + r), 1 = BDC (x = l - r).
    """
    x = piston_height(theta, r_crank, l_conrod)
    x_max = l_conrod + r_crank
    x_min = l_conrod - r_crank
    return _to_output((x_max - x) / (x_max - x_min))


def piston_position_front(theta):
    """
    Normalized piston travel for the orthographic front view.
    Pure vertical projection of the crank pin, no rod angularity.
    """
    return _to_output((1.0 - np.cos(np.deg2rad(theta))) / 2.0)


def crank_pin_position(theta, r_crank):
    """(x, y) of the crank pin relative to the crank axis, +y towards the head."""
    theta_rad = np.deg2rad(theta)
    return _to_output(r_crank * np.sin(theta_rad)), _to_output(r_crank * np.cos(theta_rad))


def rod_angle(theta, r_crank, l_conrod):
    """Connecting rod inclination from the bore axis in degrees, 0 at both dead centers."""
    return _to_output(
        np.rad2deg(np.arcsin(r_crank * np.sin(np.deg2rad(theta)) / l_conrod))
    )


# --- Valve Functions ---


def valve_lift(cycle_angle, center, duration):
    """
    Normalized valve lift (0-1) for a symmetric cosine cam lobe.

    :param cycle_angle: position(s) within the 720° cycle, already wrapped
    :param center: lobe peak in cycle degrees
    :param duration: crank degrees the valve is off its seat

    The lobe peaks at 1.0 on the centerline and reaches 0.0 at +/- duration/2.
    Distance to the centerline is measured the short way round the 720° cycle.
    """
    diff = np.abs(np.asarray(cycle_angle, dtype=float) - center)
    diff = np.where(diff > c.DEG_PER_REV, c.THETA_MAX - diff, diff)

    half_duration = duration / 2.0
    lift = np.where(
        diff < half_duration,
        np.cos(diff / half_duration * (np.pi / 2.0)),
        0.0,
    )
    return _to_output(lift)


# --- Cycle Functions ---


def stroke_index(cycle_angle):
    """
    0 = intake, 1 = compression, 2 = power, 3 = exhaust.
    Each stroke owns [start, start + 180); the upper boundary belongs to the next stroke.
    """
    index = np.floor_divide(np.asarray(cycle_angle, dtype=float), c.STROKE_DEG).astype(int)
    if index.ndim == 0:
        return int(index)
    return index
