# constants.py
#
# MIT License
#
# Copyright (c) 2025 Chris Cullin

# =================================== ENGINE GEOMETRY ===================================
NUM_CYL = 4
STROKE = 80.0  # mm
RADIUS_CRANK = STROKE / 2.0  # mm
LEN_CONROD = 150.0  # mm

# =================================== FIRING ORDER 1-3-4-2 ==============================
# crank throw of each piston relative to cylinder 1
PISTON_OFFSETS = (0.0, 180.0, 180.0, 0.0)
# where each cylinder sits inside the 720° four-stroke cycle
STROKE_OFFSETS = (0.0, 180.0, 540.0, 360.0)

# =================================== VALVE DATA ========================================
# centers are crank degrees inside the 720° cycle, 0 = TDC at start of intake
VALVE_TIMING = {
    "intake": {
        "center": 90.0,  # peak lift
        "duration": 240.0,  # off the seat
    },
    "exhaust": {
        "center": 630.0,
        "duration": 240.0,
    },
}

# =================================== CYCLE ===========================================
THETA_MIN = 0.0
THETA_MAX = 720.0  # two crank revolutions = one 4-stroke cycle
THETA_DELTA = 1.0
DEG_PER_REV = 360.0
STROKE_DEG = 180.0
RPM_TO_DEG_PER_S = 6.0  # 360° / 60 s
CAM_RATIO = 0.5  # cam turns once per two crank turns


# =================================== STROKE DISPLAY TAGS ===============================
STROKE_TAGS = {
    "Intake": "#39FF14",
    "Compression": "#7DF9FF",
    "Power": "#e74c3c",
    "Exhaust": "#f1c40f",
}
DEFAULT_STROKE_TAG = "#ffffff"

# =================================== RPM LIMITS ======================================
PLAY_RPM = 5.0  # used when "play" is pressed with the engine stopped
RPM_LIMIT = 120.0  # top of the visualisation slider
SWEEP_RPM_PER_S = 2.0

# =================================== SIMULATION SETTINGS ==============================
FRAME_RATE = 60.0
RUN_SECONDS = 30.0
LOGFILE = "engine_log.csv"
