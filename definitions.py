""" Constants describing the TinyG JSON protocol and the state derived from it. """

from typing import Dict, Any
from enum import Enum

from pygcode import GCodeRapidMove, GCodeLinearMove, GCodeArcMoveCW, GCodeArcMoveCCW, \
                    GCodeCancelCannedCycle, GCodeMoveInMachineCoords, \
                    GCodeSelectCoordinateSystem1, GCodeSelectCoordinateSystem2, \
                    GCodeSelectCoordinateSystem3, GCodeSelectCoordinateSystem4, \
                    GCodeSelectCoordinateSystem5, GCodeSelectCoordinateSystem6, \
                    GCodeSelectXYPlane, GCodeSelectZXPlane, GCodeSelectYZPlane, \
                    GCodeUseInches, GCodeUseMillimeters, \
                    GCodeAbsoluteDistanceMode, GCodeIncrementalDistanceMode, \
                    GCodeInverseTimeMode, GCodeUnitsPerMinuteMode, GCodeUnitsPerRevolution, \
                    GCodeExactPathMode, GCodeExactStopMode, GCodePathBlendingMode, \
                    GCodeStartSpindleCW, GCodeStartSpindleCCW, GCodeStopSpindle, \
                    GCodeCoolantMistOn, GCodeCoolantFloodOn, GCodeCoolantOff

# Footer status code for a successful command.
# https://github.com/synthetos/g2/wiki/Status-Codes
STATUS_CODE_OK = 0

# Notification kinds.
RAW = "raw"
MT = "mt"
PWR = "pwr"
QR = "qr"
SR = "sr"
SYS = "sys"
OV = "ov"
R = "r"
F = "f"

class MachineState(Enum):
    """ Values of the "stat" field of a status report.
    https://github.com/synthetos/TinyG/wiki/TinyG-Status-Codes#status-report-enumerations """
    UNKNOWN = -1
    INITIALIZING = 0
    READY = 1
    ALARM = 2
    STOP = 3        # Program stop.
    END = 4         # Program end.
    RUN = 5
    HOLD = 6
    PROBE = 7
    CYCLE = 8
    HOMING = 9
    JOG = 10
    INTERLOCK = 11
    SHUTDOWN = 12
    PANIC = 13

IDLE_STATES = (MachineState.READY, MachineState.STOP, MachineState.END)

# Status report modal codes.
MOTION_MODES = {
    0: "G0",        # Straight (linear) traverse
    1: "G1",        # Straight (linear) feed
    2: "G2",        # CW arc traverse
    3: "G3",        # CCW arc traverse
    4: "G80",       # Cancel motion mode
    }
COORDINATE_SYSTEMS = {
    0: "G53",       # Machine coordinate system
    1: "G54",
    2: "G55",
    3: "G56",
    4: "G57",
    5: "G58",
    6: "G59",
    }
PLANES = {
    0: "G17",       # XY plane
    1: "G18",       # XZ plane
    2: "G19",       # YZ plane
    }
UNITS = {
    0: "G20",       # Inches
    1: "G21",       # Millimeters
    }
DISTANCE_MODES = {
    0: "G90",       # Absolute
    1: "G91",       # Incremental
    }
FEEDRATE_MODES = {
    0: "G93",       # Inverse time
    1: "G94",       # Units per minute
    2: "G95",       # Units per revolution
    }
PATH_MODES = {
    0: "G61",       # Exact path
    1: "G61.1",     # Exact stop
    2: "G64",       # Continuous
    }

SPINDLE_CW = "M3"
SPINDLE_CCW = "M4"
SPINDLE_OFF = "M5"
COOLANT_MIST = "M7"
COOLANT_FLOOD = "M8"
COOLANT_OFF = "M9"

# Mapping of modal groups to the individual gcode commands they contain.
MODAL_GROUPS: Dict[str, Dict[str, Any]] = {
    "motion": {
        "G0": GCodeRapidMove,
        "G1": GCodeLinearMove,
        "G2": GCodeArcMoveCW,
        "G3": GCodeArcMoveCCW,
        "G80": GCodeCancelCannedCycle,
        },
    "wcs": {
        "G53": GCodeMoveInMachineCoords,
        "G54": GCodeSelectCoordinateSystem1,
        "G55": GCodeSelectCoordinateSystem2,
        "G56": GCodeSelectCoordinateSystem3,
        "G57": GCodeSelectCoordinateSystem4,
        "G58": GCodeSelectCoordinateSystem5,
        "G59": GCodeSelectCoordinateSystem6,
        },
    "plane": {
        "G17": GCodeSelectXYPlane,
        "G18": GCodeSelectZXPlane,
        "G19": GCodeSelectYZPlane,
        },
    "units": {
        "G20": GCodeUseInches,
        "G21": GCodeUseMillimeters,
        },
    "distance": {
        "G90": GCodeAbsoluteDistanceMode,
        "G91": GCodeIncrementalDistanceMode,
        },
    "feedrate": {
        "G93": GCodeInverseTimeMode,
        "G94": GCodeUnitsPerMinuteMode,
        "G95": GCodeUnitsPerRevolution,
        },
    "path": {
        "G61": GCodeExactPathMode,
        "G61.1": GCodeExactStopMode,
        "G64": GCodePathBlendingMode,
        },
    "spindle": {
        SPINDLE_CW: GCodeStartSpindleCW,
        SPINDLE_CCW: GCodeStartSpindleCCW,
        SPINDLE_OFF: GCodeStopSpindle,
        },
    "coolant": {
        COOLANT_MIST: GCodeCoolantMistOn,
        COOLANT_FLOOD: GCodeCoolantFloodOn,
        COOLANT_OFF: GCodeCoolantOff,
        },
    }

# Settings known to this controller and their values before the device reports them.
# Keys not listed here are never stored.
# https://github.com/synthetos/g2/wiki/Configuring-0.99-System-Groups
SETTINGS_DEFAULTS: Dict[str, Any] = {
    # Identification parameters.
    "fb": 0,        # Firmware build
    "fbs": "",      # Firmware build string
    "fbc": "",      # Firmware build config
    "fv": 0,        # Firmware version
    "hp": 0,        # Hardware platform: 1=Xmega, 2=Due, 3=v9(ARM)
    "hv": 0,        # Hardware version
    "id": "",       # Board ID

    # Overrides.
    "mfoe": 0,      # Manual feedrate override enable
    "mfo": 1,       # Manual feedrate override factor
    "mtoe": 0,      # Manual traverse override enable
    "mto": 1,       # Manual traverse override factor
    "ssoe": 0,      # Spindle speed override enable
    "sso": 1,       # Spindle speed override factor

    # System group.
    "ja": 0,        # Junction acceleration
    "ct": 0,        # Chordal tolerance
    "sl": 0,        # Soft limit enable
    "lim": 0,       # Limit switch enable
    "saf": 0,       # Safety interlock enable
    "m48": 0,       # Override enable (M48/M49)
    "mt": 0,        # Motor disable timeout, seconds
    "spep": 0,      # Spindle enable polarity
    "spdp": 0,      # Spindle direction polarity
    "spph": 0,      # Spindle pause on hold
    "spdw": 0,      # Spindle dwell time
    "cofp": 0,      # Flood coolant polarity
    "comp": 0,      # Mist coolant polarity
    "coph": 0,      # Coolant pause on hold
    "gpl": 0,       # Default gcode plane
    "gun": 0,       # Default gcode units
    "gco": 0,       # Default gcode coordinate system
    "gpa": 0,       # Default gcode path control
    "gdi": 0,       # Default gcode distance mode
    "ej": 0,        # Enable JSON mode
    "jv": 0,        # JSON verbosity
    "qv": 0,        # Queue report verbosity
    "sv": 0,        # Status report verbosity
    "si": 0,        # Status report interval, milliseconds
    "tv": 0,        # Text verbosity
    "ex": 0,        # Serial flow control
    "baud": 0,      # Serial baud rate
    }
