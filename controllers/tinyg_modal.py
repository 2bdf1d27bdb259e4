""" Translate TinyG status report codes into gcode mnemonics. """

from typing import Any, Callable, Dict, Tuple

from definitions import MachineState, MOTION_MODES, COORDINATE_SYSTEMS, PLANES, UNITS, \
                        DISTANCE_MODES, FEEDRATE_MODES, PATH_MODES, \
                        SPINDLE_CW, SPINDLE_CCW, SPINDLE_OFF, \
                        COOLANT_MIST, COOLANT_FLOOD, COOLANT_OFF


def _translate(table: Dict[int, str], code: Any) -> str:
    try:
        return table.get(code, "")
    except TypeError:
        # Unhashable value.
        return ""

def motion_mode(code: Any) -> str:
    return _translate(MOTION_MODES, code)

def coordinate_system(code: Any) -> str:
    return _translate(COORDINATE_SYSTEMS, code)

def plane(code: Any) -> str:
    return _translate(PLANES, code)

def units(code: Any) -> str:
    return _translate(UNITS, code)

def distance_mode(code: Any) -> str:
    return _translate(DISTANCE_MODES, code)

def feedrate_mode(code: Any) -> str:
    return _translate(FEEDRATE_MODES, code)

def path_mode(code: Any) -> str:
    return _translate(PATH_MODES, code)

# Status report field: (modal group, translator).
MODAL_FIELDS: Dict[str, Tuple[str, Callable[[Any], str]]] = {
    "momo": ("motion", motion_mode),
    "coor": ("wcs", coordinate_system),
    "plan": ("plane", plane),
    "unit": ("units", units),
    "dist": ("distance", distance_mode),
    "frmo": ("feedrate", feedrate_mode),
    "path": ("path", path_mode),
    }

# Status report field: coolant channel.
COOLANT_FIELDS = {
    "com": COOLANT_MIST,
    "cof": COOLANT_FLOOD,
    }

def modal_mnemonic(field: str, code: Any) -> Tuple[str, str]:
    """ Translate one of the MODAL_FIELDS.
    Returns:
        (modal group, mnemonic). The mnemonic is "" for unmapped codes. """
    group, translator = MODAL_FIELDS[field]
    return group, translator(code)

def machine_state(code: Any) -> MachineState:
    """ Translate the "stat" field. Unmapped codes read as MachineState.UNKNOWN. """
    try:
        return MachineState(code)
    except ValueError:
        return MachineState.UNKNOWN

def spindle(enable: Any, direction: Any) -> str:
    """ M5 while disabled, otherwise M3 (clockwise) or M4 (counter-clockwise)
    depending on the direction flag. """
    if not enable:
        return SPINDLE_OFF
    if direction == 0:
        return SPINDLE_CW
    return SPINDLE_CCW

def coolant(active: Tuple[str, ...], channel: str, value: Any) -> Tuple[str, ...]:
    """ Switch one coolant channel on or off, keeping the state of the other.
    Args:
        active: Coolant mnemonics currently in effect.
        channel: COOLANT_MIST or COOLANT_FLOOD.
        value: Truthy to switch the channel on.
    Returns:
        Sorted tuple of the channels now on, or (COOLANT_OFF,) if none are. """
    channels = set(active)
    channels.discard(COOLANT_OFF)
    if value:
        channels.add(channel)
    else:
        channels.discard(channel)

    if not channels:
        return (COOLANT_OFF,)
    return tuple(sorted(channels))
