""" Classify JSON frames received from a TinyG controller.

Each frame is a single JSON object. The device multiplexes several report types
on the one channel and will send any of them either wrapped in a response
envelope ({"r": {...}, "f": [...]}) or at the top level. """

from typing import Any, Dict, NamedTuple, Optional, Union

from definitions import MT, PWR, QR, SR, SYS, OV, R


class MotorTimeout(NamedTuple):
    """ Motors have been de-energised, or the motor timeout was queried. """
    mt: Any

    kind = MT

class PowerManagement(NamedTuple):
    """ Power state per motor channel.
    https://github.com/synthetos/TinyG/wiki/Power-Management """
    pwr: Any

    kind = PWR

class QueueReport(NamedTuple):
    """ Free planner buffers and buffers added/removed since the last report. """
    qr: Union[int, float]
    qi: Union[int, float]
    qo: Union[int, float]

    kind = QR

class StatusReport(NamedTuple):
    sr: Dict[str, Any]

    kind = SR

class SystemSettings(NamedTuple):
    """ https://github.com/synthetos/g2/wiki/Text-Mode#displaying-settings-and-groups """
    sys: Dict[str, Any]

    kind = SYS

class Overrides(NamedTuple):
    """ Manual override factors. Entries not present in the frame are None. """
    mfo: Any
    mto: Any
    sso: Any

    kind = OV

class ReceiveReport(NamedTuple):
    """ Acknowledgement echoing the values the device accepted. """
    r: Dict[str, Any]

    kind = R

class Unrecognized(NamedTuple):
    raw: Any

    kind = None

Report = Union[MotorTimeout, PowerManagement, QueueReport, StatusReport,
               SystemSettings, Overrides, ReceiveReport, Unrecognized]


def to_number(value: Any) -> Union[int, float]:
    """ Coerce a numeric field to a number. Anything that is not a number reads as 0. """
    if isinstance(value, int) and not isinstance(value, bool):
        # May be too large for a float.
        return value
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0
    if number != number:
        # NaN
        return 0
    if number.is_integer():
        return int(number)
    return number

def lookup(frame: Dict[str, Any], key: str) -> Any:
    """ Return the value for "key" from either the response envelope ("r.key")
    or the top level of the frame ("key"). None if neither is set. """
    envelope = frame.get("r")
    if isinstance(envelope, dict) and envelope.get(key) is not None:
        return envelope[key]
    return frame.get(key)

def footer(frame: Any) -> list:
    """ The footer array: [revision, status code, rx buffer info]. """
    if not isinstance(frame, dict):
        return []
    footer_ = frame.get("f")
    if not isinstance(footer_, list):
        return []
    return footer_


def _parse_motor_timeout(frame: Dict[str, Any]) -> Optional[Report]:
    mt = lookup(frame, "mt")
    if mt is None:
        return None
    return MotorTimeout(mt)

def _parse_power_management(frame: Dict[str, Any]) -> Optional[Report]:
    pwr = lookup(frame, "pwr")
    if pwr is None:
        return None
    return PowerManagement(pwr)

def _parse_queue_report(frame: Dict[str, Any]) -> Optional[Report]:
    qr = lookup(frame, "qr")
    if qr is None:
        return None
    return QueueReport(to_number(qr), to_number(lookup(frame, "qi")), to_number(lookup(frame, "qo")))

def _parse_status_report(frame: Dict[str, Any]) -> Optional[Report]:
    sr = lookup(frame, "sr")
    if not isinstance(sr, dict):
        return None
    return StatusReport(sr)

def _parse_system_settings(frame: Dict[str, Any]) -> Optional[Report]:
    settings = lookup(frame, "sys")
    if not isinstance(settings, dict):
        return None
    return SystemSettings(settings)

def _parse_overrides(frame: Dict[str, Any]) -> Optional[Report]:
    mfo = lookup(frame, "mfo")
    mto = lookup(frame, "mto")
    sso = lookup(frame, "sso")
    if mfo is None and mto is None and sso is None:
        return None
    return Overrides(mfo, mto, sso)

def _parse_receive_report(frame: Dict[str, Any]) -> Optional[Report]:
    r = lookup(frame, "r")
    if not isinstance(r, dict):
        return None
    return ReceiveReport(r)

# Order matters: a frame may satisfy more than one shape. The first match wins.
PARSERS = (
    _parse_motor_timeout,
    _parse_power_management,
    _parse_queue_report,
    _parse_status_report,
    _parse_system_settings,
    _parse_overrides,
    _parse_receive_report,
    )

def classify(frame: Any) -> Report:
    """ Determine which report a decoded frame carries and extract its fields. """
    if not isinstance(frame, dict):
        return Unrecognized(frame)

    for parser in PARSERS:
        report = parser(frame)
        if report is not None:
            return report

    return Unrecognized(frame)
