""" State machine reflecting the state of a TinyG hardware controller.

State is held in three regions:
    state:    Live machine status. Motor timeout, power management, queue depth
              and the status report block.
    settings: Device configuration as reported by the controller.
    footer:   Protocol revision, status code and receive buffer info from the
              most recent frame carrying a footer.

A region is never modified in place. Each report builds a candidate copy of its
region which only replaces the current one if the two differ. Only the
containers owned by the state machine are copied; values received from the
controller are shared. """

from typing import Any, Callable, Dict, Optional

from definitions import STATUS_CODE_OK, SETTINGS_DEFAULTS, MachineState, \
                        MT, PWR, QR, SR, SYS, OV, R, F
from controllers import tinyg_modal
from controllers.tinyg_parser import Report

Region = Dict[str, Any]

AXES = ("x", "y", "z", "a", "b", "c")

# Status report fields copied verbatim: report key -> status key.
STATUS_FIELDS = {
    "line": "line",
    "vel": "velocity",
    "feed": "feedrate",
    "cycs": "cycle_state",
    "mots": "motion_state",
    "hold": "feedhold_state",
    "sps": "sps",               # Spindle speed
    }

# Work position is reported in the active units with all offsets applied.
WORK_POSITION_FIELDS = {"pos%s" % axis: axis for axis in AXES}
# Machine position is always millimeters with no offsets.
MACHINE_POSITION_FIELDS = {"mpo%s" % axis: axis for axis in AXES}

OVERRIDES = ("mfo", "mto", "sso")


def default_state() -> Region:
    """ Live status before anything has been reported. """
    return {
        "mt": 0,            # Motor timeout
        "pwr": {},          # Power management. eg: {"1": 0, "2": 0, "3": 0, "4": 0}
        "qr": 0,            # Free planner buffers
        "qr_max": 0,        # Most free planner buffers ever reported
        "sr": {
            "line": 0,
            "velocity": 0,
            "feedrate": 0,
            "machine_state": MachineState.UNKNOWN,
            "cycle_state": 0,
            "motion_state": 0,
            "feedhold_state": 0,
            "mpos": {"x": "0.000", "y": "0.000", "z": "0.000"},
            "wpos": {"x": "0.000", "y": "0.000", "z": "0.000"},
            "spe": 0,       # Spindle enable
            "spd": 0,       # Spindle direction
            "sps": 0,       # Spindle speed
            "modal": {
                "motion": "",       # G0, G1, G2, G3, G80
                "wcs": "",          # G53, G54, G55, G56, G57, G58, G59
                "plane": "",        # G17, G18, G19
                "units": "",        # G20, G21
                "distance": "",     # G90, G91
                "feedrate": "",     # G93, G94, G95
                "path": "",         # G61, G61.1, G64
                "spindle": "",      # M3, M4, M5
                "coolant": (),      # (M7,), (M8,), (M7, M8), (M9,)
                },
            },
        }

def default_settings() -> Region:
    return dict(SETTINGS_DEFAULTS)

def default_footer() -> Region:
    return {
        "revision": 0,
        "status_code": 0,
        "rx_buffer_info": 0,
        }


def _present(data: Dict[str, Any], key: str) -> bool:
    return data.get(key) is not None

def copy_state(state: Region) -> Region:
    """ Copy of the live status that can be modified without affecting "state". """
    new_state = dict(state)
    if isinstance(state["pwr"], dict):
        new_state["pwr"] = dict(state["pwr"])
    status = new_state["sr"] = dict(state["sr"])
    status["mpos"] = dict(status["mpos"])
    status["wpos"] = dict(status["wpos"])
    status["modal"] = dict(status["modal"])
    return new_state

def merge_motor_timeout(state: Region, report: Report, status_code: Any) -> Region:
    if report.mt is None or status_code != STATUS_CODE_OK:
        return state
    new_state = dict(state)
    new_state["mt"] = report.mt
    return new_state

def merge_power_management(state: Region, report: Report, status_code: Any) -> Region:
    if report.pwr is None or status_code != STATUS_CODE_OK:
        return state
    new_state = dict(state)
    new_state["pwr"] = dict(report.pwr) if isinstance(report.pwr, dict) else report.pwr
    return new_state

def merge_queue_report(state: Region, report: Report, _: Any) -> Region:
    new_state = dict(state)
    new_state["qr"] = report.qr
    # The planner buffer pool size is the most free buffers ever reported.
    if report.qr > new_state["qr_max"]:
        new_state["qr_max"] = report.qr
    return new_state

def merge_status_report(state: Region, report: Report, _: Any) -> Region:
    """ Overlay the fields present in a status report onto the live status.
    Fields not in the report keep their previous values. """
    incoming = report.sr
    new_state = copy_state(state)
    status = new_state["sr"]
    modal = status["modal"]

    for key, target in STATUS_FIELDS.items():
        if _present(incoming, key):
            status[target] = incoming[key]

    if _present(incoming, "stat"):
        status["machine_state"] = tinyg_modal.machine_state(incoming["stat"])

    for key, axis in WORK_POSITION_FIELDS.items():
        if _present(incoming, key):
            status["wpos"][axis] = incoming[key]
    for key, axis in MACHINE_POSITION_FIELDS.items():
        if _present(incoming, key):
            status["mpos"][axis] = incoming[key]

    for key in tinyg_modal.MODAL_FIELDS:
        if _present(incoming, key):
            group, mnemonic = tinyg_modal.modal_mnemonic(key, incoming[key])
            modal[group] = mnemonic

    # Enable and direction may arrive in separate reports.
    if _present(incoming, "spe"):
        status["spe"] = incoming["spe"]
    if _present(incoming, "spd"):
        status["spd"] = incoming["spd"]
    if _present(incoming, "spe") or _present(incoming, "spd"):
        modal["spindle"] = tinyg_modal.spindle(status["spe"], status["spd"])

    for key, channel in tinyg_modal.COOLANT_FIELDS.items():
        if _present(incoming, key):
            modal["coolant"] = tinyg_modal.coolant(modal["coolant"], channel, incoming[key])

    return new_state

def _merge_known_settings(settings: Region, incoming: Dict[str, Any]) -> Region:
    """ Overlay only those keys that are already part of the settings. """
    known = {key: value for key, value in incoming.items() if key in settings}
    if not known:
        return settings
    new_settings = dict(settings)
    new_settings.update(known)
    return new_settings

def merge_system_settings(settings: Region, report: Report, _: Any) -> Region:
    return _merge_known_settings(settings, report.sys)

def merge_overrides(settings: Region, report: Report, status_code: Any) -> Region:
    if status_code != STATUS_CODE_OK:
        # Values can not be trusted.
        return settings
    incoming = {key: value for key, value in report._asdict().items() if value is not None}
    return _merge_known_settings(settings, incoming)

def merge_receive_report(settings: Region, report: Report, _: Any) -> Region:
    return _merge_known_settings(settings, report.r)

# Report kind: (region, merge function).
MERGES: Dict[str, Any] = {
    MT: ("state", merge_motor_timeout),
    PWR: ("state", merge_power_management),
    QR: ("state", merge_queue_report),
    SR: ("state", merge_status_report),
    SYS: ("settings", merge_system_settings),
    OV: ("settings", merge_overrides),
    R: ("settings", merge_receive_report),
    }


class StateMachineTinyG:
    """ State Machine reflecting the state of a TinyG hardware controller. """

    def __init__(self, on_update_callback: Callable[[str, Any], None]) -> None:
        self.on_update_callback = on_update_callback

        self.state: Region = default_state()
        self.settings: Region = default_settings()
        self.footer: Region = default_footer()

    def __str__(self) -> str:
        status = self.state["sr"]
        output = "TinyG state: {status[machine_state].name}\n"
        output += "machine_pos: {status[mpos]}\n"
        output += "work_pos: {status[wpos]}\n"
        output += "gcode_modal: {status[modal]}\n"
        output += "planner_buffer: {state[qr]}/{state[qr_max]}\n"
        output += "overrides: mfo: {settings[mfo]} mto: {settings[mto]} sso: {settings[sso]}\n"
        output += "footer: {footer}\n"
        return output.format(status=status, state=self.state,
                             settings=self.settings, footer=self.footer)

    @property
    def planner_buffer_pool_size(self) -> Any:
        """ High water mark of free planner buffers. Never decreases. """
        return self.state["qr_max"]

    def apply(self, report: Report, status_code: Optional[Any]) -> bool:
        """ Merge a classified report into its region.
        Args:
            report: Output of tinyg_parser.classify().
            status_code: Status code from the footer of the same frame.
                Motor timeout, power management and override values are only
                accepted when this is STATUS_CODE_OK.
        Returns:
            True if the region changed. on_update_callback will have been called. """
        if report.kind not in MERGES:
            return False

        region_name, merge = MERGES[report.kind]
        current = getattr(self, region_name)
        candidate = merge(current, report, status_code)
        if candidate == current:
            return False

        # Anything that can fail happens before the region is replaced.
        payload = self._payload(report, candidate)
        setattr(self, region_name, candidate)
        self.on_update_callback(report.kind, payload)
        return True

    def apply_footer(self, footer: list) -> bool:
        """ Record the footer. Every footer counts as an update, even if unchanged. """
        if not footer:
            return False

        padded = list(footer) + [None] * (3 - len(footer))
        self.footer = {
            "revision": padded[0],
            "status_code": padded[1],
            "rx_buffer_info": padded[2],
            }
        self.on_update_callback(F, list(footer))
        return True

    @staticmethod
    def _payload(report: Report, region: Region) -> Any:
        """ Data published alongside a change to "region". """
        if report.kind == MT:
            return region["mt"]
        if report.kind == PWR:
            pwr = region["pwr"]
            return dict(pwr) if isinstance(pwr, dict) else pwr
        if report.kind == QR:
            return report._asdict()
        if report.kind == OV:
            return {key: region[key] for key in OVERRIDES}
        # Status reports, system settings and receive reports are passed on as received.
        return dict(report[0])
