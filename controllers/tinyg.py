""" Decode telemetry from a TinyG controller and track machine state.

Feed each line received from the controller to TinyG.ingest(). It returns the
notifications the line produced, in order:
    ("raw", {"raw": line})  Always, for any non-empty line.
    (kind, payload)         If the report changed the machine state.
                            kind is one of "mt", "pwr", "qr", "sr", "sys", "ov", "r".
    ("f", footer)           If the frame carried a footer.

Not thread safe. Lines must be delivered from one thread at a time. """

from typing import Any, Dict, List, Tuple, Union
import json

from definitions import MachineState, IDLE_STATES, MODAL_GROUPS, RAW
from controllers.state_machine import StateMachineTinyG, copy_state
from controllers import tinyg_parser
from controllers.tinyg_parser import Unrecognized, Report

Notification = Tuple[str, Any]


class TinyG:
    """ Entry point for data received from a TinyG controller. """

    def __init__(self) -> None:
        self._notifications: List[Notification] = []
        self.state_machine = StateMachineTinyG(self._on_update)
        self.last_report: Report = Unrecognized({})

    def _on_update(self, kind: str, payload: Any) -> None:
        self._notifications.append((kind, payload))

    def ingest(self, incoming: Union[str, bytes]) -> List[Notification]:
        """ Process one line received from the controller. Never raises on bad input. """
        if isinstance(incoming, bytes):
            incoming = incoming.decode("utf-8", errors="replace")
        line = str(incoming).rstrip()
        if not line:
            return []

        self._notifications = [(RAW, {"raw": line})]

        if not line.startswith("{"):
            self.last_report = Unrecognized(line)
            return self._notifications

        try:
            frame = json.loads(line)
        except (ValueError, RecursionError):
            # Corrupted on the wire.
            frame = {}

        footer_ = tinyg_parser.footer(frame)
        status_code = footer_[1] if len(footer_) > 1 else None

        try:
            report = tinyg_parser.classify(frame)
            self.last_report = report
            self.state_machine.apply(report, status_code)
        except RecursionError:
            # Nested too deep to compare. The state machine is left unchanged.
            self.last_report = Unrecognized(frame)

        self.state_machine.apply_footer(footer_)

        return self._notifications

    @property
    def state(self) -> Dict[str, Any]:
        return copy_state(self.state_machine.state)

    @property
    def settings(self) -> Dict[str, Any]:
        return dict(self.state_machine.settings)

    @property
    def footer(self) -> Dict[str, Any]:
        return dict(self.state_machine.footer)

    @property
    def planner_buffer_pool_size(self) -> Any:
        """ Most free planner buffers the controller has reported.
        Suggest 12 min. Limit is 255. """
        return self.state_machine.planner_buffer_pool_size

    def machine_position(self) -> Dict[str, Any]:
        """ Machine coordinates. Always millimeters, no offsets. """
        return dict(self.state_machine.state["sr"]["mpos"])

    def work_position(self) -> Dict[str, Any]:
        """ Work coordinates. Active units, all offsets applied. """
        return dict(self.state_machine.state["sr"]["wpos"])

    def modal_group(self) -> Dict[str, Any]:
        return dict(self.state_machine.state["sr"]["modal"])

    def modal_gcodes(self) -> List[Any]:
        """ The active modal group as pygcode GCode instances.
        Groups that have not been reported yet are left out. """
        gcodes = []
        for group, value in self.state_machine.state["sr"]["modal"].items():
            mnemonics = value if isinstance(value, tuple) else (value,)
            for mnemonic in mnemonics:
                gcode_class = MODAL_GROUPS[group].get(mnemonic)
                if gcode_class is not None:
                    gcodes.append(gcode_class())
        return gcodes

    def machine_state(self) -> MachineState:
        return self.state_machine.state["sr"]["machine_state"]

    def is_alarm(self) -> bool:
        return self.machine_state() is MachineState.ALARM

    def is_idle(self) -> bool:
        return self.machine_state() in IDLE_STATES
