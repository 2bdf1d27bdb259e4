#!/usr/bin/env python3

""" Testing the TinyG telemetry decoder. """

import json
import unittest
import loader  # pylint: disable=E0401,W0611
from pygcode import GCodeRapidMove, GCodeSelectCoordinateSystem1, GCodeUseMillimeters, \
                    GCodeStartSpindleCCW, GCodeCoolantMistOn, GCodeCoolantFloodOn, \
                    GCodeMoveInMachineCoords
from definitions import MachineState
from controllers.tinyg import TinyG
from controllers.tinyg_parser import Unrecognized, StatusReport


def line(frame) -> str:
    """ Encode a frame the way TinyG sends it. """
    return json.dumps(frame, separators=(",", ":")) + "\n"

def kinds(notifications):
    return [kind for kind, _ in notifications]


class TestIngest(unittest.TestCase):
    """ Notifications produced by single lines. """

    def setUp(self):
        self.tinyg = TinyG()

    def test_empty_line(self):
        self.assertEqual(self.tinyg.ingest(""), [])
        self.assertEqual(self.tinyg.ingest("   \r\n"), [])

    def test_raw_always(self):
        notifications = self.tinyg.ingest("tinyg [mm] ok>\r\n")
        self.assertEqual(notifications, [("raw", {"raw": "tinyg [mm] ok>"})])
        self.assertIsInstance(self.tinyg.last_report, Unrecognized)

    def test_bytes(self):
        notifications = self.tinyg.ingest(b'{"sr":{"posx":"1.000"}}\r\n')
        self.assertEqual(kinds(notifications), ["raw", "sr"])
        self.assertEqual(self.tinyg.work_position()["x"], "1.000")

    def test_invalid_utf8(self):
        notifications = self.tinyg.ingest(b'\xff\xfe{"sr"\r\n')
        self.assertEqual(kinds(notifications), ["raw"])

    def test_status_report(self):
        frame = {"r": {"sr": {"posx": "1.000", "stat": 5}}, "f": [1, 0, 255]}
        notifications = self.tinyg.ingest(line(frame))
        self.assertEqual(notifications, [
            ("raw", {"raw": line(frame).strip()}),
            ("sr", {"posx": "1.000", "stat": 5}),
            ("f", [1, 0, 255]),
            ])
        self.assertIsInstance(self.tinyg.last_report, StatusReport)

    def test_footer_last(self):
        notifications = self.tinyg.ingest(line({"r": {"fv": 0.97}, "f": [1, 0, 8]}))
        self.assertEqual(kinds(notifications), ["raw", "r", "f"])
        self.assertEqual(self.tinyg.footer,
                         {"revision": 1, "status_code": 0, "rx_buffer_info": 8})

    def test_footer_without_change(self):
        """ The footer is reported even when nothing else changed. """
        notifications = self.tinyg.ingest(line({"r": {"unknown": 1}, "f": [1, 0, 8]}))
        self.assertEqual(kinds(notifications), ["raw", "f"])

    def test_unrecognized_frame_with_footer(self):
        notifications = self.tinyg.ingest(line({"er": {"st": 32}, "f": [1, 32, 8]}))
        self.assertEqual(kinds(notifications), ["raw", "f"])
        self.assertEqual(self.tinyg.footer["status_code"], 32)
        self.assertIsInstance(self.tinyg.last_report, Unrecognized)
        self.assertEqual(self.tinyg.last_report.raw, {"er": {"st": 32}, "f": [1, 32, 8]})

    def test_empty_footer(self):
        notifications = self.tinyg.ingest(line({"sr": {"posx": "1.000"}, "f": []}))
        self.assertEqual(kinds(notifications), ["raw", "sr"])

    def test_queue_report(self):
        notifications = self.tinyg.ingest(line({"qr": 28, "qi": 1, "qo": 0}))
        self.assertEqual(notifications[1], ("qr", {"qr": 28, "qi": 1, "qo": 0}))
        self.assertEqual(self.tinyg.planner_buffer_pool_size, 28)

    def test_motor_timeout(self):
        notifications = self.tinyg.ingest(line({"r": {"mt": 2}, "f": [1, 0, 8]}))
        self.assertEqual(kinds(notifications), ["raw", "mt", "f"])
        self.assertEqual(self.tinyg.state["mt"], 2)

    def test_power_management_bad_status(self):
        notifications = self.tinyg.ingest(line({"r": {"pwr": {"1": 1}}, "f": [1, 40, 8]}))
        self.assertEqual(kinds(notifications), ["raw", "f"])
        self.assertEqual(self.tinyg.state["pwr"], {})

    def test_power_management_no_footer(self):
        notifications = self.tinyg.ingest(line({"pwr": {"1": 1}}))
        self.assertEqual(kinds(notifications), ["raw"])

    def test_system_settings(self):
        frame = {"r": {"sys": {"fb": 440.2, "fv": 0.97, "hp": 1, "hv": 8,
                               "id": "3X3566-UWD", "ja": 2000000}}, "f": [1, 0, 8]}
        notifications = self.tinyg.ingest(line(frame))
        self.assertEqual(kinds(notifications), ["raw", "sys", "f"])
        self.assertEqual(self.tinyg.settings["fb"], 440.2)
        self.assertEqual(self.tinyg.settings["id"], "3X3566-UWD")
        self.assertEqual(self.tinyg.settings["ja"], 2000000)


class TestMalformedInput(unittest.TestCase):
    """ Corrupt or unexpected input never raises and never changes state. """

    def setUp(self):
        self.tinyg = TinyG()
        self.state = self.tinyg.state
        self.settings = self.tinyg.settings

    def assert_unchanged(self, notifications):
        self.assertEqual(kinds(notifications), ["raw"])
        self.assertEqual(self.tinyg.state, self.state)
        self.assertEqual(self.tinyg.settings, self.settings)

    def test_not_json(self):
        self.assert_unchanged(self.tinyg.ingest("ok"))

    def test_broken_json(self):
        self.assert_unchanged(self.tinyg.ingest('{"sr":{"posx":"1.0'))
        self.assertIsInstance(self.tinyg.last_report, Unrecognized)
        self.assertEqual(self.tinyg.last_report.raw, {})

    def test_json_array(self):
        self.assert_unchanged(self.tinyg.ingest('[{"sr":{"posx":"1.000"}}]'))

    def test_wrong_types(self):
        self.assert_unchanged(self.tinyg.ingest('{"sr":"posx","sys":[1],"r":5,"f":"x"}'))

    def test_large_integer(self):
        notifications = self.tinyg.ingest('{"qr":' + "9" * 400 + '}')
        self.assertEqual(kinds(notifications), ["raw", "qr"])
        self.assertEqual(self.tinyg.state["qr"], int("9" * 400))

    def test_deeply_nested_value(self):
        """ A deeply nested value does not stop later reports from being processed. """
        nested = '{"sr":{"posx":' + "[" * 600 + "]" * 600 + '},"f":[1,0,255]}'
        notifications = self.tinyg.ingest(nested)
        self.assertEqual(kinds(notifications)[0], "raw")
        self.assertEqual(kinds(notifications)[-1], "f")
        self.assertIsInstance(self.tinyg.state, dict)

        for posy in ("1.000", "2.000"):
            notifications = self.tinyg.ingest('{"sr":{"posy":"%s"}}' % posy)
            self.assertEqual(notifications, [
                ("raw", {"raw": '{"sr":{"posy":"%s"}}' % posy}),
                ("sr", {"posy": posy}),
                ])
            self.assertEqual(self.tinyg.work_position()["y"], posy)


class TestProperties(unittest.TestCase):
    """ Behaviour over sequences of lines. """

    def setUp(self):
        self.tinyg = TinyG()

    def test_idempotent(self):
        frame = line({"r": {"sr": {"posx": "1.000"}}, "f": [1, 0, 255]})
        self.assertEqual(kinds(self.tinyg.ingest(frame)), ["raw", "sr", "f"])
        self.assertEqual(kinds(self.tinyg.ingest(frame)), ["raw", "f"])

    def test_idempotent_without_footer(self):
        frame = line({"sr": {"momo": 1}})
        self.assertEqual(kinds(self.tinyg.ingest(frame)), ["raw", "sr"])
        self.assertEqual(kinds(self.tinyg.ingest(frame)), ["raw"])

    def test_field_preservation(self):
        self.tinyg.ingest(line({"sr": {
            "posx": "5.000", "posy": "6.000", "posz": "7.000", "mpox": "8.000",
            "momo": 1, "coor": 2, "unit": 1, "stat": 1}}))
        self.tinyg.ingest(line({"r": {"mfo": 1.2}, "f": [1, 0, 8]}))
        settings = self.tinyg.settings

        self.tinyg.ingest(line({"sr": {"posx": "1.000"}}))

        self.assertEqual(self.tinyg.work_position(), {"x": "1.000", "y": "6.000", "z": "7.000"})
        self.assertEqual(self.tinyg.machine_position(), {"x": "8.000", "y": "0.000", "z": "0.000"})
        modal = self.tinyg.modal_group()
        self.assertEqual(modal["motion"], "G1")
        self.assertEqual(modal["wcs"], "G55")
        self.assertEqual(modal["units"], "G21")
        self.assertIs(self.tinyg.machine_state(), MachineState.READY)
        self.assertEqual(self.tinyg.settings, settings)

    def test_status_code_gating(self):
        notifications = self.tinyg.ingest(
            line({"r": {"mfo": 1.5, "mto": 0.5, "sso": 1.2}, "f": [1, 100, 8]}))
        self.assertEqual(kinds(notifications), ["raw", "f"])
        self.assertEqual(self.tinyg.settings["mfo"], 1)
        self.assertEqual(self.tinyg.settings["mto"], 1)
        self.assertEqual(self.tinyg.settings["sso"], 1)

        notifications = self.tinyg.ingest(
            line({"r": {"mfo": 1.5, "mto": 0.5, "sso": 1.2}, "f": [1, 0, 8]}))
        self.assertEqual(notifications[1], ("ov", {"mfo": 1.5, "mto": 0.5, "sso": 1.2}))

    def test_coolant_additive(self):
        self.tinyg.ingest(line({"sr": {"com": 1}}))
        self.assertEqual(self.tinyg.modal_group()["coolant"], ("M7",))

        self.tinyg.ingest(line({"sr": {"cof": 1}}))
        self.assertEqual(self.tinyg.modal_group()["coolant"], ("M7", "M8"))

        self.tinyg.ingest(line({"sr": {"com": 0}}))
        self.assertEqual(self.tinyg.modal_group()["coolant"], ("M8",))

        self.tinyg.ingest(line({"sr": {"cof": 0}}))
        self.assertEqual(self.tinyg.modal_group()["coolant"], ("M9",))

    def test_coolant_same_frame(self):
        self.tinyg.ingest(line({"sr": {"com": 1, "cof": 1}}))
        self.assertEqual(self.tinyg.modal_group()["coolant"], ("M7", "M8"))

    def test_spindle(self):
        self.tinyg.ingest(line({"sr": {"spe": 1, "spd": 0}}))
        self.assertEqual(self.tinyg.modal_group()["spindle"], "M3")

        self.tinyg.ingest(line({"sr": {"spd": 1}}))
        self.assertEqual(self.tinyg.modal_group()["spindle"], "M4")

        self.tinyg.ingest(line({"sr": {"spe": 0}}))
        self.assertEqual(self.tinyg.modal_group()["spindle"], "M5")

        self.tinyg.ingest(line({"sr": {"spe": 1}}))
        self.assertEqual(self.tinyg.modal_group()["spindle"], "M4")

    def test_queue_high_water_mark(self):
        for depth in (4, 9, 3, 12, 2):
            self.tinyg.ingest(line({"qr": depth}))
        self.assertEqual(self.tinyg.state["qr"], 2)
        self.assertEqual(self.tinyg.planner_buffer_pool_size, 12)

    def test_unknown_key_filtering(self):
        notifications = self.tinyg.ingest(line({"r": {"fv": 0.97, "xyzzy": 1}, "f": [1, 0, 8]}))
        self.assertEqual(notifications[1], ("r", {"fv": 0.97, "xyzzy": 1}))
        self.assertEqual(self.tinyg.settings["fv"], 0.97)
        self.assertNotIn("xyzzy", self.tinyg.settings)


class TestQueries(unittest.TestCase):
    """ Read API. """

    def setUp(self):
        self.tinyg = TinyG()

    def test_alarm(self):
        self.assertFalse(self.tinyg.is_alarm())
        self.tinyg.ingest(line({"sr": {"stat": 2}}))
        self.assertTrue(self.tinyg.is_alarm())
        self.assertFalse(self.tinyg.is_idle())

    def test_idle(self):
        self.assertFalse(self.tinyg.is_idle())
        for stat in (1, 3, 4):
            self.tinyg.ingest(line({"sr": {"stat": stat}}))
            self.assertTrue(self.tinyg.is_idle())
        for stat in (0, 5, 6, 9):
            self.tinyg.ingest(line({"sr": {"stat": stat}}))
            self.assertFalse(self.tinyg.is_idle())

    def test_queries_return_copies(self):
        self.tinyg.machine_position()["x"] = "9.999"
        self.tinyg.work_position()["x"] = "9.999"
        self.tinyg.modal_group()["motion"] = "G2"
        self.tinyg.state["sr"]["modal"]["motion"] = "G2"
        self.tinyg.settings["mfo"] = 2
        self.assertEqual(self.tinyg.machine_position()["x"], "0.000")
        self.assertEqual(self.tinyg.work_position()["x"], "0.000")
        self.assertEqual(self.tinyg.modal_group()["motion"], "")
        self.assertEqual(self.tinyg.state["sr"]["modal"]["motion"], "")
        self.assertEqual(self.tinyg.settings["mfo"], 1)

    def test_modal_gcodes_unknown(self):
        self.assertEqual(self.tinyg.modal_gcodes(), [])

    def test_modal_gcodes(self):
        self.tinyg.ingest(line({"sr": {"momo": 0, "coor": 1, "unit": 1,
                                       "spe": 1, "spd": 1, "com": 1, "cof": 1}}))
        gcodes = self.tinyg.modal_gcodes()
        self.assertEqual([type(gcode) for gcode in gcodes], [
            GCodeRapidMove,
            GCodeSelectCoordinateSystem1,
            GCodeUseMillimeters,
            GCodeStartSpindleCCW,
            GCodeCoolantMistOn,
            GCodeCoolantFloodOn,
            ])

    def test_modal_gcodes_machine_coordinates(self):
        self.tinyg.ingest(line({"sr": {"coor": 0}}))
        self.assertEqual(self.tinyg.modal_group()["wcs"], "G53")
        self.assertEqual([type(gcode) for gcode in self.tinyg.modal_gcodes()],
                         [GCodeMoveInMachineCoords])


if __name__ == '__main__':
    unittest.main()
