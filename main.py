#!/usr/bin/env python3
""" Replay data captured from a TinyG controller.

Reads one JSON line at a time from a file (or stdin) and runs it through the
same TinyG state tracking the application uses for a live serial connection.
eg:
    ./main.py -debug_show_events capture.log
    ./main.py -summary < capture.log
"""

from typing import List, Optional, TextIO
import argparse
import sys

from component import _ComponentBase
from coordinator.coordinator import Coordinator
from controllers.tinyg_controller import TinyGController


def replay(stream: TextIO, controller: TinyGController, coordinator: Coordinator) -> int:
    """ Feed every line of "stream" to "controller".
    Returns:
        Number of lines read. """
    count = 0
    for line in stream:
        controller.receive_line(line)
        coordinator.update_components()
        count += 1
    return count

def main(argv: Optional[List[str]] = None) -> None:
    """ Main program loop. """

    # Command line arguments.
    parser = argparse.ArgumentParser(description="Replay data captured from a TinyG controller.")

    parser.add_argument("filename",
                        nargs="?",
                        help="Captured TinyG output. Reads stdin if not set.")
    parser.add_argument("-debug_show_events",
                        action="store_true",
                        help="Display events.")
    parser.add_argument("-summary",
                        action="store_true",
                        help="Display the machine state once all data has been read.")

    args = parser.parse_args(argv)

    _ComponentBase.clear_events()
    controller = TinyGController()
    coordinator = Coordinator([controller], args.debug_show_events)

    if args.filename:
        with open(args.filename, "r", encoding="utf-8", errors="replace") as capture:
            count = replay(capture, controller, coordinator)
    else:
        count = replay(sys.stdin, controller, coordinator)

    if args.summary:
        print(controller.tinyg.state_machine)
        print("settings: %s" % controller.tinyg.settings)
    print("%s lines read. %s not parsed." % (count, controller.unrecognized_count))

if __name__ == "__main__":
    main()
