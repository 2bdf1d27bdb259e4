""" Component supporting TinyG controller hardware.

Publishes the TinyG state as events for the rest of the application. The serial
transport lives elsewhere; it hands over each line it reads with receive_line(). """

from typing import Any, Union
from queue import Queue, Empty

from component import _ComponentBase
from controllers.tinyg import TinyG


class TinyGController(_ComponentBase):
    """ Component supporting TinyG controller hardware. """

    def __init__(self, label: str = "tinyg") -> None:
        # pylint: disable=E1136  # Value 'Queue' is unsubscriptable
        super().__init__(label)

        self.tinyg = TinyG()

        # Data received from TinyG that has not been processed yet.
        # Populated by the serial thread; drained by early_update().
        self._received_data: Queue[Union[str, bytes]] = Queue()

        self.unrecognized_count: int = 0

        self.event_subscriptions = {
            self.key_gen("incoming"): ("_on_incoming", None),
            self.key_gen("sync"): ("sync", None),
            }

    def receive_line(self, line: Union[str, bytes]) -> None:
        """ Queue a line read from the controller. Safe to call from any thread. """
        self._received_data.put(line)

    def _on_incoming(self, _: str, line: Any) -> None:
        """ A line was delivered as an event rather than by receive_line(). """
        if line is not None:
            self.receive_line(line)

    def early_update(self) -> bool:
        """ Process data received from the controller and publish the results. """
        super().early_update()

        while True:
            try:
                received_line = self._received_data.get(block=False)
            except Empty:
                break
            self._process(received_line)

        return True

    def _process(self, line: Union[str, bytes]) -> None:
        notifications = self.tinyg.ingest(line)
        for kind, payload in notifications:
            self.publish(self.key_gen(kind), payload)

        if notifications and self.tinyg.last_report.kind is None:
            self.unrecognized_count += 1
            if self.debug_show_events:
                print("Input not parsed: %s" % notifications[0][1]["raw"])

    def sync(self, _: str = "", __: Any = None) -> None:
        """ Publish the whole of the current state. """
        self.publish(self.key_gen("state"), self.tinyg.state)
        self.publish(self.key_gen("settings"), self.tinyg.settings)
        self.publish(self.key_gen("footer"), self.tinyg.footer)
