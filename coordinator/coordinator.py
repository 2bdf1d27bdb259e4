""" Coordinator handles interactions between components.
Coordinator polls all components for published events and delivers them to
subscribers. """

from typing import List, Dict

from component import _ComponentBase

class Coordinator(_ComponentBase):
    """ Coordinator handles interactions between components.
    Coordinator polls all components for published events and delivers them to
    subscribers. """

    def __init__(self,
                 components: List[_ComponentBase],
                 debug_show_events: bool = False) -> None:
        """
        Args:
            components: Objects deriving from the _ComponentBase class.
            debug_show_events: Print every event as it is delivered.
        """
        super().__init__("__coordinator__")

        self.components: Dict[str, _ComponentBase] = \
                {component.label: component for component in components}
        assert len(self.components) == len(components), "Component labels must be unique."

        self.debug_show_events = debug_show_events
        for component in components:
            component.debug_show_events = debug_show_events

        self.all_components: List[_ComponentBase] = [self] + list(components)

        self.running = True

        self.event_subscriptions = {}

    def _debug_display_events(self) -> None:
        """ Display all events to console. """
        if not self.debug_show_events:
            return
        for event in self._event_queue:
            print("*********", event)

    def update_components(self) -> bool:
        """ Iterate through all components, delivering and acting upon events. """
        for component in self.components.values():
            self.running = component.early_update() is not False and self.running

        # Deliver all events to consumers.
        for component in self.all_components:
            component.receive()

        self._debug_display_events()
        self.end_delivery()

        for component in self.all_components:
            component._update()    # pylint: disable=W0212  # protected-access
            component.update()

        return self.running
