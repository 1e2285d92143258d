# service/config_events.py

import logging
from typing import Callable, List, Optional

from garagedesk.core.domain import DashboardConfiguration

logger = logging.getLogger("uvicorn.error")

ConfigurationListener = Callable[[DashboardConfiguration], None]


class ConfigurationChannel:
    """
    Publish/subscribe channel for new dashboard configurations.
    Any number of listeners may subscribe; each publish reaches all of them.
    """

    def __init__(self) -> None:
        self._listeners: List[ConfigurationListener] = []
        self._latest: Optional[DashboardConfiguration] = None

    @property
    def latest(self) -> Optional[DashboardConfiguration]:
        return self._latest

    def subscribe(self, listener: ConfigurationListener) -> Callable[[], None]:
        """Registers `listener` and returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, configuration: DashboardConfiguration) -> int:
        """
        Delivers `configuration` to every listener.
        A failing listener is logged and skipped. Returns the number of
        listeners that received it without error.
        """
        self._latest = configuration
        delivered = 0

        for listener in list(self._listeners):
            try:
                listener(configuration)
                delivered += 1
            except Exception as e:
                logger.error(f"Dashboard configuration listener failed: {e}", exc_info=True)

        return delivered

    def clear(self) -> None:
        self._listeners.clear()
        self._latest = None


dashboard_updates = ConfigurationChannel()
