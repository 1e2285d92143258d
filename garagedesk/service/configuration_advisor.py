# service/configuration_advisor.py

import logging
import threading
from collections import deque
from typing import Callable, List, Optional, Sequence

from openai import OpenAI

from garagedesk.config import (
    OPENAI_API_KEY,
    ADVISOR_MODEL,
    ADVISOR_TEMPERATURE,
    ADVISOR_MAX_TOKENS,
    ADVISOR_CONTEXT_LIMIT,
)
from garagedesk.core.domain import DashboardConfiguration
from garagedesk.core.dashboard_rules import (
    DEFAULT_RULES,
    KeywordRule,
    apply_rules,
    minimal_default_configuration,
)
from garagedesk.infrastructure.service_repository import count_services
from garagedesk.infrastructure.vehicle_repository import count_vehicles
from garagedesk.extractor.dashboard_suggester import DashboardSuggester
from garagedesk.service.config_events import ConfigurationChannel, dashboard_updates

logger = logging.getLogger("uvicorn.error")

VEHICLES_TABLE = "vehicles"
SERVICES_TABLE = "services"


def count_records(table_name: str) -> int:
    counters = {VEHICLES_TABLE: count_vehicles, SERVICES_TABLE: count_services}
    if table_name not in counters:
        raise ValueError(f"No record counter for table '{table_name}'")
    return counters[table_name]()


class AdvisorSession:
    """
    Conversational memory for the advisor: the ordered list of prior requests.
    When `max_messages` is set, the oldest entries are dropped past that size.
    """

    def __init__(self, max_messages: Optional[int] = None) -> None:
        if max_messages is not None and max_messages <= 0:
            raise ValueError("max_messages must be positive or None")
        self.max_messages = max_messages
        self._messages = deque(maxlen=max_messages)

    def append(self, message: str) -> None:
        self._messages.append(message)

    def clear(self) -> None:
        self._messages.clear()

    @property
    def messages(self) -> List[str]:
        return list(self._messages)

    def __len__(self) -> int:
        return len(self._messages)


def build_system_prompt(vehicle_count: int, service_count: int) -> str:
    return (
        "You are an AI assistant helping to configure a garage management dashboard.\n"
        "Current state:\n"
        f"- {vehicle_count} vehicles in system\n"
        f"- {service_count} services recorded\n"
        "- Available metrics: service types, costs, schedules, vehicle status\n"
        "- Available charts: pie, bar, line, area\n"
        "\n"
        "Please analyze the user's request and suggest dashboard configurations."
    )


def _default_suggester() -> DashboardSuggester:
    if not OPENAI_API_KEY:
        raise RuntimeError("OPENAI_API_KEY missing in environment")
    return DashboardSuggester(
        client=OpenAI(api_key=OPENAI_API_KEY),
        model=ADVISOR_MODEL,
        temperature=ADVISOR_TEMPERATURE,
        max_tokens=ADVISOR_MAX_TOKENS,
    )


class ConfigurationAdvisor:
    """
    Turns a free-text dashboard request into a DashboardConfiguration.

    Flow:
      1) remember the request in the session
      2) count vehicles and services (0 on failure)
      3) ask the LLM for advice, sending the whole session
      4) map the advice onto the base configuration through the rule table

    Any failure along the way yields the minimal default configuration;
    `process_request` never raises.
    """

    def __init__(
        self,
        suggester: Optional[DashboardSuggester] = None,
        record_counter: Optional[Callable[[str], int]] = None,
        session: Optional[AdvisorSession] = None,
        rules: Sequence[KeywordRule] = DEFAULT_RULES,
    ) -> None:
        self._suggester = suggester
        self.record_counter = record_counter or count_records
        self.session = session or AdvisorSession(ADVISOR_CONTEXT_LIMIT or None)
        self.rules = tuple(rules)

    @property
    def suggester(self) -> DashboardSuggester:
        # created on first use so a missing key only fails the request
        if self._suggester is None:
            self._suggester = _default_suggester()
        return self._suggester

    @property
    def context(self) -> List[str]:
        return self.session.messages

    def clear_context(self) -> None:
        self.session.clear()

    def _count(self, table_name: str) -> int:
        try:
            return int(self.record_counter(table_name))
        except Exception as e:
            logger.warning(f"Could not count rows in '{table_name}', using 0: {e}")
            return 0

    def process_request(
        self,
        request: str,
        session: Optional[AdvisorSession] = None,
    ) -> DashboardConfiguration:
        session = session if session is not None else self.session

        try:
            session.append(f"User request: {request}")

            vehicle_count = self._count(VEHICLES_TABLE)
            service_count = self._count(SERVICES_TABLE)
            system_prompt = build_system_prompt(vehicle_count, service_count)

            suggestion = self.suggester.suggest(system_prompt, session.messages)
            logger.debug(f"Dashboard suggestion: {suggestion}")

            return apply_rules(suggestion or "", self.rules)
        except Exception as e:
            logger.error(f"Configuration advisor failed, using default configuration: {e}", exc_info=True)
            return minimal_default_configuration()


_advisor: Optional[ConfigurationAdvisor] = None
_advisor_lock = threading.Lock()


def get_advisor() -> ConfigurationAdvisor:
    """
    Singleton-style accessor for the process-wide advisor.
    """
    global _advisor

    if _advisor is None:
        with _advisor_lock:
            # endpoints run in a threadpool; build exactly one advisor
            if _advisor is None:
                _advisor = ConfigurationAdvisor()

    return _advisor


def reset_advisor() -> None:
    global _advisor
    with _advisor_lock:
        _advisor = None


def request_dashboard_configuration(
    request: str,
    advisor: Optional[ConfigurationAdvisor] = None,
    channel: Optional[ConfigurationChannel] = None,
) -> DashboardConfiguration:
    """
    Validates the request, runs the advisor and broadcasts the result.
    Blank requests are rejected with ValueError before reaching the advisor.
    """
    if not request or not request.strip():
        raise ValueError("Configuration request must not be empty")

    advisor = advisor or get_advisor()
    channel = channel or dashboard_updates

    config = advisor.process_request(request)
    channel.publish(config)
    return config
