from types import SimpleNamespace
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import pytest

from garagedesk.data import supabase_client
from garagedesk.extractor.dashboard_suggester import DashboardSuggester
from garagedesk.service import configuration_advisor
from garagedesk.service.config_events import dashboard_updates


class FakeQuery:
    """
    Stands in for a PostgREST query builder: every chained call is recorded
    and `execute()` returns the canned response for the table.
    """

    def __init__(self, table_name: str, response: Dict[str, Any]):
        self.table_name = table_name
        self.response = response
        self.calls: List[tuple] = []

    def __getattr__(self, name: str):
        def method(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self

        return method

    def called(self, name: str) -> List[tuple]:
        return [c for c in self.calls if c[0] == name]

    def execute(self):
        return SimpleNamespace(
            data=self.response.get("data"),
            count=self.response.get("count"),
        )


class FakeSupabase:
    def __init__(self, responses: Optional[Dict[str, Any]] = None):
        self.responses = responses or {}
        self.queries: List[FakeQuery] = []

    def table(self, name: str) -> FakeQuery:
        response = self.responses.get(name, {"data": []})
        # a list of responses is consumed one query at a time
        if isinstance(response, list):
            response = response.pop(0)
        query = FakeQuery(name, response)
        self.queries.append(query)
        return query

    def queries_for(self, name: str) -> List[FakeQuery]:
        return [q for q in self.queries if q.table_name == name]


@pytest.fixture
def fake_supabase(monkeypatch):
    """Installs a FakeSupabase as the process-wide client."""
    client = FakeSupabase()
    monkeypatch.setattr(supabase_client, "_supabase_client", client)
    return client


@pytest.fixture
def mock_suggester():
    suggester = MagicMock(spec=DashboardSuggester)
    suggester.suggest.return_value = "Show the usual overview."
    return suggester


@pytest.fixture(autouse=True)
def reset_globals():
    configuration_advisor.reset_advisor()
    dashboard_updates.clear()
    yield
    configuration_advisor.reset_advisor()
    dashboard_updates.clear()
