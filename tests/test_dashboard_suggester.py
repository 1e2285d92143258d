from unittest.mock import MagicMock

import pytest

from garagedesk.extractor.dashboard_suggester import DashboardSuggester


@pytest.fixture
def openai_client():
    client = MagicMock()
    client.chat.completions.create.return_value = MagicMock(
        choices=[MagicMock(message=MagicMock(content="Add a mechanic workload chart."))]
    )
    return client


def test_suggest_sends_system_prompt_then_context(openai_client):
    suggester = DashboardSuggester(openai_client, model="gpt-3.5-turbo")

    text = suggester.suggest("SYSTEM", ["User request: a", "User request: b"])

    assert text == "Add a mechanic workload chart."
    openai_client.chat.completions.create.assert_called_once_with(
        model="gpt-3.5-turbo",
        messages=[
            {"role": "system", "content": "SYSTEM"},
            {"role": "user", "content": "User request: a"},
            {"role": "user", "content": "User request: b"},
        ],
        temperature=0.7,
        max_tokens=500,
    )


def test_empty_completion_becomes_empty_string(openai_client):
    openai_client.chat.completions.create.return_value = MagicMock(
        choices=[MagicMock(message=MagicMock(content=None))]
    )
    assert DashboardSuggester(openai_client, model="m").suggest("S", []) == ""


def test_sdk_errors_propagate(openai_client):
    openai_client.chat.completions.create.side_effect = RuntimeError("429")
    with pytest.raises(RuntimeError):
        DashboardSuggester(openai_client, model="m").suggest("S", ["x"])
