import pytest

from flowcraft.core.exceptions import FlowchartGenerationError
from flowcraft.flowchart.model import NodeShape
from flowcraft.flowchart.nl import (
    GENERATION_FAILED_MESSAGE,
    NodeDensity,
    Verbosity,
    build_system_prompt,
    generate_flowchart,
    parse_flowchart_json,
)


class StubClient:
    def __init__(self, text="", error=None):
        self.text = text
        self.error = error
        self.requests = []

    def complete(self, *, prompt, system=None, max_tokens=None, temperature=None, json_mode=True):
        self.requests.append({"prompt": prompt, "system": system})
        if self.error:
            raise self.error
        return self.text


VALID_RESPONSE = (
    '{"nodes":[{"id":"node1","label":"Start","shape":"pill"},'
    '{"id":"node2","label":"Paid?","shape":"diamond"}],'
    '"edges":[{"source":"node1","target":"node2"}]}'
)


def test_parse_flowchart_json():
    result = parse_flowchart_json(VALID_RESPONSE)
    assert [node.shape for node in result.nodes] == [NodeShape.TERMINAL, NodeShape.DECISION]
    assert len(result.edges) == 1


def test_parse_flowchart_json_fenced_payload():
    text = "Here you go:\n```json\n{\"flowchart\": {\"nodes\": [{\"id\": \"n1\", \"label\": \"Start\"}], \"edges\": []}}\n```"
    result = parse_flowchart_json(text)
    assert len(result.nodes) == 1


def test_parse_flowchart_json_embedded_object():
    result = parse_flowchart_json('Sure! {"nodes": [{"id": "a", "label": "{x}"}], "edges": []} Done.')
    assert result.nodes[0].label == "{x}"


def test_parse_flowchart_json_rejects_prose():
    with pytest.raises(ValueError):
        parse_flowchart_json("no json here")


def test_system_prompt_reflects_settings():
    prompt = build_system_prompt(Verbosity.PRECISE, NodeDensity.AGGRESSIVE)
    assert "2-5 words" in prompt
    assert "as few nodes as possible" in prompt
    assert "'pill'" in prompt and "'diamond'" in prompt


def test_generate_flowchart_uses_client():
    client = StubClient(VALID_RESPONSE)
    result = generate_flowchart(
        "  Invoice approval  ", Verbosity.EXHAUSTIVE, NodeDensity.DEFAULT, client=client
    )
    assert len(result.nodes) == 2
    assert client.requests[0]["prompt"] == "Invoice approval"
    assert "detailed descriptions" in client.requests[0]["system"]


def test_generate_flowchart_rejects_blank_prompt():
    client = StubClient(VALID_RESPONSE)
    with pytest.raises(FlowchartGenerationError):
        generate_flowchart("   ", client=client)
    assert client.requests == []


@pytest.mark.parametrize(
    "client",
    [
        StubClient(error=RuntimeError("401 Unauthorized")),
        StubClient(text=""),
        StubClient(text="I cannot help with that."),
        StubClient(text='{"nodes": [], "edges": []}'),
    ],
)
def test_generate_flowchart_failures_surface_user_message(client):
    with pytest.raises(FlowchartGenerationError) as excinfo:
        generate_flowchart("Brew coffee", client=client)
    assert excinfo.value.message == GENERATION_FAILED_MESSAGE
    assert len(client.requests) == 1


def test_generate_flowchart_without_client_loads_dotenv(monkeypatch, tmp_path):
    from flowcraft.api import openai_client
    from flowcraft.core.exceptions import ConfigurationError

    loaded = []
    monkeypatch.setattr(openai_client, "load_dotenv", lambda: loaded.append(True))
    monkeypatch.chdir(tmp_path)
    for name in (
        "AZURE_OPENAI_ENDPOINT",
        "ENDPOINT",
        "AZURE_OPENAI_API_KEY",
        "API_KEY",
        "AZURE_OPENAI_DEPLOYMENT",
        "AZURE_OPENAI_DEPLOYMENT_NAME",
        "DEPLOYMENT_NAME",
    ):
        monkeypatch.delenv(name, raising=False)

    with pytest.raises(FlowchartGenerationError) as excinfo:
        generate_flowchart("Brew coffee")
    assert loaded == [True]
    assert isinstance(excinfo.value.__cause__, ConfigurationError)
