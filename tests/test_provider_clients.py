import pytest
import requests

from aria.core.config import EmbeddingSettings, settings
from aria.core.exceptions import AIKillSwitchError, ParseError, UpstreamError
from aria.services.ai_orchestrator import AIOrchestrator
from aria.services.embedding_service import EmbeddingClient, cosine_similarity


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else str(payload)

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error", response=self)

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


@pytest.fixture
def embedding_config():
    return EmbeddingSettings(openai_api_key="test-key", api_url="https://embeddings.test/v1", max_chars=10)


@pytest.fixture
def ai_key(monkeypatch):
    monkeypatch.setattr(settings.ai, "anthropic_api_key", "test-key")
    monkeypatch.setattr(settings.ai, "kill_switch", False)


# --- Embeddings ---

def test_embed_returns_vector_and_truncates_input(monkeypatch, embedding_config):
    sent = {}

    def fake_post(url, json=None, headers=None, timeout=None):
        sent.update(url=url, json=json, headers=headers)
        return FakeResponse(payload={"data": [{"embedding": [0.1, 0.2, 0.3]}]})

    monkeypatch.setattr(requests, "post", fake_post)

    vector = EmbeddingClient(embedding_config).embed("a" * 50)

    assert vector == [0.1, 0.2, 0.3]
    assert sent["url"] == "https://embeddings.test/v1"
    assert sent["json"]["input"] == "a" * 10
    assert sent["headers"]["Authorization"] == "Bearer test-key"


def test_embed_http_error_is_upstream_error(monkeypatch, embedding_config):
    monkeypatch.setattr(requests, "post", lambda *a, **kw: FakeResponse(status_code=500, text="boom"))
    with pytest.raises(UpstreamError):
        EmbeddingClient(embedding_config).embed("text")


def test_embed_timeout_is_upstream_error(monkeypatch, embedding_config):
    def timeout(*args, **kwargs):
        raise requests.exceptions.Timeout()

    monkeypatch.setattr(requests, "post", timeout)
    with pytest.raises(UpstreamError):
        EmbeddingClient(embedding_config).embed("text")


@pytest.mark.parametrize("payload", [
    {"data": []},
    {"unexpected": True},
    {"data": [{"embedding": []}]},
    {"data": [{"embedding": ["x", "y"]}]},
])
def test_embed_malformed_payload_is_parse_error(monkeypatch, embedding_config, payload):
    monkeypatch.setattr(requests, "post", lambda *a, **kw: FakeResponse(payload=payload))
    with pytest.raises(ParseError):
        EmbeddingClient(embedding_config).embed("text")


def test_embed_without_key_fails_before_calling_provider(monkeypatch):
    def unexpected(*args, **kwargs):
        raise AssertionError("provider must not be called")

    monkeypatch.setattr(requests, "post", unexpected)
    with pytest.raises(UpstreamError):
        EmbeddingClient(EmbeddingSettings(openai_api_key=None)).embed("text")


def test_embed_or_none_swallows_provider_failure(monkeypatch, embedding_config):
    monkeypatch.setattr(requests, "post", lambda *a, **kw: FakeResponse(status_code=503, text="down"))
    assert EmbeddingClient(embedding_config).embed_or_none("text") is None


def test_cosine_similarity_edge_cases():
    assert cosine_similarity([1.0, 0.0], [1.0, 0.0]) == pytest.approx(1.0)
    assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)
    assert cosine_similarity([0.0, 0.0], [1.0, 0.0]) == 0.0
    assert cosine_similarity([1.0, 0.0], [1.0, 0.0, 0.0]) == 0.0


# --- Messages API ---

def _message(text):
    return FakeResponse(payload={"content": [{"type": "text", "text": text}]})


def test_call_model_returns_text(monkeypatch, ai_key):
    payloads = []

    def fake_post(payload):
        payloads.append(payload)
        return _message("Drafted paragraph.")

    monkeypatch.setattr(AIOrchestrator, "_post", staticmethod(fake_post))

    text = AIOrchestrator.call_model([{"role": "user", "content": "hi"}], system="You are ARIA", max_tokens=250)

    assert text == "Drafted paragraph."
    assert payloads[0]["model"] == settings.ai.model_name
    assert payloads[0]["system"] == "You are ARIA"
    assert payloads[0]["max_tokens"] == 250


def test_call_model_falls_back_to_secondary_model(monkeypatch, ai_key):
    models = []

    def fake_post(payload):
        models.append(payload["model"])
        if payload["model"] == settings.ai.model_name:
            return FakeResponse(status_code=529, text="overloaded")
        return _message("From fallback.")

    monkeypatch.setattr(AIOrchestrator, "_post", staticmethod(fake_post))

    assert AIOrchestrator.generate_text("hi") == "From fallback."
    assert models == [settings.ai.model_name, settings.ai.fallback_model]


def test_call_model_raises_when_both_models_fail(monkeypatch, ai_key):
    monkeypatch.setattr(AIOrchestrator, "_post", staticmethod(lambda payload: FakeResponse(payload={"content": []})))
    with pytest.raises(UpstreamError):
        AIOrchestrator.generate_text("hi")


def test_kill_switch_blocks_calls(monkeypatch, ai_key):
    monkeypatch.setattr(settings.ai, "kill_switch", True)
    with pytest.raises(AIKillSwitchError) as exc:
        AIOrchestrator.generate_text("hi")
    assert exc.value.status_code == 503


def test_missing_key_is_upstream_error(monkeypatch):
    monkeypatch.setattr(settings.ai, "anthropic_api_key", None)
    monkeypatch.setattr(settings.ai, "kill_switch", False)
    with pytest.raises(UpstreamError):
        AIOrchestrator.generate_text("hi")


def test_analyze_json_extracts_fenced_payload(monkeypatch, ai_key):
    reply = "Here you go:\n```json\n{\"targetDate\": \"2027-03-01\"}\n```"
    monkeypatch.setattr(AIOrchestrator, "_post", staticmethod(lambda payload: _message(reply)))
    assert AIOrchestrator.analyze_json("estimate", expect="object") == {"targetDate": "2027-03-01"}
