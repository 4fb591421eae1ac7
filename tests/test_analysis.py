import base64
from types import SimpleNamespace

import anthropic
import httpx
import pytest

from jinn_gallery.core.config import settings
from jinn_gallery.core.errors import (
    AnalysisFailed,
    MalformedResponse,
    ServiceError,
    ServiceUnavailable,
)
from jinn_gallery.services.analysis import AnalysisClient

REQUEST = httpx.Request("POST", "https://api.anthropic.com/v1/messages")


class _Messages:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.kwargs = None

    def create(self, **kwargs):
        self.kwargs = kwargs
        if self.error is not None:
            raise self.error
        return self.result


def _client(result=None, error=None):
    return SimpleNamespace(messages=_Messages(result=result, error=error))


def _text_response(*texts):
    return SimpleNamespace(content=[SimpleNamespace(type="text", text=t) for t in texts])


def test_analyze_sends_multimodal_message(monkeypatch):
    monkeypatch.setattr(settings, "anthropic_model", "claude-test")
    monkeypatch.setattr(settings, "analysis_max_tokens", 1024)
    fake = _client(result=_text_response("Fra utsiden ", "og inn."))

    text = AnalysisClient(client=fake).analyze(b"\x89PNG", "sys", "usr", media_type="image/png")

    assert text == "Fra utsiden og inn."
    kwargs = fake.messages.kwargs
    assert kwargs["model"] == "claude-test"
    assert kwargs["max_tokens"] == 1024
    assert kwargs["system"] == "sys"
    content = kwargs["messages"][0]["content"]
    assert content[0] == {"type": "text", "text": "usr"}
    assert content[1]["source"]["media_type"] == "image/png"
    assert base64.b64decode(content[1]["source"]["data"]) == b"\x89PNG"


def test_connection_error_is_service_unavailable():
    fake = _client(error=anthropic.APIConnectionError(request=REQUEST))
    with pytest.raises(ServiceUnavailable):
        AnalysisClient(client=fake).analyze(b"x", "s", "u")


def test_timeout_is_service_unavailable():
    fake = _client(error=anthropic.APITimeoutError(request=REQUEST))
    with pytest.raises(ServiceUnavailable):
        AnalysisClient(client=fake).analyze(b"x", "s", "u")


def test_status_error_is_service_error():
    response = httpx.Response(529, request=REQUEST)
    fake = _client(error=anthropic.APIStatusError("overloaded", response=response, body=None))
    with pytest.raises(ServiceError) as excinfo:
        AnalysisClient(client=fake).analyze(b"x", "s", "u")
    assert "529" in excinfo.value.reason
    # users only ever see the generic message
    assert excinfo.value.message == "Could not analyze the image"


@pytest.mark.parametrize(
    "result",
    [
        SimpleNamespace(content=[]),
        SimpleNamespace(content=[SimpleNamespace(type="tool_use", id="t1")]),
        _text_response("   "),
    ],
)
def test_missing_text_is_malformed(result):
    with pytest.raises(MalformedResponse):
        AnalysisClient(client=_client(result=result)).analyze(b"x", "s", "u")


def test_all_failures_are_analysis_failed():
    for cls in (ServiceUnavailable, ServiceError, MalformedResponse):
        assert issubclass(cls, AnalysisFailed)
