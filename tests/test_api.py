import asyncio
import json

import httpx
from fastapi.testclient import TestClient

from nextwave_functions.api.app import app, blog_service, checkout_service, contact_service
from nextwave_functions.config import Settings
from nextwave_functions.providers.llm.openai_chat import OpenAIChatClient
from nextwave_functions.providers.payments.stripe_checkout import StripeCheckout

client = TestClient(app)
URL = "/functions/v1/generate-blog"
AUTH = {"Authorization": "Bearer anon-key"}
PAYLOAD = {"topic": "AI for agencies", "keywords": ["automation", "content"], "tone": "professional"}


class _Message:
    def __init__(self, content: str) -> None:
        self.content = content


class _FakeLLM:
    def __init__(self, content: str = "# Generated", delay: float = 0.0) -> None:
        self.content = content
        self.delay = delay
        self.calls = 0

    async def ainvoke(self, messages):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        return _Message(self.content)


def _use_llm(monkeypatch, llm: _FakeLLM, **settings) -> None:
    values = {"OPENAI_API_KEY": "sk-test"}
    values.update(settings)
    monkeypatch.setattr(blog_service, "client", OpenAIChatClient(Settings(**values), llm=llm))


def test_healthz() -> None:
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_generate_blog_success(monkeypatch) -> None:
    llm = _FakeLLM(content="# AI for agencies\n\nBody text")
    _use_llm(monkeypatch, llm)
    resp = client.post(URL, json=PAYLOAD, headers=AUTH)
    assert resp.status_code == 200
    assert resp.json() == {"content": "# AI for agencies\n\nBody text"}
    assert resp.headers["access-control-allow-origin"] == "*"
    assert resp.headers["cache-control"] == "no-cache"
    assert llm.calls == 1


def test_preflight_returns_empty_204() -> None:
    resp = client.options(URL, headers={"Origin": "https://example.com", "Access-Control-Request-Method": "POST"})
    assert resp.status_code == 204
    assert resp.content == b""
    assert resp.headers["access-control-allow-origin"] == "*"
    assert "POST" in resp.headers["access-control-allow-methods"]


def test_non_post_methods_are_405() -> None:
    for method in ["GET", "PUT", "DELETE", "PATCH"]:
        resp = client.request(method, URL, headers=AUTH)
        assert resp.status_code == 405
        assert resp.json() == {"error": "Method not allowed"}
        assert resp.headers["access-control-allow-origin"] == "*"


def test_missing_authorization_is_401_even_with_bad_body() -> None:
    resp = client.post(URL, content=b"{broken")
    assert resp.status_code == 401
    resp = client.post(URL, json=PAYLOAD, headers={"Authorization": "Basic abc"})
    assert resp.status_code == 401


def test_missing_fields_are_400() -> None:
    for field_name, word in [("topic", "Topic"), ("keywords", "keyword"), ("tone", "Tone")]:
        payload = {key: value for key, value in PAYLOAD.items() if key != field_name}
        resp = client.post(URL, json=payload, headers=AUTH)
        assert resp.status_code == 400
        assert word in resp.json()["error"]


def test_missing_api_key_is_503_without_call(monkeypatch) -> None:
    llm = _FakeLLM()
    _use_llm(monkeypatch, llm, OPENAI_API_KEY="")
    resp = client.post(URL, json=PAYLOAD, headers=AUTH)
    assert resp.status_code == 503
    assert llm.calls == 0


def test_slow_provider_is_504(monkeypatch) -> None:
    _use_llm(monkeypatch, _FakeLLM(delay=5.0), LLM_TIMEOUT_SECONDS=0.05)
    resp = client.post(URL, json=PAYLOAD, headers=AUTH)
    assert resp.status_code == 504
    assert set(resp.json()) == {"error"}
    assert "too long" in resp.json()["error"]


class _FakeMailer:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.sent = 0

    async def send(self, contact) -> None:
        if self.error is not None:
            raise self.error
        self.sent += 1


def _use_mailer(monkeypatch, mailer: _FakeMailer) -> None:
    settings = Settings(SMTP_HOST="smtp.example.com", SMTP_USER="hello@nextwave.dev", SMTP_PASS="secret")
    monkeypatch.setattr(contact_service, "settings", settings)
    monkeypatch.setattr(contact_service, "mailer", mailer)


def _use_stripe(monkeypatch, handler) -> None:
    settings = Settings(STRIPE_SECRET_KEY="sk_test_123")
    checkout = StripeCheckout(settings, transport=httpx.MockTransport(handler))
    monkeypatch.setattr(checkout_service, "settings", settings)
    monkeypatch.setattr(checkout_service, "checkout", checkout)


def test_send_email_error_paths_return_json_with_cors(monkeypatch) -> None:
    url = "/functions/v1/send-email"
    valid = {"name": "Ada", "email": "ada@example.com", "message": "Hello"}
    _use_mailer(monkeypatch, _FakeMailer())
    cases = [
        (b"{broken", 400),
        (json.dumps({**valid, "name": "Ada\nBcc: victim@example.com"}).encode(), 400),
        (json.dumps({**valid, "email": "ada@example.com\r\nBcc: victim@example.com"}).encode(), 400),
        (json.dumps({"name": "Ada"}).encode(), 400),
    ]
    for body, status in cases:
        resp = client.post(url, content=body, headers={"Content-Type": "application/json"})
        assert resp.status_code == status
        assert "error" in resp.json()
        assert resp.headers["access-control-allow-origin"] == "*"

    resp = client.get(url)
    assert resp.status_code == 405
    assert resp.headers["access-control-allow-origin"] == "*"

    _use_mailer(monkeypatch, _FakeMailer(error=ValueError("Header values may not contain linefeed")))
    resp = client.post(url, json=valid)
    assert resp.status_code == 500
    assert resp.json() == {"error": "Email sending failed"}
    assert resp.headers["access-control-allow-origin"] == "*"


def test_send_email_success(monkeypatch) -> None:
    mailer = _FakeMailer()
    _use_mailer(monkeypatch, mailer)
    resp = client.post("/functions/v1/send-email", json={"name": "Ada", "email": "ada@example.com", "message": "Hi"})
    assert resp.status_code == 200
    assert resp.json() == {"success": True}
    assert mailer.sent == 1


def test_create_checkout_error_paths_return_json_with_cors(monkeypatch) -> None:
    url = "/functions/v1/create-checkout"
    cases = [
        (lambda request: httpx.Response(200, text="<html>"), {"plan": "pro"}, 502),
        (lambda request: httpx.Response(200, json=["cs_test_1"]), {"plan": "pro"}, 502),
        (lambda request: httpx.Response(400, json={"error": {"message": "No such price"}}), {"plan": "pro"}, 400),
        (lambda request: httpx.Response(200, json={"id": "cs_test_1"}), {"plan": "gold"}, 400),
    ]
    for handler, payload, status in cases:
        _use_stripe(monkeypatch, handler)
        resp = client.post(url, json=payload)
        assert resp.status_code == status
        assert "error" in resp.json()
        assert resp.headers["access-control-allow-origin"] == "*"

    resp = client.post(url, content=b"not json")
    assert resp.status_code == 400
    assert resp.headers["access-control-allow-origin"] == "*"


def test_create_checkout_success(monkeypatch) -> None:
    _use_stripe(monkeypatch, lambda request: httpx.Response(200, json={"id": "cs_test_1"}))
    resp = client.post("/functions/v1/create-checkout", json={"plan": "starter"}, headers={"Origin": "https://nextwave.dev"})
    assert resp.status_code == 200
    assert resp.json() == {"sessionId": "cs_test_1"}
    assert resp.headers["access-control-allow-origin"] == "*"
