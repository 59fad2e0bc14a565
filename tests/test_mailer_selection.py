from __future__ import annotations

import json

import httpx
import pytest

from cycle_notify.mailer import BrevoMailer, MailConfig, MailError, ResendMailer, SendGridMailer, build_mailer

CONFIG = MailConfig(from_email="notify@example.com", from_name="Cycle")


def _build(**keys):
    params = {"resend_api_key": None, "brevo_api_key": None, "sendgrid_api_key": None}
    params.update(keys)
    return build_mailer(from_email="notify@example.com", from_name="Cycle", **params)


def test_selects_resend_by_default():
    mailer = _build(resend_api_key="re-key", brevo_api_key="brevo-key", sendgrid_api_key="sg-key")
    assert mailer.provider == "resend"


def test_selects_brevo_when_resend_missing():
    mailer = _build(brevo_api_key="brevo-key", sendgrid_api_key="sg-key")
    assert mailer.provider == "brevo"


def test_selects_sendgrid_when_only_sendgrid_key_is_set():
    mailer = _build(sendgrid_api_key="sg-key")
    assert mailer.provider == "sendgrid"


def test_raises_when_no_provider_configured():
    with pytest.raises(MailError):
        _build(resend_api_key="  ")


def test_resend_posts_sender_recipient_and_html():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["auth"] = request.headers["Authorization"]
        captured["payload"] = json.loads(request.content)
        return httpx.Response(200, json={"id": "email-1"})

    client = httpx.Client(transport=httpx.MockTransport(handler))
    mailer = ResendMailer("re-key", CONFIG, http_client=client)
    mailer.send("user@example.com", "subject", "<p>hi</p>", "hi")

    assert captured["url"] == "https://api.resend.com/emails"
    assert captured["auth"] == "Bearer re-key"
    assert captured["payload"] == {
        "from": "Cycle <notify@example.com>",
        "to": ["user@example.com"],
        "subject": "subject",
        "html": "<p>hi</p>",
        "text": "hi",
    }


def test_resend_error_status_raises_mail_error():
    client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(422, json={"message": "bad"})))
    mailer = ResendMailer("re-key", CONFIG, http_client=client)
    with pytest.raises(MailError):
        mailer.send("user@example.com", "subject", "<p>hi</p>")


def test_brevo_posts_sender_recipient_and_html():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["api_key"] = request.headers["api-key"]
        captured["payload"] = json.loads(request.content)
        return httpx.Response(201, json={"messageId": "m-1"})

    mailer = BrevoMailer("brevo-key", CONFIG, http_client=httpx.Client(transport=httpx.MockTransport(handler)))
    mailer.send("user@example.com", "subject", "<p>hi</p>", "hi")

    assert captured["url"] == "https://api.brevo.com/v3/smtp/email"
    assert captured["api_key"] == "brevo-key"
    assert captured["payload"] == {
        "sender": {"name": "Cycle", "email": "notify@example.com"},
        "to": [{"email": "user@example.com"}],
        "subject": "subject",
        "htmlContent": "<p>hi</p>",
        "textContent": "hi",
    }


def test_brevo_error_status_raises_mail_error():
    client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(401, json={"code": "unauthorized"})))
    mailer = BrevoMailer("brevo-key", CONFIG, http_client=client)
    with pytest.raises(MailError):
        mailer.send("user@example.com", "subject", "<p>hi</p>")


class FakeSendGrid:
    def __init__(self, status_code: int = 202, error: Exception | None = None):
        self.status_code = status_code
        self.error = error
        self.mails = []

    def send(self, mail):
        self.mails.append(mail)
        if self.error:
            raise self.error
        return type("Response", (), {"status_code": self.status_code})()


def test_sendgrid_sends_mail_to_recipient():
    fake = FakeSendGrid()
    SendGridMailer("sg-key", CONFIG, client=fake).send("user@example.com", "subject", "<p>hi</p>", "hi")

    body = fake.mails[0].get()
    assert body["personalizations"][0]["to"] == [{"email": "user@example.com"}]
    assert body["from"] == {"email": "notify@example.com", "name": "Cycle"}
    assert body["subject"] == "subject"


@pytest.mark.parametrize("fake", [FakeSendGrid(status_code=400), FakeSendGrid(error=RuntimeError("boom"))])
def test_sendgrid_failures_raise_mail_error(fake: FakeSendGrid):
    with pytest.raises(MailError):
        SendGridMailer("sg-key", CONFIG, client=fake).send("user@example.com", "subject", "<p>hi</p>")
