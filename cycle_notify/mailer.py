from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

import httpx
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Email, Mail

logger = logging.getLogger(__name__)

RESEND_ENDPOINT = "https://api.resend.com/emails"
BREVO_ENDPOINT = "https://api.brevo.com/v3/smtp/email"


class MailError(Exception):
    """Raised when mail sending fails."""


class MailSender(Protocol):
    provider: str

    def send(self, to_email: str, subject: str, html_body: str, text_body: str | None = None) -> None: ...


@dataclass(frozen=True)
class MailConfig:
    from_email: str
    from_name: str

    @property
    def formatted_sender(self) -> str:
        if self.from_name:
            return f"{self.from_name} <{self.from_email}>"
        return self.from_email


class _HttpMailer:
    provider = "http"

    def __init__(self, config: MailConfig, http_client: Optional[httpx.Client] = None):
        self._config = config
        self._http_client = http_client

    def _post(self, url: str, payload: Dict[str, Any], headers: Dict[str, str]) -> httpx.Response:
        try:
            if self._http_client is not None:
                response = self._http_client.post(url, json=payload, headers=headers)
            else:
                with httpx.Client(timeout=20.0) as client:
                    response = client.post(url, json=payload, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise MailError(
                f"{self.provider} returned error status {exc.response.status_code}: {exc.response.text}"
            ) from exc
        except httpx.RequestError as exc:
            raise MailError(f"{self.provider} request failed: {exc}") from exc
        logger.info("Mail sent via %s with status %s", self.provider, response.status_code)
        return response


class ResendMailer(_HttpMailer):
    provider = "resend"

    def __init__(self, api_key: str, config: MailConfig, http_client: Optional[httpx.Client] = None):
        super().__init__(config, http_client)
        self._api_key = api_key

    def send(self, to_email: str, subject: str, html_body: str, text_body: str | None = None) -> None:
        payload: Dict[str, Any] = {
            "from": self._config.formatted_sender,
            "to": [to_email],
            "subject": subject,
            "html": html_body,
        }
        if text_body:
            payload["text"] = text_body
        headers = {"Authorization": f"Bearer {self._api_key}", "content-type": "application/json"}
        self._post(RESEND_ENDPOINT, payload, headers)


class BrevoMailer(_HttpMailer):
    provider = "brevo"

    def __init__(self, api_key: str, config: MailConfig, http_client: Optional[httpx.Client] = None):
        super().__init__(config, http_client)
        self._api_key = api_key

    def send(self, to_email: str, subject: str, html_body: str, text_body: str | None = None) -> None:
        payload: Dict[str, Any] = {
            "sender": {"name": self._config.from_name, "email": self._config.from_email},
            "to": [{"email": to_email}],
            "subject": subject,
            "htmlContent": html_body,
        }
        if text_body:
            payload["textContent"] = text_body
        headers = {"api-key": self._api_key, "content-type": "application/json"}
        self._post(BREVO_ENDPOINT, payload, headers)


class SendGridMailer:
    provider = "sendgrid"

    def __init__(self, api_key: str, config: MailConfig, client: Optional[Any] = None):
        self._client = client or SendGridAPIClient(api_key)
        self._from_email = Email(email=config.from_email, name=config.from_name)

    def send(self, to_email: str, subject: str, html_body: str, text_body: str | None = None) -> None:
        mail = Mail(
            from_email=self._from_email,
            to_emails=to_email,
            subject=subject,
            plain_text_content=text_body,
            html_content=html_body,
        )
        try:
            response = self._client.send(mail)
        except Exception as exc:  # noqa: BLE001
            raise MailError(f"Failed to send email: {exc}") from exc
        if response.status_code >= 400:
            raise MailError(f"SendGrid returned error status: {response.status_code}")
        logger.info("Mail sent via sendgrid with status %s", response.status_code)


def build_mailer(
    *,
    resend_api_key: Optional[str],
    brevo_api_key: Optional[str],
    sendgrid_api_key: Optional[str],
    from_email: str,
    from_name: str,
) -> MailSender:
    """
    Provider selection:
    - Resend is default.
    - Otherwise Brevo, then SendGrid, whichever is set first.
    """
    config = MailConfig(from_email=from_email, from_name=from_name)
    if resend_api_key and resend_api_key.strip():
        return ResendMailer(resend_api_key.strip(), config)
    if brevo_api_key and brevo_api_key.strip():
        return BrevoMailer(brevo_api_key.strip(), config)
    if sendgrid_api_key and sendgrid_api_key.strip():
        return SendGridMailer(sendgrid_api_key.strip(), config)
    raise MailError("No mail provider configured: set RESEND_API_KEY, BREVO_API_KEY or SENDGRID_API_KEY.")
