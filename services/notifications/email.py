from __future__ import annotations

import html
import logging
from typing import Optional, Protocol

import httpx
from pydantic import BaseModel, Field

from core.errors import NotificationError

logger = logging.getLogger(__name__)


class NotificationPayload(BaseModel):
    kind: str = "application"
    company_name: str
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    # label -> public URL, rendered as one link each
    documents: dict[str, str] = Field(default_factory=dict)
    extra: dict[str, str] = Field(default_factory=dict)


class Notifier(Protocol):
    def send(self, payload: NotificationPayload) -> None: ...


def render_subject(payload: NotificationPayload) -> str:
    return f"New {payload.kind}: {payload.company_name}"


def render_html(payload: NotificationPayload) -> str:
    rows = [
        ("Company name", payload.company_name),
        ("Applicant", payload.full_name),
        ("Email", payload.email),
        ("Phone", payload.phone),
        ("Address", payload.address),
        ("Notes", payload.notes),
        *payload.extra.items(),
    ]
    cell = "padding: 8px; border-bottom: 1px solid #eee;"
    table = "".join(
        f'<tr><td style="{cell} font-weight: bold;">{html.escape(label)}</td>'
        f'<td style="{cell}">{html.escape(value or "-")}</td></tr>'
        for label, value in rows
    )
    links = "".join(
        f'<p><a href="{html.escape(url, quote=True)}">View {html.escape(label)}</a></p>'
        for label, url in payload.documents.items()
    )
    return (
        '<div style="font-family: sans-serif; padding: 20px; color: #333;">'
        f"<h2>New {html.escape(payload.kind)} received</h2>"
        f'<table style="width: 100%; border-collapse: collapse;">{table}</table>'
        f"{links}</div>"
    )


class EmailNotifier:
    """
    Sends the intake email through the Resend HTTP API.
    Without an API key it runs dry: the payload is logged and nothing is sent.
    """

    def __init__(
        self,
        *,
        api_key: str | None,
        api_url: str,
        sender: str,
        recipients: list[str],
        timeout_s: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._api_url = api_url
        self._sender = sender
        self._recipients = [r.strip() for r in recipients if r.strip()]
        self._timeout_s = timeout_s
        self._transport = transport

    @property
    def dry_run(self) -> bool:
        return not (self._api_key and self._recipients)

    def send(self, payload: NotificationPayload) -> None:
        message = {
            "from": self._sender,
            "to": self._recipients,
            "subject": render_subject(payload),
            "html": render_html(payload),
        }
        if self.dry_run:
            logger.info("notifier dry run: %s", message["subject"])
            return
        try:
            with httpx.Client(timeout=self._timeout_s, transport=self._transport) as client:
                r = client.post(
                    self._api_url,
                    json=message,
                    headers={"Authorization": f"Bearer {self._api_key}"},
                )
            r.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise NotificationError(
                f"email provider returned {e.response.status_code}: {e.response.text[:200]}"
            ) from e
        except httpx.HTTPError as e:
            raise NotificationError(f"email provider unreachable: {e}") from e
        logger.info("notification sent: %s", message["subject"])
