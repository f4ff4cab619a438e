"""Best-effort delivery of Flux events to a DingTalk robot webhook."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Callable

import httpx

from fluxtalk.config import DingTalkConfig
from fluxtalk.dingtalk.formatter import format_event
from fluxtalk.dingtalk.signing import build_query, now_ms
from fluxtalk.events import Event
from fluxtalk.utils.logging import get_logger

log = get_logger(__name__)

CONTENT_TYPE = "application/json;charset=utf-8"


@dataclass
class DeliveryResult:
    """Outcome of one send. Delivery failures are reported here, never raised."""

    delivered: bool
    skipped: bool = False
    status_code: int | None = None
    body: str = ""
    error: str = ""


class DingTalkNotifier:
    """Posts formatted events to a DingTalk robot.

    Fire-and-forget: a single POST, no retry. The HTTP status code is not
    checked, so a 4xx/5xx reply still counts as delivered.
    """

    def __init__(
        self,
        config: DingTalkConfig,
        client: httpx.AsyncClient | None = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._config = config
        self._clock = clock
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient()

    @property
    def name(self) -> str:
        return "DingTalk"

    async def send(self, event: Event) -> DeliveryResult:
        params = build_query(self._config.access_token, self._config.secret, self._clock())

        message = format_event(event, self._config.at_num, self._config.tz)
        if message is None:
            return DeliveryResult(delivered=False, skipped=True)

        # Lone surrogates from decoded JSON cannot be UTF-8 encoded
        body = json.dumps(message.to_payload(), ensure_ascii=False).encode("utf-8", errors="replace")
        try:
            resp = await self._client.post(
                self._config.endpoint,
                params=params,
                content=body,
                headers={"Content-Type": CONTENT_TYPE},
            )
        except httpx.HTTPError as exc:
            log.error(
                "dingtalk_send_failed",
                error=str(exc),
                error_type=type(exc).__name__,
                title=message.title,
            )
            return DeliveryResult(delivered=False, error=str(exc) or type(exc).__name__)

        log.debug(
            "dingtalk_response",
            status=resp.status_code,
            body=resp.text[:500],
        )
        log.info("dingtalk_message_sent", title=message.title, status=resp.status_code)
        return DeliveryResult(delivered=True, status_code=resp.status_code, body=resp.text)

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()
