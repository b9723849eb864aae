"""Query event sinks: structured logging and best-effort LangFuse export."""
from __future__ import annotations

import logging
import time
import uuid
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional, Protocol, Sequence

import httpx

from app.config import Settings, settings

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class QueryEvent:
    """Outcome of one handled query request."""

    kind: str
    status: str
    status_code: int
    duration_seconds: float
    size: int = 0
    error: Optional[str] = None
    trace_id: str = field(default_factory=lambda: str(uuid.uuid4()))


class QueryEventSink(Protocol):
    async def record(self, event: QueryEvent) -> None:
        ...


class LoggingEventSink:
    """Writes one log line per query."""

    def __init__(self, log: Optional[logging.Logger] = None) -> None:
        self.logger = log or logger

    async def record(self, event: QueryEvent) -> None:
        level = logging.INFO if event.status == "ok" else logging.WARNING
        self.logger.log(
            level,
            "query=%s status=%s code=%s size=%s duration_ms=%.3f%s",
            event.kind,
            event.status,
            event.status_code,
            event.size,
            event.duration_seconds * 1000,
            f" error={event.error}" if event.error else "",
        )


class LangfuseEventSink:
    """Sends query events to LangFuse when configured."""

    def __init__(self, config: Settings = settings) -> None:
        self.host = config.langfuse_host.rstrip("/") if config.langfuse_host else None
        self.public_key = config.langfuse_public_key
        self.secret_key = config.langfuse_secret_key
        self.dataset = config.langfuse_dataset
        self.timeout = config.telemetry_timeout_seconds
        self.enabled = bool(self.host and self.public_key and self.secret_key)
        self._endpoint = (
            f"{self.host}/api/public/ingestion/events" if self.host else None
        )

    async def record(self, event: QueryEvent) -> None:
        if not self.enabled or not self._endpoint:
            return

        metadata = asdict(event)
        trace_id = metadata.pop("trace_id")
        metadata["duration_ms"] = round(metadata.pop("duration_seconds") * 1000, 3)
        payload: Dict[str, Any] = {
            "traceId": trace_id,
            "name": "wordexpr_query",
            "timestamp": int(time.time() * 1000),
            "dataset": self.dataset,
            "metadata": metadata,
        }
        headers = {
            "Content-Type": "application/json",
            "X-Langfuse-Public-Key": self.public_key,
            "X-Langfuse-Secret-Key": self.secret_key,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                await client.post(self._endpoint, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            logger.debug("LangFuse telemetry failed: %s", exc)


class FanoutEventSink:
    """Forwards every event to each wrapped sink in order."""

    def __init__(self, sinks: Sequence[QueryEventSink]) -> None:
        self.sinks = list(sinks)

    async def record(self, event: QueryEvent) -> None:
        for sink in self.sinks:
            await sink.record(event)


def build_event_sink(config: Settings = settings) -> QueryEventSink:
    langfuse = LangfuseEventSink(config)
    if langfuse.enabled:
        return FanoutEventSink([LoggingEventSink(), langfuse])
    return LoggingEventSink()
