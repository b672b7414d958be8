import logging
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Mapping, Optional, Sequence, Tuple

from campusdesk.dispatch.chat_log import ChatLog, ChatLogEntry
from campusdesk.dispatch.handlers import RECORDS_UNAVAILABLE_TEXT, Handler

log = logging.getLogger(__name__)

FALLBACK_INTENT = "Default Fallback Intent"
GENERIC_FALLBACK_TEXT = (
    "Sorry, I couldn't find an answer to that. "
    "I can guide you with fees, mentorship, counseling, reminders or campus FAQs."
)

Resolver = Callable[[str], Awaitable[Optional[str]]]

# (response text, match source, error message)
_Outcome = Tuple[str, str, Optional[str]]


@dataclass(frozen=True)
class DispatchRequest:
    intent_name: str
    parameters: Mapping[str, str] = field(default_factory=dict)
    query_text: str = ""


@dataclass(frozen=True)
class DispatchResponse:
    response_text: str


class IntentDispatcher:
    """
    Routes a request to a structured handler or through the fallback chain.

    Known intents go to their handler. Everything else tries each resolver
    in order and stops at the first non-empty answer, ending with a generic
    message. Exactly one response is produced and, when a chat log is
    attached, exactly one log entry is recorded for it.
    """

    def __init__(
        self,
        handlers: Mapping[str, Handler],
        fallback_chain: Sequence[Tuple[str, Resolver]],
        *,
        fallback_text: str = GENERIC_FALLBACK_TEXT,
        chat_log: Optional[ChatLog] = None,
    ):
        self.handlers = dict(handlers)
        self.fallback_chain = tuple(fallback_chain)
        self.fallback_text = fallback_text
        self.chat_log = chat_log

    async def dispatch(self, request: DispatchRequest) -> DispatchResponse:
        start = time.perf_counter()
        handler = self.handlers.get(request.intent_name)
        if handler is not None:
            text, source, error = await self._run_handler(handler, request)
        else:
            text, source, error = await self._run_fallback(request.query_text)

        latency_ms = (time.perf_counter() - start) * 1000
        log.info("intent=%s source=%s latency=%.1fms", request.intent_name, source, latency_ms)
        if self.chat_log is not None:
            self.chat_log.record(
                ChatLogEntry(
                    query=request.query_text,
                    response=text,
                    intent=request.intent_name,
                    match_source=source,
                    latency_ms=latency_ms,
                    error=error,
                )
            )
        return DispatchResponse(response_text=text)

    async def _run_handler(self, handler: Handler, request: DispatchRequest) -> _Outcome:
        try:
            return await handler(request.parameters), "handler", None
        except Exception as e:
            log.exception("Handler for %s failed", request.intent_name)
            return RECORDS_UNAVAILABLE_TEXT, "error", str(e)

    async def _run_fallback(self, query: str) -> _Outcome:
        error = None
        for name, resolver in self.fallback_chain:
            try:
                answer = await resolver(query)
            except Exception as e:
                log.exception("Fallback resolver %s failed", name)
                error = f"{name}: {e}"
                continue
            if answer:
                return answer, name, error
        return self.fallback_text, "none", error
