"""
Chat Relay – validates a chat request and relays the model's streamed reply
as a sequence of events (start → content* → done | error).
"""

import json
import logging
from dataclasses import dataclass
from typing import Iterator, Optional

from app.errors import InvalidArgument, ServiceError

logger = logging.getLogger("pillgraph.chat")

CHAT_ROLES = ("user", "assistant")


@dataclass
class ChatEvent:
    type: str
    text: Optional[str] = None
    code: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> dict:
        payload = {"type": self.type}
        if self.type == "content":
            payload["text"] = self.text
        elif self.type == "error":
            payload["code"] = self.code
            payload["error"] = self.error
        return payload

    def to_sse(self) -> str:
        return f"data: {json.dumps(self.to_dict(), ensure_ascii=False)}\n\n"


class ChatRelay:
    def __init__(self, ai_client, history_limit: int = 20, max_message_length: int = 2000):
        self.ai = ai_client
        self.history_limit = history_limit
        self.max_message_length = max_message_length

    def prepare(self, message, history=None) -> tuple[str, list[dict]]:
        """Validate the request up front so errors surface before any event is sent."""
        if not isinstance(message, str) or not message.strip():
            raise InvalidArgument("Message must be a non-empty string.")
        message = message.strip()
        if len(message) > self.max_message_length:
            raise InvalidArgument(
                f"Message too long (max {self.max_message_length} characters)."
            )

        if history is None:
            history = []
        if not isinstance(history, list):
            raise InvalidArgument("'history' must be an array.")

        turns = [
            {"role": turn["role"], "content": turn["content"]}
            for turn in history
            if isinstance(turn, dict)
            and turn.get("role") in CHAT_ROLES
            and isinstance(turn.get("content"), str)
            and turn["content"].strip()
        ]
        if len(turns) != len(history):
            logger.info("Dropped %d malformed history turn(s)", len(history) - len(turns))
        return message, turns[-self.history_limit:] if self.history_limit > 0 else []

    def stream(self, message, history=None) -> Iterator[ChatEvent]:
        message, turns = self.prepare(message, history)
        return self._relay(message, turns)

    def _relay(self, message: str, turns: list[dict]) -> Iterator[ChatEvent]:
        logger.info("Chat stream started history=%d", len(turns))
        yield ChatEvent("start")
        chunks = 0
        try:
            for text in self.ai.stream_chat(message, turns):
                if not text:
                    continue
                chunks += 1
                yield ChatEvent("content", text=text)
        except ServiceError as exc:
            logger.error("Chat stream failed after %d chunk(s) [%s]: %s", chunks, exc.error_code, exc.message)
            yield ChatEvent("error", code=exc.error_code, error=exc.message)
            return
        except Exception as exc:
            logger.exception("Chat stream crashed after %d chunk(s): %s", chunks, exc)
            yield ChatEvent("error", code="INTERNAL_ERROR", error="Internal server error.")
            return

        logger.info("Chat stream finished chunks=%d", chunks)
        yield ChatEvent("done")
