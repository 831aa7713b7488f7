# api/app/schemas/chat.py
from __future__ import annotations

import logging
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

MAX_CONTENT_LENGTH = 2000
MAX_MESSAGES = 50
MIN_AGE = 2
MAX_AGE = 17


def utf16_length(text: str) -> int:
    return len(text.encode("utf-16-le", "surrogatepass")) // 2


class InvalidChatRequest(Exception):
    """The body parsed but does not describe a valid chat request."""


class ChatMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    role: Literal["user", "assistant"]
    content: str = Field(min_length=1, max_length=MAX_CONTENT_LENGTH, strict=True)

    @field_validator("content")
    @classmethod
    def _check_content(cls, value: str) -> str:
        # Browsers count UTF-16 code units, so astral characters count twice.
        if utf16_length(value) > MAX_CONTENT_LENGTH:
            raise ValueError("message too long")
        if not value.strip():
            raise ValueError("message is blank")
        return value


class ChatRequest(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    messages: list[ChatMessage] = Field(min_length=1, max_length=MAX_MESSAGES)
    user_age: Annotated[int, Field(ge=MIN_AGE, le=MAX_AGE, strict=True)] | None = Field(
        default=None, alias="userAge"
    )

    @field_validator("user_age", mode="before")
    @classmethod
    def _integral_float_age(cls, value: Any) -> Any:
        # JSON 10.0 is the integer 10 to a JavaScript client.
        if isinstance(value, float) and value.is_integer():
            return int(value)
        return value


def validate_chat_request(raw: Any) -> ChatRequest:
    """Validate a decoded JSON body.

    Raises InvalidChatRequest without field detail; the locations of the
    failures are only logged.
    """
    try:
        return ChatRequest.model_validate(raw)
    except ValidationError as exc:
        locations = [".".join(str(part) for part in err["loc"]) for err in exc.errors()]
        logger.warning("Chat request rejected: %d errors at %s", exc.error_count(), locations)
        raise InvalidChatRequest("Invalid request data") from exc


def sanitize_messages(messages: list[ChatMessage]) -> list[dict[str, str]]:
    """Bound and trim every message before it goes upstream."""
    return [
        {"role": m.role, "content": m.content[:MAX_CONTENT_LENGTH].strip()}
        for m in messages
    ]
