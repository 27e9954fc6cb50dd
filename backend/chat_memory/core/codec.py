"""
Session record codec.

Derives a session's title and preview from its messages and converts message
lists between the runtime form (datetime timestamps) and the storage form
(ISO-8601 strings).
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from ..models.session import Message
from ..utils.timestamp import normalize_timestamp, to_iso_string

DEFAULT_TITLE = "New Chat"
EMPTY_PREVIEW = "No messages yet"
ELLIPSIS = "..."

TITLE_MAX_LENGTH = 30
TITLE_MIN_WORD_BREAK = 15
PREVIEW_MAX_LENGTH = 50

MessageLike = Union[Message, Mapping[str, Any]]


def _as_dict(message: MessageLike) -> Dict[str, Any]:
    if isinstance(message, Message):
        return message.model_dump()
    return dict(message)


def _first_user_content(messages: Sequence[MessageLike]) -> Optional[str]:
    for message in messages:
        data = _as_dict(message)
        if data.get("sender") == "user":
            return str(data.get("content", "")).strip()
    return None


def derive_title(messages: Sequence[MessageLike]) -> str:
    """
    Title from the first user message, at most 30 characters plus an ellipsis.

    A cut that fills all 30 characters backs off to the last space, as long as
    that space is at index 15 or later.
    """
    content = _first_user_content(messages)
    if content is None:
        return DEFAULT_TITLE

    title = content[:TITLE_MAX_LENGTH]
    if len(title) == TITLE_MAX_LENGTH:
        last_space = title.rfind(" ")
        if last_space >= TITLE_MIN_WORD_BREAK:
            title = title[:last_space]
        title += ELLIPSIS
    return title


def derive_preview(messages: Sequence[MessageLike]) -> str:
    """Preview from the first user message, never longer than 50 characters."""
    content = _first_user_content(messages)
    if content is None:
        return EMPTY_PREVIEW

    if len(content) > PREVIEW_MAX_LENGTH:
        return content[:PREVIEW_MAX_LENGTH - len(ELLIPSIS)] + ELLIPSIS
    return content


def to_storage_form(messages: Sequence[MessageLike]) -> List[Dict[str, Any]]:
    """Messages as plain dicts with ISO-8601 timestamps; other fields pass through."""
    stored = []
    for message in messages:
        data = _as_dict(message)
        data["timestamp"] = to_iso_string(data.get("timestamp"))
        stored.append(data)
    return stored


def to_runtime_form(messages: Sequence[MessageLike]) -> List[Message]:
    """
    Messages as models with datetime timestamps.

    Unparseable stored timestamps are replaced with the current time.

    Raises:
        pydantic.ValidationError: If a message is missing its id, sender or content
    """
    runtime = []
    for message in messages:
        data = _as_dict(message)
        data["timestamp"] = normalize_timestamp(data.get("timestamp"))
        runtime.append(Message.model_validate(data))
    return runtime
