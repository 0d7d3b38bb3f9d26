"""Utility functions for the streamgate gateway."""

from typing import Dict, List, Sequence

from .models import ChatMessage

# Wildcard origin: fine on a LAN, not for a public deployment.
CORS_HEADERS: Dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

STREAM_HEADERS: Dict[str, str] = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


def ensure_system_message(
    messages: Sequence[ChatMessage], system_prompt: str
) -> List[ChatMessage]:
    """
    Prepend the default system message unless the conversation already starts with one.

    Args:
        messages: The conversation as received from the client
        system_prompt: Content for the injected system message

    Returns:
        A new list whose first element is a system message
    """
    if messages and messages[0].role == "system":
        return list(messages)
    return [ChatMessage(role="system", content=system_prompt), *messages]
