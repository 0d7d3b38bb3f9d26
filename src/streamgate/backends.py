"""Upstream calls for the streamgate gateway."""

import logging
import httpx
from typing import Any, Dict, Sequence

from .errors import UpstreamUnreachable
from .models import ChatMessage

logger = logging.getLogger(__name__)


def build_upstream_body(
    messages: Sequence[ChatMessage], max_tokens: int, temperature: float
) -> Dict[str, Any]:
    """
    Build the JSON body sent to a backend.

    The model identifier is not forwarded; each backend serves exactly one model.
    """
    return {
        "messages": [message.model_dump() for message in messages],
        "max_tokens": max_tokens,
        "temperature": temperature,
        "stream": True,
    }


async def open_upstream(
    client: httpx.AsyncClient, endpoint: str, body: Dict[str, Any]
) -> httpx.Response:
    """
    POST to a backend and return the response with its body left unread.

    The caller owns the response and must close it.

    Raises:
        UpstreamUnreachable: if the request cannot be sent
    """
    request = client.build_request("POST", endpoint, json=body)
    try:
        response = await client.send(request, stream=True)
    except httpx.HTTPError as e:
        raise UpstreamUnreachable(endpoint, str(e) or type(e).__name__) from e

    if response.status_code != 200:
        logger.warning(
            f"Backend at {endpoint} answered {response.status_code}, relaying body anyway"
        )
    return response
