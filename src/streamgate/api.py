"""FastAPI application and routes for the streamgate gateway."""

import json
import logging
from typing import Any, AsyncGenerator, Dict, Optional

import httpx
from fastapi import FastAPI, Request, Response
from fastapi.responses import StreamingResponse
from pydantic import ValidationError

from . import __version__
from .config import SYSTEM_PROMPT, config as default_config, configure_logging
from .errors import ClientError, GatewayError, InvalidPayload, MethodNotAllowed
from .models import StreamRequest
from .registry import ModelRegistry
from .streaming import relay_chat
from .utils import CORS_HEADERS, STREAM_HEADERS, ensure_system_message

logger = logging.getLogger(__name__)


def error_response(error: ClientError) -> Response:
    """Render a client error as an OpenAI-style JSON error envelope."""
    return Response(
        content=json.dumps(error.to_dict()),
        status_code=error.status_code,
        headers=CORS_HEADERS,
        media_type="application/json",
    )


def create_app(
    config: Optional[Dict[str, Any]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Build the gateway application.

    Args:
        config: Configuration dictionary, defaults to the one loaded at import
        transport: Optional httpx transport used for every upstream call

    Returns:
        The FastAPI application, with the registry on ``app.state.registry``
    """
    config = config if config is not None else default_config
    configure_logging(config)

    app = FastAPI(title="streamgate", version=__version__)
    app.state.registry = ModelRegistry.from_config(config.get("models") or {})
    app.state.system_prompt = config.get("system_prompt") or SYSTEM_PROMPT
    app.state.upstream = config.get("upstream") or {}
    app.state.timeout = (config.get("settings") or {}).get("timeout")
    app.state.transport = transport

    @app.options("/v1/chat/completions")
    @app.options("/v1/models")
    async def preflight() -> Response:
        return Response(status_code=200, headers=CORS_HEADERS)

    @app.get("/v1/models")
    async def list_models(request: Request) -> Response:
        """Display names and descriptions of the configured models."""
        registry: ModelRegistry = request.app.state.registry
        return Response(
            content=json.dumps(registry.listing()),
            status_code=200,
            headers=CORS_HEADERS,
            media_type="application/json",
        )

    @app.post("/v1/chat/completions")
    async def chat_completions(request: Request) -> Response:
        """
        Streaming chat completions:
        - Validates the requested model against the registry
        - Injects the default system message when the conversation lacks one
        - Relays the backend's event stream line by line

        Failures after the stream has started only reach the logs.
        """
        state = request.app.state
        body = await request.body()

        try:
            try:
                stream_request = StreamRequest.model_validate_json(body)
            except ValidationError:
                raise InvalidPayload()
            entry = state.registry.resolve(stream_request.model)
        except ClientError as e:
            logger.info(f"Rejected chat request: {e}")
            return error_response(e)

        messages = ensure_system_message(stream_request.messages, state.system_prompt)

        async def event_stream() -> AsyncGenerator[bytes, None]:
            try:
                async for frame in relay_chat(
                    entry.id,
                    entry.url,
                    messages,
                    max_tokens=state.upstream.get("max_tokens", 2000),
                    temperature=state.upstream.get("temperature", 0.7),
                    timeout=state.timeout,
                    transport=state.transport,
                ):
                    yield frame
            except GatewayError as e:
                logger.error(f"Streaming error: {e}")

        return StreamingResponse(
            event_stream(),
            headers={**CORS_HEADERS, **STREAM_HEADERS},
            media_type="text/event-stream",
        )

    @app.api_route(
        "/v1/chat/completions", methods=["GET", "HEAD", "PUT", "PATCH", "DELETE"]
    )
    async def chat_method_not_allowed(request: Request) -> Response:
        response = error_response(MethodNotAllowed(request.method))
        response.headers["Allow"] = "POST, OPTIONS"
        return response

    @app.api_route("/v1/models", methods=["HEAD", "POST", "PUT", "PATCH", "DELETE"])
    async def models_method_not_allowed(request: Request) -> Response:
        response = error_response(MethodNotAllowed(request.method))
        response.headers["Allow"] = "GET, OPTIONS"
        return response

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy"}

    return app


app = create_app()
