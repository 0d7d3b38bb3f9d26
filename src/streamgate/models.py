"""Data models and schemas for the streamgate gateway."""

from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, field_validator


class ChatMessage(BaseModel):
    """Chat message model."""
    model_config = ConfigDict(frozen=True)

    role: Literal["system", "user", "assistant"]
    content: str = ""

    @field_validator("content", mode="before")
    @classmethod
    def null_content(cls, value):
        return "" if value is None else value


class StreamRequest(BaseModel):
    """
    Inbound request model for chat completions.

    Every field may be omitted or null; either way it takes its default.
    """
    messages: List[ChatMessage] = []
    max_tokens: int = 0
    temperature: float = 0.0
    stream: bool = False
    model: str = ""

    @field_validator("messages", "max_tokens", "temperature", "stream", "model", mode="before")
    @classmethod
    def null_to_default(cls, value, info):
        if value is None:
            return cls.model_fields[info.field_name].get_default()
        return value


class Delta(BaseModel):
    """Delta model for streaming responses."""
    content: Optional[str] = None
    role: Optional[str] = None


class Choice(BaseModel):
    """Choice model for streamed chunks."""
    delta: Optional[Delta] = None
    index: Optional[int] = None
    finish_reason: Optional[str] = None


class StreamResponse(BaseModel):
    """One upstream chunk, as carried by a ``data:`` line."""
    choices: Optional[List[Optional[Choice]]] = None
    model: Optional[str] = None

    @property
    def content(self) -> str:
        """Content of the first choice's delta, or an empty string."""
        if not self.choices:
            return ""
        choice = self.choices[0]
        if choice is None or choice.delta is None:
            return ""
        return choice.delta.content or ""
