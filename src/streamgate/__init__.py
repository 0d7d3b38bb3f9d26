"""A streaming reverse proxy for OpenAI-style chat completion backends."""

__version__ = "0.1.0"

from .config import load_config
from .api import app, create_app
from .registry import ModelEntry, ModelRegistry

from .streaming import relay_chat, relay_lines, RelayStats
from .utils import ensure_system_message
