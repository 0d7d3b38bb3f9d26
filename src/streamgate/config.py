"""Configuration handling for the streamgate gateway."""

import copy
import os
import yaml
import logging
from pathlib import Path
from typing import Dict, Any, Optional

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

relay_logger = logging.getLogger("relay")
relay_logger.setLevel(logging.INFO)

CONFIG_PATH = Path(__file__).parent.parent.parent / "config.yaml"

SYSTEM_PROMPT = (
    "You are an AI assistant running locally on ai.meng.zip infrastructure using "
    "modest hardware resources. Current date: Sunday, August 24, 2025. Provide "
    "complete, accurate information in concise responses - include all necessary "
    "details but keep explanations brief and well-structured to optimize "
    "performance. Be direct and efficient while ensuring your answers are fully "
    "helpful."
)

DEFAULT_CONFIG: Dict[str, Any] = {
    "models": {
        "qwen3": {
            "url": "http://192.168.129.107:8004/v1/chat/completions",
            "name": "Qwen3-0.6B",
            "description": "Fast Thinking",
        },
        "lfm2": {
            "url": "http://192.168.129.109:8004/v1/chat/completions",
            "name": "LFM2-VL-1.6B-Q4_0",
            "description": "Fast",
        },
        "phi4": {
            "url": "http://192.168.129.111:8004/v1/chat/completions",
            "name": "Phi-4-4B",
            "description": "Good Responses",
        },
        "gemma": {
            "url": "http://192.168.129.110:8004/v1/chat/completions",
            "name": "Gemma-3-4B",
            "description": "Best Responses",
        },
    },
    "system_prompt": SYSTEM_PROMPT,
    # Sent upstream in place of whatever the client asked for.
    "upstream": {"max_tokens": 2000, "temperature": 0.7},
    "settings": {"host": "0.0.0.0", "port": 5000, "timeout": None, "log_file": None},
}


def load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load configuration, overlaying config.yaml onto the built-in defaults.

    Top-level sections present in the file replace the default section, except
    ``upstream`` and ``settings`` which are merged key by key. Sections of the
    wrong type (``settings: null``, say) are ignored with a warning. A missing
    or unreadable file leaves the defaults untouched.
    """
    config = copy.deepcopy(DEFAULT_CONFIG)
    config_path = Path(path) if path is not None else CONFIG_PATH

    if not config_path.exists():
        logger.info(f"No config file at {config_path}, using built-in defaults")
        return config

    try:
        overrides = yaml.safe_load(config_path.read_text()) or {}
        if not isinstance(overrides, dict):
            raise ValueError("top level must be a mapping")
    except Exception as e:
        logger.error(f"Error loading {config_path}: {str(e)}")
        return config

    for section, value in overrides.items():
        expected = dict if section in ("models", "upstream", "settings") else str
        if section in DEFAULT_CONFIG and not isinstance(value, expected):
            logger.warning(
                f"Ignoring '{section}' in {config_path}: expected a {expected.__name__}"
            )
            continue
        if section in ("upstream", "settings"):
            config[section].update(value)
        else:
            config[section] = value

    logger.info(f"Successfully loaded configuration from {config_path}")
    return config


def configure_logging(config: Dict[str, Any]) -> None:
    """Attach a file handler to the relay logger when settings.log_file is set."""
    log_file = (config.get("settings") or {}).get("log_file")
    if not log_file:
        return

    log_path = Path(log_file)
    for handler in relay_logger.handlers:
        if isinstance(handler, logging.FileHandler) and handler.baseFilename == os.path.abspath(log_path):
            return

    log_path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(str(log_path), mode="a")
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
    )
    relay_logger.addHandler(file_handler)
    relay_logger.propagate = True


config = load_config()
