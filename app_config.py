# Conference Dossier Generator - Configuration
"""
Settings come from an optional config.json next to the app, then from
environment variables, which win.

    {
      "webhook": {"url": "https://..."},
      "server": {"host": "0.0.0.0", "port": 5050},
      "debug": {"log_level": "DEBUG"}
    }
"""

import json
import logging
import os

logger = logging.getLogger(__name__)

CONFIG_FILE = "config.json"

DEFAULT_WEBHOOK_URL = (
    "https://prod-cc-darius-n8n.whitepebble-f2dfd303.canadacentral"
    ".azurecontainerapps.io/webhook/dossier-generator"
)
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 5050
DEFAULT_LOG_LEVEL = "INFO"


def load_config(path=None):
    """Read config.json, returning an empty dict if it is missing or broken."""
    path = path or CONFIG_FILE
    try:
        with open(path, 'r', encoding='utf-8') as f:
            config = json.load(f)
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as e:
        logger.warning("Ignoring unreadable %s: %s", path, e)
        return {}
    return config if isinstance(config, dict) else {}


def get_webhook_url(config=None):
    if config is None:
        config = load_config()
    url = os.environ.get("DOSSIER_WEBHOOK_URL")
    if url:
        return url
    return config.get('webhook', {}).get('url', DEFAULT_WEBHOOK_URL)


def get_host(config=None):
    if config is None:
        config = load_config()
    return config.get('server', {}).get('host', DEFAULT_HOST)


def get_port(config=None):
    if config is None:
        config = load_config()
    port = os.environ.get("DOSSIER_PORT") or config.get('server', {}).get('port', DEFAULT_PORT)
    try:
        return int(port)
    except (TypeError, ValueError):
        logger.warning("Invalid port %r, using %d", port, DEFAULT_PORT)
        return DEFAULT_PORT


def get_log_level(config=None):
    if config is None:
        config = load_config()
    level = os.environ.get("DOSSIER_LOG_LEVEL") or config.get('debug', {}).get('log_level', DEFAULT_LOG_LEVEL)
    return str(level).upper()
