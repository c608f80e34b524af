"""
Project initialization and management utilities.
"""

import os
import sys
import logging
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)

DEFAULT_PORT = 8000
MIN_PORT = 80
MAX_PORT = 65535

def setup_logging(level: Optional[int] = None) -> None:
    """
    Set up logging configuration.

    Args:
        level: Logging level, taken from LOG_LEVEL when not given
    """
    if level is None:
        level = getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )

def resolve_port(value: Optional[str] = None) -> int:
    """
    Work out the port to listen on.

    Args:
        value: Raw port value, read from PORT when not given

    Returns:
        The parsed port (8000 if it is not a number) clamped to [80, 65535]
    """
    if value is None:
        value = os.environ.get("PORT")
    try:
        port = int(value)
    except (TypeError, ValueError):
        port = DEFAULT_PORT
    return max(min(MAX_PORT, port), MIN_PORT)

def get_system_info() -> Dict[str, Any]:
    """
    Get system information for diagnostics.

    Returns:
        Dictionary of system information
    """
    return {
        "python_version": sys.version,
        "port": resolve_port(),
        "gradio_api_name": os.environ.get("GRADIO_API_NAME", "/chat"),
        "hf_token_set": bool(os.environ.get("HF_TOKEN")),
    }

def print_startup_message() -> None:
    """Print a startup message with the serve link."""
    info = get_system_info()

    print("\n" + "=" * 50)
    print("   Gradio Chat Adapter")
    print("=" * 50)

    print("\nSystem Information:")
    print(f"- Python: {info['python_version'].split()[0]}")
    print(f"- Gradio endpoint: {info['gradio_api_name']}")
    print(f"- HF token: {'set' if info['hf_token_set'] else 'not set'}")

    print(f"\nServer start successful, serve link: http://localhost:{info['port']}/api/conversation?text=hello")
    print("=" * 50 + "\n")
