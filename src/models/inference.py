"""
Chat sessions against hosted Gradio chat apps.
"""

import asyncio
import logging
import os
from typing import Any, Callable, List, Optional, Tuple

from gradio_client import Client

logger = logging.getLogger(__name__)

HISTORY_SIZE = 20

# Spaces reachable by numeric model index; "0" is the default for the query path.
# Extra entries can be appended through GRADIO_PRESET_SPACES (comma separated).
PRESET_SPACES: List[str] = ["mikeee/chatglm2-6b-4bit"]

class UnknownModelError(LookupError):
    """Raised when a numeric model index has no preset space."""

def preset_spaces() -> List[str]:
    extra = os.environ.get("GRADIO_PRESET_SPACES", "")
    return PRESET_SPACES + [space.strip() for space in extra.split(",") if space.strip()]

def resolve_space(model: str) -> str:
    """
    Map a model identifier onto a Gradio source.

    Args:
        model: Space id, URL, or index into the preset spaces

    Returns:
        Value accepted by gradio_client.Client
    """
    model = model.strip()
    if model.isdecimal():
        spaces = preset_spaces()
        index = int(model)
        if index >= len(spaces):
            raise UnknownModelError(f"no preset model at index {index}")
        return spaces[index]
    return model

def extract_reply(output: Any) -> str:
    """
    Pull the newest assistant text out of a Gradio endpoint output.

    Handles plain strings, tuple-format chatbots ([[user, bot], ...]),
    messages-format chatbots ([{"role": ..., "content": ...}, ...]) and
    tuples of several outputs, where the chatbot value wins over text boxes.
    """
    if output is None:
        return ""
    if isinstance(output, str):
        return output
    if isinstance(output, tuple):
        chatbots = [item for item in output if isinstance(item, list)]
        texts = [item for item in output if isinstance(item, str)]
        if chatbots:
            return extract_reply(chatbots[0])
        return texts[0] if texts else ""
    if isinstance(output, list):
        for entry in reversed(output):
            if isinstance(entry, dict):
                # newest entry from the user: no reply yet
                if entry.get("role") != "assistant":
                    return ""
                content = entry.get("content")
                return content if isinstance(content, str) else ""
            elif isinstance(entry, (list, tuple)) and len(entry) > 1:
                return entry[1] or ""
        return ""
    return str(output)

class ChatSession:
    """One conversation with a single Gradio chat backend."""

    def __init__(self, url: str, history_size: int = HISTORY_SIZE):
        """
        Initialize the session.

        Args:
            url: Space id, URL, or preset index of the backend
            history_size: Maximum number of prior turns sent along with a prompt
        """
        self.src = resolve_space(url)
        self.history_size = history_size
        self.history: List[Tuple[str, str]] = []
        self.api_name = os.environ.get("GRADIO_API_NAME", "/chat")
        self.hf_token = os.environ.get("HF_TOKEN") or None

    def _history_payload(self) -> List[List[str]]:
        turns = self.history[-self.history_size:] if self.history_size > 0 else []
        return [[user, reply] for user, reply in turns]

    def _chat_sync(self, prompt: str, emit: Callable[[str], None]) -> str:
        """Blocking chat call; runs in a worker thread."""
        options = {"hf_token": self.hf_token} if self.hf_token else {}
        client = Client(self.src, verbose=False, **options)
        job = client.submit(prompt, self._history_payload(), api_name=self.api_name)
        for output in job:
            emit(extract_reply(output))
        return extract_reply(job.result())

    async def chat(
        self,
        prompt: str,
        on_message: Optional[Callable[[str], None]] = None,
    ) -> str:
        """
        Send a prompt and wait for the full reply.

        Args:
            prompt: Text to send
            on_message: Called with the cumulative reply each time it grows

        Returns:
            The final reply text
        """
        loop = asyncio.get_running_loop()

        def emit(text: str) -> None:
            if on_message is not None:
                loop.call_soon_threadsafe(on_message, text)

        logger.info(f"Sending prompt to {self.src} with {len(self.history)} prior turns")
        content = await loop.run_in_executor(None, self._chat_sync, prompt, emit)
        self.history.append((prompt, content))
        return content
