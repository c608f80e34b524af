"""
Translation between OpenAI-style message lists and chat backend turns.
"""

from typing import List, Optional, Tuple

from models.schemas import Message, Choice, ChatResponse

Turn = Tuple[str, str]

class PromptMissingError(ValueError):
    """Raised when a request carries no user message to send."""

    def __init__(self, message: str = "messages can't be empty!"):
        super().__init__(message)

def parse_messages(messages: List[Message]) -> Tuple[List[Turn], str]:
    """
    Split a message list into prior turns and the prompt to send.

    A user message opens a turn; an assistant or system message fills the
    reply of the turn before it and is dropped when there is none. The prompt
    is the last user message, and its own turn is left out of the history
    while it is still unanswered.

    Args:
        messages: Messages in the order the caller sent them

    Returns:
        Tuple of (history, prompt)

    Raises:
        PromptMissingError: If no non-empty user message is present
    """
    turns: List[List[str]] = []
    for message in messages:
        if message.role == "user":
            turns.append([message.content, ""])
        elif turns:
            turns[-1][1] = message.content

    prompt = next(
        (message.content for message in reversed(messages) if message.role == "user"),
        None,
    )
    if not prompt:
        raise PromptMissingError()

    # The last turn always belongs to the prompt.
    if not turns[-1][1]:
        turns.pop()
    return [(user, reply) for user, reply in turns], prompt

def build_response(content: str, prompt: Optional[str] = None) -> ChatResponse:
    """Wrap backend text as a single assistant choice."""
    message = Message(role="assistant", content=content)
    return ChatResponse(
        whisper=prompt,
        choices=[Choice(delta=message, message=message)],
    )

def text_delta(text: str, sent: int) -> str:
    """Text added after the first ``sent`` characters."""
    return text[sent:]
