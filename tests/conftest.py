import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from api import chat as chat_module  # noqa: E402


class FakeSession:
    """Stands in for ChatSession; replays canned backend callbacks."""

    def __init__(self, updates=(), final="", error=None):
        self.src = "fake/space"
        self.updates = list(updates)
        self.final = final
        self.error = error
        self.history = []
        self.prompts = []
        self.model = None

    async def chat(self, prompt, on_message=None):
        self.prompts.append(prompt)
        for text in self.updates:
            if on_message is not None:
                on_message(text)
        if self.error is not None:
            raise self.error
        return self.final


@pytest.fixture
def install_session(monkeypatch):
    """Route create_session to a FakeSession built from the given arguments."""
    created = []

    def install(**kwargs):
        session = FakeSession(**kwargs)

        def factory(model):
            session.model = model
            created.append(session)
            return session

        monkeypatch.setattr(chat_module, "create_session", factory)
        return session

    install.created = created
    return install
