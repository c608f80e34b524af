import pytest

from models.conversation import PromptMissingError, build_response, parse_messages, text_delta
from models.schemas import Message


def msgs(*pairs):
    return [Message(role=role, content=content) for role, content in pairs]


def test_history_excludes_final_prompt():
    history, prompt = parse_messages(msgs(("user", "a"), ("assistant", "b"), ("user", "c")))
    assert history == [("a", "b")]
    assert prompt == "c"


def test_system_message_fills_open_reply():
    history, prompt = parse_messages(msgs(("user", "a"), ("system", "s")))
    assert history == [("a", "s")]
    assert prompt == "a"


def test_prompt_is_last_user_message():
    messages = msgs(
        ("user", "first"),
        ("assistant", "reply"),
        ("user", "second"),
        ("assistant", "another"),
        ("system", "note"),
    )
    history, prompt = parse_messages(messages)
    assert prompt == "second"
    assert history == [("first", "reply"), ("second", "note")]


def test_leading_non_user_messages_are_dropped():
    history, prompt = parse_messages(msgs(("system", "be nice"), ("assistant", "hi"), ("user", "q")))
    assert history == []
    assert prompt == "q"


def test_caller_order_is_preserved():
    messages = msgs(("user", "c"), ("user", "a"), ("user", "b"))
    history, prompt = parse_messages(messages)
    assert history == [("c", ""), ("a", "")]
    assert prompt == "b"
    assert [m.content for m in messages] == ["c", "a", "b"]


@pytest.mark.parametrize(
    "messages",
    [
        [],
        msgs(("system", "s")),
        msgs(("assistant", "a"), ("system", "s")),
        msgs(("user", "")),
    ],
)
def test_missing_prompt_raises(messages):
    with pytest.raises(PromptMissingError):
        parse_messages(messages)


def test_build_response_shape():
    response = build_response("hi there", "hello")
    data = response.model_dump(exclude_none=True)
    assert data["whisper"] == "hello"
    assert data["choices"][0]["message"] == {"role": "assistant", "content": "hi there"}
    assert data["choices"][0]["delta"] == data["choices"][0]["message"]


def test_build_response_without_prompt_omits_whisper():
    data = build_response("x").model_dump(exclude_none=True)
    assert "whisper" not in data


def test_text_delta():
    assert text_delta("Hello", 2) == "llo"
    assert text_delta("Hello", 5) == ""
