from study_notes_assistant.transcript import ChatMessage, append_message, read_messages


def test_messages_round_trip_by_session(tmp_path):
    path = tmp_path / "logs" / "chat.jsonl"
    append_message(path, ChatMessage(session_id="a", role="user", content="what is osmosis"))
    append_message(path, ChatMessage(session_id="b", role="user", content="hello"))
    append_message(path, ChatMessage(session_id="a", role="assistant", content="Osmosis is...", related_notes=["o1"]))

    messages = read_messages(path, session_id="a")

    assert [message.role for message in messages] == ["user", "assistant"]
    assert messages[1].related_notes == ["o1"]
    assert len(read_messages(path)) == 3


def test_read_messages_missing_file(tmp_path):
    assert read_messages(tmp_path / "none.jsonl") == []
