"""Tests for session handoffs."""

from unittest.mock import patch

import pytest

from mnemo.errors import InvalidArgumentsError
from mnemo.handoff.schema import EMPTY_HANDOFF_SUMMARY, HandoffCategory, parse_categories

PROJECT = "/work/project"


def test_prepare_captures_everything_by_default(handoffs, memory, history_writer):
    """Test that omitting include captures every category."""
    memory.remember("db", "Postgres", PROJECT)
    history_writer.decision("Use Postgres", rationale="JSONB support", timestamp=1_000)
    history_writer.decision("Drop Redis", timestamp=2_000)
    history_writer.tool_use("Edit", {"file_path": "/work/project/app.py"}, timestamp=3_000)

    handoff = handoffs.prepare_handoff("session-1", PROJECT)

    assert handoff.from_session_id == "session-1"
    assert handoff.project_path == PROJECT
    assert [d.decision_text for d in handoff.decisions] == ["Drop Redis", "Use Postgres"]
    assert handoff.decisions[1].rationale == "JSONB support"
    assert [i.key for i in handoff.working_memory] == ["db"]
    assert [f.path for f in handoff.active_files] == ["/work/project/app.py"]
    assert handoff.resumed_by_session_id is None
    assert handoff.resumed_at is None
    assert "2 decisions" in handoff.context_summary
    assert "Drop Redis" in handoff.context_summary


def test_prepare_with_empty_include(handoffs, memory, history_writer):
    """Test that an empty include captures nothing."""
    memory.remember("db", "Postgres", PROJECT)
    history_writer.decision("Use Postgres")

    handoff = handoffs.prepare_handoff("session-1", PROJECT, include=[])

    assert handoff.context_summary == EMPTY_HANDOFF_SUMMARY
    assert handoff.decisions == []
    assert handoff.working_memory == []
    assert handoff.active_files == []


def test_prepare_with_selected_categories(handoffs, memory, history_writer):
    """Test that only the requested categories are captured."""
    memory.remember("db", "Postgres", PROJECT)
    history_writer.decision("Use Postgres")

    handoff = handoffs.prepare_handoff("session-1", PROJECT, include=["memory"])

    assert [i.key for i in handoff.working_memory] == ["db"]
    assert handoff.decisions == []
    assert "working memory item" in handoff.context_summary
    assert "decision" not in handoff.context_summary


def test_prepare_skips_expired_memory(handoffs, memory):
    memory.remember("live", "v", PROJECT)
    memory.remember("dead", "v", PROJECT, ttl=-1)

    handoff = handoffs.prepare_handoff("session-1", PROJECT, include=["memory"])

    assert [i.key for i in handoff.working_memory] == ["live"]


def test_prepare_rejects_unknown_category(handoffs):
    """Test that an unknown category is an argument error."""
    with pytest.raises(InvalidArgumentsError, match="Unknown handoff category"):
        handoffs.prepare_handoff("session-1", PROJECT, include=["decisions", "bogus"])

    assert handoffs.list_handoffs(PROJECT) == []


def test_prepare_rejects_empty_session(handoffs):
    with pytest.raises(InvalidArgumentsError):
        handoffs.prepare_handoff("", PROJECT)


def test_each_prepare_creates_new_handoff(handoffs):
    """Test that calls within the same millisecond still get distinct ids."""
    with patch("mnemo.handoff.store.now_ms", return_value=5_000):
        ids = [handoffs.prepare_handoff("session-1", PROJECT).id for _ in range(5)]

    assert len(set(ids)) == 5
    listed = handoffs.list_handoffs(PROJECT)
    assert [h.id for h in listed] == ids[::-1]
    assert all(h.created_at == listed[0].created_at for h in listed)


def test_active_files_dedupe_and_skip_bad_parameters(handoffs, history_writer):
    """Test file extraction from tool uses."""
    history_writer.tool_use("Read", {"file_path": "/a.py"}, timestamp=1_000)
    history_writer.tool_use("Edit", {"file_path": "/b.py"}, timestamp=2_000)
    history_writer.tool_use("Write", {"file_path": "/a.py"}, timestamp=3_000)
    history_writer.tool_use("Bash", {"command": "ls"}, timestamp=4_000)
    history_writer.tool_use("Edit", "{not json", timestamp=5_000)
    history_writer.tool_use("Edit", {"other": 1}, timestamp=6_000)

    handoff = handoffs.prepare_handoff("session-1", PROJECT, include=["files"])

    assert [(f.path, f.last_tool) for f in handoff.active_files] == [
        ("/a.py", "Write"),
        ("/b.py", "Edit"),
    ]


def test_history_is_scoped_to_project(handoffs, history_writer, make_history_writer):
    """Test that another project's decisions are not captured."""
    make_history_writer("/work/other").decision("Unrelated")
    history_writer.decision("Related")

    handoff = handoffs.prepare_handoff("session-1", PROJECT, include=["decisions"])

    assert [d.decision_text for d in handoff.decisions] == ["Related"]


def test_get_handoff_round_trip(handoffs, memory, history_writer):
    """Test that a stored handoff reads back equal to what was returned."""
    memory.remember("db", "Postgres", PROJECT, tags=["infra"])
    history_writer.decision("Use Postgres")

    created = handoffs.prepare_handoff("session-1", PROJECT)
    loaded = handoffs.get_handoff(created.id, PROJECT)

    assert loaded == created


def test_get_handoff_wrong_project(handoffs):
    created = handoffs.prepare_handoff("session-1", PROJECT)

    assert handoffs.get_handoff(created.id, "/work/other") is None


def test_resume(handoffs):
    """Test that resuming records the new session."""
    created = handoffs.prepare_handoff("session-1", PROJECT)

    resumed = handoffs.resume_from_handoff(created.id, PROJECT, "session-2")

    assert resumed is not None
    assert resumed.id == created.id
    assert resumed.resumed_by_session_id == "session-2"
    assert resumed.resumed_at is not None
    assert resumed.snapshot() == created.snapshot()


def test_resume_twice_keeps_latest(handoffs):
    """Test that a second resumption overwrites the first."""
    created = handoffs.prepare_handoff("session-1", PROJECT)
    with patch("mnemo.handoff.store.now_ms", return_value=10_000):
        handoffs.resume_from_handoff(created.id, PROJECT, "session-2")
    with patch("mnemo.handoff.store.now_ms", return_value=20_000):
        resumed = handoffs.resume_from_handoff(created.id, PROJECT, "session-3")

    assert resumed.resumed_by_session_id == "session-3"
    assert resumed.resumed_at.timestamp() == 20


def test_resume_unknown_handoff(handoffs):
    """Test that an unknown id is not an error."""
    assert handoffs.resume_from_handoff("no-such-id", PROJECT, "session-2") is None


def test_resume_from_other_project(handoffs):
    created = handoffs.prepare_handoff("session-1", PROJECT)

    assert handoffs.resume_from_handoff(created.id, "/work/other", "session-2") is None
    assert handoffs.get_handoff(created.id, PROJECT).resumed_by_session_id is None


def test_list_handoffs_most_recent_first(handoffs):
    """Test list ordering, including ties on creation time."""
    with patch("mnemo.handoff.store.now_ms", return_value=1_000):
        first = handoffs.prepare_handoff("session-1", PROJECT)
    with patch("mnemo.handoff.store.now_ms", return_value=2_000):
        second = handoffs.prepare_handoff("session-2", PROJECT)
        third = handoffs.prepare_handoff("session-3", PROJECT)

    assert [h.id for h in handoffs.list_handoffs(PROJECT)] == [third.id, second.id, first.id]
    assert handoffs.latest_handoff(PROJECT).id == third.id


def test_list_handoffs_empty_project(handoffs):
    assert handoffs.list_handoffs("/work/nowhere") == []
    assert handoffs.latest_handoff("/work/nowhere") is None


def test_corrupt_snapshot_reads_as_empty(handoffs, db):
    """Test that an unreadable stored snapshot does not break listing."""
    created = handoffs.prepare_handoff("session-1", PROJECT)
    with db.transaction("corrupt handoff") as conn:
        conn.execute(
            "UPDATE session_handoffs SET handoff_data = ? WHERE id = ?",
            ("{not json", created.id),
        )

    listed = handoffs.list_handoffs(PROJECT)

    assert len(listed) == 1
    assert listed[0].id == created.id
    assert listed[0].context_summary == EMPTY_HANDOFF_SUMMARY
    assert listed[0].decisions == []


def test_snapshot_with_wrong_shape_reads_as_empty(handoffs, db):
    created = handoffs.prepare_handoff("session-1", PROJECT)
    with db.transaction("corrupt handoff") as conn:
        conn.execute(
            "UPDATE session_handoffs SET handoff_data = ? WHERE id = ?",
            ('{"decisions": "not a list"}', created.id),
        )

    assert handoffs.get_handoff(created.id, PROJECT).decisions == []


def test_parse_categories():
    """Test normalization of include arguments."""
    assert parse_categories(None) == list(HandoffCategory)
    assert parse_categories([]) == []
    assert parse_categories(["files", "memory", "files"]) == [
        HandoffCategory.FILES,
        HandoffCategory.MEMORY,
    ]
    with pytest.raises(InvalidArgumentsError):
        parse_categories("memory")
