"""Tests for the per-session mutation logger."""

import pytest

from bioflow.logging import SessionLogger, get_session_logger, remove_session_logger


class TestSessionLogger:

    def test_records_in_order(self):
        log = SessionLogger("s1")
        log.log("create_workflow", "w1", name="A")
        log.log("instantiate_node", "w1", node_id="n1")
        log.log("create_workflow", "w2", name="B")
        assert log.operations() == ["create_workflow", "instantiate_node", "create_workflow"]
        assert [e.detail for e in log.entries("w1")] == [{"name": "A"}, {"node_id": "n1"}]

    def test_ring_buffer(self):
        log = SessionLogger("s2", max_entries=2)
        for i in range(4):
            log.log("move_node", "w", step=i)
        assert log.max_entries == 2
        assert [e.detail["step"] for e in log.entries()] == [2, 3]

    def test_rejects_zero_size(self):
        with pytest.raises(ValueError):
            SessionLogger("s3", max_entries=0)

    def test_entry_to_dict(self):
        entry = SessionLogger("s4").log("delete_edge", "w", edge_id="e1")
        data = entry.to_dict()
        assert data["operation"] == "delete_edge"
        assert data["detail"] == {"edge_id": "e1"}
        assert data["timestamp"]

    def test_clear(self):
        log = SessionLogger("s5")
        log.log("x")
        log.clear()
        assert len(log) == 0


class TestRegistry:

    def test_get_or_create(self):
        assert get_session_logger("reg-1") is None
        created = get_session_logger("reg-1", create_if_missing=True, max_entries=7)
        assert created.max_entries == 7
        assert get_session_logger("reg-1") is created
        assert remove_session_logger("reg-1") is True
        assert remove_session_logger("reg-1") is False

    def test_store_registers_its_logger(self, store):
        assert get_session_logger(store.session_id) is store.session_log
