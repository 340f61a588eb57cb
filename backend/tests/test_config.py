"""Tests for the editor configuration."""

import os

import pytest

from bioflow.config import EditorConfig, FieldType, get_config_class, list_config_classes
from bioflow.config.sub_config.general.env_utils import env_sync, read_env_defaults


class TestEditorConfig:

    def test_defaults(self):
        cfg = EditorConfig()
        assert cfg.default_workflow_name == "Workflow 1"
        assert cfg.keep_last_workflow is True
        assert cfg.id_suffix_length == 8
        assert cfg.history_limit == 500
        assert cfg.validate() == []

    def test_registered(self):
        assert get_config_class("editor") is EditorConfig
        assert EditorConfig in list_config_classes()

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("BIOFLOW_DEFAULT_WORKFLOW_NAME", "Scratch")
        monkeypatch.setenv("BIOFLOW_KEEP_LAST_WORKFLOW", "off")
        monkeypatch.setenv("BIOFLOW_ID_SUFFIX_LENGTH", "12")
        cfg = EditorConfig.get_default_instance()
        assert cfg.default_workflow_name == "Scratch"
        assert cfg.keep_last_workflow is False
        assert cfg.id_suffix_length == 12

    def test_unparseable_env_value_skipped(self, monkeypatch):
        monkeypatch.setenv("BIOFLOW_HISTORY_LIMIT", "lots")
        assert EditorConfig.get_default_instance().history_limit == 500

    def test_out_of_range_env_falls_back_to_defaults(self, monkeypatch):
        monkeypatch.setenv("BIOFLOW_ID_SUFFIX_LENGTH", "2")
        monkeypatch.setenv("BIOFLOW_DEFAULT_WORKFLOW_NAME", "Scratch")
        cfg = EditorConfig.get_default_instance()
        assert cfg == EditorConfig()

    def test_validate_reports_ranges(self):
        errors = EditorConfig(id_suffix_length=64, default_workflow_name="").validate()
        assert len(errors) == 2

    def test_fields_metadata(self):
        meta = {f.name: f for f in EditorConfig.get_fields_metadata()}
        assert set(meta) == {"default_workflow_name", "keep_last_workflow", "id_suffix_length", "history_limit"}
        assert meta["keep_last_workflow"].field_type is FieldType.BOOLEAN
        assert "apply_change" not in meta["history_limit"].to_dict()


class TestEnvUtils:

    def test_read_env_defaults_with_explicit_environ(self):
        values = read_env_defaults(
            EditorConfig._ENV_MAP,
            EditorConfig.__dataclass_fields__,
            environ={"BIOFLOW_KEEP_LAST_WORKFLOW": "YES", "UNRELATED": "1"},
        )
        assert values == {"keep_last_workflow": True}

    def test_bad_boolean_skipped(self):
        values = read_env_defaults(
            EditorConfig._ENV_MAP,
            EditorConfig.__dataclass_fields__,
            environ={"BIOFLOW_KEEP_LAST_WORKFLOW": "maybe"},
        )
        assert values == {}

    def test_env_sync(self, monkeypatch):
        monkeypatch.delenv("BIOFLOW_KEEP_LAST_WORKFLOW", raising=False)
        apply = env_sync("BIOFLOW_KEEP_LAST_WORKFLOW")
        apply(False)
        assert os.environ["BIOFLOW_KEEP_LAST_WORKFLOW"] == "false"
        apply(None)
        assert "BIOFLOW_KEEP_LAST_WORKFLOW" not in os.environ


@pytest.mark.parametrize("length", [4, 16])
def test_id_suffix_length_controls_generated_ids(catalog, length):
    from bioflow.workflow import WorkflowStore

    store = WorkflowStore(catalog=catalog, config=EditorConfig(id_suffix_length=length))
    wf = store.create_workflow("A")
    assert len(wf) == len("workflow-") + length


class TestApplyChanges:

    def test_applies_and_syncs_environment(self, monkeypatch):
        monkeypatch.setenv("BIOFLOW_HISTORY_LIMIT", "500")
        monkeypatch.setenv("BIOFLOW_DEFAULT_WORKFLOW_NAME", "Workflow 1")
        cfg = EditorConfig()
        assert cfg.apply_changes({"history_limit": 50, "default_workflow_name": "Main"}) == []
        assert cfg.history_limit == 50
        assert cfg.default_workflow_name == "Main"
        assert os.environ["BIOFLOW_HISTORY_LIMIT"] == "50"
        assert os.environ["BIOFLOW_DEFAULT_WORKFLOW_NAME"] == "Main"

    def test_unchanged_values_skip_hook(self, monkeypatch):
        monkeypatch.setenv("BIOFLOW_ID_SUFFIX_LENGTH", "untouched")
        cfg = EditorConfig()
        assert cfg.apply_changes({"id_suffix_length": 8}) == []
        assert os.environ["BIOFLOW_ID_SUFFIX_LENGTH"] == "untouched"

    @pytest.mark.parametrize("changes", [
        {"id_suffix_length": 2},
        {"id_suffix_length": "12"},
        {"default_workflow_name": ""},
        {"dark_mode": True},
        {"history_limit": 10, "id_suffix_length": 99},
    ])
    def test_rejected_changes_apply_nothing(self, changes, monkeypatch):
        monkeypatch.setenv("BIOFLOW_HISTORY_LIMIT", "500")
        cfg = EditorConfig()
        assert cfg.apply_changes(changes) != []
        assert cfg == EditorConfig()
        assert os.environ["BIOFLOW_HISTORY_LIMIT"] == "500"
