"""Tests for the starter workflow templates."""

import pytest

from bioflow.workflow import TEMPLATES, create_from_template, inspect_workflow
from bioflow.workflow.workflow_inspector import MISSING_INPUT


class TestTemplates:

    def test_docking_template(self, store):
        active = store.active_workflow_id
        wf = create_from_template(store, "docking", "Dock 1")
        doc = store.get_workflow(wf)

        assert doc.name == "Dock 1"
        assert sorted(n.type_id for n in doc.nodes) == sorted([
            "protein-fetch",
            "molecule-fetch",
            "protein-molecule-dock",
            "protein-molecule-affinity",
        ])
        assert len(doc.edges) == 4
        assert doc.validate_graph() == []
        assert store.active_workflow_id == active

    def test_templates_only_miss_user_inputs(self, store):
        for key in TEMPLATES:
            wf = create_from_template(store, key, key)
            report = inspect_workflow(store.get_workflow(wf), catalog=store.catalog)
            assert {i["kind"] for i in report["issues"]} == {MISSING_INPUT}

    def test_variant_template_wiring(self, store):
        wf = create_from_template(store, "variant", "Variants")
        doc = store.get_workflow(wf)
        variant = next(n for n in doc.nodes if n.type_id == "protein-variant")
        assert {e.target_port_id for e in doc.get_edges_to(variant.id)} == {
            "protein_data",
            "variant_instructions",
        }
        assert len(doc.get_edges_from(variant.id)) == 1

    def test_unknown_template(self, store):
        with pytest.raises(ValueError):
            create_from_template(store, "crispr", "x")
