"""Tests for the strict workflow inspection layer."""

from bioflow.workflow import NodeCatalog, inspect_workflow, validate_connection
from bioflow.workflow.workflow_inspector import (
    DUPLICATE_EDGE,
    MISSING_INPUT,
    SELF_LOOP,
    TYPE_MISMATCH,
    UNKNOWN_TYPE,
)
from bioflow.workflow.workflow_model import EdgeInstance


def _kinds(report):
    return sorted(issue["kind"] for issue in report["issues"])


class TestInspectWorkflow:

    def test_empty_workflow_is_valid(self, store, workflow_id):
        report = inspect_workflow(store.get_workflow(workflow_id))
        assert report["summary"]["valid"] is True
        assert report["summary"]["node_count"] == 0
        assert report["issues"] == []

    def test_clean_chain(self, store, workflow_id):
        fetch = store.instantiate_node(workflow_id, "protein-fetch", (0, 0))
        viewer = store.instantiate_node(workflow_id, "protein-visualizer", (300, 0))
        store.set_node_input_value(workflow_id, fetch.id, "uniprot_id", "P69905")
        store.connect(workflow_id, fetch.id, "protein_data", viewer.id, "protein_data")

        report = inspect_workflow(store.get_workflow(workflow_id))

        assert report["issues"] == []
        assert report["summary"]["nodes_by_category"] == {"protein": 1, "analysis": 1}
        assert report["edges"][0]["compatible"] is True
        viewer_detail = next(n for n in report["nodes"] if n["id"] == viewer.id)
        assert viewer_detail["inputs"][0]["connected_from"] == [f"{fetch.id}.protein_data"]

    def test_reports_missing_required_input(self, store, workflow_id):
        fetch = store.instantiate_node(workflow_id, "protein-fetch", (0, 0))
        report = inspect_workflow(store.get_workflow(workflow_id))
        assert _kinds(report) == [MISSING_INPUT]
        assert report["issues"][0]["node_id"] == fetch.id

    def test_reports_permissively_accepted_edges(self, store, workflow_id):
        variant = store.instantiate_node(workflow_id, "protein-variant", (0, 0))
        fetch = store.instantiate_node(workflow_id, "protein-fetch", (0, 200))
        store.set_node_input_value(workflow_id, fetch.id, "uniprot_id", "P69905")
        store.connect(workflow_id, variant.id, "variant_protein", variant.id, "protein_data")
        store.connect(workflow_id, fetch.id, "protein_data", variant.id, "variant_instructions")
        store.connect(workflow_id, fetch.id, "protein_data", variant.id, "variant_instructions")

        report = inspect_workflow(store.get_workflow(workflow_id))

        assert _kinds(report) == sorted([SELF_LOOP, TYPE_MISMATCH, TYPE_MISMATCH, DUPLICATE_EDGE])
        assert report["summary"]["valid"] is False

    def test_unknown_type_against_catalog(self, store, workflow_id):
        node = store.instantiate_node(workflow_id, "text-prompt", (0, 0))
        report = inspect_workflow(store.get_workflow(workflow_id), catalog=NodeCatalog([]))
        assert _kinds(report) == [UNKNOWN_TYPE]
        assert report["issues"][0]["node_id"] == node.id

    def test_dangling_edge_in_hand_built_document(self, store, workflow_id):
        node = store.instantiate_node(workflow_id, "text-prompt", (0, 0))
        doc = store.get_workflow(workflow_id)
        broken = doc.model_copy(update={"edges": (EdgeInstance(
            id="edge-x",
            source_node_id=node.id,
            source_port_id="prompt_text",
            target_node_id="gone",
            target_port_id="uniprot_id",
        ),)})
        report = inspect_workflow(broken)
        assert "dangling_edge" in _kinds(report)
        assert broken.validate_graph() != []


class TestValidateConnection:

    def test_compatible_connection(self, store, workflow_id):
        mol = store.instantiate_node(workflow_id, "molecule-fetch", (0, 0))
        dock = store.instantiate_node(workflow_id, "protein-molecule-dock", (300, 0))
        doc = store.get_workflow(workflow_id)
        assert validate_connection(doc, mol.id, "molecule_data", dock.id, "molecule_data") == []

    def test_problems_listed(self, store, workflow_id):
        mol = store.instantiate_node(workflow_id, "molecule-fetch", (0, 0))
        dock = store.instantiate_node(workflow_id, "protein-molecule-dock", (300, 0))
        store.connect(workflow_id, mol.id, "molecule_data", dock.id, "molecule_data")
        doc = store.get_workflow(workflow_id)

        assert len(validate_connection(doc, mol.id, "molecule_data", dock.id, "molecule_data")) == 1
        assert any("Type mismatch" in p for p in
                   validate_connection(doc, mol.id, "molecule_data", dock.id, "protein_data"))
        assert any("no output port" in p for p in
                   validate_connection(doc, mol.id, "pubchem_id", dock.id, "protein_data"))
        assert validate_connection(doc, "ghost", "x", dock.id, "protein_data") == ["Unknown source node: ghost"]

    def test_does_not_mutate(self, store, workflow_id):
        mol = store.instantiate_node(workflow_id, "molecule-fetch", (0, 0))
        before = store.session
        validate_connection(store.get_workflow(workflow_id), mol.id, "molecule_data", mol.id, "pubchem_id")
        assert store.session is before
