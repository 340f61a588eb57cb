"""
Pre-built Workflow Templates.

Factory functions that lay out ready-made starter graphs on a new
workflow tab. Everything is built through ``WorkflowStore`` operations,
so templates obey the same rules as hand-built workflows.
"""

from __future__ import annotations

from logging import getLogger
from typing import Callable, Dict

from bioflow.workflow.workflow_store import WorkflowStore

logger = getLogger(__name__)

TemplateFactory = Callable[[WorkflowStore, str], str]


# ============================================================================
# Protein–Molecule Docking
# ============================================================================


def create_docking_template(store: WorkflowStore, name: str = "Docking Study") -> str:
    """Build a docking workflow and return its id.

    Topology::
        Fetch Protein ──┬─> Docking
        Fetch Molecule ─┤
                        └─> Affinity Calculator
    """
    wf = store.create_workflow(name)

    protein = store.instantiate_node(wf, "protein-fetch", (32, 64))
    molecule = store.instantiate_node(wf, "molecule-fetch", (32, 288))
    dock = store.instantiate_node(wf, "protein-molecule-dock", (448, 64))
    affinity = store.instantiate_node(wf, "protein-molecule-affinity", (448, 288))

    for target in (dock, affinity):
        store.connect(wf, protein.id, "protein_data", target.id, "protein_data")
        store.connect(wf, molecule.id, "molecule_data", target.id, "molecule_data")

    logger.info(f"Docking template created: {name} ({wf})")
    return wf


# ============================================================================
# Protein Variant Exploration
# ============================================================================


def create_variant_template(store: WorkflowStore, name: str = "Variant Exploration") -> str:
    """Build a prompt-driven protein variant workflow and return its id.

    Topology::
        Fetch Protein ─> Variant Creator ─> Protein Visualizer
        Text Prompt ───┘
    """
    wf = store.create_workflow(name)

    protein = store.instantiate_node(wf, "protein-fetch", (32, 64))
    prompt = store.instantiate_node(wf, "text-prompt", (32, 288))
    variant = store.instantiate_node(wf, "protein-variant", (448, 160))
    viewer = store.instantiate_node(wf, "protein-visualizer", (864, 160))

    store.connect(wf, protein.id, "protein_data", variant.id, "protein_data")
    store.connect(wf, prompt.id, "prompt_text", variant.id, "variant_instructions")
    store.connect(wf, variant.id, "variant_protein", viewer.id, "protein_data")

    logger.info(f"Variant template created: {name} ({wf})")
    return wf


TEMPLATES: Dict[str, TemplateFactory] = {
    "docking": create_docking_template,
    "variant": create_variant_template,
}


def create_from_template(store: WorkflowStore, key: str, name: str) -> str:
    """Instantiate the template registered under ``key``."""
    try:
        factory = TEMPLATES[key]
    except KeyError:
        raise ValueError(f"Unknown workflow template: {key}") from None
    return factory(store, name)
