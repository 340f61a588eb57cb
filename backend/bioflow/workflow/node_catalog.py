"""
Node Type Catalog: the read-only table of placeable node types.

Every node type the editor palette offers is declared here once, with
its category and typed input/output ports. The catalog is built at
process start and never mutated; node instances keep their own copy of
the definition they were created from.
"""

from __future__ import annotations

from enum import Enum
from logging import getLogger
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from bioflow.workflow.errors import UnknownNodeType

logger = getLogger(__name__)


# ============================================================================
# Definitions
# ============================================================================


class NodeCategory(str, Enum):
    """Palette grouping for node types."""
    PROTEIN = "protein"
    MOLECULE = "molecule"
    ANALYSIS = "analysis"
    UTILITY = "utility"


class NodePortSpec(BaseModel):
    """A named, typed input or output slot on a node type.

    ``data_type`` travels as ``type`` on the wire.
    ``required`` is only meaningful for inputs.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    data_type: str = Field(alias="type")
    required: bool = False


class NodeTypeDefinition(BaseModel):
    """A reusable processing-step template."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    category: NodeCategory
    inputs: Tuple[NodePortSpec, ...] = ()
    outputs: Tuple[NodePortSpec, ...] = ()

    def get_input(self, port_id: str) -> Optional[NodePortSpec]:
        for port in self.inputs:
            if port.id == port_id:
                return port
        return None

    def get_output(self, port_id: str) -> Optional[NodePortSpec]:
        for port in self.outputs:
            if port.id == port_id:
                return port
        return None


# ============================================================================
# Catalog
# ============================================================================


class NodeCatalog:
    """Ordered, immutable lookup table of NodeTypeDefinitions."""

    def __init__(self, definitions: Iterable[NodeTypeDefinition]) -> None:
        self._types: Dict[str, NodeTypeDefinition] = {}
        for definition in definitions:
            if definition.id in self._types:
                raise ValueError(f"Duplicate node type id: {definition.id}")
            self._types[definition.id] = definition

    def list_types(self) -> List[NodeTypeDefinition]:
        """All definitions in declaration order."""
        return list(self._types.values())

    def get_type(self, type_id: str) -> NodeTypeDefinition:
        """Look up a definition, raising ``UnknownNodeType`` if absent."""
        try:
            return self._types[type_id]
        except KeyError:
            raise UnknownNodeType(type_id) from None

    def find(self, type_id: str) -> Optional[NodeTypeDefinition]:
        return self._types.get(type_id)

    def group_by_category(self) -> Dict[NodeCategory, List[NodeTypeDefinition]]:
        """Palette view: category → definitions, catalog order kept."""
        groups: Dict[NodeCategory, List[NodeTypeDefinition]] = {}
        for definition in self._types.values():
            groups.setdefault(definition.category, []).append(definition)
        return groups

    def __contains__(self, type_id: object) -> bool:
        return type_id in self._types

    def __iter__(self) -> Iterator[NodeTypeDefinition]:
        return iter(self.list_types())

    def __len__(self) -> int:
        return len(self._types)


# ============================================================================
# Built-in Node Types
# ============================================================================


def _port(port_id: str, name: str, data_type: str, required: bool = False) -> NodePortSpec:
    return NodePortSpec(id=port_id, name=name, data_type=data_type, required=required)


BUILT_IN_NODE_TYPES: List[NodeTypeDefinition] = [
    NodeTypeDefinition(
        id="protein-fetch",
        name="Fetch Protein",
        description="Fetch protein information from UniProt database",
        category=NodeCategory.PROTEIN,
        inputs=(_port("uniprot_id", "UniProt ID", "string", required=True),),
        outputs=(_port("protein_data", "Protein Data", "protein"),),
    ),
    NodeTypeDefinition(
        id="text-prompt",
        name="Text Prompt",
        description="Create text prompts for various workflow components",
        category=NodeCategory.UTILITY,
        inputs=(),
        outputs=(_port("prompt_text", "Prompt Text", "string"),),
    ),
    NodeTypeDefinition(
        id="protein-variant",
        name="Protein Variant Creator",
        description="Create variants of existing proteins",
        category=NodeCategory.PROTEIN,
        inputs=(
            _port("protein_data", "Protein Data", "protein", required=True),
            _port("variant_instructions", "Variant Instructions", "string", required=True),
        ),
        outputs=(_port("variant_protein", "Variant Protein", "protein"),),
    ),
    NodeTypeDefinition(
        id="protein-prompt-processor",
        name="Protein-Prompt Processor",
        description="Process protein data with text prompts",
        category=NodeCategory.ANALYSIS,
        inputs=(
            _port("protein_data", "Protein Data", "protein", required=True),
            _port("prompt_text", "Prompt Text", "string", required=True),
        ),
        outputs=(_port("processed_result", "Processed Result", "analysis"),),
    ),
    NodeTypeDefinition(
        id="protein-visualizer",
        name="Protein Visualizer",
        description="Visualize protein structures",
        category=NodeCategory.ANALYSIS,
        inputs=(_port("protein_data", "Protein Data", "protein", required=True),),
        outputs=(_port("visualization", "Visualization", "image"),),
    ),
    NodeTypeDefinition(
        id="protein-molecule-dock",
        name="Protein-Molecule Docking",
        description="Dock molecules to protein structures",
        category=NodeCategory.ANALYSIS,
        inputs=(
            _port("protein_data", "Protein Data", "protein", required=True),
            _port("molecule_data", "Molecule Data", "molecule", required=True),
        ),
        outputs=(_port("docking_result", "Docking Result", "docking"),),
    ),
    NodeTypeDefinition(
        id="protein-molecule-affinity",
        name="Affinity Calculator",
        description="Calculate binding affinity between proteins and molecules",
        category=NodeCategory.ANALYSIS,
        inputs=(
            _port("protein_data", "Protein Data", "protein", required=True),
            _port("molecule_data", "Molecule Data", "molecule", required=True),
        ),
        outputs=(_port("affinity_score", "Affinity Score", "number"),),
    ),
    NodeTypeDefinition(
        id="molecule-fetch",
        name="Fetch Molecule",
        description="Fetch molecule information from PubChem database",
        category=NodeCategory.MOLECULE,
        inputs=(_port("pubchem_id", "PubChem ID", "string", required=True),),
        outputs=(_port("molecule_data", "Molecule Data", "molecule"),),
    ),
]


# ── Singleton ──

_catalog_instance: Optional[NodeCatalog] = None


def get_node_catalog() -> NodeCatalog:
    """Return the global catalog of built-in node types."""
    global _catalog_instance
    if _catalog_instance is None:
        _catalog_instance = NodeCatalog(BUILT_IN_NODE_TYPES)
        logger.info(f"Node catalog initialized: {len(_catalog_instance)} node types")
    return _catalog_instance
