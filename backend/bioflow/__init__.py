"""
BioFlow: workflow graph editor core.

Holds the session model behind the visual protein/molecule workflow
editor: the node type catalog and the workflow graph store.
"""

__version__ = "0.1.0"
