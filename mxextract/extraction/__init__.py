"""
Extraction engine.

This package walks a loaded application model and projects it into the
output schema of ``mxextract.models``.
"""

from mxextract.extraction.context import ExtractionContext, ExtractionWarning, UnitResults
from mxextract.extraction.flows import FlowExtractor
from mxextract.extraction.modules import ModuleExtractor
from mxextract.extraction.nodes import ACTIVITY_NODES, NodeExtractor
from mxextract.extraction.project import ProjectExtractor, extract_project

__all__ = [
    "ACTIVITY_NODES",
    "ExtractionContext",
    "ExtractionWarning",
    "FlowExtractor",
    "ModuleExtractor",
    "NodeExtractor",
    "ProjectExtractor",
    "UnitResults",
    "extract_project",
]
