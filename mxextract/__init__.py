"""
mxextract: application model extraction and normalization.

Walks a loaded application model (entities, associations, security roles
and microflow graphs) and projects it into a flat, stable JSON document.
"""

from mxextract.extraction import ProjectExtractor, extract_project
from mxextract.models import Document
from mxextract.persist import persist_document, render_document
from mxextract.resolver import resolve_ref

__version__ = "0.1.0"

__all__ = [
    "Document",
    "ProjectExtractor",
    "extract_project",
    "persist_document",
    "render_document",
    "resolve_ref",
]
