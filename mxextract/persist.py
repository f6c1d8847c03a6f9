"""
Rendering and writing of extracted documents.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from mxextract.config import get_settings
from mxextract.models import Document
from mxextract.utils.errors import PersistenceError
from mxextract.utils.logging import get_logger

logger = get_logger(__name__)


def render_document(document: Document, indent: Optional[int] = None) -> str:
    """Render a document as JSON text with the schema's key order."""
    if indent is None:
        indent = get_settings().json_indent
    return json.dumps(document.to_json_dict(), indent=indent or None, ensure_ascii=False) + "\n"


def persist_document(
    document: Document,
    path: Optional[Union[str, Path]] = None,
    indent: Optional[int] = None,
) -> Path:
    """
    Write a document as UTF-8 JSON, replacing the target atomically.

    Args:
        document: Document to write
        path: Target file (defaults to the configured output file)
        indent: JSON indentation (defaults to settings)

    Returns:
        The path written

    Raises:
        PersistenceError: If the file cannot be written
    """
    target = Path(path) if path is not None else get_settings().output_file
    text = render_document(document, indent=indent)

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{target.name}.", suffix=".tmp", dir=str(target.parent)
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(text)
            os.replace(tmp_name, target)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
    except OSError as e:
        raise PersistenceError(f"Failed to write '{target}': {e}", {"path": str(target)})

    logger.info(f"Extraction saved to {target}", extra={"bytes": len(text.encode("utf-8"))})
    return target
