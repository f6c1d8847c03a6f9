"""
JSON model snapshots.

A snapshot is an offline copy of an application model. Elements are JSON
objects tagged with ``"$Type"`` (the platform structure type), optionally
``"$ID"``, ``"$QualifiedName"`` and ``"$LoadError"``; cross-references are
``{"$Ref": "<qualified name or node id>"}``. Field names are camelCase and
are read back through snake_case attribute access, so a ``SnapshotModel``
can be handed to the extractors like any other model source.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic.alias_generators import to_camel

from mxextract.utils.errors import ModelLoadError, SnapshotFormatError
from mxextract.utils.logging import get_logger

logger = get_logger(__name__)

TYPE_KEY = "$Type"
ID_KEY = "$ID"
QUALIFIED_NAME_KEY = "$QualifiedName"
LOAD_ERROR_KEY = "$LoadError"
REF_KEY = "$Ref"

# Containers whose names are not part of the qualified names beneath them.
TRANSPARENT_TYPES = ("Projects$Folder",)


class ModelReference:
    """Reference to another element of the snapshot."""

    def __init__(self, target: str, model: "SnapshotModel") -> None:
        self.target = target
        self._model = model

    @property
    def qualified_name(self) -> str:
        return self.target

    @property
    def name(self) -> str:
        return self.target.rsplit(".", 1)[-1]

    @property
    def id(self) -> str:
        return self.target

    async def load(self) -> "ModelElement":
        return self._model.lookup(self.target)

    def __repr__(self) -> str:
        return f"ModelReference({self.target!r})"


class ModelElement:
    """One element of a snapshot with attribute-style field access."""

    def __init__(
        self,
        fields: Dict[str, Any],
        structure_type_name: Optional[str],
        element_id: Optional[str],
        qualified_name: Optional[str],
        load_error: Optional[str],
    ) -> None:
        self._fields = fields
        self._structure_type_name = structure_type_name
        self._id = element_id
        self._qualified_name = qualified_name
        self._load_error = load_error

    @property
    def structure_type_name(self) -> Optional[str]:
        return self._structure_type_name

    @property
    def id(self) -> Optional[str]:
        return self._id

    @property
    def qualified_name(self) -> Optional[str]:
        return self._qualified_name

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        fields = self.__dict__.get("_fields", {})
        if name in fields:
            return fields[name]
        return fields.get(to_camel(name))

    async def load(self) -> "ModelElement":
        if self._load_error:
            raise ModelLoadError(self._qualified_name or self._id or "element", self._load_error)
        return self

    def __repr__(self) -> str:
        label = self._qualified_name or self._id or ""
        return f"ModelElement({self._structure_type_name!r}, {label!r})"


class SnapshotModel:
    """
    Model source backed by a parsed snapshot document.

    Args:
        data: Parsed snapshot JSON
        source: Where the snapshot came from (used in error messages)
    """

    def __init__(self, data: Dict[str, Any], source: str = "<memory>") -> None:
        if not isinstance(data, dict):
            raise SnapshotFormatError(source, "root must be an object")
        modules = data.get("modules", [])
        securities = data.get("projectSecurities", [])
        if not isinstance(modules, list) or not isinstance(securities, list):
            raise SnapshotFormatError(source, "'modules' and 'projectSecurities' must be lists")

        self.source = source
        self.project_name: str = data.get("projectName") or ""
        self._by_id: Dict[str, ModelElement] = {}
        self._by_qualified_name: Dict[str, ModelElement] = {}

        self._project_securities: List[Any] = [self._build(s, None) for s in securities]
        self._modules: List[Any] = [self._build(m, None) for m in modules]

    def all_project_securities(self) -> List[Any]:
        return list(self._project_securities)

    def all_modules(self) -> List[Any]:
        return list(self._modules)

    def lookup(self, target: str) -> ModelElement:
        """Find an element by node id or qualified name."""
        element = self._by_id.get(target) or self._by_qualified_name.get(target)
        if element is None:
            raise ModelLoadError(target, "no such element in snapshot")
        return element

    def _build(self, value: Any, parent_name: Optional[str]) -> Any:
        if isinstance(value, list):
            return [self._build(item, parent_name) for item in value]
        if not isinstance(value, dict):
            return value
        if REF_KEY in value:
            target = value[REF_KEY]
            return ModelReference(str(target), self) if target else None

        name = value.get("name")
        structure_type_name = value.get(TYPE_KEY)
        qualified_name = value.get(QUALIFIED_NAME_KEY)
        if (
            qualified_name is None
            and isinstance(name, str)
            and name
            and structure_type_name not in TRANSPARENT_TYPES
        ):
            qualified_name = f"{parent_name}.{name}" if parent_name else name

        child_parent = qualified_name or parent_name
        fields = {
            key: self._build(item, child_parent)
            for key, item in value.items()
            if not key.startswith("$")
        }
        element_id = value.get(ID_KEY)
        element = ModelElement(
            fields,
            structure_type_name=structure_type_name,
            element_id=str(element_id) if element_id is not None else None,
            qualified_name=qualified_name,
            load_error=value.get(LOAD_ERROR_KEY),
        )

        if element.id is not None:
            self._by_id.setdefault(element.id, element)
        if qualified_name:
            self._by_qualified_name.setdefault(qualified_name, element)
        return element


def load_snapshot(path: Union[str, Path]) -> SnapshotModel:
    """
    Read a snapshot file.

    Raises:
        SnapshotFormatError: If the file is missing or not valid snapshot JSON
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise SnapshotFormatError(str(path), "file not found")
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise SnapshotFormatError(str(path), str(e))

    model = SnapshotModel(data, source=str(path))
    logger.info(
        f"Loaded model snapshot with {len(model.all_modules())} modules",
        extra={"snapshot": str(path)},
    )
    return model
