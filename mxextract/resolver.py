"""
Reference resolution and handle loading.

Cross-references in the model are turned into qualified-name strings here,
and every "materialize this handle" call goes through ``load_handle`` so the
extractors stay independent of how a model source loads its elements.
"""

import inspect
from enum import Enum
from typing import Any, Awaitable, Callable, Iterable, List, Optional

from mxextract.utils.errors import ModelLoadError
from mxextract.utils.logging import get_logger

logger = get_logger(__name__)

Loader = Callable[[Any], Awaitable[Any]]


def resolve_ref(handle: Any) -> Optional[str]:
    """
    Resolve a model handle to its qualified name.

    Returns ``None`` when the handle is absent, carries no name, or raises
    while its name is read. Never raises.
    """
    if handle is None:
        return None
    if isinstance(handle, str):
        return handle or None

    try:
        name = getattr(handle, "qualified_name", None) or getattr(handle, "name", None)
    except Exception as e:
        logger.debug(f"Unresolvable reference {type(handle).__name__}: {e}")
        return None

    if isinstance(name, str) and name:
        return name
    return None


def resolve_refs(handles: Optional[Iterable[Any]]) -> List[Optional[str]]:
    """Resolve every handle of a collection, keeping order and unresolved slots."""
    if not handles:
        return []
    return [resolve_ref(handle) for handle in handles]


def node_id(node: Any) -> Optional[str]:
    """Return the native identifier of a node, or ``None``."""
    if node is None:
        return None
    try:
        value = getattr(node, "id", None)
    except Exception:
        return None
    return str(value) if value is not None and value != "" else None


def describe_handle(handle: Any) -> str:
    """Best-effort label for a handle, used in warnings."""
    return resolve_ref(handle) or node_id(handle) or f"<unnamed {type(handle).__name__}>"


def text_of(value: Any) -> str:
    """Return a string field, mapping ``None`` to the empty string."""
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def enum_text(value: Any, default: str = "") -> str:
    """Render a platform enumeration value as its literal name."""
    if value is None:
        return default
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, str):
        return value
    name = getattr(value, "name", None)
    if isinstance(name, str) and name:
        return name
    return str(value)


async def load_handle(handle: Any) -> Any:
    """
    Materialize a handle.

    Handles without a ``load`` method are returned as they are; ``load`` may
    return the element directly or an awaitable resolving to it.

    Raises:
        ModelLoadError: If the handle is absent or loading fails
    """
    if handle is None:
        raise ModelLoadError("<none>", "handle is not set")

    load = getattr(handle, "load", None)
    if load is None:
        return handle

    try:
        result = load()
        if inspect.isawaitable(result):
            result = await result
    except ModelLoadError:
        raise
    except Exception as e:
        raise ModelLoadError(describe_handle(handle), str(e)) from e

    if result is None:
        raise ModelLoadError(describe_handle(handle), "load returned nothing")
    return result


def flag_of(obj: Any, name: str, default: bool = False) -> bool:
    """Read a boolean field, using ``default`` when it is absent or unset."""
    value = getattr(obj, name, None)
    if value is None:
        return default
    return bool(value)
