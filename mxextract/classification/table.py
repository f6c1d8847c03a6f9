"""
Ordered variant tables for classifying model nodes.

A ``VariantTable`` maps the structure type of a raw node to a literal kind
tag and a kind-specific projection. Rules are evaluated in declaration
order and the first rule whose aliases contain the node's structure type
wins; the table is therefore the ordering contract for any overlapping
aliases a platform version may introduce. Nodes that match no rule fall
through to ``{"kind": "Unknown", "raw": <structure type>}``.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from mxextract.utils.logging import get_logger

logger = get_logger(__name__)

UNKNOWN_KIND = "Unknown"

Projector = Callable[[Any], Dict[str, Any]]


def structure_type_of(node: Any) -> str:
    """Return the discriminant of a raw node, falling back to its class name."""
    structure_type = getattr(node, "structure_type_name", None)
    if isinstance(structure_type, str) and structure_type:
        return structure_type
    return type(node).__name__


def short_type_name(node: Any) -> str:
    """Return the structure type without its namespace, e.g. ``RetrieveAction``."""
    return structure_type_of(node).rsplit("$", 1)[-1]


def _no_fields(node: Any) -> Dict[str, Any]:
    return {}


@dataclass(frozen=True)
class VariantRule:
    """One arm of a variant table."""

    kind: str
    structure_types: Tuple[str, ...]
    project: Projector = _no_fields

    def matches(self, node: Any) -> bool:
        return structure_type_of(node) in self.structure_types


class VariantTable:
    """
    Closed, ordered dispatch table for one family of node variants.

    Args:
        family: Human readable family name (used in logs and the CLI)
        rules: Rules in priority order
    """

    def __init__(self, family: str, rules: Iterable[VariantRule]) -> None:
        self.family = family
        self.rules: List[VariantRule] = list(rules)

        # First rule listing a structure type owns it.
        self._index: Dict[str, VariantRule] = {}
        for rule in self.rules:
            for structure_type in rule.structure_types:
                self._index.setdefault(structure_type, rule)

    def __contains__(self, node: Any) -> bool:
        return self.rule_for(node) is not None

    def __len__(self) -> int:
        return len(self.rules)

    @property
    def kinds(self) -> List[str]:
        return [rule.kind for rule in self.rules]

    def rule_for(self, node: Any) -> Optional[VariantRule]:
        """Return the first rule matching the node, if any."""
        if node is None:
            return None
        return self._index.get(structure_type_of(node))

    def classify(self, node: Any) -> Tuple[str, Dict[str, Any]]:
        """
        Classify a node into ``(kind, fields)``.

        Never raises: unknown variants and projection failures both produce
        the ``Unknown`` kind with a diagnostic ``raw`` field.
        """
        rule = self.rule_for(node)
        if rule is None:
            raw = structure_type_of(node) if node is not None else "missing"
            logger.debug(f"Unknown {self.family} variant: {raw}")
            return UNKNOWN_KIND, {"raw": raw}

        try:
            return rule.kind, rule.project(node)
        except Exception as e:
            logger.warning(
                f"Failed to project {self.family} variant {rule.kind}: {e}",
                extra={"family": self.family, "kind": rule.kind},
            )
            return UNKNOWN_KIND, {"raw": f"{structure_type_of(node)}: {e}"}

    def project(self, node: Any) -> Dict[str, Any]:
        """Classify a node and return a record tagged with ``kind``."""
        kind, fields = self.classify(node)
        return {"kind": kind, **fields}

    def project_optional(self, node: Any) -> Optional[Dict[str, Any]]:
        """Like ``project`` but maps an absent node to ``None``."""
        if node is None:
            return None
        return self.project(node)

    def describe(self) -> List[Tuple[str, Tuple[str, ...]]]:
        """Return ``(kind, structure types)`` pairs in evaluation order."""
        return [(rule.kind, rule.structure_types) for rule in self.rules]
