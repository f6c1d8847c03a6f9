"""
Flow-graph extraction.

A flow is projected in two ordered passes over its native collections: the
node collection (parameters and activities) and the edge collection. Edge
endpoints are emitted as node identifiers, never as nested records.
"""

from functools import partial
from typing import Any, List, Tuple

from mxextract.classification import CASE_VALUES, DATA_TYPES, structure_type_of
from mxextract.extraction.context import ExtractionContext
from mxextract.extraction.nodes import extract_nodes
from mxextract.models import ActivityNode, Edge, Flow, FlowSecurity, Parameter
from mxextract.resolver import flag_of, node_id, resolve_ref, resolve_refs, text_of
from mxextract.utils.logging import get_logger

logger = get_logger(__name__)

ANNOTATION_FLOW_TYPES = ("Microflows$AnnotationFlow",)

VOID_TYPE = {"kind": "Void"}


def extract_edge(edge: Any) -> Edge:
    """Project one edge, resolving its endpoints to node identifiers."""
    case_value = None
    if structure_type_of(edge) not in ANNOTATION_FLOW_TYPES:
        case_value = CASE_VALUES.project_optional(getattr(edge, "case_value", None))

    return Edge(
        origin=node_id(getattr(edge, "origin", None)),
        destination=node_id(getattr(edge, "destination", None)),
        origin_connection_index=getattr(edge, "origin_connection_index", None),
        destination_connection_index=getattr(edge, "destination_connection_index", None),
        case_value=case_value,
    )


class FlowExtractor:
    """Extract microflows and comparable executable units."""

    def __init__(self, context: ExtractionContext) -> None:
        self.context = context

    async def extract_flow(self, handle: Any) -> Flow:
        flow = await self.context.load(handle)
        name = text_of(getattr(flow, "name", None))
        qualified_name = resolve_ref(flow) or ""
        guard = partial(self.context.guard, "microflow", qualified_name or name)

        logger.info(f"Extracting microflow: {qualified_name or name}")

        parameters, activities = guard("activities", lambda: self._nodes(flow), ([], []))
        edges = guard(
            "flows",
            lambda: [extract_edge(edge) for edge in (getattr(flow, "flows", None) or [])],
            [],
        )

        return Flow(
            name=name,
            qualified_name=qualified_name,
            documentation=text_of(getattr(flow, "documentation", None)),
            return_type=self._return_type(flow),
            security=guard("security", lambda: self._security(flow), None),
            parameters=parameters,
            activities=activities,
            flows=edges,
        )

    @staticmethod
    def _return_type(flow: Any) -> dict:
        return_type = getattr(flow, "microflow_return_type", None)
        if return_type is None:
            return dict(VOID_TYPE)
        return DATA_TYPES.project(return_type)

    @staticmethod
    def _security(flow: Any) -> FlowSecurity:
        return FlowSecurity(
            allowed_roles=resolve_refs(getattr(flow, "allowed_module_roles", None)),
            apply_entity_access=flag_of(flow, "apply_entity_access", False),
            allow_concurrent_execution=flag_of(flow, "allow_concurrent_execution", True),
        )

    @staticmethod
    def _nodes(flow: Any) -> Tuple[List[Parameter], List[ActivityNode]]:
        collection = getattr(flow, "object_collection", None)
        return extract_nodes(list(getattr(collection, "objects", None) or []))
