"""
Projection of single model units into output records.

``NodeExtractor`` handles the domain-model and security units (entities,
associations, user roles, module security). Flow-graph nodes are projected
by the module-level ``ACTIVITY_NODES`` table and ``extract_nodes``; those
are pure functions over an already loaded flow.
"""

from functools import partial
from typing import Any, Dict, List, Optional, Tuple

from mxextract.classification import (
    ATTRIBUTE_TYPES,
    DATA_TYPES,
    GENERALIZATIONS,
    SPLIT_CONDITIONS,
    UNKNOWN_KIND,
    VALIDATION_RULES,
    VALUE_TYPES,
    VariantRule,
    VariantTable,
    project_action,
    structure_type_of,
)
from mxextract.classification.datatypes import project_text
from mxextract.extraction.context import ExtractionContext
from mxextract.models import (
    AccessRule,
    ActivityNode,
    Association,
    Attribute,
    DeleteBehavior,
    Entity,
    EventHandler,
    Index,
    ModuleRole,
    ModuleSecurity,
    Parameter,
    UserRole,
    ValidationRule,
)
from mxextract.resolver import enum_text, flag_of, node_id, resolve_ref, resolve_refs, text_of
from mxextract.utils.logging import get_logger

logger = get_logger(__name__)


def _seq(obj: Any, name: str) -> List[Any]:
    return list(getattr(obj, name, None) or [])


# =============================================================================
# Domain Model and Security Units
# =============================================================================


class NodeExtractor:
    """
    Extract domain-model and security units.

    Every output field is always present; a field whose projection fails is
    emptied and a warning naming the unit is recorded on the context.
    """

    def __init__(self, context: ExtractionContext) -> None:
        self.context = context

    async def extract_entity(self, handle: Any) -> Entity:
        entity = await self.context.load(handle)
        name = text_of(getattr(entity, "name", None))
        guard = partial(self.context.guard, "entity", resolve_ref(entity) or name)

        return Entity(
            name=name,
            documentation=text_of(getattr(entity, "documentation", None)),
            generalization=guard("generalization", lambda: self._generalization(entity), None),
            attributes=guard(
                "attributes",
                lambda: [self.extract_attribute(a) for a in _seq(entity, "attributes")],
                [],
            ),
            validation_rules=guard(
                "validationRules",
                lambda: [self.extract_validation_rule(r) for r in _seq(entity, "validation_rules")],
                [],
            ),
            event_handlers=guard(
                "eventHandlers",
                lambda: [self.extract_event_handler(h) for h in _seq(entity, "event_handlers")],
                [],
            ),
            indexes=guard(
                "indexes",
                lambda: [self.extract_index(i) for i in _seq(entity, "indexes")],
                [],
            ),
            access_rules=guard(
                "accessRules",
                lambda: [self.extract_access_rule(r) for r in _seq(entity, "access_rules")],
                [],
            ),
        )

    @staticmethod
    def _generalization(entity: Any) -> Optional[str]:
        kind, fields = GENERALIZATIONS.classify(getattr(entity, "generalization", None))
        if kind == "Generalization":
            return fields["generalization"]
        return None

    @staticmethod
    def extract_attribute(attribute: Any) -> Attribute:
        return Attribute(
            name=text_of(getattr(attribute, "name", None)),
            type=ATTRIBUTE_TYPES.project(getattr(attribute, "type", None)),
            documentation=text_of(getattr(attribute, "documentation", None)),
            value=VALUE_TYPES.project_optional(getattr(attribute, "value", None)),
        )

    @staticmethod
    def extract_validation_rule(rule: Any) -> ValidationRule:
        return ValidationRule(
            attribute=resolve_ref(getattr(rule, "attribute", None)),
            rule_type=VALIDATION_RULES.project(getattr(rule, "rule_info", None)),
            error_message=project_text(getattr(rule, "error_message", None)),
        )

    @staticmethod
    def extract_event_handler(handler: Any) -> EventHandler:
        return EventHandler(
            moment=enum_text(getattr(handler, "moment", None)),
            event=enum_text(getattr(handler, "event", None)),
            microflow=resolve_ref(getattr(handler, "microflow", None)),
            pass_event_object=flag_of(handler, "pass_event_object", False),
            raise_error_on_false=flag_of(handler, "raise_error_on_false", False),
        )

    @staticmethod
    def extract_index(index: Any) -> Index:
        return Index(
            data_storage_guid=text_of(getattr(index, "data_storage_guid", None)),
            attributes=[
                resolve_ref(getattr(indexed, "attribute", None))
                for indexed in _seq(index, "attributes")
            ],
        )

    @staticmethod
    def extract_access_rule(rule: Any) -> AccessRule:
        return AccessRule(
            documentation=text_of(getattr(rule, "documentation", None)),
            default_member_access_rights=enum_text(
                getattr(rule, "default_member_access_rights", None)
            ),
            allow_create=flag_of(rule, "allow_create", False),
            allow_delete=flag_of(rule, "allow_delete", False),
            module_roles=resolve_refs(getattr(rule, "module_roles", None)),
            x_path_constraint=text_of(getattr(rule, "x_path_constraint", None)),
        )

    async def extract_association(self, handle: Any) -> Association:
        association = await self.context.load(handle)
        name = text_of(getattr(association, "name", None))
        guard = partial(self.context.guard, "association", resolve_ref(association) or name)

        return Association(
            name=name,
            documentation=text_of(getattr(association, "documentation", None)),
            parent=resolve_ref(getattr(association, "parent", None)),
            child=resolve_ref(getattr(association, "child", None)),
            type=enum_text(getattr(association, "type", None)),
            owner=enum_text(getattr(association, "owner", None)),
            delete_behavior=guard(
                "deleteBehavior", lambda: self._delete_behavior(association), None
            ),
        )

    @staticmethod
    def _delete_behavior(association: Any) -> DeleteBehavior:
        behavior = getattr(association, "delete_behavior", None)
        return DeleteBehavior(
            parent_delete=enum_text(getattr(behavior, "parent_delete_behavior", None)),
            child_delete=enum_text(getattr(behavior, "child_delete_behavior", None)),
        )

    @staticmethod
    def extract_user_role(role: Any) -> UserRole:
        return UserRole(
            name=text_of(getattr(role, "name", None)),
            description=text_of(getattr(role, "description", None)),
            module_roles=resolve_refs(getattr(role, "module_roles", None)),
        )

    async def extract_module_security(self, handle: Any) -> Optional[ModuleSecurity]:
        if handle is None:
            return None
        security = await self.context.load(handle)
        return ModuleSecurity(
            module_roles=[
                ModuleRole(
                    name=text_of(getattr(role, "name", None)),
                    description=text_of(getattr(role, "description", None)),
                )
                for role in _seq(security, "module_roles")
            ]
        )


# =============================================================================
# Flow-Graph Nodes
# =============================================================================

PARAMETER_TYPES = ("Microflows$MicroflowParameterObject", "Microflows$MicroflowParameter")

# Merges are implied by the edges; annotations carry no logic.
SKIPPED_NODE_TYPES = ("Microflows$ExclusiveMerge", "Microflows$Annotation")


def _action_activity(node: Any) -> Dict[str, Any]:
    action = getattr(node, "action", None)
    if action is None:
        action_type, details = UNKNOWN_KIND, {}
    else:
        action_type, details = project_action(action)
    return {
        "actionType": action_type,
        "caption": text_of(getattr(node, "caption", None)),
        "errorHandlingType": enum_text(getattr(action, "error_handling_type", None), "Abort"),
        "details": details,
    }


def _end_event(node: Any) -> Dict[str, Any]:
    return {"returnValue": text_of(getattr(node, "return_value", None))}


def _exclusive_split(node: Any) -> Dict[str, Any]:
    return {
        "caption": text_of(getattr(node, "caption", None)),
        "documentation": text_of(getattr(node, "documentation", None)),
        "condition": SPLIT_CONDITIONS.project_optional(getattr(node, "split_condition", None)),
    }


def _inheritance_split(node: Any) -> Dict[str, Any]:
    return {
        "caption": text_of(getattr(node, "caption", None)),
        "splitVariable": text_of(getattr(node, "split_variable_name", None)),
    }


def _loop(node: Any) -> Dict[str, Any]:
    source = getattr(node, "loop_source", None)
    variable = getattr(node, "loop_variable_name", None) or getattr(source, "variable_name", None)
    iterated = getattr(node, "iterated_list_variable_name", None) or getattr(
        source, "list_variable_name", None
    )
    _, activities = extract_nodes(_seq(getattr(node, "object_collection", None), "objects"))
    return {
        "loopVariableName": text_of(variable),
        "iteratedList": text_of(iterated),
        "activities": activities,
    }


ACTIVITY_NODES = VariantTable(
    "activity-node",
    [
        VariantRule("ActionActivity", ("Microflows$ActionActivity",), _action_activity),
        VariantRule("StartEvent", ("Microflows$StartEvent",)),
        VariantRule("EndEvent", ("Microflows$EndEvent",), _end_event),
        VariantRule("ExclusiveSplit", ("Microflows$ExclusiveSplit",), _exclusive_split),
        VariantRule("InheritanceSplit", ("Microflows$InheritanceSplit",), _inheritance_split),
        VariantRule("Loop", ("Microflows$LoopedActivity",), _loop),
        VariantRule("ContinueEvent", ("Microflows$ContinueEvent",)),
        VariantRule("BreakEvent", ("Microflows$BreakEvent",)),
        VariantRule("ErrorEvent", ("Microflows$ErrorEvent",)),
    ],
)


def extract_parameter(node: Any) -> Parameter:
    return Parameter(
        id=node_id(node),
        name=text_of(getattr(node, "name", None)),
        type=DATA_TYPES.project(getattr(node, "variable_type", None)),
        documentation=text_of(getattr(node, "documentation", None)),
    )


def extract_activity_node(node: Any) -> Optional[ActivityNode]:
    """Project one flow-graph node; ``None`` for nodes that are not modeled."""
    if structure_type_of(node) in SKIPPED_NODE_TYPES:
        return None
    return {"id": node_id(node), **ACTIVITY_NODES.project(node)}


def extract_nodes(objects: List[Any]) -> Tuple[List[Parameter], List[ActivityNode]]:
    """Split a node collection into parameters and activities in one ordered pass."""
    parameters: List[Parameter] = []
    activities: List[ActivityNode] = []
    for node in objects:
        if structure_type_of(node) in PARAMETER_TYPES:
            parameters.append(extract_parameter(node))
            continue
        activity = extract_activity_node(node)
        if activity is not None:
            activities.append(activity)
    return parameters, activities
