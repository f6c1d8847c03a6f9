"""
Output schema for extracted application models.

Every record is a frozen pydantic model whose fields serialize under
camelCase aliases in declaration order. Variant-shaped values (typed
variants, activity nodes, action details) are plain dictionaries produced
by the variant tables in ``mxextract.classification``.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

TypedVariant = Dict[str, Any]
ActivityNode = Dict[str, Any]


class SchemaModel(BaseModel):
    """Base for all output records."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_json_dict(self) -> Dict[str, Any]:
        """Dump with output aliases and JSON-compatible values."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# Security Models
# =============================================================================


class UserRole(SchemaModel):
    """Project-level user role."""

    name: str = ""
    description: str = ""
    module_roles: List[Optional[str]] = Field(default_factory=list)


class ProjectSecurity(SchemaModel):
    """Project-wide security settings."""

    security_level: str = "none"
    check_security: bool = False
    user_roles: List[UserRole] = Field(default_factory=list)


class ModuleRole(SchemaModel):
    """Role declared by a module."""

    name: str = ""
    description: str = ""


class ModuleSecurity(SchemaModel):
    """Module-level security settings."""

    module_roles: List[ModuleRole] = Field(default_factory=list)


# =============================================================================
# Domain Model Models
# =============================================================================


class Attribute(SchemaModel):
    """Entity attribute with its classified type and value."""

    name: str
    type: TypedVariant
    documentation: str = ""
    value: Optional[TypedVariant] = None


class ValidationRule(SchemaModel):
    """Validation rule attached to an entity attribute."""

    attribute: Optional[str] = None
    rule_type: TypedVariant
    error_message: Optional[Dict[str, Any]] = None


class EventHandler(SchemaModel):
    """Before/after event handler of an entity."""

    moment: str = ""
    event: str = ""
    microflow: Optional[str] = None
    pass_event_object: bool = False
    raise_error_on_false: bool = False


class Index(SchemaModel):
    """Database index on an entity."""

    data_storage_guid: str = ""
    attributes: List[Optional[str]] = Field(default_factory=list)


class AccessRule(SchemaModel):
    """Entity access rule."""

    documentation: str = ""
    default_member_access_rights: str = ""
    allow_create: bool = False
    allow_delete: bool = False
    module_roles: List[Optional[str]] = Field(default_factory=list)
    x_path_constraint: str = ""


class Entity(SchemaModel):
    """Persisted or non-persisted entity of a domain model."""

    name: str
    documentation: str = ""
    generalization: Optional[str] = None
    attributes: List[Attribute] = Field(default_factory=list)
    validation_rules: List[ValidationRule] = Field(default_factory=list)
    event_handlers: List[EventHandler] = Field(default_factory=list)
    indexes: List[Index] = Field(default_factory=list)
    access_rules: List[AccessRule] = Field(default_factory=list)


class DeleteBehavior(SchemaModel):
    """Delete behavior on both ends of an association."""

    parent_delete: str = ""
    child_delete: str = ""


class Association(SchemaModel):
    """Association between two entities."""

    name: str
    documentation: str = ""
    parent: Optional[str] = None
    child: Optional[str] = None
    type: str = ""
    owner: str = ""
    delete_behavior: Optional[DeleteBehavior] = Field(default_factory=DeleteBehavior)


class DomainModel(SchemaModel):
    """Entities and associations of one module."""

    entities: List[Entity] = Field(default_factory=list)
    associations: List[Association] = Field(default_factory=list)


# =============================================================================
# Flow Models
# =============================================================================


class FlowSecurity(SchemaModel):
    """Execution security of a flow."""

    allowed_roles: List[Optional[str]] = Field(default_factory=list)
    apply_entity_access: bool = False
    allow_concurrent_execution: bool = True


class Parameter(SchemaModel):
    """Input parameter of a flow."""

    id: Optional[str] = None
    name: str = ""
    type: TypedVariant
    documentation: str = ""


class Edge(SchemaModel):
    """Directed connection between two activity nodes."""

    origin: Optional[str] = None
    destination: Optional[str] = None
    origin_connection_index: Optional[int] = None
    destination_connection_index: Optional[int] = None
    case_value: Optional[TypedVariant] = None


class Flow(SchemaModel):
    """Executable flow graph (microflow)."""

    name: str
    qualified_name: str = ""
    documentation: str = ""
    return_type: TypedVariant
    security: Optional[FlowSecurity] = Field(default_factory=FlowSecurity)
    parameters: List[Parameter] = Field(default_factory=list)
    activities: List[ActivityNode] = Field(default_factory=list)
    flows: List[Edge] = Field(default_factory=list)


# =============================================================================
# Document Models
# =============================================================================


class Module(SchemaModel):
    """All extracted artifacts of one module."""

    name: str
    domain_model: DomainModel = Field(default_factory=DomainModel)
    microflows: List[Flow] = Field(default_factory=list)
    security: Optional[ModuleSecurity] = None


class Document(SchemaModel):
    """Root of the extracted application logic."""

    project_name: str
    schema_version: str = "1.0"
    extracted_at: datetime
    project_security: ProjectSecurity = Field(default_factory=ProjectSecurity)
    modules: List[Module] = Field(default_factory=list)
