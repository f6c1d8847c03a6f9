"""
Variant tables for domain-model and data types.

Covers attribute types, attribute value types, validation rule kinds,
entity generalizations and the data types used by flow parameters, return
types and variables.
"""

from typing import Any, Dict, Optional

from mxextract.classification.table import VariantRule, VariantTable
from mxextract.resolver import enum_text, flag_of, resolve_ref, text_of


def project_text(text: Any) -> Optional[Dict[str, Any]]:
    """Project a translatable text into its translations."""
    if text is None:
        return None
    translations = getattr(text, "translations", None) or []
    return {
        "translations": [
            {
                "languageCode": text_of(getattr(t, "language_code", None)),
                "text": text_of(getattr(t, "text", None)),
            }
            for t in translations
        ]
    }


def _enumeration(node: Any) -> Dict[str, Any]:
    return {"enumeration": resolve_ref(getattr(node, "enumeration", None))}


def _entity(node: Any) -> Dict[str, Any]:
    return {"entity": resolve_ref(getattr(node, "entity", None))}


# =============================================================================
# Attribute Types
# =============================================================================


def _string_attribute(node: Any) -> Dict[str, Any]:
    return {"length": getattr(node, "length", None)}


def _datetime_attribute(node: Any) -> Dict[str, Any]:
    return {"localized": flag_of(node, "localize_date", False)}


ATTRIBUTE_TYPES = VariantTable(
    "attribute-type",
    [
        VariantRule("String", ("DomainModels$StringAttributeType",), _string_attribute),
        VariantRule("Integer", ("DomainModels$IntegerAttributeType",)),
        VariantRule("Long", ("DomainModels$LongAttributeType",)),
        VariantRule("Decimal", ("DomainModels$DecimalAttributeType",)),
        VariantRule("Boolean", ("DomainModels$BooleanAttributeType",)),
        VariantRule("DateTime", ("DomainModels$DateTimeAttributeType",), _datetime_attribute),
        VariantRule("Enumeration", ("DomainModels$EnumerationAttributeType",), _enumeration),
        VariantRule("AutoNumber", ("DomainModels$AutoNumberAttributeType",)),
        VariantRule("Binary", ("DomainModels$BinaryAttributeType",)),
        VariantRule("HashedString", ("DomainModels$HashedStringAttributeType",)),
    ],
)


# =============================================================================
# Attribute Value Types
# =============================================================================


def _stored_value(node: Any) -> Dict[str, Any]:
    return {"defaultValue": text_of(getattr(node, "default_value", None))}


def _calculated_value(node: Any) -> Dict[str, Any]:
    return {
        "microflow": resolve_ref(getattr(node, "microflow", None)),
        "passEntity": flag_of(node, "pass_entity", False),
    }


VALUE_TYPES = VariantTable(
    "value-type",
    [
        VariantRule("StoredValue", ("DomainModels$StoredValue",), _stored_value),
        VariantRule("CalculatedValue", ("DomainModels$CalculatedValue",), _calculated_value),
    ],
)


# =============================================================================
# Validation Rules
# =============================================================================


def _equals_to_rule(node: Any) -> Dict[str, Any]:
    return {
        "useValue": flag_of(node, "use_value", False),
        "equalsToValue": text_of(getattr(node, "equals_to_value", None)),
        "equalsToAttribute": resolve_ref(getattr(node, "equals_to_attribute", None)),
    }


def _range_rule(node: Any) -> Dict[str, Any]:
    return {
        "rangeType": enum_text(getattr(node, "type_of_range", None)),
        "useMinValue": flag_of(node, "use_min_value", False),
        "minValue": text_of(getattr(node, "min_value", None)),
        "useMaxValue": flag_of(node, "use_max_value", False),
        "maxValue": text_of(getattr(node, "max_value", None)),
    }


def _regex_rule(node: Any) -> Dict[str, Any]:
    return {"regularExpression": resolve_ref(getattr(node, "regular_expression", None))}


def _max_length_rule(node: Any) -> Dict[str, Any]:
    return {"maxLength": getattr(node, "max_length", None)}


VALIDATION_RULES = VariantTable(
    "validation-rule",
    [
        VariantRule("Required", ("DomainModels$RequiredRuleInfo",)),
        VariantRule("Unique", ("DomainModels$UniqueRuleInfo",)),
        VariantRule("EqualsTo", ("DomainModels$EqualsToRuleInfo",), _equals_to_rule),
        VariantRule("Range", ("DomainModels$RangeRuleInfo",), _range_rule),
        VariantRule("RegEx", ("DomainModels$RegExRuleInfo",), _regex_rule),
        VariantRule("MaxLength", ("DomainModels$MaxLengthRuleInfo",), _max_length_rule),
    ],
)


# =============================================================================
# Generalizations
# =============================================================================


def _generalization(node: Any) -> Dict[str, Any]:
    return {"generalization": resolve_ref(getattr(node, "generalization", None))}


def _no_generalization(node: Any) -> Dict[str, Any]:
    return {"persistable": flag_of(node, "persistable", True)}


GENERALIZATIONS = VariantTable(
    "generalization",
    [
        VariantRule("Generalization", ("DomainModels$Generalization",), _generalization),
        VariantRule("NoGeneralization", ("DomainModels$NoGeneralization",), _no_generalization),
    ],
)


# =============================================================================
# Data Types
# =============================================================================


DATA_TYPES = VariantTable(
    "data-type",
    [
        VariantRule("Object", ("DataTypes$ObjectType",), _entity),
        VariantRule("List", ("DataTypes$ListType",), _entity),
        VariantRule("String", ("DataTypes$StringType",)),
        VariantRule("Integer", ("DataTypes$IntegerType",)),
        VariantRule("Long", ("DataTypes$LongType",)),
        VariantRule("Decimal", ("DataTypes$DecimalType",)),
        VariantRule("Float", ("DataTypes$FloatType",)),
        VariantRule("Boolean", ("DataTypes$BooleanType",)),
        VariantRule("DateTime", ("DataTypes$DateTimeType",)),
        VariantRule("Enumeration", ("DataTypes$EnumerationType",), _enumeration),
        VariantRule("Binary", ("DataTypes$BinaryType",)),
        VariantRule("Void", ("DataTypes$VoidType",)),
        VariantRule("Empty", ("DataTypes$EmptyType",)),
    ],
)
