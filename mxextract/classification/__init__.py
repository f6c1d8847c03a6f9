"""
Variant tables for the node families of an application model.

Each family is one ordered ``VariantTable``; ``FAMILIES`` lists them all so
the complete dispatch set can be audited in one place.
"""

from mxextract.classification.actions import (
    ACTION_TYPES,
    CASE_VALUES,
    RANGES,
    RETRIEVE_SOURCES,
    SPLIT_CONDITIONS,
    project_action,
)
from mxextract.classification.datatypes import (
    ATTRIBUTE_TYPES,
    DATA_TYPES,
    GENERALIZATIONS,
    VALIDATION_RULES,
    VALUE_TYPES,
)
from mxextract.classification.table import (
    UNKNOWN_KIND,
    VariantRule,
    VariantTable,
    short_type_name,
    structure_type_of,
)

FAMILIES = {
    "attribute-type": ATTRIBUTE_TYPES,
    "value-type": VALUE_TYPES,
    "validation-rule": VALIDATION_RULES,
    "generalization": GENERALIZATIONS,
    "data-type": DATA_TYPES,
    "action": ACTION_TYPES,
    "retrieve-source": RETRIEVE_SOURCES,
    "range": RANGES,
    "split-condition": SPLIT_CONDITIONS,
    "case-value": CASE_VALUES,
}

__all__ = [
    "ACTION_TYPES",
    "ATTRIBUTE_TYPES",
    "CASE_VALUES",
    "DATA_TYPES",
    "FAMILIES",
    "GENERALIZATIONS",
    "RANGES",
    "RETRIEVE_SOURCES",
    "SPLIT_CONDITIONS",
    "UNKNOWN_KIND",
    "VALIDATION_RULES",
    "VALUE_TYPES",
    "VariantRule",
    "VariantTable",
    "project_action",
    "short_type_name",
    "structure_type_of",
]
