"""
Shared fixtures for the mxextract tests.
"""

import os
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from mxextract.config import Settings, reset_settings
from mxextract.snapshot import SnapshotModel


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Run every test without MXEXTRACT_* overrides from the outer shell."""
    for key in list(os.environ):
        if key.startswith("MXEXTRACT_"):
            monkeypatch.delenv(key, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def make_node():
    """Factory for raw model nodes carrying a structure type."""

    def _make(structure_type=None, **fields):
        if structure_type is not None:
            fields["structure_type_name"] = structure_type
        return SimpleNamespace(**fields)

    return _make


@pytest.fixture
def failing_handle():
    """Factory for handles whose load fails."""

    class FailingHandle:
        def __init__(self, name, reason="corrupt unit"):
            self.name = name
            self.reason = reason

        def load(self):
            raise RuntimeError(self.reason)

    return FailingHandle


@pytest.fixture
def settings():
    """Settings built from a clean environment."""
    return Settings()


@pytest.fixture
def fixed_clock():
    """Clock frozen at the start of 2024."""
    return lambda: datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def approve_order_microflow():
    """Snapshot JSON of a small decision microflow."""
    return {
        "$Type": "Microflows$Microflow",
        "name": "ACT_ApproveOrder",
        "documentation": "Approves large orders",
        "microflowReturnType": {"$Type": "DataTypes$BooleanType"},
        "allowedModuleRoles": [{"$Ref": "Sales.Admin"}],
        "applyEntityAccess": True,
        "objectCollection": {
            "$Type": "Microflows$MicroflowObjectCollection",
            "objects": [
                {
                    "$Type": "Microflows$MicroflowParameterObject",
                    "$ID": "p1",
                    "name": "Order",
                    "variableType": {
                        "$Type": "DataTypes$ObjectType",
                        "entity": {"$Ref": "Sales.Order"},
                    },
                },
                {"$Type": "Microflows$StartEvent", "$ID": "s1"},
                {
                    "$Type": "Microflows$ExclusiveSplit",
                    "$ID": "x1",
                    "caption": "Large order?",
                    "splitCondition": {
                        "$Type": "Microflows$ExpressionSplitCondition",
                        "expression": "$Order/Amount > 1000",
                    },
                },
                {
                    "$Type": "Microflows$ActionActivity",
                    "$ID": "a1",
                    "caption": "Approve",
                    "action": {
                        "$Type": "Microflows$ChangeObjectAction",
                        "changeVariableName": "Order",
                        "commit": "Yes",
                        "errorHandlingType": "Rollback",
                    },
                },
                {"$Type": "Microflows$ExclusiveMerge", "$ID": "m1"},
                {"$Type": "Microflows$EndEvent", "$ID": "e1", "returnValue": "true"},
            ],
        },
        "flows": [
            {
                "$Type": "Microflows$SequenceFlow",
                "origin": {"$Ref": "s1"},
                "destination": {"$Ref": "x1"},
                "caseValue": {"$Type": "Microflows$NoCase"},
            },
            {
                "$Type": "Microflows$SequenceFlow",
                "origin": {"$Ref": "x1"},
                "destination": {"$Ref": "a1"},
                "caseValue": {"$Type": "Microflows$EnumerationCase", "value": "true"},
            },
            {
                "$Type": "Microflows$SequenceFlow",
                "origin": {"$Ref": "x1"},
                "destination": {"$Ref": "m1"},
                "caseValue": {"$Type": "Microflows$EnumerationCase", "value": "false"},
            },
            {
                "$Type": "Microflows$SequenceFlow",
                "origin": {"$Ref": "a1"},
                "destination": {"$Ref": "m1"},
            },
            {
                "$Type": "Microflows$SequenceFlow",
                "origin": {"$Ref": "m1"},
                "destination": {"$Ref": "e1"},
            },
        ],
    }


@pytest.fixture
def sales_snapshot(approve_order_microflow):
    """Snapshot JSON of a one-module shop application."""
    return {
        "projectName": "Shop",
        "projectSecurities": [
            {
                "$Type": "Security$ProjectSecurity",
                "securityLevel": "CheckEverything",
                "checkSecurity": True,
                "userRoles": [
                    {
                        "$Type": "Security$UserRole",
                        "name": "Administrator",
                        "description": "Can do everything",
                        "moduleRoles": [{"$Ref": "Sales.Admin"}],
                    }
                ],
            }
        ],
        "modules": [
            {
                "$Type": "Projects$Module",
                "name": "Sales",
                "domainModel": {
                    "$Type": "DomainModels$DomainModel",
                    "entities": [
                        {
                            "$Type": "DomainModels$Entity",
                            "name": "Customer",
                            "generalization": {
                                "$Type": "DomainModels$NoGeneralization",
                                "persistable": True,
                            },
                            "attributes": [
                                {
                                    "$Type": "DomainModels$Attribute",
                                    "name": "Name",
                                    "type": {
                                        "$Type": "DomainModels$StringAttributeType",
                                        "length": 200,
                                    },
                                }
                            ],
                        },
                        {
                            "$Type": "DomainModels$Entity",
                            "name": "Order",
                            "documentation": "A placed order",
                            "attributes": [
                                {
                                    "$Type": "DomainModels$Attribute",
                                    "name": "Amount",
                                    "type": {"$Type": "DomainModels$DecimalAttributeType"},
                                    "value": {
                                        "$Type": "DomainModels$StoredValue",
                                        "defaultValue": "0",
                                    },
                                }
                            ],
                            "validationRules": [
                                {
                                    "$Type": "DomainModels$ValidationRule",
                                    "attribute": {"$Ref": "Sales.Order.Amount"},
                                    "ruleInfo": {"$Type": "DomainModels$RequiredRuleInfo"},
                                    "errorMessage": {
                                        "translations": [
                                            {"languageCode": "en_US", "text": "Required"}
                                        ]
                                    },
                                }
                            ],
                            "accessRules": [
                                {
                                    "$Type": "DomainModels$AccessRule",
                                    "defaultMemberAccessRights": "ReadWrite",
                                    "allowCreate": True,
                                    "allowDelete": False,
                                    "moduleRoles": [{"$Ref": "Sales.Admin"}],
                                    "xPathConstraint": "",
                                }
                            ],
                        },
                    ],
                    "associations": [
                        {
                            "$Type": "DomainModels$Association",
                            "name": "Order_Customer",
                            "parent": {"$Ref": "Sales.Order"},
                            "child": {"$Ref": "Sales.Customer"},
                            "type": "Reference",
                            "owner": "Default",
                            "deleteBehavior": {
                                "parentDeleteBehavior": "DeleteMeAndReferences",
                                "childDeleteBehavior": "DeleteMeButKeepReferences",
                            },
                        }
                    ],
                },
                "moduleSecurity": {
                    "$Type": "Security$ModuleSecurity",
                    "moduleRoles": [
                        {
                            "$Type": "Security$ModuleRole",
                            "name": "Admin",
                            "description": "Full access",
                        }
                    ],
                },
                "documents": [
                    {"$Type": "Pages$Page", "name": "Order_Overview"},
                ],
                "folders": [
                    {
                        "$Type": "Projects$Folder",
                        "name": "Orders",
                        "documents": [approve_order_microflow],
                    }
                ],
            }
        ],
    }


@pytest.fixture
def sales_model(sales_snapshot):
    """Parsed shop snapshot."""
    return SnapshotModel(sales_snapshot, source="sales.json")
