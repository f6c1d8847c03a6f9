"""
Tests for top-level project extraction.
"""

import json
from types import SimpleNamespace

import pytest

from mxextract.extraction.project import ProjectExtractor, extract_project
from mxextract.persist import render_document


def _model(modules=(), securities=(), project_name="Shop"):
    return SimpleNamespace(
        all_modules=lambda: list(modules),
        all_project_securities=lambda: list(securities),
        project_name=project_name,
    )


class TestProjectExtraction:
    """Test whole-project projection."""

    @pytest.mark.asyncio
    async def test_security_fallback(self, settings, fixed_clock):
        """Test the project security fallback for a model without one."""
        document = await extract_project(_model(), settings=settings, clock=fixed_clock)

        assert document.project_security.to_json_dict() == {
            "securityLevel": "none",
            "checkSecurity": False,
            "userRoles": [],
        }
        assert document.modules == []

    @pytest.mark.asyncio
    async def test_first_project_security_is_used(self, settings, fixed_clock, make_node):
        """Test that only the first project security is read."""
        securities = [
            make_node(
                security_level="CheckEverything",
                check_security=True,
                user_roles=[make_node(name="Administrator")],
            ),
            make_node(security_level="CheckNothing"),
        ]

        document = await extract_project(
            _model(securities=securities), settings=settings, clock=fixed_clock
        )

        assert document.project_security.security_level == "CheckEverything"
        assert document.project_security.check_security is True
        assert [r.name for r in document.project_security.user_roles] == ["Administrator"]

    @pytest.mark.asyncio
    async def test_failing_project_security(self, settings, fixed_clock, failing_handle):
        """Test that a failing project security falls back with a warning."""
        extractor = ProjectExtractor(settings=settings, clock=fixed_clock)

        document = await extractor.extract_project(
            _model(securities=[failing_handle("Security")])
        )

        assert document.project_security.security_level == "none"
        assert [w.unit_kind for w in extractor.warnings] == ["projectSecurity"]

    @pytest.mark.asyncio
    async def test_module_order_and_failure(self, settings, fixed_clock, make_node, failing_handle):
        """Test that modules keep their order and failing modules are skipped."""
        modules = [
            make_node("Projects$Module", name="Sales"),
            failing_handle("Broken"),
            make_node("Projects$Module", name="Administration"),
        ]
        extractor = ProjectExtractor(settings=settings, clock=fixed_clock)

        document = await extractor.extract_project(_model(modules=modules))

        assert [m.name for m in document.modules] == ["Sales", "Administration"]
        assert len(extractor.warnings) == 1
        assert extractor.warnings[0].unit_kind == "module"
        assert extractor.warnings[0].unit_name == "Broken"

    @pytest.mark.asyncio
    async def test_excluded_modules(self, settings, fixed_clock, make_node):
        """Test that excluded modules are left out."""
        settings.excluded_modules = ["System"]
        modules = [make_node(name="System"), make_node(name="Sales")]

        document = await extract_project(
            _model(modules=modules), settings=settings, clock=fixed_clock
        )

        assert [m.name for m in document.modules] == ["Sales"]

    @pytest.mark.asyncio
    async def test_project_name_precedence(self, settings, fixed_clock):
        """Test the precedence of the project name sources."""
        model = _model(project_name="FromModel")

        document = await extract_project(model, settings=settings, clock=fixed_clock)
        assert document.project_name == "FromModel"

        settings.project_name = "FromSettings"
        document = await extract_project(model, settings=settings, clock=fixed_clock)
        assert document.project_name == "FromSettings"

        document = await extract_project(
            model, project_name="FromArgument", settings=settings, clock=fixed_clock
        )
        assert document.project_name == "FromArgument"

    @pytest.mark.asyncio
    async def test_injected_loader(self, settings, fixed_clock, make_node):
        """Test that an injected loader is used for every load."""
        loaded = []

        async def loader(handle):
            loaded.append(handle.name)
            return handle

        await extract_project(
            _model(modules=[make_node(name="Sales")]),
            loader=loader,
            settings=settings,
            clock=fixed_clock,
        )

        assert loaded == ["Sales"]


class TestDocument:
    """Test the shape of the extracted document."""

    @pytest.mark.asyncio
    async def test_top_level_keys(self, settings, fixed_clock, sales_model):
        """Test the top-level keys of the document."""
        document = await extract_project(sales_model, settings=settings, clock=fixed_clock)
        data = json.loads(render_document(document, indent=2))

        assert list(data) == [
            "projectName",
            "schemaVersion",
            "extractedAt",
            "projectSecurity",
            "modules",
        ]
        assert data["projectName"] == "Shop"
        assert data["schemaVersion"] == "1.0"
        assert data["extractedAt"].startswith("2024-01-01T00:00:00")

    @pytest.mark.asyncio
    async def test_extraction_is_idempotent(self, settings, fixed_clock, sales_model):
        """Test that two runs produce the same document."""
        first = await extract_project(sales_model, settings=settings, clock=fixed_clock)
        second = await extract_project(sales_model, settings=settings, clock=fixed_clock)

        assert render_document(first, indent=2) == render_document(second, indent=2)

    @pytest.mark.asyncio
    async def test_sales_snapshot(self, settings, fixed_clock, sales_model):
        """Test extracting the shop snapshot end to end."""
        extractor = ProjectExtractor(settings=settings, clock=fixed_clock)
        document = await extractor.extract_project(sales_model)
        data = document.to_json_dict()

        assert extractor.warnings == []
        assert data["projectSecurity"] == {
            "securityLevel": "CheckEverything",
            "checkSecurity": True,
            "userRoles": [
                {
                    "name": "Administrator",
                    "description": "Can do everything",
                    "moduleRoles": ["Sales.Admin"],
                }
            ],
        }

        sales = data["modules"][0]
        assert sales["name"] == "Sales"
        assert sales["security"] == {
            "moduleRoles": [{"name": "Admin", "description": "Full access"}]
        }

        customer, order = sales["domainModel"]["entities"]
        assert customer["attributes"][0]["type"] == {"kind": "String", "length": 200}
        assert order["attributes"][0]["value"] == {"kind": "StoredValue", "defaultValue": "0"}
        assert order["validationRules"] == [
            {
                "attribute": "Sales.Order.Amount",
                "ruleType": {"kind": "Required"},
                "errorMessage": {"translations": [{"languageCode": "en_US", "text": "Required"}]},
            }
        ]
        assert order["accessRules"][0]["moduleRoles"] == ["Sales.Admin"]
        assert sales["domainModel"]["associations"][0]["parent"] == "Sales.Order"
        assert sales["domainModel"]["associations"][0]["child"] == "Sales.Customer"

        (microflow,) = sales["microflows"]
        assert microflow["qualifiedName"] == "Sales.ACT_ApproveOrder"
        assert microflow["returnType"] == {"kind": "Boolean"}
        assert microflow["security"] == {
            "allowedRoles": ["Sales.Admin"],
            "applyEntityAccess": True,
            "allowConcurrentExecution": True,
        }
        assert microflow["parameters"] == [
            {
                "id": "p1",
                "name": "Order",
                "type": {"kind": "Object", "entity": "Sales.Order"},
                "documentation": "",
            }
        ]
        assert [a["id"] for a in microflow["activities"]] == ["s1", "x1", "a1", "e1"]
        assert microflow["activities"][2]["errorHandlingType"] == "Rollback"
        assert [(f["origin"], f["destination"]) for f in microflow["flows"]] == [
            ("s1", "x1"),
            ("x1", "a1"),
            ("x1", "m1"),
            ("a1", "m1"),
            ("m1", "e1"),
        ]
        assert microflow["flows"][1]["caseValue"] == {"kind": "Enumeration", "value": "true"}
        assert microflow["flows"][3]["caseValue"] is None
