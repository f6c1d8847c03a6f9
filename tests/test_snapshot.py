"""
Tests for JSON model snapshots.
"""

import json

import pytest

from mxextract.resolver import load_handle, resolve_ref
from mxextract.snapshot import ModelReference, SnapshotModel, load_snapshot
from mxextract.utils.errors import ModelLoadError, SnapshotFormatError


class TestSnapshotModel:
    """Test the snapshot-backed model source."""

    def test_modules_and_securities(self, sales_model):
        """Test reading modules and project securities."""
        assert sales_model.project_name == "Shop"
        assert [m.name for m in sales_model.all_modules()] == ["Sales"]
        assert len(sales_model.all_project_securities()) == 1

    def test_qualified_names(self, sales_model):
        """Test derived qualified names."""
        (module,) = sales_model.all_modules()
        order = module.domain_model.entities[1]

        assert module.qualified_name == "Sales"
        assert order.qualified_name == "Sales.Order"
        assert order.attributes[0].qualified_name == "Sales.Order.Amount"

    def test_folders_do_not_contribute_to_qualified_names(self, sales_model):
        """Test that folders do not contribute to qualified names."""
        (module,) = sales_model.all_modules()
        (folder,) = module.folders
        (microflow,) = folder.documents

        assert folder.qualified_name is None
        assert microflow.qualified_name == "Sales.ACT_ApproveOrder"

    def test_snake_case_field_access(self, sales_model):
        """Test snake_case access to camelCase fields."""
        (module,) = sales_model.all_modules()
        assert module.domain_model.structure_type_name == "DomainModels$DomainModel"
        assert module.module_security.module_roles[0].name == "Admin"
        assert module.missing_field is None

    def test_lookup(self, sales_model):
        """Test looking up elements by qualified name or identifier."""
        assert sales_model.lookup("Sales.Customer").name == "Customer"
        assert sales_model.lookup("s1").structure_type_name == "Microflows$StartEvent"
        with pytest.raises(ModelLoadError, match="no such element"):
            sales_model.lookup("Sales.Missing")

    @pytest.mark.asyncio
    async def test_reference_loads_target(self, sales_model):
        """Test that loading a reference returns its target."""
        (role,) = sales_model.all_project_securities()[0].user_roles
        (reference,) = role.module_roles

        assert isinstance(reference, ModelReference)
        assert resolve_ref(reference) == "Sales.Admin"
        assert (await load_handle(reference)).description == "Full access"

    @pytest.mark.asyncio
    async def test_load_error(self):
        """Test that $LoadError makes the element fail to load."""
        model = SnapshotModel(
            {
                "modules": [
                    {"$Type": "Projects$Module", "name": "Sales", "$LoadError": "unit is locked"}
                ]
            }
        )
        with pytest.raises(ModelLoadError, match="unit is locked"):
            await load_handle(model.all_modules()[0])

    def test_empty_reference(self):
        """Test that an empty reference becomes None."""
        model = SnapshotModel({"modules": [{"name": "Sales", "documents": [{"$Ref": ""}]}]})
        assert model.all_modules()[0].documents == [None]

    def test_invalid_structure(self):
        """Test that an invalid structure raises SnapshotFormatError."""
        with pytest.raises(SnapshotFormatError, match="must be lists"):
            SnapshotModel({"modules": {"Sales": {}}})
        with pytest.raises(SnapshotFormatError, match="root must be an object"):
            SnapshotModel([])


class TestLoadSnapshot:
    """Test reading snapshot files."""

    def test_load(self, tmp_path, sales_snapshot):
        """Test loading a snapshot file."""
        path = tmp_path / "sales.json"
        path.write_text(json.dumps(sales_snapshot), encoding="utf-8")

        model = load_snapshot(path)

        assert model.source == str(path)
        assert model.all_modules()[0].name == "Sales"

    def test_missing_file(self, tmp_path):
        """Test that a missing file raises SnapshotFormatError."""
        with pytest.raises(SnapshotFormatError, match="file not found"):
            load_snapshot(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        """Test that invalid JSON raises SnapshotFormatError."""
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(SnapshotFormatError, match="Invalid model snapshot"):
            load_snapshot(path)
