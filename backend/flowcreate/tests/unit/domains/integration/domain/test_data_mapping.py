"""
Test cases for DataMapping aggregate.
"""

from uuid import uuid4

import pytest

from flowcreate.core.errors import ValidationError
from flowcreate.modules.integration.domain.aggregates import DataMapping
from flowcreate.modules.integration.domain.enums import TransformationKind
from flowcreate.modules.integration.domain.events import DataMappingCreated
from flowcreate.modules.integration.domain.value_objects import FieldMapping


@pytest.fixture
def mapping(make_mapping):
    return make_mapping(uuid4())


@pytest.mark.unit
class TestDataMappingCreation:
    """Test mapping construction."""

    def test_create_mapping(self, owner_id, contact_source_schema, contact_target_schema):
        """Test a new mapping is active at version one."""
        integration_id = uuid4()

        mapping = DataMapping(
            owner_id=owner_id,
            integration_id=integration_id,
            name=" Contacts ",
            source_schema=contact_source_schema,
            target_schema=contact_target_schema,
        )

        assert mapping.name == "Contacts"
        assert mapping.is_active
        assert mapping.mapping_version == 1
        assert mapping.field_mappings == []
        event = mapping.get_events()[0]
        assert isinstance(event, DataMappingCreated)
        assert event.integration_id == integration_id

    def test_duplicate_target_rejected(
        self, owner_id, contact_source_schema, contact_target_schema
    ):
        """Test two rules may not write the same target field."""
        with pytest.raises(ValidationError, match="Target field 'id' is already mapped"):
            DataMapping(
                owner_id=owner_id,
                integration_id=uuid4(),
                name="Contacts",
                source_schema=contact_source_schema,
                target_schema=contact_target_schema,
                field_mappings=[FieldMapping("id", "id"), FieldMapping("email", "id")],
            )

    def test_duplicate_rule_id_rejected(self, mapping):
        """Test rule ids are unique within a mapping."""
        with pytest.raises(ValidationError, match="already exists"):
            mapping.add_field_mapping(FieldMapping("age", "other", mapping_id="fm_id"))

    def test_schemas_are_required(self, owner_id, contact_source_schema):
        """Test both schemas must be DataSchema instances."""
        with pytest.raises(ValidationError):
            DataMapping(
                owner_id=owner_id,
                integration_id=uuid4(),
                name="Contacts",
                source_schema=contact_source_schema,
                target_schema=None,
            )


@pytest.mark.unit
class TestDataMappingRules:
    """Test rule list changes."""

    def test_add_update_remove_bump_version(self, make_mapping):
        """Test every rule change increments the mapping version."""
        # Arrange
        mapping = make_mapping(uuid4(), field_mappings=[])

        # Act
        mapping.add_field_mapping(FieldMapping("id", "id", mapping_id="fm_a"))
        updated = mapping.update_field_mapping("fm_a", required=True)
        mapping.remove_field_mapping("fm_a")

        # Assert
        assert updated.required
        assert updated.id == "fm_a"
        assert mapping.mapping_version == 4
        assert mapping.field_mappings == []

    def test_update_keeps_position(self, mapping):
        """Test updated rules keep their declaration order."""
        mapping.update_field_mapping("fm_email", kind="format", config={"format": "lowercase"})

        assert [fm.id for fm in mapping.field_mappings] == [
            "fm_id",
            "fm_name",
            "fm_email",
            "fm_status",
        ]
        assert mapping.get_field_mapping("fm_email").kind == TransformationKind.FORMAT

    def test_update_to_taken_target_rejected(self, mapping):
        """Test an update cannot collide with another rule's target."""
        with pytest.raises(ValidationError, match="already mapped"):
            mapping.update_field_mapping("fm_email", target_field="name")

    def test_unknown_rule(self, mapping):
        """Test update and remove report unknown rule ids."""
        with pytest.raises(ValidationError, match="not found"):
            mapping.update_field_mapping("fm_missing", required=True)
        with pytest.raises(ValidationError, match="not found"):
            mapping.remove_field_mapping("fm_missing")


@pytest.mark.unit
class TestDataMappingValidation:
    """Test structural validation against the schemas."""

    def test_valid_mapping(self, mapping):
        """Test the contact mapping covers every target field."""
        result = mapping.validate_mapping()

        assert result.is_valid
        assert result.errors == ()
        assert result.warnings == ()

    def test_unmapped_required_and_optional_targets(self, make_mapping):
        """Test missing required targets are errors, optional ones warnings."""
        mapping = make_mapping(uuid4(), field_mappings=[FieldMapping("id", "id")])

        result = mapping.validate_mapping()

        assert not result.is_valid
        assert result.errors == ("Required target field 'name' is not mapped",)
        assert set(result.warnings) == {
            "Optional target field 'email' is not mapped",
            "Optional target field 'status' is not mapped",
        }

    def test_lookup_without_config(self, make_mapping):
        """Test lookup rules must carry a table."""
        mapping = make_mapping(
            uuid4(),
            field_mappings=[
                FieldMapping("id", "id"),
                FieldMapping("first_name", "name"),
                FieldMapping("status", "status", kind="lookup", mapping_id="fm_lk"),
            ],
        )

        result = mapping.validate_mapping()

        assert (
            "Mapping 'fm_lk' uses lookup transformation but has no transformation config"
            in result.errors
        )

    def test_expression_needs_expression_text(self, make_mapping):
        """Test expression rules must define the expression."""
        mapping = make_mapping(
            uuid4(),
            field_mappings=[
                FieldMapping("id", "id"),
                FieldMapping(
                    "first_name",
                    "name",
                    kind="expression",
                    config={"other": 1},
                    mapping_id="fm_expr",
                ),
            ],
        )

        result = mapping.validate_mapping()

        assert result.errors == ("Mapping 'fm_expr' expression config must define 'expression'",)

    def test_unknown_fields_reported(self, make_mapping):
        """Test references to fields absent from either schema."""
        mapping = make_mapping(
            uuid4(),
            field_mappings=[
                FieldMapping("id", "id"),
                FieldMapping("first_name", "name"),
                FieldMapping("phone", "mobile"),
            ],
        )

        result = mapping.validate_mapping()

        assert result.errors == (
            "Source field 'phone' does not exist in source schema",
            "Target field 'mobile' does not exist in target schema",
        )
