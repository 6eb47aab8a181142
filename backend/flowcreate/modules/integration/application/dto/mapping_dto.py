"""Data mapping DTOs for application layer."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID

from flowcreate.modules.integration.domain.aggregates import DataMapping


@dataclass(frozen=True)
class DataMappingDTO:
    """DTO for data mapping information."""

    id: UUID
    owner_id: UUID
    integration_id: UUID
    name: str
    description: str
    source_schema: dict[str, Any]
    target_schema: dict[str, Any]
    field_mappings: list[dict[str, Any]]
    is_active: bool
    mapping_version: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, mapping: DataMapping) -> "DataMappingDTO":
        """Create DTO from domain model."""
        return cls(
            id=mapping.id,
            owner_id=mapping.owner_id,
            integration_id=mapping.integration_id,
            name=mapping.name,
            description=mapping.description,
            source_schema=mapping.source_schema.to_dict(),
            target_schema=mapping.target_schema.to_dict(),
            field_mappings=[fm.to_dict() for fm in mapping.field_mappings],
            is_active=mapping.is_active,
            mapping_version=mapping.mapping_version,
            created_at=mapping.created_at,
            updated_at=mapping.updated_at,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": str(self.id),
            "owner_id": str(self.owner_id),
            "integration_id": str(self.integration_id),
            "name": self.name,
            "description": self.description,
            "source_schema": self.source_schema,
            "target_schema": self.target_schema,
            "field_mappings": list(self.field_mappings),
            "is_active": self.is_active,
            "mapping_version": self.mapping_version,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
