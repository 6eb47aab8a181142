"""Filtering, sorting and paging of a user's integrations."""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from flowcreate.core.errors import ValidationError
from flowcreate.modules.integration.domain.aggregates import Integration
from flowcreate.modules.integration.domain.enums import IntegrationStatus, IntegrationType

SORT_FIELDS = ("name", "created_at", "last_run", "status")
SORT_ORDERS = ("asc", "desc")
MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class IntegrationFilters:
    """Conjunction of optional criteria. An integration must carry every tag."""

    term: str = ""
    status: IntegrationStatus | None = None
    integration_type: IntegrationType | None = None
    tags: frozenset[str] = field(default_factory=frozenset)
    created_after: datetime | None = None
    created_before: datetime | None = None

    @classmethod
    def parse(
        cls,
        term: str | None = None,
        status: IntegrationStatus | str | None = None,
        integration_type: IntegrationType | str | None = None,
        tags: Iterable[str] | None = None,
        created_after: datetime | None = None,
        created_before: datetime | None = None,
    ) -> "IntegrationFilters":
        """
        Raises:
            ValidationError: On unknown status or type, or an inverted date range
        """
        field_errors: dict[str, list[str]] = {}
        parsed_status = parsed_type = None
        if status is not None:
            try:
                parsed_status = IntegrationStatus(status)
            except ValueError:
                field_errors["status"] = [f"Unknown integration status '{status}'"]
        if integration_type is not None:
            try:
                parsed_type = IntegrationType(integration_type)
            except ValueError:
                field_errors["type"] = [f"Unknown integration type '{integration_type}'"]
        if created_after and created_before and created_after > created_before:
            field_errors["created_after"] = [
                "created_after must not be later than created_before"
            ]
        if field_errors:
            raise ValidationError.from_fields(field_errors)

        return cls(
            term=(term or "").strip(),
            status=parsed_status,
            integration_type=parsed_type,
            tags=frozenset(Integration.normalize_tags(tags or ())),
            created_after=created_after,
            created_before=created_before,
        )

    def matches(self, integration: Integration) -> bool:
        if self.status is not None and integration.status != self.status:
            return False
        if (
            self.integration_type is not None
            and integration.integration_type != self.integration_type
        ):
            return False
        if not self.tags <= integration.tags:
            return False
        if self.created_after and integration.created_at < self.created_after:
            return False
        if self.created_before and integration.created_at > self.created_before:
            return False
        return integration.matches_term(self.term)

    def apply(self, integrations: Iterable[Integration]) -> list[Integration]:
        return [integration for integration in integrations if self.matches(integration)]


def _sort_value(integration: Integration, sort_by: str) -> Any:
    if sort_by == "name":
        return integration.name.lower()
    if sort_by == "last_run":
        return integration.metrics.last_executed_at
    if sort_by == "status":
        return integration.status.value
    return integration.created_at


def sort_integrations(
    integrations: Sequence[Integration], sort_by: str = "created_at", sort_order: str = "desc"
) -> list[Integration]:
    """Sort by one of ``SORT_FIELDS``. Never-run integrations sort last for ``last_run``."""
    present = [i for i in integrations if _sort_value(i, sort_by) is not None]
    missing = [i for i in integrations if _sort_value(i, sort_by) is None]
    present.sort(key=lambda i: _sort_value(i, sort_by), reverse=sort_order == "desc")
    return present + missing


def validate_page(limit: int, offset: int) -> None:
    """
    Raises:
        ValidationError: If limit or offset is out of range
    """
    field_errors: dict[str, list[str]] = {}
    if not 1 <= limit <= MAX_PAGE_SIZE:
        field_errors["limit"] = [f"limit must be between 1 and {MAX_PAGE_SIZE}"]
    if offset < 0:
        field_errors["offset"] = ["offset cannot be negative"]
    if field_errors:
        raise ValidationError.from_fields(field_errors)


def paginate(items: Sequence[Any], limit: int, offset: int) -> list[Any]:
    return list(items[offset : offset + limit])
