"""Static catalog of integration types and starter templates."""

from typing import Any

from flowcreate.modules.integration.domain.enums import AuthType, IntegrationType

INTEGRATION_TYPES: tuple[dict[str, Any], ...] = (
    {
        "type": IntegrationType.API.value,
        "name": "REST API",
        "description": "Connect to REST APIs",
        "auth_types": [AuthType.API_KEY.value, AuthType.OAUTH.value, AuthType.BASIC.value],
        "capabilities": ["read", "write", "webhook"],
    },
    {
        "type": IntegrationType.DATABASE.value,
        "name": "Database",
        "description": "Connect to databases",
        "auth_types": [AuthType.BASIC.value],
        "capabilities": ["read", "write", "sync"],
    },
    {
        "type": IntegrationType.FILE.value,
        "name": "File System",
        "description": "Process files",
        "auth_types": [AuthType.API_KEY.value, AuthType.BASIC.value],
        "capabilities": ["read", "write", "watch"],
    },
    {
        "type": IntegrationType.EMAIL.value,
        "name": "Email",
        "description": "Email integration",
        "auth_types": [AuthType.OAUTH.value, AuthType.BASIC.value],
        "capabilities": ["read", "send", "webhook"],
    },
)

INTEGRATION_TEMPLATES: tuple[dict[str, Any], ...] = (
    {
        "id": "salesforce_contacts",
        "name": "Salesforce Contacts Sync",
        "type": IntegrationType.API.value,
        "category": "crm",
        "description": "Sync contacts between Salesforce and your application",
        "config": {
            "type": IntegrationType.API.value,
            "endpoints": [],
            "auth": {"type": AuthType.OAUTH.value},
        },
    },
    {
        "id": "gmail_automation",
        "name": "Gmail Email Automation",
        "type": IntegrationType.EMAIL.value,
        "category": "communication",
        "description": "Automate email processing with Gmail",
        "config": {
            "type": IntegrationType.EMAIL.value,
            "endpoints": [],
            "auth": {"type": AuthType.OAUTH.value},
        },
    },
)


def available_integration_types() -> list[dict[str, Any]]:
    return [dict(item) for item in INTEGRATION_TYPES]


def find_templates(
    integration_type: str | None = None, category: str | None = None
) -> list[dict[str, Any]]:
    """Templates filtered by type and category (both optional, exact match)."""
    return [
        dict(template)
        for template in INTEGRATION_TEMPLATES
        if (integration_type is None or template["type"] == integration_type)
        and (category is None or template["category"] == category)
    ]
