"""Integration domain enums for type safety and domain modeling."""

from datetime import date, datetime
from enum import Enum


class IntegrationType(Enum):
    """Kinds of external systems an integration can connect to."""

    API = "api"
    DATABASE = "database"
    FILE = "file"
    EMAIL = "email"

    def __str__(self) -> str:
        """Return human-readable string representation."""
        if self == IntegrationType.API:
            return "API"
        return self.value.title()

    @property
    def supports_sync(self) -> bool:
        """Check if this integration type supports scheduled synchronization."""
        return self in {IntegrationType.API, IntegrationType.DATABASE, IntegrationType.FILE}


class IntegrationStatus(Enum):
    """Lifecycle states of an integration."""

    DRAFT = "draft"
    ACTIVE = "active"
    PAUSED = "paused"
    ARCHIVED = "archived"

    def __str__(self) -> str:
        return self.value.title()

    @property
    def is_terminal(self) -> bool:
        return self == IntegrationStatus.ARCHIVED

    @property
    def can_execute(self) -> bool:
        return self == IntegrationStatus.ACTIVE

    @property
    def allows_config_changes(self) -> bool:
        """Configuration edits are allowed until the integration is archived."""
        return self != IntegrationStatus.ARCHIVED


class AuthType(Enum):
    """Authentication schemes for external integrations."""

    API_KEY = "api_key"
    OAUTH = "oauth"
    BASIC = "basic"

    def __str__(self) -> str:
        """Return human-readable string representation."""
        if self == AuthType.API_KEY:
            return "API Key"
        if self == AuthType.OAUTH:
            return "OAuth"
        return self.value.title()

    @property
    def is_token_based(self) -> bool:
        return self in {AuthType.API_KEY, AuthType.OAUTH}

    @property
    def supports_refresh(self) -> bool:
        return self == AuthType.OAUTH


class HttpMethod(Enum):
    """HTTP methods an endpoint may use."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"

    def __str__(self) -> str:
        return self.value

    @property
    def has_body(self) -> bool:
        return self in {HttpMethod.POST, HttpMethod.PUT, HttpMethod.PATCH}


class FieldType(Enum):
    """Value types a schema field can declare."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    ARRAY = "array"
    OBJECT = "object"

    def __str__(self) -> str:
        return self.value

    def matches(self, value) -> bool:
        """Check whether a concrete value conforms to this field type."""
        if self == FieldType.STRING:
            return isinstance(value, str)
        if self == FieldType.NUMBER:
            return isinstance(value, int | float) and not isinstance(value, bool)
        if self == FieldType.BOOLEAN:
            return isinstance(value, bool)
        if self == FieldType.DATE:
            if isinstance(value, date | datetime):
                return True
            if isinstance(value, str):
                try:
                    datetime.fromisoformat(value.replace("Z", "+00:00"))
                except ValueError:
                    return False
                return True
            return False
        if self == FieldType.ARRAY:
            return isinstance(value, list | tuple)
        return isinstance(value, dict)


class TransformationKind(Enum):
    """How a field mapping derives its target value."""

    DIRECT = "direct"
    FORMAT = "format"
    LOOKUP = "lookup"
    EXPRESSION = "expression"

    def __str__(self) -> str:
        return self.value

    @property
    def requires_config(self) -> bool:
        """Lookup and expression mappings cannot run without configuration."""
        return self in {TransformationKind.LOOKUP, TransformationKind.EXPRESSION}


class SyncDirection(Enum):
    """Data synchronization directions."""

    PULL = "pull"
    PUSH = "push"
    BIDIRECTIONAL = "bidirectional"

    def __str__(self) -> str:
        return self.value.title()

    @property
    def pulls(self) -> bool:
        return self in {SyncDirection.PULL, SyncDirection.BIDIRECTIONAL}


class ScheduleType(Enum):
    """How a sync job decides when to run next."""

    INTERVAL = "interval"
    CRON = "cron"

    def __str__(self) -> str:
        return self.value


class ConflictResolution(Enum):
    """Policy applied when a synced record already exists at the target."""

    SOURCE_WINS = "source_wins"
    TARGET_WINS = "target_wins"
    MERGE = "merge"

    def __str__(self) -> str:
        return self.value.replace("_", " ").title()


class SyncJobStatus(Enum):
    """Run state of a sync job."""

    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value.title()

    @property
    def is_running(self) -> bool:
        return self == SyncJobStatus.RUNNING


class HealthStatus(Enum):
    """Health buckets derived from the health score."""

    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"

    def __str__(self) -> str:
        return self.value.title()

    @property
    def severity(self) -> int:
        return {
            HealthStatus.HEALTHY: 0,
            HealthStatus.WARNING: 1,
            HealthStatus.CRITICAL: 2,
        }[self]


class ExecutionErrorKind(Enum):
    """Categories of execution failures."""

    PRECONDITION = "precondition"
    TIMEOUT = "timeout"
    AUTHENTICATION = "authentication"
    RATE_LIMIT = "rate_limit"
    CONNECTION = "connection"
    TRANSFORMATION = "transformation"
    VALIDATION = "validation"

    def __str__(self) -> str:
        return self.value

    @property
    def is_recoverable(self) -> bool:
        """Whether retrying the same execution later may succeed."""
        return self in {
            ExecutionErrorKind.TIMEOUT,
            ExecutionErrorKind.RATE_LIMIT,
            ExecutionErrorKind.CONNECTION,
        }


class ExecutionTrigger(Enum):
    """What caused an execution."""

    MANUAL = "manual"
    SCHEDULED = "scheduled"
    WEBHOOK = "webhook"
    API = "api"
    SYNC = "sync"

    def __str__(self) -> str:
        return self.value


class StatsPeriod(Enum):
    """Reporting periods for integration statistics."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"

    def __str__(self) -> str:
        return self.value

    @property
    def days(self) -> int:
        return {
            StatsPeriod.DAY: 1,
            StatsPeriod.WEEK: 7,
            StatsPeriod.MONTH: 30,
            StatsPeriod.YEAR: 365,
        }[self]


class StatusAction(Enum):
    """Lifecycle actions accepted by status-change commands."""

    ACTIVATE = "activate"
    PAUSE = "pause"
    RESUME = "resume"
    ARCHIVE = "archive"

    def __str__(self) -> str:
        return self.value
