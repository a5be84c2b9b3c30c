"""
Value objects for tooldeck.

Each value object validates on construction through a create() factory
that returns a Result. Values are frozen; the plain constructor is used
only for data that has already been validated (for example when
rehydrating from storage).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable

from pydantic import SecretStr

from .errors import DomainError
from .result import Result, collect

MAX_KEY_LENGTH = 100
MAX_VALUE_LENGTH = 1000

_BASE_URL_PATTERN = re.compile(r"^https?://[^\s/$.?#].[^\s]*$", re.IGNORECASE)


def _bounded_text(value: str | None, label: str, max_length: int) -> Result[str]:
    if value is None or not value.strip():
        return Result.fail(DomainError.validation(f"{label} cannot be empty"))
    if len(value) > max_length:
        return Result.fail(
            DomainError.validation(f"{label} cannot exceed {max_length} characters")
        )
    return Result.ok(value.strip())


# =============================================================================
# Key-Value Pairs
# =============================================================================


@dataclass(frozen=True, slots=True)
class KeyValuePair:
    """A validated (key, value) pair used for URL parameters, headers and body."""

    key: str
    value: str

    @classmethod
    def create(cls, key: str, value: str) -> Result[KeyValuePair]:
        if key is None or not key.strip():
            return Result.fail(DomainError.validation("Key cannot be empty"))
        if len(key) > MAX_KEY_LENGTH:
            return Result.fail(
                DomainError.validation(f"Key cannot exceed {MAX_KEY_LENGTH} characters")
            )
        if not value:
            return Result.fail(DomainError.validation("Value cannot be null"))
        if len(value) > MAX_VALUE_LENGTH:
            return Result.fail(
                DomainError.validation(f"Value cannot exceed {MAX_VALUE_LENGTH} characters")
            )
        return Result.ok(cls(key=key.strip(), value=value))

    def as_tuple(self) -> tuple[str, str]:
        return (self.key, self.value)

    def __str__(self) -> str:
        return f"{self.key}={self.value}"


def validate_pairs(pairs: Iterable[tuple[str, str]]) -> Result[tuple[KeyValuePair, ...]]:
    """Validate raw (key, value) tuples, stopping at the first invalid pair."""
    return collect(KeyValuePair.create(key, value) for key, value in pairs)


def pairs_to_tuples(pairs: Iterable[KeyValuePair]) -> tuple[tuple[str, str], ...]:
    return tuple(pair.as_tuple() for pair in pairs)


# =============================================================================
# Strings
# =============================================================================


def validate_base_url(url: str | None) -> Result[str]:
    if not url:
        return Result.fail(DomainError.validation("Base URL cannot be empty"))
    if len(url) > 1000:
        return Result.fail(DomainError.validation("Base URL cannot exceed 1000 characters"))
    if not _BASE_URL_PATTERN.match(url):
        return Result.fail(DomainError.validation("Invalid URL format"))
    return Result.ok(url.strip())


def validate_resource_name(name: str | None) -> Result[str]:
    return _bounded_text(name, "Resource name", 100)


def validate_resource_description(description: str | None) -> Result[str]:
    return _bounded_text(description, "Resource description", 500)


def validate_app_name(name: str | None) -> Result[str]:
    return _bounded_text(name, "App name", 100)


def validate_url_path(path: str | None) -> Result[str | None]:
    """Blank paths collapse to None; anything else is kept verbatim."""
    if path is None or not path.strip():
        return Result.ok(None)
    if len(path) > 500:
        return Result.fail(DomainError.validation("URL path cannot exceed 500 characters"))
    return Result.ok(path.strip())


# =============================================================================
# Enums
# =============================================================================


class HttpMethod(str, Enum):
    """HTTP methods an App may use."""

    DELETE = "DELETE"
    GET = "GET"
    PATCH = "PATCH"
    POST = "POST"
    PUT = "PUT"

    @classmethod
    def from_string(cls, value: str) -> Result[HttpMethod]:
        try:
            return Result.ok(cls((value or "").strip().upper()))
        except ValueError:
            return Result.fail(DomainError.validation(f"Invalid HTTP method: {value}"))

    def __str__(self) -> str:
        return self.value


class ResourceKind(str, Enum):
    """Resource flavours; their field sets are mutually exclusive."""

    HTTP = "HTTP"
    SQL = "SQL"

    @classmethod
    def from_string(cls, value: str) -> Result[ResourceKind]:
        try:
            return Result.ok(cls((value or "").strip().upper()))
        except ValueError:
            return Result.fail(DomainError.validation(f"Invalid resource kind: {value}"))

    def __str__(self) -> str:
        return self.value


class RunStatus(str, Enum):
    """
    Run lifecycle states.

    Pending -> Running -> {Success, Failure, InvalidConfiguration}.
    InvalidConfiguration may also be reached straight from Pending when
    validation or composition fails before any call is attempted.
    """

    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    FAILURE = "failure"
    INVALID_CONFIGURATION = "invalid_configuration"

    @classmethod
    def from_string(cls, value: str) -> Result[RunStatus]:
        try:
            return Result.ok(cls((value or "").strip().lower()))
        except ValueError:
            return Result.fail(DomainError.validation(f"Invalid run status: {value}"))

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATUSES

    def can_transition_to(self, target: RunStatus) -> bool:
        return target in _ALLOWED_TRANSITIONS.get(self, frozenset())

    def __str__(self) -> str:
        return _DISPLAY_NAMES[self]


_TERMINAL_STATUSES = frozenset(
    {RunStatus.SUCCESS, RunStatus.FAILURE, RunStatus.INVALID_CONFIGURATION}
)

_ALLOWED_TRANSITIONS: dict[RunStatus, frozenset[RunStatus]] = {
    RunStatus.PENDING: frozenset({RunStatus.RUNNING, RunStatus.INVALID_CONFIGURATION}),
    RunStatus.RUNNING: frozenset(
        {RunStatus.SUCCESS, RunStatus.FAILURE, RunStatus.INVALID_CONFIGURATION}
    ),
}

_DISPLAY_NAMES = {
    RunStatus.PENDING: "Pending",
    RunStatus.RUNNING: "Running",
    RunStatus.SUCCESS: "Success",
    RunStatus.FAILURE: "Failure",
    RunStatus.INVALID_CONFIGURATION: "InvalidConfiguration",
}


class DatabaseEngine(str, Enum):
    POSTGRES = "POSTGRES"

    @classmethod
    def from_string(cls, value: str) -> Result[DatabaseEngine]:
        normalized = (value or "").strip().upper().replace("-", "_")
        if normalized in ("POSTGRES", "POSTGRESQL", "PG"):
            return Result.ok(cls.POSTGRES)
        return Result.fail(DomainError.validation(f"Invalid database engine: {value}"))


class DatabaseAuthScheme(str, Enum):
    USERNAME_PASSWORD = "USERNAME_PASSWORD"

    @classmethod
    def from_string(cls, value: str) -> Result[DatabaseAuthScheme]:
        normalized = (value or "").strip().upper().replace("-", "_")
        if normalized in ("USERNAME_PASSWORD", "USERPASSWORD", "USER_PASS"):
            return Result.ok(cls.USERNAME_PASSWORD)
        return Result.fail(
            DomainError.validation(f"Invalid database authentication scheme: {value}")
        )


# =============================================================================
# SQL connection settings
# =============================================================================


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    """
    Connection settings carried by a SQL Resource.

    The password is a SecretStr so it never shows up in reprs or logs.
    """

    engine: DatabaseEngine
    database_name: str
    host: str
    port: int
    auth_scheme: DatabaseAuthScheme
    username: str
    password: SecretStr
    use_ssl: bool = True
    enable_ssh_tunnel: bool = False
    connection_options: tuple[KeyValuePair, ...] = ()

    @classmethod
    def create(
        cls,
        *,
        database_name: str | None,
        host: str | None,
        port: int | None,
        username: str | None,
        password: str | None,
        engine: str = "postgres",
        auth_scheme: str = "username_password",
        use_ssl: bool = True,
        enable_ssh_tunnel: bool = False,
        connection_options: Iterable[tuple[str, str]] = (),
    ) -> Result[DatabaseConfig]:
        engine_result = DatabaseEngine.from_string(engine)
        if engine_result.is_error:
            return Result.fail(engine_result.error)

        name_result = _bounded_text(database_name, "Database name", 200)
        if name_result.is_error:
            return Result.fail(name_result.error)

        host_result = _bounded_text(host, "Database host", 255)
        if host_result.is_error:
            return Result.fail(host_result.error)

        if port is None:
            return Result.fail(DomainError.validation("Database port is required"))
        if port < 1 or port > 65535:
            return Result.fail(
                DomainError.validation("Database port must be between 1 and 65535")
            )

        scheme_result = DatabaseAuthScheme.from_string(auth_scheme)
        if scheme_result.is_error:
            return Result.fail(scheme_result.error)

        username_result = _bounded_text(username, "Database username", 128)
        if username_result.is_error:
            return Result.fail(username_result.error)

        if not password:
            return Result.fail(DomainError.validation("Database password cannot be empty"))
        if len(password) > 256:
            return Result.fail(
                DomainError.validation("Database password cannot exceed 256 characters")
            )

        options_result = validate_pairs(connection_options)
        if options_result.is_error:
            return Result.fail(options_result.error)

        return Result.ok(
            cls(
                engine=engine_result.value,
                database_name=name_result.value,
                host=host_result.value,
                port=port,
                auth_scheme=scheme_result.value,
                username=username_result.value,
                password=SecretStr(password),
                use_ssl=use_ssl,
                enable_ssh_tunnel=enable_ssh_tunnel,
                connection_options=options_result.value,
            )
        )

    def to_dict(self) -> dict[str, Any]:
        """Serializable form; the password stays masked."""
        return {
            "engine": self.engine.value,
            "database_name": self.database_name,
            "host": self.host,
            "port": self.port,
            "auth_scheme": self.auth_scheme.value,
            "username": self.username,
            "password": str(self.password),
            "use_ssl": self.use_ssl,
            "enable_ssh_tunnel": self.enable_ssh_tunnel,
            "connection_options": [
                {"key": option.key, "value": option.value} for option in self.connection_options
            ],
        }
