"""
Boundary schemas.

JSON-serializable snapshots exchanged with the persistence and API
collaborators. Parsing a snapshot checks its shape (pydantic); turning
it into domain state with to_domain() re-runs the domain validators and
returns a Result.

Usage:
    # From JSON (storage or request body)
    snapshot = AppSnapshotModel.model_validate(payload)
    app = snapshot.to_domain().unwrap()

    request = CreateRunRequest.model_validate(
        {"input_values": [{"title": "id", "value": "42"}]}
    )
    result = prepare_run(app, resource, request.to_domain())

    # To JSON
    RunSnapshotModel.from_domain(run.state).model_dump(mode="json")
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, Field, SecretStr

from tooldeck.config import get_settings
from tooldeck.domain import resource as resource_aggregate
from tooldeck.domain.app import App
from tooldeck.domain.errors import DomainError
from tooldeck.domain.inputs import Input, InputKind, InputType, RadioOption, validate_inputs
from tooldeck.domain.request import ExecutableHttpRequest
from tooldeck.domain.resource import Resource
from tooldeck.domain.result import Result, collect
from tooldeck.domain.run import Run, RunInputValue
from tooldeck.domain.values import (
    DatabaseConfig,
    HttpMethod,
    RunStatus,
    validate_app_name,
    validate_pairs,
    validate_url_path,
)
from tooldeck.services.conflicts import AppConflictSnapshot


def _default_use_json_body() -> bool:
    return get_settings().default_use_json_body


# =============================================================================
# Shared
# =============================================================================


class KeyValueModel(BaseModel):
    key: str
    value: str


def _pairs(items: list[KeyValueModel]) -> list[tuple[str, str]]:
    return [(item.key, item.value) for item in items]


def _models(pairs: Any) -> list[KeyValueModel]:
    return [KeyValueModel(key=pair.key, value=pair.value) for pair in pairs]


# =============================================================================
# Resource
# =============================================================================


class DatabaseConfigModel(BaseModel):
    """SQL connection settings. The password is a SecretStr."""

    engine: str = "postgres"
    database_name: str
    host: str
    port: int
    auth_scheme: str = "username_password"
    username: str
    password: SecretStr
    use_ssl: bool = True
    enable_ssh_tunnel: bool = False
    connection_options: list[KeyValueModel] = Field(default_factory=list)

    def to_domain(self) -> Result[DatabaseConfig]:
        return DatabaseConfig.create(
            engine=self.engine,
            database_name=self.database_name,
            host=self.host,
            port=self.port,
            auth_scheme=self.auth_scheme,
            username=self.username,
            password=self.password.get_secret_value(),
            use_ssl=self.use_ssl,
            enable_ssh_tunnel=self.enable_ssh_tunnel,
            connection_options=_pairs(self.connection_options),
        )


class ResourceSnapshotModel(BaseModel):
    """
    Stored form of a Resource.

    kind selects which field set is read: base_url and the key-value
    collections for HTTP, database for SQL.
    """

    id: UUID
    name: str
    description: str
    space_id: UUID
    kind: Literal["HTTP", "SQL"] = "HTTP"
    base_url: str | None = None
    url_parameters: list[KeyValueModel] = Field(default_factory=list)
    headers: list[KeyValueModel] = Field(default_factory=list)
    body: list[KeyValueModel] = Field(default_factory=list)
    database: DatabaseConfigModel | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    is_deleted: bool = False

    def to_domain(self) -> Result[Resource]:
        if self.kind == "SQL":
            if self.database is None:
                return Result.fail(
                    DomainError.validation("SQL resource requires database settings")
                )
            created = self.database.to_domain().bind(
                lambda database: resource_aggregate.create_sql(
                    name=self.name,
                    description=self.description,
                    space_id=self.space_id,
                    database=database,
                    resource_id=self.id,
                )
            )
        else:
            created = resource_aggregate.create_http(
                name=self.name,
                description=self.description,
                space_id=self.space_id,
                base_url=self.base_url,
                url_parameters=_pairs(self.url_parameters),
                headers=_pairs(self.headers),
                body=_pairs(self.body),
                resource_id=self.id,
            )

        return created.map(
            lambda aggregate: aggregate.with_state(
                created_at=self.created_at or aggregate.state.created_at,
                updated_at=self.updated_at or aggregate.state.updated_at,
                is_deleted=self.is_deleted,
            ).state
        )

    @classmethod
    def from_domain(cls, resource: Resource) -> ResourceSnapshotModel:
        database = None
        if resource.database is not None:
            config = resource.database
            database = DatabaseConfigModel(
                engine=config.engine.value,
                database_name=config.database_name,
                host=config.host,
                port=config.port,
                auth_scheme=config.auth_scheme.value,
                username=config.username,
                password=config.password,
                use_ssl=config.use_ssl,
                enable_ssh_tunnel=config.enable_ssh_tunnel,
                connection_options=_models(config.connection_options),
            )
        return cls(
            id=resource.id,
            name=resource.name,
            description=resource.description,
            space_id=resource.space_id,
            kind=resource.kind.value,
            base_url=resource.base_url,
            url_parameters=_models(resource.url_parameters),
            headers=_models(resource.headers),
            body=_models(resource.body),
            database=database,
            created_at=resource.created_at,
            updated_at=resource.updated_at,
            is_deleted=resource.is_deleted,
        )


# =============================================================================
# App
# =============================================================================


class RadioOptionModel(BaseModel):
    value: str
    label: str | None = None


class InputTypeModel(BaseModel):
    """
    Declared Input type.

    Which of max_length / currency / options / allowed is required
    depends on kind, mirroring the InputType factories.
    """

    kind: InputKind
    max_length: int | None = None
    currency: str | None = None
    options: list[RadioOptionModel] = Field(default_factory=list)
    allowed: list[str] = Field(default_factory=list)

    def to_domain(self) -> Result[InputType]:
        kind = self.kind
        if kind == InputKind.EMAIL:
            return Result.ok(InputType.email())
        if kind == InputKind.DATE:
            return Result.ok(InputType.date())
        if kind == InputKind.INTEGER:
            return Result.ok(InputType.integer())
        if kind == InputKind.BOOLEAN:
            return Result.ok(InputType.boolean())
        if kind == InputKind.TEXT:
            return InputType.text(self.max_length or 0)
        if kind == InputKind.CURRENCY:
            return InputType.currency_of(self.currency or "")
        if kind == InputKind.RADIO:
            return InputType.radio(
                RadioOption(option.value, option.label) for option in self.options
            )
        if kind == InputKind.MULTI_EMAIL:
            return InputType.multi_email(self.allowed)
        if kind == InputKind.MULTI_DATE:
            return InputType.multi_date(self.allowed)
        if kind == InputKind.MULTI_TEXT:
            return InputType.multi_text(self.max_length or 0, self.allowed)
        return InputType.multi_integer(self.allowed)


class InputModel(BaseModel):
    title: str
    type: InputTypeModel
    required: bool = False
    description: str | None = None
    default_value: str | None = None

    def to_domain(self) -> Result[Input]:
        return self.type.to_domain().bind(
            lambda input_type: Input.create(
                self.title,
                input_type,
                required=self.required,
                description=self.description,
                default_value=self.default_value,
            )
        )

    @classmethod
    def from_domain(cls, item: Input) -> InputModel:
        return cls.model_validate(item.to_dict())


class AppSnapshotModel(BaseModel):
    """Stored form of an App."""

    id: UUID
    name: str
    folder_id: UUID
    resource_id: UUID
    http_method: str = "GET"
    inputs: list[InputModel] = Field(default_factory=list)
    url_path: str | None = None
    url_parameters: list[KeyValueModel] = Field(default_factory=list)
    headers: list[KeyValueModel] = Field(default_factory=list)
    body: list[KeyValueModel] = Field(default_factory=list)
    use_json_body: bool = Field(default_factory=_default_use_json_body)
    created_at: datetime | None = None
    updated_at: datetime | None = None
    is_deleted: bool = False

    def to_domain(self) -> Result[App]:
        """
        Rebuild App state.

        Key conflicts with the Resource were checked when the App was
        stored and are not re-checked here.
        """
        name = validate_app_name(self.name)
        if name.is_error:
            return Result.fail(name.error)

        method = HttpMethod.from_string(self.http_method)
        if method.is_error:
            return Result.fail(method.error)

        inputs = collect(item.to_domain() for item in self.inputs).bind(validate_inputs)
        if inputs.is_error:
            return Result.fail(inputs.error)

        url_path = validate_url_path(self.url_path)
        if url_path.is_error:
            return Result.fail(url_path.error)

        collections = collect(
            validate_pairs(_pairs(items)) for items in (self.url_parameters, self.headers, self.body)
        )
        if collections.is_error:
            return Result.fail(collections.error)
        url_parameters, headers, body = collections.value

        return Result.ok(
            App(
                id=self.id,
                name=name.value,
                folder_id=self.folder_id,
                resource_id=self.resource_id,
                http_method=method.value,
                inputs=inputs.value,
                url_path=url_path.value,
                url_parameters=url_parameters,
                headers=headers,
                body=body,
                use_json_body=self.use_json_body,
                created_at=self.created_at,
                updated_at=self.updated_at,
                is_deleted=self.is_deleted,
            )
        )

    @classmethod
    def from_domain(cls, app: App) -> AppSnapshotModel:
        return cls(
            id=app.id,
            name=app.name,
            folder_id=app.folder_id,
            resource_id=app.resource_id,
            http_method=app.http_method.value,
            inputs=[InputModel.from_domain(item) for item in app.inputs],
            url_path=app.url_path,
            url_parameters=_models(app.url_parameters),
            headers=_models(app.headers),
            body=_models(app.body),
            use_json_body=app.use_json_body,
            created_at=app.created_at,
            updated_at=app.updated_at,
            is_deleted=app.is_deleted,
        )

    def conflict_snapshot(self) -> AppConflictSnapshot:
        """Conflict snapshot straight from stored data, without rebuilding the App."""
        return AppConflictSnapshot(
            app_id=self.id,
            url_parameters=tuple(_pairs(self.url_parameters)),
            headers=tuple(_pairs(self.headers)),
            body=tuple(_pairs(self.body)),
        )


# =============================================================================
# Run
# =============================================================================


class RunInputValueModel(BaseModel):
    title: str
    value: str

    def to_domain(self) -> RunInputValue:
        return RunInputValue(self.title, self.value)


class CreateRunRequest(BaseModel):
    """Body of a "run this App" call."""

    input_values: list[RunInputValueModel] = Field(default_factory=list)

    def to_domain(self) -> tuple[RunInputValue, ...]:
        return tuple(item.to_domain() for item in self.input_values)


class ExecutableHttpRequestModel(BaseModel):
    base_url: str
    url_parameters: list[KeyValueModel] = Field(default_factory=list)
    headers: list[KeyValueModel] = Field(default_factory=list)
    body: list[KeyValueModel] = Field(default_factory=list)
    http_method: str
    use_json_body: bool = True

    def to_domain(self) -> Result[ExecutableHttpRequest]:
        method = HttpMethod.from_string(self.http_method)
        if method.is_error:
            return Result.fail(method.error)
        return Result.ok(
            ExecutableHttpRequest(
                base_url=self.base_url,
                url_parameters=tuple(_pairs(self.url_parameters)),
                headers=tuple(_pairs(self.headers)),
                body=tuple(_pairs(self.body)),
                http_method=method.value.value,
                use_json_body=self.use_json_body,
            )
        )

    @classmethod
    def from_domain(cls, request: ExecutableHttpRequest) -> ExecutableHttpRequestModel:
        def to_models(pairs: tuple[tuple[str, str], ...]) -> list[KeyValueModel]:
            return [KeyValueModel(key=key, value=value) for key, value in pairs]

        return cls(
            base_url=request.base_url,
            url_parameters=to_models(request.url_parameters),
            headers=to_models(request.headers),
            body=to_models(request.body),
            http_method=request.http_method,
            use_json_body=request.use_json_body,
        )


class RunSnapshotModel(BaseModel):
    """Stored / returned form of a Run."""

    id: UUID
    app_id: UUID
    status: str
    input_values: list[RunInputValueModel] = Field(default_factory=list)
    executable_request: ExecutableHttpRequestModel | None = None
    response: str | None = None
    error_message: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    created_at: datetime | None = None

    def to_domain(self) -> Result[Run]:
        """
        Rebuild Run state, e.g. between start_run and record_outcome.

        Input values are not re-checked against the App; they were
        validated when the Run was created. Wrap the state with
        Aggregate.create(run) to continue the lifecycle.
        """
        status = RunStatus.from_string(self.status)
        if status.is_error:
            return Result.fail(status.error)

        request: ExecutableHttpRequest | None = None
        if self.executable_request is not None:
            converted = self.executable_request.to_domain()
            if converted.is_error:
                return Result.fail(converted.error)
            request = converted.value

        return Result.ok(
            Run(
                id=self.id,
                app_id=self.app_id,
                status=status.value,
                input_values=tuple(item.to_domain() for item in self.input_values),
                executable_request=request,
                response=self.response,
                error_message=self.error_message,
                started_at=self.started_at,
                completed_at=self.completed_at,
                created_at=self.created_at,
            )
        )

    @classmethod
    def from_domain(cls, run: Run) -> RunSnapshotModel:
        request = None
        if run.executable_request is not None:
            request = ExecutableHttpRequestModel.from_domain(run.executable_request)
        return cls(
            id=run.id,
            app_id=run.app_id,
            status=run.status.value,
            input_values=[RunInputValueModel(**item.to_dict()) for item in run.input_values],
            executable_request=request,
            response=run.response,
            error_message=run.error_message,
            started_at=run.started_at,
            completed_at=run.completed_at,
            created_at=run.created_at,
        )


__all__ = [
    "KeyValueModel",
    "DatabaseConfigModel",
    "ResourceSnapshotModel",
    "RadioOptionModel",
    "InputTypeModel",
    "InputModel",
    "AppSnapshotModel",
    "RunInputValueModel",
    "CreateRunRequest",
    "ExecutableHttpRequestModel",
    "RunSnapshotModel",
]
