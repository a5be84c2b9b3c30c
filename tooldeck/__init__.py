"""
tooldeck - template composition and run execution for HTTP tools.

Operators define reusable connection templates (Resources) and
parameterized actions bound to them (Apps), then execute those actions
(Runs) with concrete input values. tooldeck is the engine in the middle:

- **Conflict checks**: Resource and App parameter keys never overlap
- **Composition**: Resource template + App additions -> one request
- **Substitution**: {title} placeholders resolved from Run inputs
- **Run lifecycle**: forward-only status machine with domain events

Network I/O, storage and authorization belong to the embedding
application.

Quick Start:
    >>> from tooldeck.domain import app, resource
    >>> from tooldeck.services.runs import prepare_run
    >>>
    >>> res = resource.create_http(
    ...     name="Users", description="Users API", space_id=space_id,
    ...     base_url="https://api.example.com/v1",
    ... ).unwrap()
    >>> get_user = app.create(
    ...     name="Get user", folder_id=folder_id, resource=res.state,
    ...     http_method="GET", inputs=[id_input], url_path="/users/{id}",
    ... ).unwrap()
    >>> run = prepare_run(get_user.state, res.state, {"id": "42"}).unwrap()
    >>> run.state.executable_request.base_url
    'https://api.example.com/v1/users/42'
"""

__version__ = "0.1.0"

# Core exports for convenient imports
from tooldeck.domain import (
    Aggregate,
    App,
    DomainError,
    ErrorKind,
    ExecutableHttpRequest,
    Resource,
    Result,
    Run,
    RunStatus,
)
from tooldeck.services.runs import prepare_run, record_outcome, start_run

__all__ = [
    # Version info
    "__version__",
    # Domain
    "Aggregate",
    "App",
    "DomainError",
    "ErrorKind",
    "ExecutableHttpRequest",
    "Resource",
    "Result",
    "Run",
    "RunStatus",
    # Run flow
    "prepare_run",
    "start_run",
    "record_outcome",
]
