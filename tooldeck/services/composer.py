"""
Request Composer.

Merges a Resource template with an App's additions into an unresolved
ExecutableHttpRequest. Because Resource and App keys are kept disjoint
at mutation time, merging is plain concatenation per category with the
Resource's pairs first.

Placeholders like {id} are left in place; the substitution step
resolves them with Run input values.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tooldeck.domain.errors import DomainError
from tooldeck.domain.request import ExecutableHttpRequest
from tooldeck.domain.result import Result
from tooldeck.domain.values import ResourceKind, pairs_to_tuples

if TYPE_CHECKING:
    from tooldeck.domain.app import App
    from tooldeck.domain.resource import Resource

logger = logging.getLogger(__name__)


def join_url(base_url: str, url_path: str | None) -> str:
    """
    Join a base URL and an optional path with exactly one "/" between them.

    A missing or empty path leaves the base URL untouched.

        join_url("https://api.test.com/", "/users")  # https://api.test.com/users
        join_url("https://api.test.com", None)       # https://api.test.com
    """
    if not url_path:
        return base_url
    return f"{base_url.rstrip('/')}/{url_path.lstrip('/')}"


def compose_executable_request(
    resource: Resource,
    app: App,
) -> Result[ExecutableHttpRequest]:
    """
    Build the request for app on top of resource.

    Fails with InvalidOperation for a SQL Resource, a Resource without a
    base URL, or an App bound to a different Resource.
    """
    if resource.kind == ResourceKind.SQL:
        return Result.fail(
            DomainError.invalid_operation("Cannot compose an HTTP request from a SQL resource")
        )

    if not resource.base_url:
        return Result.fail(DomainError.invalid_operation("Resource has no base URL"))

    if app.resource_id != resource.id:
        return Result.fail(
            DomainError.invalid_operation(
                f"App {app.id} is bound to resource {app.resource_id}, not {resource.id}"
            )
        )

    request = ExecutableHttpRequest(
        base_url=join_url(resource.base_url, app.url_path),
        url_parameters=pairs_to_tuples(resource.url_parameters)
        + pairs_to_tuples(app.url_parameters),
        headers=pairs_to_tuples(resource.headers) + pairs_to_tuples(app.headers),
        body=pairs_to_tuples(resource.body) + pairs_to_tuples(app.body),
        http_method=app.http_method.value,
        use_json_body=app.use_json_body,
    )

    logger.debug(f"[composer] Composed {request.http_method} {request.base_url} for app {app.id}")
    return Result.ok(request)
