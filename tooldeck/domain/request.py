"""
Executable HTTP request.

The fully resolved description of an HTTP call, produced by composing a
Resource with an App and substituting Run input values. It is handed to
an execution collaborator; tooldeck itself never sends it.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, replace
from typing import Any, Callable

import httpx

_BODYLESS_METHODS = frozenset({"GET", "DELETE", "HEAD"})

# Plain ASCII numerals only: no digit separators, no non-ASCII digits
_INTEGER_PATTERN = re.compile(r"^\s*[+-]?\d+\s*$", re.ASCII)
_FLOAT_PATTERN = re.compile(r"^\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?\s*$", re.ASCII)

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


def _coerce_json_value(value: str) -> Any:
    """Best-effort typing of a body value: int64, float, bool, null, else string."""
    if _INTEGER_PATTERN.match(value):
        number = int(value)
        if _INT64_MIN <= number <= _INT64_MAX:
            return number
    if _FLOAT_PATTERN.match(value):
        number = float(value)
        if math.isfinite(number):
            return number
    lowered = value.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if value == "null":
        return None
    return value


@dataclass(frozen=True, slots=True)
class ExecutableHttpRequest:
    """
    Resolved HTTP request.

    Attributes:
        base_url: Full URL without query string
        url_parameters: Query parameters, in order
        headers: Request headers, in order
        body: Body parameters, in order
        http_method: Upper-case HTTP verb
        use_json_body: Send body as JSON object instead of form-encoded
    """

    base_url: str
    url_parameters: tuple[tuple[str, str], ...] = ()
    headers: tuple[tuple[str, str], ...] = ()
    body: tuple[tuple[str, str], ...] = ()
    http_method: str = "GET"
    use_json_body: bool = True

    def map_strings(self, fn: Callable[[str], str]) -> ExecutableHttpRequest:
        """Apply fn to the base URL and to every key and value."""

        def _pairs(pairs: tuple[tuple[str, str], ...]) -> tuple[tuple[str, str], ...]:
            return tuple((fn(key), fn(value)) for key, value in pairs)

        return replace(
            self,
            base_url=fn(self.base_url),
            url_parameters=_pairs(self.url_parameters),
            headers=_pairs(self.headers),
            body=_pairs(self.body),
        )

    @property
    def has_body(self) -> bool:
        return bool(self.body) and self.http_method.upper() not in _BODYLESS_METHODS

    def to_httpx_request(self) -> httpx.Request:
        """
        Build (without sending) the equivalent httpx.Request.

        GET/DELETE/HEAD never carry a body. Otherwise the body is a JSON
        object when use_json_body is set, form-encoded when it is not.
        """
        method = self.http_method.upper()
        url = httpx.URL(self.base_url)
        if self.url_parameters:
            url = url.copy_merge_params(list(self.url_parameters))

        headers = list(self.headers)

        if not self.has_body:
            return httpx.Request(method, url, headers=headers)

        if self.use_json_body:
            payload = {key: _coerce_json_value(value) for key, value in self.body}
            return httpx.Request(method, url, headers=headers, json=payload)

        return httpx.Request(method, url, headers=headers, data=dict(self.body))

    def to_dict(self) -> dict[str, Any]:
        return {
            "base_url": self.base_url,
            "url_parameters": [list(pair) for pair in self.url_parameters],
            "headers": [list(pair) for pair in self.headers],
            "body": [list(pair) for pair in self.body],
            "http_method": self.http_method,
            "use_json_body": self.use_json_body,
        }
