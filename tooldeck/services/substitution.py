"""
Template substitution.

Replaces literal {title} tokens in a composed request with Run input
values. Replacement is plain substring replacement: no escaping, no
recursion, and text without a matching token stays as it is.

Titles are applied in sorted order, whatever order the values arrive
in. When one title's token occurs inside text produced by an earlier
replacement, it is replaced too, so a value containing "{b}" set for
title "a" is resolved again by "b" but not the other way around. This
matches existing stored Runs and is kept as is.
"""

from __future__ import annotations

from typing import Iterable, Mapping

from tooldeck.domain.request import ExecutableHttpRequest


def placeholder(title: str) -> str:
    return "{" + title + "}"


def substitute_text(text: str, values: Mapping[str, str]) -> str:
    for title, value in sorted(values.items()):
        text = text.replace(placeholder(title), value)
    return text


def substitute(
    request: ExecutableHttpRequest,
    values: Mapping[str, str] | Iterable[tuple[str, str]],
) -> ExecutableHttpRequest:
    """
    Resolve placeholders in the base URL and in every key and value.

    values may be a mapping or (title, value) pairs; later pairs with the
    same title win, as with dict().
    """
    mapping = dict(values)
    if not mapping:
        return request
    return request.map_strings(lambda text: substitute_text(text, mapping))
