"""Small httpx helpers raising ``ProviderError`` on failure."""

from __future__ import annotations

import json
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, cast

import httpx

from aix.errors import ProviderError


def error_message(body: str, fallback: str) -> str:
    """Pull the vendor message out of a JSON error body, if it has one."""
    try:
        data = json.loads(body)
    except json.JSONDecodeError:
        return body.strip() or fallback
    if isinstance(data, dict):
        error = data.get("error", data)
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
        if isinstance(error, str):
            return error
    return body.strip() or fallback


def raise_for_status(name: str, response: httpx.Response, body: str) -> None:
    if response.status_code >= 400:
        raise ProviderError(
            name,
            error_message(body, response.reason_phrase),
            status_code=response.status_code,
        )


async def fetch_text_or_raise(
    client: httpx.AsyncClient,
    *,
    name: str,
    url: str,
    headers: dict[str, str],
    method: str = "GET",
    body: Any = None,
) -> str:
    """Perform a request and return the body text, raising on any failure."""
    try:
        response = await client.request(method, url, headers=headers, json=body)
    except httpx.HTTPError as exc:
        raise ProviderError(name, f"{type(exc).__name__}: {exc}") from exc
    raise_for_status(name, response, response.text)
    return response.text


async def fetch_json_or_raise(
    client: httpx.AsyncClient,
    *,
    name: str,
    url: str,
    headers: dict[str, str],
    method: str = "GET",
    body: Any = None,
) -> dict[str, Any]:
    text = await fetch_text_or_raise(client, name=name, url=url, headers=headers, method=method, body=body)
    try:
        return cast(dict[str, Any], json.loads(text))
    except json.JSONDecodeError as exc:
        raise ProviderError(name, f"invalid JSON response: {exc.msg}") from exc


@asynccontextmanager
async def borrowed_client(client: httpx.AsyncClient | None, timeout_s: float) -> AsyncIterator[httpx.AsyncClient]:
    """Yield ``client`` as is, or a short-lived client closed on exit."""
    if client is not None:
        yield client
        return
    async with httpx.AsyncClient(timeout=timeout_s) as owned:
        yield owned
