"""Execute a catalogued operation against the upstream HTTP API.

Arguments arrive as one flat mapping. Declared parameters are routed by
their location (path, query, header, cookie); everything else rebuilds the
request body according to the layout recorded at catalog-build time.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import quote

import httpx

from .compiler import MULTIPART_CONTENT_TYPE
from .models import OperationRecord

logger = logging.getLogger(__name__)

_PATH_PARAM = re.compile(r"\{([^}]+)\}")


class HttpClientError(Exception):
    """Upstream call failed; data carries {"response": {"data", "status"}} when known."""

    def __init__(self, message: str, data: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.data = data


@dataclass
class HttpResponse:
    data: Any
    status: int
    headers: dict[str, str] = field(default_factory=dict)


def _form_value(value: Any) -> str:
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def _fill_path(path: str, values: dict[str, Any]) -> str:
    def _sub(match: re.Match[str]) -> str:
        name = match.group(1)
        if values.get(name) is None:
            raise HttpClientError(f"Missing required path parameter {name!r}")
        return quote(str(values[name]), safe="")

    return _PATH_PARAM.sub(_sub, path)


def build_request(record: OperationRecord, arguments: dict[str, Any]) -> dict[str, Any]:
    """Turn flat tool arguments into keyword arguments for httpx."""
    by_location: dict[str, dict[str, Any]] = {"path": {}, "query": {}, "header": {}, "cookie": {}}
    body_args: dict[str, Any] = {}
    for name, value in arguments.items():
        location = record.parameters.get(name)
        if location in by_location:
            by_location[location][name] = value
        else:
            body_args[name] = value

    request: dict[str, Any] = {
        "method": record.method.upper(),
        "url": _fill_path(record.path, by_location["path"]),
    }

    query = {k: v for k, v in by_location["query"].items() if v is not None}
    if query:
        request["params"] = query

    headers = {k: str(v) for k, v in by_location["header"].items() if v is not None}
    cookies = {k: v for k, v in by_location["cookie"].items() if v is not None}
    if cookies:
        headers["Cookie"] = "; ".join(f"{k}={v}" for k, v in cookies.items())
    if headers:
        request["headers"] = headers

    layout = record.request_body
    if layout is None:
        if body_args:
            logger.debug("Ignoring arguments with no request body to carry them: %s", sorted(body_args))
        return request

    if layout.nested:
        if "body" in body_args:
            request["json"] = body_args["body"]
    elif layout.content_type.startswith(MULTIPART_CONTENT_TYPE):
        files = {}
        data = {}
        for name, value in body_args.items():
            if value is None:
                continue
            if name in layout.file_fields:
                file_path = Path(value)
                files[name] = (file_path.name, file_path.read_bytes())
            else:
                data[name] = _form_value(value)
        if files:
            request["files"] = files
        if data:
            request["data"] = data
    elif "json" in layout.content_type:
        if body_args:
            request["json"] = body_args
    elif body_args:
        request["data"] = {k: _form_value(v) for k, v in body_args.items() if v is not None}
    return request


def _decode(response: httpx.Response) -> Any:
    if not response.content:
        return None
    if "json" in response.headers.get("content-type", ""):
        try:
            return response.json()
        except ValueError:
            return response.text
    return response.text


class HttpClient:
    """Thin async wrapper around httpx for catalogued operations."""

    def __init__(
        self,
        base_url: str,
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.base_url = base_url
        self.headers = dict(headers or {})
        self.timeout = timeout
        self._transport = transport

    async def execute(self, record: OperationRecord, arguments: dict[str, Any]) -> HttpResponse:
        """Perform the call; raise HttpClientError on transport failure or status >= 400."""
        request = build_request(record, arguments)
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                headers=self.headers,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(**request)
        except httpx.HTTPError as exc:
            raise HttpClientError(f"Request to {request['method']} {request['url']} failed: {exc}") from exc

        data = _decode(response)
        if response.is_error:
            raise HttpClientError(
                f"Request failed with status code {response.status_code}",
                data={"response": {"data": data, "status": response.status_code}},
            )
        return HttpResponse(data=data, status=response.status_code, headers=dict(response.headers))
