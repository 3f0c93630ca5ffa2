from __future__ import annotations

import os
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

from starlette.requests import HTTPConnection

from .schemas import EnvironmentSnapshot, RequestInfo

# Headers where a repeat carries no meaning; the first occurrence is kept.
SINGLE_VALUE_HEADERS = frozenset(
    {
        "age",
        "authorization",
        "content-length",
        "content-type",
        "etag",
        "expires",
        "from",
        "host",
        "if-modified-since",
        "if-unmodified-since",
        "last-modified",
        "location",
        "max-forwards",
        "proxy-authorization",
        "referer",
        "retry-after",
        "server",
        "user-agent",
    }
)


def build_snapshot(
    ips: Mapping[str, str], request: Optional[RequestInfo] = None
) -> EnvironmentSnapshot:
    return EnvironmentSnapshot(env=dict(os.environ), ips=dict(ips), req=request)


def merge_headers(raw: Iterable[Tuple[bytes, bytes]]) -> Dict[str, Union[str, List[str]]]:
    """Fold raw header pairs into one entry per lower-cased name.

    ``set-cookie`` always becomes a list, ``cookie`` values are joined with
    ``"; "`` and other repeated headers with ``", "``.
    """
    headers: Dict[str, Union[str, List[str]]] = {}
    for raw_name, raw_value in raw:
        name = raw_name.decode("latin-1").lower()
        value = raw_value.decode("latin-1")
        if name == "set-cookie":
            prev = headers.get(name)
            headers[name] = [*prev, value] if isinstance(prev, list) else [value]
        elif name not in headers:
            headers[name] = value
        elif name in SINGLE_VALUE_HEADERS:
            continue
        else:
            sep = "; " if name == "cookie" else ", "
            headers[name] = f"{headers[name]}{sep}{value}"
    return headers


def request_target(conn: HTTPConnection) -> str:
    """Return the request target as sent by the client: path plus query."""
    raw_path = conn.scope.get("raw_path")
    if raw_path:
        path = raw_path.split(b"?", 1)[0].decode("latin-1")
    else:
        path = conn.scope["path"]
    query = conn.scope.get("query_string", b"")
    if query:
        return f"{path}?{query.decode('latin-1')}"
    return path


def describe_request(conn: HTTPConnection) -> RequestInfo:
    return RequestInfo(
        headers=merge_headers(conn.scope.get("headers", [])),
        method=conn.scope.get("method", "GET"),
        url=request_target(conn),
    )
