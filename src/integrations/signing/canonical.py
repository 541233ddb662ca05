"""
Canonical request construction for AWS Signature Version 4.

The canonical request is the exact byte sequence the remote service re-derives
from what it receives. Header names are lower-cased and sorted, and the same
sorted tuple feeds both the canonical headers block and the signed-headers
list, so the two cannot drift apart.
"""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass
from typing import Mapping, Tuple, Union

_INNER_SPACES = re.compile(r" {2,}")


def sha256_hex(data: Union[str, bytes]) -> str:
    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.sha256(data).hexdigest()


@dataclass(frozen=True)
class CanonicalRequest:
    method: str
    uri: str
    query: str
    headers: Tuple[Tuple[str, str], ...]
    payload_hash: str

    @property
    def signed_headers(self) -> str:
        return ";".join(name for name, _ in self.headers)

    @property
    def canonical_headers(self) -> str:
        return "".join(f"{name}:{value}\n" for name, value in self.headers)

    def render(self) -> str:
        # canonical_headers already ends in "\n"; the join adds the blank line.
        return "\n".join(
            [
                self.method,
                self.uri,
                self.query,
                self.canonical_headers,
                self.signed_headers,
                self.payload_hash,
            ]
        )

    def digest(self) -> str:
        return sha256_hex(self.render())


def _normalize_value(value: str) -> str:
    return _INNER_SPACES.sub(" ", str(value).strip())


def canonicalize(
    method: str,
    uri: str,
    headers: Mapping[str, str],
    payload: Union[str, bytes],
    query: str = "",
) -> CanonicalRequest:
    """
    Build the canonical request for a single call.

    Args:
        method: HTTP method, upper-cased on output
        uri: absolute URI path (e.g. /paapi5/getitems)
        headers: every header to sign; names are case-insensitive
        payload: the exact body that will be sent
        query: canonical query string (empty for body-only operations)

    Raises:
        ValueError: if two header names collide once lower-cased
    """
    normalized = {}
    for name, value in headers.items():
        key = name.strip().lower()
        if key in normalized:
            raise ValueError(f"Duplicate header after case folding: {key}")
        normalized[key] = _normalize_value(value)

    ordered = tuple(sorted(normalized.items()))
    return CanonicalRequest(
        method=method.upper(),
        uri=uri or "/",
        query=query,
        headers=ordered,
        payload_hash=sha256_hex(payload),
    )
