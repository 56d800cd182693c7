# Overview: Cross-origin gate; exact-match origin allow-list applied to every request.

"""
Origin policy gate.

The allow-list is frozen when the app is created. Per request:

- OPTIONS on a known route is answered immediately with an empty 200.
- A request carrying an Origin that is not on the list is stopped with an
  empty 403 before any view runs; no cross-origin headers are added, so the
  browser rejects it.
- An allowed Origin is echoed back in Access-Control-Allow-Origin.

Requests without an Origin header are not cross-origin and pass through
without CORS headers.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from flask import current_app, g, request


CORS_ALLOW_HEADERS = "Authorization, Content-Type"
CORS_ALLOW_METHODS = "GET,POST,PUT,DELETE,OPTIONS"


@dataclass(frozen=True)
class OriginDecision:
    allowed: bool
    origin: str | None = None


@dataclass(frozen=True)
class OriginPolicy:
    allowed_origins: frozenset[str]

    @classmethod
    def from_origins(cls, origins: Iterable[str]) -> "OriginPolicy":
        return cls(frozenset(origins))

    def evaluate(self, origin: str | None) -> OriginDecision:
        """No wildcard, prefix or case-insensitive matching."""
        if origin is not None and origin in self.allowed_origins:
            return OriginDecision(allowed=True, origin=origin)
        return OriginDecision(allowed=False)


def get_origin_policy() -> OriginPolicy:
    return current_app.extensions["origin_policy"]


def origin_gate():
    origin = request.headers.get("Origin")
    decision = get_origin_policy().evaluate(origin)
    g.origin_decision = decision

    if request.method == "OPTIONS" and request.url_rule is not None:
        return current_app.response_class(status=200)

    if origin is not None and not decision.allowed:
        current_app.logger.info("Blocked %s %s from origin %r", request.method, request.path, origin)
        return current_app.response_class(status=403)

    return None


def add_cors_headers(response):
    decision = g.get("origin_decision")
    if decision is not None and decision.allowed:
        response.headers["Access-Control-Allow-Origin"] = decision.origin
        response.headers["Access-Control-Allow-Credentials"] = "true"
        response.headers["Vary"] = "Origin"
        response.headers["Access-Control-Allow-Headers"] = CORS_ALLOW_HEADERS
        response.headers["Access-Control-Allow-Methods"] = CORS_ALLOW_METHODS
    return response


def init_app(app) -> None:
    app.extensions["origin_policy"] = OriginPolicy.from_origins(app.config["CORS_ALLOWED_ORIGINS"])
    app.before_request(origin_gate)
    app.after_request(add_cors_headers)
