"""Tests for HTTP middleware helpers."""

from __future__ import annotations

from types import SimpleNamespace

from starlette.requests import Request

from interview_ai.shared.middleware import UNMATCHED_ROUTE, route_label


def _request(**scope) -> Request:
    return Request({"type": "http", "method": "GET", "path": "/", "headers": [], **scope})


class TestRouteLabel:
    def test_uses_path_template_of_matched_route(self):
        route = SimpleNamespace(path_format="/api/v1/sessions/{session_id}")
        assert route_label(_request(route=route)) == "/api/v1/sessions/{session_id}"

    def test_falls_back_to_route_path(self):
        route = SimpleNamespace(path="/api/v1/health")
        assert route_label(_request(route=route)) == "/api/v1/health"

    def test_unmatched_request(self):
        assert route_label(_request()) == UNMATCHED_ROUTE
