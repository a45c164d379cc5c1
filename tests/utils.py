from __future__ import annotations

import json
from typing import Any
from typing import Optional

from pytest_httpserver import HTTPServer
from werkzeug import Request
from werkzeug import Response

NO_AUTH = object()
"""Sentinel for asserting that a request carries no `auth` member."""


def add_zabbix_endpoint(
    httpserver: HTTPServer,
    method: str,  # method is zabbix API method, not HTTP method
    *,
    params: Optional[Any] = None,
    response: Any = None,
    error: Optional[dict[str, Any]] = None,
    auth: Optional[Any] = None,
    headers: Optional[dict[str, str]] = None,
    id: Optional[int] = None,
) -> None:
    """Add an endpoint mocking a Zabbix API endpoint.

    The response echoes the request ID unless `id` is given."""

    # Use a custom handler to check request contents
    def handler(request: Request) -> Response:
        # Request has content type 'application/json-rpc'
        # so request.json() method does not work
        request_json = json.loads(request.data.decode())

        assert request_json["jsonrpc"] == "2.0"
        assert request_json["method"] == method

        # Only check the params we passed are correct
        # Missing/extra params are not checked
        if isinstance(params, dict):
            for k, v in params.items():
                assert k in request_json["params"]
                assert request_json["params"][k] == v
        elif params is not None:
            assert request_json["params"] == params

        if auth is NO_AUTH:
            assert "auth" not in request_json
        elif auth is not None:
            assert request_json["auth"] == auth

        if headers:
            for k, v in headers.items():
                assert request.headers[k] == v

        resp: dict[str, Any] = {
            "jsonrpc": "2.0",
            "id": request_json["id"] if id is None else id,
        }
        if error is not None:
            resp["error"] = error
        else:
            resp["result"] = response
        return Response(json.dumps(resp), status=200, content_type="application/json")

    httpserver.expect_oneshot_request(
        "/api_jsonrpc.php",
        method="POST",
    ).respond_with_handler(handler)


def add_zabbix_version_endpoint(httpserver: HTTPServer, version: str) -> None:
    """Add an endpoint emulating the Zabbix apiinfo.version method."""
    add_zabbix_endpoint(
        httpserver,
        method="apiinfo.version",
        params=[],
        response=version,
        auth=NO_AUTH,
    )


def add_zabbix_login_endpoints(
    httpserver: HTTPServer,
    version: str = "7.0.0",
    token: str = "session-token",
) -> None:
    """Add the version and login endpoints used when logging in."""
    add_zabbix_version_endpoint(httpserver, version)
    add_zabbix_endpoint(
        httpserver,
        method="user.login",
        response=token,
        auth=NO_AUTH,
    )


def host(
    hostid: str, name: str, maintenance_status: str = "0"
) -> dict[str, Any]:
    """A host object as returned by host.get."""
    return {
        "hostid": hostid,
        "name": name,
        "maintenance_from": "0",
        "maintenance_status": maintenance_status,
        "maintenance_type": "0",
        "maintenanceid": "0",
    }
