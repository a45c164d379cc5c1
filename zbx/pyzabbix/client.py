#
# The code in this file is based on the pyzabbix library:
# https://github.com/lukecyca/pyzabbix
#
# Numerous changes have been made to the original code to make it more
# type-safe and to better fit the use-cases of zbx.
#
# Changelog:
# - Request IDs are allocated from a thread-safe counter and checked
#   against the response ID.
# - The API version is resolved at most once per client, also under
#   concurrent access.
# - Failed calls raise CallError wrapping either the API error or the
#   client-side fault.
#

from __future__ import annotations

import functools
import itertools
import logging
import threading
from collections.abc import Iterable
from collections.abc import Sequence
from concurrent.futures import Future
from typing import TYPE_CHECKING
from typing import Any
from typing import Callable
from typing import Literal
from typing import Optional
from typing import Union

import httpx
from pydantic import TypeAdapter
from pydantic import ValidationError
from pydantic_core import PydanticSerializationError

from zbx.__about__ import APP_NAME
from zbx.__about__ import __version__
from zbx.exceptions import APIError
from zbx.exceptions import CallError
from zbx.exceptions import ZabbixAPIEmptyTokenError
from zbx.exceptions import ZabbixAPIException
from zbx.exceptions import ZabbixAPIRequestError
from zbx.exceptions import ZabbixAPIResponseIDMismatch
from zbx.exceptions import ZabbixAPIResponseParsingError
from zbx.exceptions import ZabbixNotFoundError
from zbx.pyzabbix import compat
from zbx.pyzabbix.enums import TriggerStatus
from zbx.pyzabbix.types import Host
from zbx.pyzabbix.types import HostGroup
from zbx.pyzabbix.types import Maintenance
from zbx.pyzabbix.types import Trigger
from zbx.pyzabbix.types import ZabbixAPIRequest
from zbx.pyzabbix.types import ZabbixAPIResponse
from zbx.pyzabbix.version import APIVersion

if TYPE_CHECKING:
    from zbx.config.model import Config

logger = logging.getLogger(__name__)

RPC_ENDPOINT = "/api_jsonrpc.php"
CONTENT_TYPE = "application/json-rpc"
LOGIN_METHOD = "user.login"
VERSION_METHOD = "apiinfo.version"

# Methods the server rejects when called with an auth token
UNAUTHENTICATED_METHODS = frozenset(
    [LOGIN_METHOD, VERSION_METHOD, "user.checkauthentication"]
)

HOST_FIELDS = [
    "hostid",
    "name",
    "maintenance_from",
    "maintenance_status",
    "maintenance_type",
    "maintenanceid",
]
HOSTGROUP_FIELDS = ["groupid", "name"]
TIMEPERIOD_FIELDS = ["timeperiodid", "period", "timeperiod_type", "start_date"]

DebugDirection = Literal["request", "response"]
DebugHook = Callable[[DebugDirection, bytes], None]
"""Called with the raw request body before it is sent and the raw
response body after it is received."""


@functools.cache
def _get_type_adapter(type_: Any) -> TypeAdapter[Any]:
    return TypeAdapter(type_)


def strip_none(data: dict[str, Any]) -> dict[str, Any]:
    """Recursively strip None values from a dictionary."""
    new: dict[str, Any] = {}
    for key, value in data.items():
        if value is not None:
            if isinstance(value, dict):
                v = strip_none(value)  # pyright: ignore[reportUnknownArgumentType]
                if v:
                    new[key] = v
            else:
                new[key] = value
    return new


def not_found(kind: str, missing: Iterable[str]) -> ZabbixNotFoundError:
    return ZabbixNotFoundError(f"{kind} not found: {', '.join(missing)}")


class ZabbixAPI:
    def __init__(
        self,
        server: str = "http://localhost/zabbix",
        timeout: Optional[int] = None,
        verify_ssl: bool = True,
        virtual_host: Optional[str] = None,
        auth_token: Optional[str] = None,
        client: Optional[httpx.Client] = None,
        login_rules: Sequence[compat.VersionRule] = compat.LOGIN_USER_FIELD_RULES,
        debug_hook: Optional[DebugHook] = None,
    ):
        """Parameters:
        server: Base URI for zabbix web interface (omitting /api_jsonrpc.php).
        timeout: Request timeout in seconds.
        verify_ssl: Verify the TLS certificate of the server.
        virtual_host: Value of the HTTP `Host` header, if it differs from the server.
        auth_token: Pre-provisioned API token. No login is required.
        client: HTTP client to send requests with. Owned by the caller.
        login_rules: Rules selecting the user parameter of `user.login`.
        debug_hook: Called with raw request and response bodies.
        """
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.virtual_host = virtual_host
        self.auth = auth_token or ""
        self.login_rules = compat.sort_rules(login_rules)
        self.debug_hook = debug_hook

        self.url = self._get_url(server)
        logger.debug("JSON-RPC Server Endpoint: %s", self.url)

        self._owns_session = client is None
        self.session = client or self._get_client(verify_ssl, timeout)

        self._ids = itertools.count(1)
        self._id_lock = threading.Lock()

        self._version: Optional[APIVersion] = None
        self._version_future: Optional[Future[APIVersion]] = None
        self._version_lock = threading.Lock()

    def _get_url(self, server: str) -> str:
        """Format a URL for the Zabbix API."""
        server, _, _ = server.partition(RPC_ENDPOINT)
        return f"{server.rstrip('/')}{RPC_ENDPOINT}"

    def set_url(self, server: str) -> str:
        """Set a new URL for the client."""
        self.url = self._get_url(server)
        return self.url

    @property
    def server_url(self) -> str:
        """Base URL of the Zabbix web interface."""
        return self.url.partition(RPC_ENDPOINT)[0]

    @classmethod
    def from_config(
        cls,
        config: Config,
        client: Optional[httpx.Client] = None,
        debug_hook: Optional[DebugHook] = None,
    ) -> ZabbixAPI:
        """Create a ZabbixAPI instance from a Config object.

        Uses the configured API token if there is one. The client is not
        logged in otherwise.
        """
        login_rules = compat.LOGIN_USER_FIELD_RULES
        if config.api.login_username_since:
            login_rules = compat.login_rules_since(
                APIVersion.parse(config.api.login_username_since)
            )
        return cls(
            server=config.api.url,
            timeout=config.api.timeout,
            verify_ssl=config.api.verify_ssl,
            virtual_host=config.api.virtual_host or None,
            auth_token=config.api.auth_token.get_secret_value() or None,
            client=client,
            login_rules=login_rules,
            debug_hook=debug_hook,
        )

    def _get_client(
        self, verify_ssl: bool, timeout: Union[float, int, None] = None
    ) -> httpx.Client:
        return httpx.Client(
            verify=verify_ssl,
            timeout=timeout,
            # Default headers for all requests
            headers={
                "Content-Type": CONTENT_TYPE,
                "User-Agent": f"python/{APP_NAME}/{__version__}",
                "Cache-Control": "no-cache",
            },
        )

    def close(self) -> None:
        """Close the HTTP client if it was created by this object."""
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> ZabbixAPI:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def next_request_id(self) -> int:
        with self._id_lock:
            return next(self._ids)

    def set_auth_token(self, token: str) -> None:
        """Use a pre-provisioned API token instead of logging in."""
        self.auth = token

    @property
    def is_authenticated(self) -> bool:
        return bool(self.auth)

    def login(self, username: str, password: str) -> str:
        """Log in to the Zabbix API and cache the session token.

        The name of the user parameter depends on the API version,
        which is resolved first.
        """
        version = self.api_version()
        user_field = compat.login_user_name(version, self.login_rules)
        logger.debug("Logging in as %s (%s=)", username, user_field)

        token = self.call(
            LOGIN_METHOD, {user_field: username, "password": password}, str
        )
        if not token:
            raise ZabbixAPIEmptyTokenError(
                f"{LOGIN_METHOD} returned an empty session token"
            )
        self.auth = token
        return token

    def logout(self) -> None:
        """End the session and forget the token."""
        if not self.auth:
            return
        self.call("user.logout", [])
        self.auth = ""

    def api_version(self) -> APIVersion:
        """Return the API version of the server.

        The version is queried once per client. Concurrent callers wait
        for the same query and get the same result. Failures are not
        cached, so a later call queries the server again.
        """
        with self._version_lock:
            if self._version is not None:
                return self._version
            future = self._version_future
            owner = future is None
            if future is None:
                future = self._version_future = Future()

        if not owner:
            return future.result()

        try:
            version = self._fetch_api_version()
        except BaseException as e:
            with self._version_lock:
                self._version_future = None
            future.set_exception(e)
            raise
        with self._version_lock:
            self._version = version
            self._version_future = None
        future.set_result(version)
        return version

    @property
    def version(self) -> APIVersion:
        return self.api_version()

    def _fetch_api_version(self) -> APIVersion:
        version = self.call(VERSION_METHOD, [], str)
        logger.debug("Zabbix API version: %s", version)
        return APIVersion.parse(version)

    def call(self, method: str, params: Any = None, result_type: Any = Any) -> Any:
        """Call a Zabbix API method and return its result.

        The result is validated against `result_type`.
        Any failure is raised as a `CallError`.
        """
        if params is None:
            params = {}
        request = ZabbixAPIRequest(
            method=method,
            params=params,
            id=self.next_request_id(),
        )
        if self.auth and method.lower() not in UNAUTHENTICATED_METHODS:
            request.auth = self.auth

        try:
            response = self._do_request(request)
            return self._validate_result(response, result_type)
        except ZabbixAPIException as e:
            raise CallError(request.id, method, params, e) from e

    def _do_request(self, request: ZabbixAPIRequest) -> ZabbixAPIResponse:
        try:
            body = request.to_json()
        except (PydanticSerializationError, TypeError, ValueError) as e:
            raise ZabbixAPIRequestError(
                f"Failed to serialize params for {request.method}: {e}"
            ) from e

        logger.debug("Sending %s (id=%d) to %s", request.method, request.id, self.url)
        if self.debug_hook:
            self.debug_hook("request", body)

        headers = {"Content-Type": CONTENT_TYPE}
        if self.virtual_host:
            headers["Host"] = self.virtual_host

        try:
            resp = self.session.post(self.url, content=body, headers=headers)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ZabbixAPIRequestError(
                f"HTTP {e.response.status_code} from {self.url}",
                response=e.response,
            ) from e
        except httpx.HTTPError as e:
            raise ZabbixAPIRequestError(
                f"Failed to send request to {self.url}: {e}"
            ) from e

        if self.debug_hook:
            self.debug_hook("response", resp.content)

        try:
            response = ZabbixAPIResponse.model_validate_json(resp.content)
        except ValidationError as e:
            raise ZabbixAPIResponseParsingError(
                f"Failed to parse response from {self.url}: {e}"
            ) from e

        if response.error:
            raise APIError(
                response.error.code,
                response.error.message,
                response.error.data,
            )
        if response.id != request.id:
            raise ZabbixAPIResponseIDMismatch(request.id, response.id)
        return response

    def _validate_result(self, response: ZabbixAPIResponse, result_type: Any) -> Any:
        if result_type is Any:
            return response.result
        try:
            return _get_type_adapter(result_type).validate_python(response.result)
        except ValidationError as e:
            raise ZabbixAPIResponseParsingError(
                f"Unexpected result type: {e}"
            ) from e

    def __getattr__(self, attr: str) -> ZabbixAPIObjectClass:
        """Dynamically create an object class (ie: host)"""
        if attr.startswith("_"):
            raise AttributeError(attr)
        return ZabbixAPIObjectClass(attr, self)

    #
    # Hosts
    #

    def get_hosts_by_names(self, names: Sequence[str]) -> list[Host]:
        """Fetch hosts whose visible names are exactly `names`."""
        if not names:
            return []
        hosts: list[Host] = self.call(
            "host.get",
            {"output": HOST_FIELDS, "filter": {"name": list(names)}},
            list[Host],
        )
        found = {h.name for h in hosts}
        missing = [name for name in names if name not in found]
        if missing:
            raise not_found("hosts", missing)
        return hosts

    def get_hosts_by_ids(self, host_ids: Sequence[str]) -> list[Host]:
        if not host_ids:
            return []
        hosts: list[Host] = self.call(
            "host.get",
            {"output": HOST_FIELDS, "hostids": list(host_ids)},
            list[Host],
        )
        found = {h.hostid for h in hosts}
        missing = [hid for hid in host_ids if hid not in found]
        if missing:
            raise not_found("host IDs", missing)
        return hosts

    def get_hosts_by_group_ids(self, group_ids: Sequence[str]) -> list[Host]:
        """Fetch all hosts that are members of the given host groups."""
        if not group_ids:
            return []
        return self.call(
            "host.get",
            {"output": HOST_FIELDS, "groupids": list(group_ids)},
            list[Host],
        )

    #
    # Host groups
    #

    def get_hostgroups_by_names(self, names: Sequence[str]) -> list[HostGroup]:
        """Fetch host groups whose names are exactly `names`."""
        if not names:
            return []
        groups: list[HostGroup] = self.call(
            "hostgroup.get",
            {"output": HOSTGROUP_FIELDS, "filter": {"name": list(names)}},
            list[HostGroup],
        )
        found = {g.name for g in groups}
        missing = [name for name in names if name not in found]
        if missing:
            raise not_found("host groups", missing)
        return groups

    def get_nested_hostgroups(self, names: Sequence[str]) -> list[HostGroup]:
        """Fetch the named host groups and all groups nested below them.

        A group is nested below `name` if its name starts with `name/`.
        """
        groups = self.get_hostgroups_by_names(names)
        if not groups:
            return []
        prefixes = [f"{name}/" for name in names]
        candidates: list[HostGroup] = self.call(
            "hostgroup.get",
            {
                "output": HOSTGROUP_FIELDS,
                "search": {"name": prefixes},
                "searchByAny": True,
                "startSearch": True,
            },
            list[HostGroup],
        )
        # Search is case-insensitive, so the prefix is matched again here.
        children = sorted(
            (
                g
                for g in candidates
                if any(g.name.startswith(prefix) for prefix in prefixes)
            ),
            key=lambda g: g.name,
        )
        seen: set[str] = set()
        result: list[HostGroup] = []
        for group in itertools.chain(groups, children):
            if group.groupid not in seen:
                seen.add(group.groupid)
                result.append(group)
        return result

    #
    # Maintenances
    #

    def _maintenance_get_params(self) -> dict[str, Any]:
        return {
            "output": "extend",
            compat.param_select_hostgroups(self.version): HOSTGROUP_FIELDS,
            "selectHosts": HOST_FIELDS,
            "selectTimeperiods": TIMEPERIOD_FIELDS,
        }

    def get_maintenances(
        self,
        maintenance_ids: Optional[Sequence[str]] = None,
        names: Optional[Sequence[str]] = None,
    ) -> list[Maintenance]:
        """Fetch maintenances, optionally filtered by IDs and exact names."""
        params = self._maintenance_get_params()
        if maintenance_ids:
            params["maintenanceids"] = list(maintenance_ids)
        if names:
            params["filter"] = {"name": list(names)}
        return self.call("maintenance.get", params, list[Maintenance])

    def get_maintenance_by_id(self, maintenance_id: str) -> Maintenance:
        maintenances = self.get_maintenances(maintenance_ids=[maintenance_id])
        if len(maintenances) != 1:
            raise ZabbixNotFoundError(
                f"Expected 1 maintenance with ID {maintenance_id}, got {len(maintenances)}"
            )
        return maintenances[0]

    def get_maintenance_by_name(self, name: str) -> Maintenance:
        maintenances = self.get_maintenances(names=[name])
        if len(maintenances) != 1:
            raise ZabbixNotFoundError(
                f"Expected 1 maintenance named {name!r}, got {len(maintenances)}"
            )
        return maintenances[0]

    def get_maintenance_ids_by_ids(self, maintenance_ids: Sequence[str]) -> list[str]:
        """Check that the given maintenance IDs exist and return them."""
        maintenances: list[dict[str, str]] = self.call(
            "maintenance.get",
            {"output": ["maintenanceid"], "maintenanceids": list(maintenance_ids)},
            list[dict[str, str]],
        )
        if len(maintenances) != len(maintenance_ids):
            found = {m["maintenanceid"] for m in maintenances}
            raise not_found(
                "maintenance IDs", [mid for mid in maintenance_ids if mid not in found]
            )
        return [m["maintenanceid"] for m in maintenances]

    def get_maintenance_ids_by_names(self, names: Sequence[str]) -> list[str]:
        """Look up the IDs of maintenances with the given exact names."""
        maintenances: list[dict[str, str]] = self.call(
            "maintenance.get",
            {"output": ["maintenanceid", "name"], "filter": {"name": list(names)}},
            list[dict[str, str]],
        )
        if len(maintenances) != len(names):
            found = {m.get("name") for m in maintenances}
            missing = [name for name in names if name not in found]
            if missing:
                raise not_found("maintenances", missing)
            raise ZabbixNotFoundError(
                f"Expected {len(names)} maintenances, got {len(maintenances)}"
            )
        return [m["maintenanceid"] for m in maintenances]

    def _maintenance_params(self, maintenance: Maintenance) -> dict[str, Any]:
        """Parameters for maintenance.create and maintenance.update.

        Hosts and host groups are only referenced by ID."""
        params = maintenance.model_dump_api()
        params.pop("hosts", None)
        params.pop("groups", None)
        params["timeperiods"] = [
            tp.model_dump_api() for tp in maintenance.timeperiods
        ]
        for tp in params["timeperiods"]:
            tp.pop("timeperiodid", None)

        targets = compat.param_maintenance_targets(self.version)
        host_ids = [h.hostid for h in maintenance.hosts]
        group_ids = [g.groupid for g in maintenance.groups]
        if targets.as_objects:
            params[targets.hosts] = [{"hostid": hid} for hid in host_ids]
            params[targets.groups] = [{"groupid": gid} for gid in group_ids]
        else:
            params[targets.hosts] = host_ids
            params[targets.groups] = group_ids
        return params

    def create_maintenance(self, maintenance: Maintenance) -> str:
        """Create a maintenance and return its ID.

        The ID is also set on `maintenance`."""
        params = self._maintenance_params(maintenance)
        params.pop("maintenanceid", None)
        resp = self.call("maintenance.create", params, dict[str, list[str]])
        maintenance.maintenanceid = self._single_id(resp, "maintenanceids")
        return maintenance.maintenanceid

    def update_maintenance(self, maintenance: Maintenance) -> str:
        if not maintenance.maintenanceid:
            raise ZabbixNotFoundError("Cannot update a maintenance without an ID")
        params = self._maintenance_params(maintenance)
        resp = self.call("maintenance.update", params, dict[str, list[str]])
        return self._single_id(resp, "maintenanceids")

    def delete_maintenances(self, maintenance_ids: Sequence[str]) -> list[str]:
        """Delete maintenances and return the deleted IDs."""
        resp: dict[str, list[str]] = self.call(
            "maintenance.delete", list(maintenance_ids), dict[str, list[str]]
        )
        return resp.get("maintenanceids", [])

    def get_maintenance_hosts(self, maintenance: Maintenance) -> list[Host]:
        """Hosts of a maintenance, including hosts of its host groups,
        without duplicates and sorted by name."""
        hosts = list(maintenance.hosts)
        if maintenance.groups:
            hosts.extend(
                self.get_hosts_by_group_ids([g.groupid for g in maintenance.groups])
            )
        unique: dict[str, Host] = {}
        for host in hosts:
            unique.setdefault(host.name, host)
        return sorted(unique.values(), key=lambda h: h.name)

    @staticmethod
    def _single_id(resp: dict[str, list[str]], key: str) -> str:
        ids = resp.get(key, [])
        if len(ids) != 1:
            raise ZabbixAPIResponseParsingError(
                f"Expected 1 ID in {key!r}, got {len(ids)}"
            )
        return ids[0]

    #
    # Triggers
    #

    def _trigger_get_params(
        self,
        trigger_ids: Optional[Sequence[str]] = None,
        host_ids: Optional[Sequence[str]] = None,
        group_ids: Optional[Sequence[str]] = None,
        item_ids: Optional[Sequence[str]] = None,
        descriptions: Optional[Sequence[str]] = None,
    ) -> dict[str, Any]:
        params: dict[str, Any] = {
            "triggerids": list(trigger_ids) if trigger_ids else None,
            "hostids": list(host_ids) if host_ids else None,
            "groupids": list(group_ids) if group_ids else None,
            "itemids": list(item_ids) if item_ids else None,
            "filter": {"description": list(descriptions)} if descriptions else None,
        }
        return strip_none(params)

    def get_triggers(
        self,
        trigger_ids: Optional[Sequence[str]] = None,
        host_ids: Optional[Sequence[str]] = None,
        group_ids: Optional[Sequence[str]] = None,
        item_ids: Optional[Sequence[str]] = None,
        descriptions: Optional[Sequence[str]] = None,
    ) -> list[Trigger]:
        params = self._trigger_get_params(
            trigger_ids, host_ids, group_ids, item_ids, descriptions
        )
        params.update(
            {
                "output": "extend",
                compat.param_select_hostgroups(self.version): HOSTGROUP_FIELDS,
                "selectHosts": HOST_FIELDS,
                "selectItems": ["itemid", "hostid", "key_", "name", "type"],
            }
        )
        return self.call("trigger.get", params, list[Trigger])

    def get_trigger_ids(
        self,
        trigger_ids: Optional[Sequence[str]] = None,
        host_ids: Optional[Sequence[str]] = None,
        group_ids: Optional[Sequence[str]] = None,
        item_ids: Optional[Sequence[str]] = None,
        descriptions: Optional[Sequence[str]] = None,
    ) -> list[str]:
        params = self._trigger_get_params(
            trigger_ids, host_ids, group_ids, item_ids, descriptions
        )
        params["output"] = ["triggerid"]
        triggers: list[dict[str, str]] = self.call(
            "trigger.get", params, list[dict[str, str]]
        )
        return [t["triggerid"] for t in triggers]

    def set_trigger_status(self, trigger_id: str, status: TriggerStatus) -> list[str]:
        """Enable or disable a trigger. Returns the updated trigger IDs."""
        resp: dict[str, list[str]] = self.call(
            "trigger.update",
            {"triggerid": trigger_id, "status": status.as_api_str()},
            dict[str, list[str]],
        )
        return resp.get("triggerids", [])


class ZabbixAPIObjectClass:
    def __init__(self, name: str, parent: ZabbixAPI) -> None:
        self.name = name
        self.parent = parent

    def __getattr__(self, attr: str) -> Any:
        """Dynamically create a method (ie: get)"""

        def fn(*args: Any, **kwargs: Any) -> Any:
            if args and kwargs:
                raise TypeError("Found both args and kwargs")

            return self.parent.call(f"{self.name}.{attr}", list(args) or kwargs)

        return fn
