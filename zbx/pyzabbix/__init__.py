"""Client for the Zabbix JSON-RPC API.

The client is derived from PyZabbix (https://github.com/lukecyca/pyzabbix),
which is licensed under the GNU Lesser General Public License (LGPL) according
to its PyPI metadata:

    Copyright (C) 2013-2015 PyZabbix Contributors

    This library is free software: you can redistribute it and/or modify
    it under the terms of the GNU Lesser General Public License as published by
    the Free Software Foundation, either version 3 of the License, or
    (at your option) any later version.

    This library is distributed in the hope that it will be useful,
    but WITHOUT ANY WARRANTY; without even the implied warranty of
    MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
    GNU Lesser General Public License for more details.

    You should have received a copy of the GNU Lesser General Public License
    along with this library. If not, see <https://www.gnu.org/licenses/>.

Modules:
- `version`: parsing and ordering of API versions.
- `types`: JSON-RPC envelopes and API object models.
- `compat`: version-gated parameter names.
- `client`: the `ZabbixAPI` client.
"""

from __future__ import annotations

from zbx.pyzabbix.client import ZabbixAPI
from zbx.pyzabbix.version import APIVersion

__all__ = ["APIVersion", "ZabbixAPI"]
