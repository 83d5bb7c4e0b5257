#!/usr/bin/env python3
"""YAML inventory of remote MicroShift hosts, grouped by name."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import yaml

from ..common.errors import InventoryError

DEFAULT_GROUP = "local-lab"

HOST_KEYS = {
    'host': 'host',
    'ansible_host': 'host',
    'port': 'port',
    'ansible_port': 'port',
    'user': 'user',
    'ansible_user': 'user',
    'key_file': 'key_file',
    'ansible_ssh_private_key_file': 'key_file',
    'password': 'password',
    'ansible_password': 'password'
}


@dataclass
class Host:
    """A remote target reachable over SSH."""
    name: str
    host: str
    port: int = 22
    user: Optional[str] = None
    key_file: Optional[str] = None
    password: Optional[str] = None


def _host_settings(name, raw):
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise InventoryError(f"Host entry '{name}' must be a mapping")
    settings = {}
    for key, value in raw.items():
        if key not in HOST_KEYS:
            raise InventoryError(f"Unknown setting '{key}' for host '{name}'")
        settings[HOST_KEYS[key]] = value
    return settings


def parse_inventory(data, group=DEFAULT_GROUP):
    """
    Resolve the hosts of one group from parsed inventory data.

    Args:
        data: Mapping of group name to {'hosts': {...}, 'vars': {...}}
        group: Group to resolve

    Returns:
        list: Host instances in inventory order
    """
    if not isinstance(data, dict) or group not in data:
        raise InventoryError(f"Inventory group '{group}' not found")

    entry = data[group] or {}
    if not isinstance(entry, dict):
        raise InventoryError(f"Inventory group '{group}' must be a mapping with 'hosts'")
    group_vars = _host_settings(f"{group}:vars", entry.get('vars'))
    hosts_data = entry.get('hosts') or {}
    if not isinstance(hosts_data, dict) or not hosts_data:
        raise InventoryError(f"Inventory group '{group}' has no hosts")

    hosts = []
    for name, raw in hosts_data.items():
        settings = dict(group_vars)
        settings.update(_host_settings(name, raw))
        settings.setdefault('host', name)
        key_file = settings.get('key_file')
        if key_file:
            settings['key_file'] = os.path.expanduser(key_file)
        try:
            settings['port'] = int(settings.get('port', 22))
        except (TypeError, ValueError) as e:
            raise InventoryError(f"Invalid port for host '{name}': {settings.get('port')}") from e
        hosts.append(Host(name=str(name), **settings))
    return hosts


def load_inventory(path, group=DEFAULT_GROUP) -> List[Host]:
    """Read an inventory YAML file and return the hosts of a group."""
    try:
        with open(Path(path).expanduser(), encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise InventoryError(f"Cannot read inventory {path}: {e}") from e
    return parse_inventory(data, group)
