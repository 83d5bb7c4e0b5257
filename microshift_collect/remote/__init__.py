"""Remote collection over SSH."""

from .inventory import Host, load_inventory, parse_inventory, DEFAULT_GROUP
from .fetcher import RemoteFetcher, HostResult, connect_ssh

__all__ = [
    'Host',
    'load_inventory',
    'parse_inventory',
    'DEFAULT_GROUP',
    'RemoteFetcher',
    'HostResult',
    'connect_ssh'
]
