from __future__ import annotations

import logging
import socket
from types import MappingProxyType
from typing import Dict, Mapping

import psutil

log = logging.getLogger(__name__)


def build_interface_map() -> Mapping[str, str]:
    """Map each interface name to its IPv4 address.

    IPv6 and link-layer addresses are skipped, as are interfaces without any
    IPv4 address. If an interface has several IPv4 addresses the last one
    reported wins. Enumeration errors yield an empty map.
    """
    try:
        all_ifcs = psutil.net_if_addrs()
    except (OSError, psutil.Error) as exc:
        log.warning("Could not enumerate network interfaces: %s", exc)
        return MappingProxyType({})

    ifcs: Dict[str, str] = {}
    for name, addrs in all_ifcs.items():
        for addr in addrs:
            if addr.family == socket.AF_INET:
                ifcs[name] = addr.address
    return MappingProxyType(ifcs)
