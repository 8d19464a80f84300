"""
Host identity normalization.
"""

import ipaddress
import re


_HOSTNAME = re.compile(r"^[A-Za-z0-9]([A-Za-z0-9.-]*[A-Za-z0-9])?$")


def resolve_host_identity(origin: str) -> str:
    """
    Reduce an "address:port" origin to the bare address.
    
    IPv6 addresses must be bracketed ("[::1]:514"). A hostname keeps its
    name but loses a numeric port and is lowercased, so one relay sending
    from several source ports maps to one identity. Anything else is
    returned unchanged. No name resolution happens here, so the result
    depends only on `origin`.
    
    >>> resolve_host_identity("10.0.0.5:51820")
    '10.0.0.5'
    >>> resolve_host_identity("Relay-01:514")
    'relay-01'
    """
    host, sep, port = origin.rpartition(":")
    if not sep or not (port.isascii() and port.isdigit()) or int(port) > 65535:
        return origin
    
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    elif ":" in host:
        return origin
    
    try:
        return str(ipaddress.ip_address(host))
    except ValueError:
        pass
    
    if host.isascii() and _HOSTNAME.match(host):
        return host.lower()
    return origin
