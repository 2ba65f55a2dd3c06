"""
Origin access policy: only pages served from our own host may use the relay.
"""
from typing import Iterable, Optional

import structlog

logger = structlog.get_logger(__name__)

DEFAULT_LOCAL_HOSTS = ("localhost", "127.0.0.1")


def is_local_host(host: Optional[str], local_hosts: Iterable[str] = DEFAULT_LOCAL_HOSTS) -> bool:
    if not host:
        return False
    return any(local in host for local in local_hosts)


def is_request_allowed(
    host: Optional[str],
    referer: Optional[str],
    local_hosts: Iterable[str] = DEFAULT_LOCAL_HOSTS,
) -> bool:
    """Allow development hosts unconditionally, otherwise require the referer
    to contain our host.

    This is plain substring containment, not origin matching: a referer that
    carries the host anywhere (even in its query string) passes.
    """
    if is_local_host(host, local_hosts):
        return True

    if not host or not referer or host not in referer:
        logger.warning("access_denied", host=host, referer=referer)
        return False

    return True
