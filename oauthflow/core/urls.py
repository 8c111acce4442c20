"""
URL helpers: absolute base URL, link joining and the same-site check.
"""
from typing import Iterable, Optional
from urllib.parse import urlsplit


def join_links(*parts: Optional[str]) -> str:
    """
    Join URL fragments with single slashes, keeping any query string on the last part.
    """
    pieces = [p for p in parts if p]
    if not pieces:
        return ""

    result = pieces[0]
    for part in pieces[1:]:
        result = f"{result.rstrip('/')}/{part.lstrip('/')}"
    return result


def is_site_url(url: Optional[str], base_url: str, allowed_hosts: Iterable[str] = ()) -> bool:
    """
    Check whether ``url`` points at this site.

    Relative URLs are on-site. Absolute URLs must use http(s) and a host that
    matches the base URL's host or one of ``allowed_hosts``. Protocol-relative
    URLs and anything carrying credentials or backslashes are rejected, as
    browsers resolve those to foreign hosts.
    """
    if not url:
        return False

    url = url.strip()
    if "\\" in url or any(ord(ch) < 32 for ch in url):
        return False

    parts = urlsplit(url)
    if not parts.scheme and not parts.netloc:
        return not url.startswith("//")

    if parts.scheme not in ("http", "https") or not parts.netloc:
        return False
    if parts.username or parts.password:
        return False

    host = (parts.hostname or "").lower()
    hosts = {(urlsplit(base_url).hostname or "").lower()}
    hosts.update(h.lower() for h in allowed_hosts)
    return host in hosts
