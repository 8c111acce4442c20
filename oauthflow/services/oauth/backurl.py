"""
Back-URL resolution: where to send the user once the login flow completes.
"""
from typing import Callable, Mapping, Optional

SitePredicate = Callable[[str], bool]


def is_ajax(request_vars: Mapping[str, str], headers: Mapping[str, str]) -> bool:
    """An XMLHttpRequest, or a request that says it is one with ``ajax=1``."""
    return (
        headers.get("x-requested-with", "").lower() == "xmlhttprequest"
        or request_vars.get("ajax") == "1"
    )


def find_back_url(
    request_vars: Mapping[str, str],
    headers: Mapping[str, str],
    is_site_url: SitePredicate,
    base_url: str,
) -> str:
    """
    Pick the return target for a login flow.

    Precedence: the ``BackURL`` request variable, then the ``X-Backurl`` header
    on AJAX requests, then ``Referer``. Anything that is missing or not on this
    site falls back to ``base_url``.

    Args:
        request_vars: Query and form values of the request
        headers: Request headers (case-insensitive mapping)
        is_site_url: Same-site predicate
        base_url: Absolute base URL of the application
    """
    back_url: Optional[str] = None
    if request_vars.get("BackURL"):
        back_url = request_vars["BackURL"]
    elif is_ajax(request_vars, headers) and headers.get("x-backurl"):
        back_url = headers["x-backurl"]
    elif headers.get("referer"):
        back_url = headers["referer"]

    if not back_url or not is_site_url(back_url):
        back_url = base_url

    return back_url


def get_return_url(stored: Optional[str], is_site_url: SitePredicate, base_url: str) -> str:
    """Re-check a stored back URL before redirecting to it."""
    if not stored or not is_site_url(stored):
        return base_url
    return stored
