"""
Builds links that start a login flow, e.g. for "Sign in with ..." buttons.
"""
from typing import Iterable, List, Optional, Tuple
from urllib.parse import urlencode

from oauthflow.core.config import Settings
from oauthflow.core.urls import join_links


def build_authorization_url(
    settings: Settings,
    provider: str,
    context: Optional[str] = None,
    scopes: Optional[Iterable[str]] = None,
    back_url: Optional[str] = None,
) -> str:
    """
    Build the ``authenticate`` link for ``provider``.

    Without scopes a single empty ``scope[]`` is sent, which the flow treats
    as "use the provider's default scopes".
    """
    params: List[Tuple[str, str]] = [("provider", provider)]
    if context:
        params.append(("context", context))

    scopes = list(scopes or [])
    if scopes:
        params.extend(("scope[]", scope) for scope in scopes)
    else:
        params.append(("scope[]", ""))

    if back_url:
        params.append(("BackURL", back_url))

    link = join_links("/", settings.OAUTH_URL_SEGMENT, "authenticate")
    return f"{link}?{urlencode(params)}"
