"""
HTML for the callback bounce page.

Some providers deliver the authorization code with a form POST. The page
re-requests the callback with a GET so the rest of the flow only deals
with query parameters.
"""
import json
from html import escape

REDIRECT_PAGE = """<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta http-equiv="refresh" content="0;url={url_attr}">
    <title>Redirecting…</title>
</head>
<body>
    <p>Redirecting… If nothing happens, <a href="{url_attr}">continue</a>.</p>
    <script>window.location.replace({url_js});</script>
</body>
</html>"""


def render_redirect_page(url: str) -> str:
    """Render the bounce page for ``url``."""
    # json.dumps alone would let "</script>" through
    url_js = json.dumps(url).replace("<", "\\u003c").replace(">", "\\u003e")
    return REDIRECT_PAGE.format(url_attr=escape(url, quote=True), url_js=url_js)
