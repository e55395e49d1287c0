"""Reverse-proxy awareness for client addresses and URL scheme."""

from __future__ import annotations

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix


def init_app(app: Flask) -> None:
    """Wrap the WSGI app in :class:`~werkzeug.middleware.proxy_fix.ProxyFix`.

    ``USE_PROXYFIX`` toggles the middleware and ``PROXYFIX_HOPS`` sets how many
    ``X-Forwarded-*`` hops are trusted. Zero hops leaves the app untouched.
    """
    hops = int(app.config.get("PROXYFIX_HOPS", 1))
    if not app.config.get("USE_PROXYFIX", True) or hops <= 0:
        return
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=hops, x_proto=hops, x_host=hops, x_prefix=hops)
