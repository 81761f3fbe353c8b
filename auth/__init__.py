"""
Auth package for the Shortlink API.

Resolves the caller identity used as `owner_id` on short URLs, based on
HTTP Basic Auth against a small configured user store. Identity only; the
ownership rule itself lives in `shortlink.manager.url_manager`.
"""
