"""
Configuration for the auth module.

This defines how users are loaded. For demo purposes, this uses an
in-memory dictionary (username -> password or "sha256:<hexdigest>").
In production, this can be extended to load users from a database or
external identity provider.
"""

from typing import Dict
import os

USERS: Dict[str, str] = {
    "demo": os.getenv("DEMO_USER_PASSWORD", "demo"),
    "admin": os.getenv("ADMIN_USER_PASSWORD", "admin"),
}
