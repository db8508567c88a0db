"""Caller identity supplied by the external auth provider.

The provider signs the user in and stores ``user_id``, ``name`` and ``email``
in the Flask session; this module only reads them.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import wraps
from typing import Any, Mapping, Optional

from flask import g, jsonify, session


@dataclass(frozen=True)
class CurrentUser:
    user_id: str
    name: Optional[str] = None
    email: Optional[str] = None


def current_user_from_session(data: Mapping[str, Any]) -> Optional[CurrentUser]:
    user_id = str(data.get("user_id") or "").strip()
    if not user_id:
        return None
    return CurrentUser(user_id=user_id, name=data.get("name"), email=data.get("email"))


def login_required(view):
    """Resolve the session user into ``g.current_user`` or answer 401."""

    @wraps(view)
    async def wrapper(*args, **kwargs):
        user = current_user_from_session(session)
        if user is None:
            return jsonify({"success": False, "message": "Please sign in to continue."}), 401
        g.current_user = user
        return await view(*args, **kwargs)

    return wrapper
