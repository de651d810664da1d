from __future__ import annotations

from functools import wraps
from typing import Optional

from flask import flash, g, redirect, url_for

from ..core.enums import Role
from ..users.model import Identity
from .holder import SessionHolder

ROLE_HOME = {
    Role.ADMIN: "admin_dashboard",
    Role.STUDENT: "student_dashboard",
}


def current_session() -> SessionHolder:
    """The holder the application root restored for this request."""
    return g.session_holder


def current_identity() -> Optional[Identity]:
    holder = g.get("session_holder")
    return holder.current if holder is not None else None


def role_home(identity: Identity):
    return redirect(url_for(ROLE_HOME[identity.role]))


def role_required(role: Role):
    """Gate a view on one role; callers with the other role are sent to their own home."""

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            holder = current_session()
            if not holder.is_authenticated:
                flash("Please log in to continue.", "warning")
                return redirect(url_for("login"))
            if holder.current.role != role:
                return role_home(holder.current)
            return view(*args, **kwargs)

        return wrapper

    return decorator


admin_required = role_required(Role.ADMIN)
student_required = role_required(Role.STUDENT)
