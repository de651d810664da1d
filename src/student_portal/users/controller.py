from __future__ import annotations

import logging

from flask import Flask, flash, redirect, render_template, request, url_for

from ..container import Container
from ..core.exceptions import BackendError, DomainError, ValidationError
from ..sessions.guards import current_session, role_home
from .service import DUPLICATE, RegistrationPayload

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    def _system_error(action: str, e: Exception) -> None:
        logger.exception("unexpected error during %s", action)
        if bool(app.config.get("DEBUG", False)):
            flash(f"System error during {action}: {e}", "danger")
        else:
            flash("An error occurred. Please try again.", "danger")

    def _link_student(identity) -> None:
        """Attach the student to a record; a failure here is retried on the next login."""
        try:
            container.student_service.link_registered_student(identity)
        except DomainError as e:
            logger.warning("could not link a record for %s: %s", identity.identifier, e)

    @app.route("/", endpoint="index")
    def index():
        holder = current_session()
        if holder.is_authenticated:
            return role_home(holder.current)
        return redirect(url_for("login"))

    @app.route("/login", methods=["GET", "POST"], endpoint="login")
    def login():
        holder = current_session()
        if holder.is_authenticated:
            return role_home(holder.current)

        if request.method == "POST":
            try:
                result = holder.login(
                    request.form.get("regNumber", ""),
                    request.form.get("password", ""),
                    remember=bool(request.form.get("remember_me")),
                )
                if result.success:
                    _link_student(result.identity)
                    flash("Login successful!", "success")
                    return role_home(result.identity)
                flash(result.message, "danger")
            except BackendError as e:
                flash(str(e), "danger")
            except Exception as e:
                _system_error("login", e)

        return render_template("login.html", reg_number=request.form.get("regNumber", ""))

    @app.route("/register", methods=["GET", "POST"], endpoint="register")
    def register_account():
        holder = current_session()
        if holder.is_authenticated:
            return role_home(holder.current)

        allow_admin = bool(app.config.get("ALLOW_ADMIN_REGISTRATION", False))
        errors: dict[str, str] = {}

        if request.method == "POST":
            try:
                payload = RegistrationPayload.from_form(request.form, allow_admin=allow_admin)
                result = container.credential_authority.register(payload)
                if result.success:
                    _link_student(result.identity)
                    flash("Registration successful. You can now log in.", "success")
                    return redirect(url_for("login"))
                if result.reason == DUPLICATE:
                    errors["regNumber"] = "An account with this registration number already exists"
                flash(errors.get("regNumber") or "Unable to register. Please try again.", "danger")
            except ValidationError as e:
                errors = e.errors
                flash(str(e), "danger")
            except BackendError as e:
                flash(str(e), "danger")
            except Exception as e:
                _system_error("registration", e)

        return render_template(
            "register.html",
            form=request.form,
            errors=errors,
            allow_admin=allow_admin,
        )

    @app.route("/logout", methods=["GET", "POST"], endpoint="logout")
    def logout():
        current_session().logout()
        flash("Logged out successfully.", "info")
        return redirect(url_for("login"))
