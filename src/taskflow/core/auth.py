# src/taskflow/core/auth.py

from __future__ import annotations

import logging
import re

from ..tasks.task_api import ApiError
from .state import AppState

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_NAME_LENGTH = 2
MIN_PASSWORD_LENGTH = 6


class AuthError(ValueError):
    """Signup/login could not be completed; the message is user-facing."""


def validate_credentials(email: str, password: str) -> list[str]:
    errors: list[str] = []
    if not email or not _EMAIL_RE.match(email):
        errors.append("Please enter a valid email address")
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    return errors


def validate_signup(name: str, email: str, password: str) -> list[str]:
    errors: list[str] = []
    if not name or len(name.strip()) < MIN_NAME_LENGTH:
        errors.append(f"Name must be at least {MIN_NAME_LENGTH} characters")
    errors.extend(validate_credentials(email, password))
    return errors


def _establish_session(state: AppState, email: str, password: str) -> dict:
    token = state.api.login(email=email, password=password)
    # the profile request needs the new token
    state.session.token = token
    try:
        user = state.api.get_current_user()
    except ApiError:
        state.session.token = None
        raise
    state.session.set_auth(token, user)
    state.error = None
    logger.info("Signed in as %s", user.get("email") or email)
    return user


def login(state: AppState, email: str, password: str) -> dict:
    email = (email or "").strip().lower()
    errors = validate_credentials(email, password)
    if errors:
        raise AuthError("; ".join(errors))
    try:
        return _establish_session(state, email, password)
    except ApiError as e:
        state.error = str(e) or "Invalid credentials"
        raise AuthError(state.error) from e


def signup(state: AppState, name: str, email: str, password: str) -> dict:
    """Register, then log in with the same credentials and load the profile."""
    name = (name or "").strip()
    email = (email or "").strip().lower()
    errors = validate_signup(name, email, password)
    if errors:
        raise AuthError("; ".join(errors))
    try:
        state.api.signup(name=name, email=email, password=password)
        return _establish_session(state, email, password)
    except ApiError as e:
        state.error = str(e) or "Signup failed"
        raise AuthError(state.error) from e


def logout(state: AppState) -> None:
    state.session.clear_auth()
    state.tasks = []
    state.error = None
    logger.info("Signed out.")


def toggle_dark_mode(state: AppState) -> bool:
    state.session.set_dark_mode(not state.session.dark_mode)
    return state.session.dark_mode
