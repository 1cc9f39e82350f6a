"""
Tastebook - Auth service.

Thin wrapper over Supabase Auth. Sign-up also creates the public profile
row; sign-in records the day's login for the streak.
"""

import logging

from supabase import Client

from tastebook.errors import AuthenticationError, BackendError, TastebookError
from tastebook.services.streak import record_activity

logger = logging.getLogger(__name__)


def _session_payload(response) -> dict:
    session = response.session
    user = response.user
    return {
        "user": {"id": user.id, "email": user.email} if user else None,
        "access_token": session.access_token if session else None,
        "refresh_token": session.refresh_token if session else None,
        "expires_at": session.expires_at if session else None,
    }


def sign_up(client: Client, email: str, password: str, full_name: str) -> dict:
    """Create the auth user, then its `users` row."""
    try:
        response = client.auth.sign_up({
            "email": email,
            "password": password,
            "options": {"data": {"full_name": full_name}},
        })
    except Exception as e:
        logger.warning(f"Sign-up failed for {email}: {e}")
        raise AuthenticationError(str(e))

    if not response.user:
        raise AuthenticationError("Could not create user")

    try:
        client.table("users").insert({
            "id": response.user.id,
            "email": response.user.email or email,
            "full_name": full_name,
        }).execute()
    except Exception as e:
        logger.error(f"Error creating profile for {response.user.id}: {e}")
        raise BackendError("Error creating user profile")

    logger.info(f"User {response.user.id} signed up")
    return _session_payload(response)


def sign_in(client: Client, email: str, password: str) -> dict:
    """Password sign-in. The login is recorded but never blocks the session."""
    try:
        response = client.auth.sign_in_with_password({"email": email, "password": password})
    except Exception as e:
        logger.warning(f"Sign-in failed for {email}: {e}")
        raise AuthenticationError("Invalid email or password")

    if not response.session or not response.user:
        raise AuthenticationError("Invalid email or password")

    try:
        record_activity(client, response.user.id, "login")
    except TastebookError as e:
        logger.error(f"Error recording login activity: {e.message}")

    return _session_payload(response)


def sign_out(client: Client) -> None:
    client.auth.sign_out()


def refresh_session(client: Client, refresh_token: str) -> dict:
    try:
        response = client.auth.refresh_session(refresh_token)
    except Exception as e:
        logger.warning(f"Session refresh failed: {e}")
        raise AuthenticationError("Session expired")
    return _session_payload(response)


def get_user_from_token(client: Client, access_token: str):
    """The auth user behind `access_token`, or None when it is not valid."""
    response = client.auth.get_user(access_token)
    if not response or not response.user:
        return None
    return response.user
