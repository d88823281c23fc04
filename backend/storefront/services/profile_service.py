# Overview: Service-layer operations for customer profiles; encapsulates business logic and database work.

from __future__ import annotations

from ..data_access import role_session
from ..models import Employee, User
from ..validation import ServiceError
from . import token_service
from .auth_service import hash_password, verify_password


class ProfileError(ServiceError):
    """Raised for profile update errors."""


def _get_user(session, user_id: int) -> User:
    user = session.get(User, user_id)
    if user is None:
        raise ProfileError("User not found", status_code=404)
    return user


def change_username(user_id: int, username: str) -> dict:
    """
    Rename the customer and reissue their token (the username is a claim).

    Returns {"user": ..., "token": ...}.
    """
    with role_session("user", user_id) as session:
        user = _get_user(session, user_id)
        if username != user.username:
            taken = session.query(User.id).filter(User.username == username, User.id != user_id).first()
            if taken is None:
                taken = session.query(Employee.id).filter(Employee.username == username).first()
            if taken is not None:
                raise ProfileError("Username is already taken")
            user.username = username
            session.flush()
        user_data = user.to_dict()

    token = token_service.issue_customer_token(user_data["id"], user_data["username"], user_data["email"])
    return {"user": user_data, "token": token}


def change_password(user_id: int, old_password: str, new_password: str) -> None:
    with role_session("user", user_id) as session:
        user = _get_user(session, user_id)
        if not user.password_hash or not user.password_hash.strip():
            raise ProfileError("Password is not set. Contact an administrator.")
        if not verify_password(old_password, user.password_hash):
            raise ProfileError("Current password is incorrect", status_code=401)
        user.password_hash = hash_password(new_password)
