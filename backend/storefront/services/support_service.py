# Overview: Service-layer operations for support requests and chat; encapsulates business logic and database work.

"""
Support Service

Customers open a request about one of their orders; the request message
becomes the first chat line. Support agents take requests into work and
reply; only an admin closes them.

    CREATED --take--> PROCESSING --close (admin)--> COMPLETED

A COMPLETED request accepts no further messages from either side.
"""

from __future__ import annotations

from ..data_access import role_session
from ..models import Employee, Sale, SupportMessage, SupportRequest, User
from ..models.support import (
    REQUEST_COMPLETED,
    REQUEST_CREATED,
    REQUEST_PROCESSING,
    SENDER_EMPLOYEE,
    SENDER_USER,
)
from ..time_utils import to_utc_z, utcnow
from ..validation import ServiceError


EMPLOYEE_DISPLAY_NAME = "Support agent"


class SupportError(ServiceError):
    """Raised for support request and chat errors."""


def _sender_names(session, messages: list[SupportMessage]) -> tuple[dict, dict]:
    user_ids = {m.sender_id for m in messages if m.sender_type == SENDER_USER}
    employee_ids = {m.sender_id for m in messages if m.sender_type == SENDER_EMPLOYEE}
    users = {}
    employees = {}
    if user_ids:
        users = dict(session.query(User.id, User.username).filter(User.id.in_(user_ids)).all())
    if employee_ids:
        employees = dict(
            session.query(Employee.id, Employee.username).filter(Employee.id.in_(employee_ids)).all()
        )
    return users, employees


def _chat(session, request_id: int) -> list[SupportMessage]:
    return (
        session.query(SupportMessage)
        .filter(SupportMessage.request_id == request_id)
        .order_by(SupportMessage.created_at.asc(), SupportMessage.id.asc())
        .all()
    )


# --- customer side ---------------------------------------------------------

def create_request(user_id: int, subject: str, message: str, priority: str, order_id: int) -> dict:
    """
    Open a support request about one of the customer's orders.

    Raises SupportError 403 when the order is not the customer's.
    """
    with role_session("user", user_id) as session:
        order = session.query(Sale.id).filter(Sale.id == order_id, Sale.user_id == user_id).first()
        if order is None:
            raise SupportError("Order not found or does not belong to you", status_code=403)

        now = utcnow()
        request = SupportRequest(
            user_id=user_id,
            subject=subject,
            message=message,
            priority=priority,
            status=REQUEST_CREATED,
            order_id=order_id,
            created_at=now,
        )
        session.add(request)
        session.flush()

        session.add(SupportMessage(
            request_id=request.id,
            sender_type=SENDER_USER,
            sender_id=user_id,
            message=message,
            created_at=now,
        ))
        session.flush()

        return {
            "id": request.id,
            "status": request.status,
            "createdAt": to_utc_z(request.created_at),
        }


def list_customer_requests(user_id: int) -> list[dict]:
    with role_session("user", user_id) as session:
        requests = (
            session.query(SupportRequest)
            .filter(SupportRequest.user_id == user_id)
            .order_by(SupportRequest.created_at.desc(), SupportRequest.id.desc())
            .all()
        )
        return [r.to_dict() for r in requests]


def _owned_request(session, user_id: int, request_id: int) -> SupportRequest:
    request = (
        session.query(SupportRequest)
        .filter(SupportRequest.id == request_id, SupportRequest.user_id == user_id)
        .first()
    )
    if request is None:
        raise SupportError("Support request not found", status_code=403)
    return request


def customer_messages(user_id: int, request_id: int) -> list[dict]:
    """Chat of the customer's own request. Staff show up under a generic name."""
    with role_session("user", user_id) as session:
        _owned_request(session, user_id, request_id)
        messages = _chat(session, request_id)
        users, _ = _sender_names(session, messages)
        return [
            m.to_dict(users.get(m.sender_id) if m.sender_type == SENDER_USER else EMPLOYEE_DISPLAY_NAME)
            for m in messages
        ]


def post_customer_message(user_id: int, request_id: int, message: str) -> dict:
    with role_session("user", user_id) as session:
        request = _owned_request(session, user_id, request_id)
        if request.status == REQUEST_COMPLETED:
            raise SupportError("Cannot send messages to a completed request")

        chat_line = SupportMessage(
            request_id=request_id,
            sender_type=SENDER_USER,
            sender_id=user_id,
            message=message,
            created_at=utcnow(),
        )
        session.add(chat_line)
        session.flush()
        return chat_line.to_dict()


# --- employee side ---------------------------------------------------------

def list_requests(employee_id: int | None, status: str | None = None) -> list[dict]:
    with role_session("support", employee_id) as session:
        query = session.query(SupportRequest)
        if status:
            query = query.filter(SupportRequest.status == status)
        requests = query.order_by(SupportRequest.created_at.desc(), SupportRequest.id.desc()).all()
        return [r.to_employee_dict() for r in requests]


def _get_request(session, request_id: int) -> SupportRequest:
    request = session.get(SupportRequest, request_id)
    if request is None:
        raise SupportError("Support request not found", status_code=404)
    return request


def take_request(employee_id: int, request_id: int) -> dict:
    """Assign the request to the calling agent and move it to PROCESSING."""
    with role_session("support", employee_id) as session:
        request = _get_request(session, request_id)
        if request.status == REQUEST_COMPLETED:
            raise SupportError("Cannot take a completed request")

        request.employee_id = employee_id
        request.taken_at = utcnow()
        request.status = REQUEST_PROCESSING
        session.flush()
        session.refresh(request)
        return request.to_employee_dict()


def employee_messages(employee_id: int | None, request_id: int) -> list[dict]:
    with role_session("support", employee_id) as session:
        _get_request(session, request_id)
        messages = _chat(session, request_id)
        users, employees = _sender_names(session, messages)
        return [
            m.to_dict(users.get(m.sender_id) if m.sender_type == SENDER_USER else employees.get(m.sender_id))
            for m in messages
        ]


def post_employee_message(employee_id: int, role: str, request_id: int, message: str) -> dict:
    """
    Reply in a request's chat.

    Only the assigned agent may reply; admins may reply anywhere.
    """
    with role_session("support", employee_id) as session:
        request = _get_request(session, request_id)
        if request.status == REQUEST_COMPLETED:
            raise SupportError("Cannot send messages to a completed request", status_code=403)
        if role != "admin" and request.employee_id != employee_id:
            raise SupportError("You cannot send messages to this request", status_code=403)

        chat_line = SupportMessage(
            request_id=request_id,
            sender_type=SENDER_EMPLOYEE,
            sender_id=employee_id,
            message=message,
            created_at=utcnow(),
        )
        session.add(chat_line)
        session.flush()
        return chat_line.to_dict()


def close_request(request_id: int) -> dict:
    with role_session("admin") as session:
        request = _get_request(session, request_id)
        if request.status == REQUEST_COMPLETED:
            raise SupportError("Support request is already closed")

        request.status = REQUEST_COMPLETED
        request.closed_at = utcnow()
        session.flush()
        return request.to_employee_dict()
