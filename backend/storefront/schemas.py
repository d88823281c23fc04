"""
Request schemas for the storefront API.

Bodies sent by the storefront client use camelCase keys (appId, orderId, ...);
the admin product forms post snake_case keys. Both are declared here as the
client sends them.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from .time_utils import parse_iso_datetime


class _Schema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# --- auth / profile --------------------------------------------------------

class RegisterRequest(_Schema):
    email: EmailStr
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=6)


class LoginRequest(_Schema):
    username: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)


class UsernameUpdate(_Schema):
    username: str = Field(..., min_length=3, max_length=50)


class PasswordUpdate(_Schema):
    old_password: str = Field(..., alias="oldPassword", min_length=1)
    new_password: str = Field(..., alias="newPassword", min_length=6)


# --- catalog ---------------------------------------------------------------

class AppSearchQuery(_Schema):
    search: str = ""
    category_id: Optional[int] = Field(None, alias="categoryId", gt=0)


class ReviewCreate(_Schema):
    evaluation: int = Field(..., ge=1, le=5)
    comment: str = Field(..., min_length=10, max_length=2000)


# --- orders ----------------------------------------------------------------

class CheckoutItem(_Schema):
    app_id: int = Field(..., alias="appId", gt=0)
    # Informational only; the amount charged comes from the catalog price
    price: Optional[Decimal] = Field(None, ge=0)
    quantity: int = Field(1, gt=0)


class PaymentInfo(_Schema):
    method: Literal["card", "wallet"]
    card_last4: Optional[str] = Field(None, alias="cardLast4", pattern=r"^\d{4}$")


class CheckoutRequest(_Schema):
    items: list[CheckoutItem] = Field(..., min_length=1)
    payment: PaymentInfo


# --- support ---------------------------------------------------------------

class SupportRequestCreate(_Schema):
    subject: str = Field(..., min_length=5, max_length=120)
    message: str = Field(..., min_length=10, max_length=1000)
    priority: Literal["low", "normal", "high"] = "normal"
    order_id: int = Field(..., alias="orderId", gt=0)


class ChatMessageCreate(_Schema):
    message: str = Field(..., min_length=1, max_length=2000)


class SupportStatusQuery(_Schema):
    status: Optional[Literal["CREATED", "PROCESSING", "COMPLETED"]] = None


class ReviewStatusQuery(_Schema):
    status: Optional[Literal["PENDING", "APPROVED", "REJECTED"]] = None


# --- analytics -------------------------------------------------------------

class MetricsQuery(_Schema):
    period: Literal["day", "week", "month"] = "day"


class TopAppsQuery(_Schema):
    limit: int = Field(10, ge=1, le=100)


class DaysQuery(_Schema):
    days: int = Field(30, ge=1, le=366)


class OrdersFilterQuery(_Schema):
    start_date: Optional[datetime] = Field(None, alias="startDate")
    end_date: Optional[datetime] = Field(None, alias="endDate")
    status: Optional[str] = None
    user_id: Optional[int] = Field(None, alias="userId", gt=0)
    app_id: Optional[int] = Field(None, alias="appId", gt=0)
    limit: int = Field(50, ge=1, le=500)
    offset: int = Field(0, ge=0)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _parse_dates(cls, value):
        if value is None or isinstance(value, datetime):
            return value
        try:
            return parse_iso_datetime(str(value))
        except ValueError:
            raise ValueError("must be an ISO-8601 date or datetime")


# --- admin -----------------------------------------------------------------

class ProviderCreate(_Schema):
    provider_name: str = Field(..., min_length=1, max_length=200)
    provider_type: Literal["Developer", "Publisher"]
    country: str = Field(..., min_length=1, max_length=120)
    founded_date: date
    web: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None


class AppCreate(_Schema):
    provider_id: int = Field(..., gt=0)
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    cost_price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    release_date: date
    category_id: int = Field(..., gt=0)


class EmployeeCreate(_Schema):
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=6)
    position: str = Field(..., min_length=1, max_length=120)


class EmployeePasswordSet(_Schema):
    password: str = Field(..., min_length=6)
