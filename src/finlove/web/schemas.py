"""Request and response bodies for the HTTP API."""

import datetime as dt
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from finlove.domain.entities import PaymentMethod, TransactionType


class RegisterRequest(BaseModel):
    name: str
    email: str
    password: str


class LoginRequest(BaseModel):
    email: str
    password: str


class ForgotPasswordRequest(BaseModel):
    email: str


class ResetPasswordRequest(BaseModel):
    token: str
    password: str


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    spending_limit: Decimal
    savings_goal: Optional[str] = None
    partner_id: Optional[int] = None


class TokenResponse(BaseModel):
    token: str
    user: UserOut


class TransactionCreate(BaseModel):
    description: str
    amount: Decimal = Field(gt=0)
    type: TransactionType
    category: str
    date: Optional[dt.date] = None
    payment_method: PaymentMethod = PaymentMethod.DEBIT
    installments: int = Field(default=1, ge=1)
    is_recurring: bool = False
    recurring_day: Optional[int] = Field(default=None, ge=1, le=31)
    credit_card_id: Optional[int] = None


class TransactionUpdate(BaseModel):
    description: Optional[str] = None
    amount: Optional[Decimal] = Field(default=None, gt=0)
    type: Optional[TransactionType] = None
    category: Optional[str] = None
    date: Optional[dt.date] = None
    payment_method: Optional[PaymentMethod] = None
    is_paid: Optional[bool] = None


class TransactionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    type: TransactionType
    amount: Decimal
    description: str
    category: str
    date: dt.date
    payment_method: PaymentMethod
    is_paid: bool
    installment_id: Optional[str] = None
    installments: Optional[int] = None
    current_installment: Optional[int] = None
    credit_card_id: Optional[int] = None
    created_at: dt.datetime


class CreateTransactionResponse(BaseModel):
    transaction_ids: list[int]
    installment_id: Optional[str] = None
    recurring_id: Optional[int] = None


class DeletedResponse(BaseModel):
    deleted: int


class PartnerLinkRequest(BaseModel):
    email: str


class CronResponse(BaseModel):
    ok: bool
    created: int
    templates_updated: int
    notifications: int
    notifications_failed: int
