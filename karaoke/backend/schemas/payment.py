"""Schemas for subscription plans and the WhatsApp checkout."""

from typing import List
from pydantic import BaseModel, Field


class Plan(BaseModel):
    id: str
    name: str
    price: int  # IDR
    duration: str
    features: List[str] = Field(default_factory=list)
    color: str
    icon: str
    popular: bool = False


class PaymentMethod(BaseModel):
    title: str
    description: str
    number: str
    color: str
    icon: str


class FAQEntry(BaseModel):
    question: str
    answer: str


class AccountStatus(BaseModel):
    label: str
    description: str
    included: List[str] = Field(default_factory=list)
    excluded: List[str] = Field(default_factory=list)


class CheckoutRequest(BaseModel):
    plan_id: str


class OrderSummary(BaseModel):
    item: str
    price: str
    total: str


class CheckoutResponse(BaseModel):
    plan: Plan
    whatsapp_url: str
    message: str
    order: OrderSummary
    steps: List[str]
    confirmation: str
