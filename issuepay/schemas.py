from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class CheckoutRequest(ApiModel):
    cost: float = Field(gt=0, le=1_000_000, allow_inf_nan=False)
    issue_title: str = Field(alias="issueTitle", min_length=1)
    email: str
    issue_id: str = Field(alias="issueId", min_length=1)


class UserCreate(ApiModel):
    email: str = Field(min_length=3)
    name: Optional[str] = None
    photo_url: Optional[str] = Field(default=None, alias="photoURL")


class UserOut(ApiModel):
    id: str
    email: str
    name: Optional[str] = None
    photo_url: Optional[str] = Field(default=None, alias="photoURL")
    role: str
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")


class IssueCreate(ApiModel):
    title: str = Field(min_length=1)
    email: str
    description: Optional[str] = None
    location: Optional[str] = None
    category: Optional[str] = None


class IssueOut(ApiModel):
    id: str
    title: str
    email: str
    description: Optional[str] = None
    location: Optional[str] = None
    category: Optional[str] = None
    payment_status: Optional[str] = Field(default=None, alias="paymentStatus")
    tracking_id: Optional[str] = Field(default=None, alias="trackingId")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")


class PaymentOut(ApiModel):
    id: str
    amount: float
    email: Optional[str] = None
    issue_id: Optional[str] = Field(default=None, alias="issueId")
    transaction_id: str = Field(alias="transactionId")
    payment_status: Optional[str] = Field(default=None, alias="paymentStatus")
    paid_at: Optional[datetime] = Field(default=None, alias="paidAt")
    tracking_id: Optional[str] = Field(default=None, alias="trackingId")


class StaffCreate(ApiModel):
    email: str
    name: Optional[str] = None


class StaffOut(ApiModel):
    id: str
    email: str
    name: Optional[str] = None
    status: str
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")


class StaffStatusUpdate(ApiModel):
    status: str = Field(min_length=1)
    email: Optional[str] = None
