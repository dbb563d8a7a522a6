from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Column, String, Numeric, DateTime, Text
from issuepay.database import Base


def _new_id():
    return uuid4().hex


def _utcnow():
    return datetime.now(timezone.utc)


class Issue(Base):
    __tablename__ = "issues"

    id = Column(String, primary_key=True, default=_new_id)
    title = Column(String, nullable=False)
    email = Column(String, index=True, nullable=False)     # reporter
    description = Column(Text)
    location = Column(String)
    category = Column(String)
    payment_status = Column(String)                        # NULL | paid
    tracking_id = Column(String)
    created_at = Column(DateTime(timezone=True), default=_utcnow)


class Payment(Base):
    __tablename__ = "payments"

    id = Column(String, primary_key=True, default=_new_id)
    amount = Column(Numeric(12, 2), nullable=False)
    email = Column(String, index=True)
    issue_id = Column(String, index=True)
    transaction_id = Column(String, unique=True, nullable=False)   # Stripe PaymentIntent ID
    payment_status = Column(String)
    paid_at = Column(DateTime(timezone=True), default=_utcnow)
    tracking_id = Column(String)


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=_new_id)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String)
    photo_url = Column(String)
    role = Column(String, nullable=False, default="user")  # user | staff | admin
    created_at = Column(DateTime(timezone=True), default=_utcnow)


class StaffApplication(Base):
    __tablename__ = "staffs"

    id = Column(String, primary_key=True, default=_new_id)
    email = Column(String, index=True, nullable=False)
    name = Column(String)
    status = Column(String, nullable=False, default="pending")  # pending | approved | rejected
    created_at = Column(DateTime(timezone=True), default=_utcnow)
