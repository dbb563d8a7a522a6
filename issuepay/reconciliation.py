"""Turns a completed Stripe checkout session into local issue/payment state.

The unique constraint on ``payments.transaction_id`` is the idempotency
guard: the lookup below only short-circuits the common replay, a concurrent
duplicate still fails on insert and is answered with the stored tracking id.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from issuepay.errors import ConflictIgnored, ValidationError
from issuepay.models import Issue, Payment
from issuepay.stripe_service import CheckoutOutcome
from issuepay.tracking import generate_tracking_id

logger = logging.getLogger(__name__)

PAID = "paid"


def serialize_payment(payment: Payment) -> dict:
    return {
        "id": payment.id,
        "amount": float(payment.amount),
        "email": payment.email,
        "issueId": payment.issue_id,
        "transactionId": payment.transaction_id,
        "paymentStatus": payment.payment_status,
        "paidAt": payment.paid_at.isoformat() if payment.paid_at else None,
        "trackingId": payment.tracking_id,
    }


class PaymentReconciler:

    def __init__(self, db: Session, provider):
        self.db = db
        self.provider = provider

    def reconcile(self, session_id) -> dict:
        if not session_id or not str(session_id).strip():
            raise ValidationError("session_id is required")

        outcome = self.provider.retrieve_session(session_id)
        transaction_id = outcome.transaction_id

        existing = self._find_payment(transaction_id)
        if existing:
            logger.info("Session %s replayed for transaction %s", session_id, transaction_id)
            return self._replay(existing)

        if not outcome.payment_status:
            logger.info("Session %s has no payment status", session_id)
            return {"success": False}

        if outcome.payment_status != PAID:
            logger.warning("Session %s not paid (status=%s), issue %s left untouched",
                           session_id, outcome.payment_status, outcome.issue_id)
            return {"success": False, "paymentStatus": outcome.payment_status}

        if not transaction_id:
            logger.warning("Paid session %s carries no payment intent", session_id)
            return {"success": False, "paymentStatus": outcome.payment_status}

        try:
            return self._record_paid(outcome)
        except ConflictIgnored:
            existing = self._find_payment(transaction_id)
            if existing is None:
                logger.error("Payment insert for transaction %s conflicted but no record was found",
                             transaction_id)
                return {"success": False}
            logger.info("Concurrent reconciliation for transaction %s already recorded", transaction_id)
            return self._replay(existing)

    def _find_payment(self, transaction_id):
        if not transaction_id:
            return None
        return self.db.query(Payment).filter_by(transaction_id=transaction_id).first()

    def _replay(self, payment: Payment) -> dict:
        return {
            "success": True,
            "message": "already exist",
            "trackingId": payment.tracking_id,
            "transactionId": payment.transaction_id,
        }

    def _record_paid(self, outcome: CheckoutOutcome) -> dict:
        tracking_id = generate_tracking_id()

        matched = self.db.query(Issue).filter(Issue.id == outcome.issue_id).count()
        # an issue becomes paid at most once; later payments keep its tracking id
        result = self.db.execute(
            update(Issue)
            .where(Issue.id == outcome.issue_id, Issue.payment_status.is_(None))
            .values(payment_status=PAID, tracking_id=tracking_id)
        )
        modified = result.rowcount or 0
        if not matched:
            logger.warning("Paid session %s references unknown issue %s",
                           outcome.session_id, outcome.issue_id)
        elif not modified:
            logger.warning("Issue %s already paid, transaction %s recorded without re-marking it",
                           outcome.issue_id, outcome.transaction_id)

        payment = Payment(
            amount=Decimal(outcome.amount_total or 0) / 100,
            email=outcome.customer_email,
            issue_id=outcome.issue_id,
            transaction_id=outcome.transaction_id,
            payment_status=outcome.payment_status,
            paid_at=datetime.now(timezone.utc),
            tracking_id=tracking_id,
        )
        self.db.add(payment)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictIgnored()
        self.db.refresh(payment)

        logger.info("Recorded payment %s for issue %s, tracking id %s",
                    payment.transaction_id, payment.issue_id, tracking_id)
        return {
            "success": True,
            "trackingId": tracking_id,
            "modifyIssue": {"matchedCount": matched, "modifiedCount": modified},
            "transactionId": outcome.transaction_id,
            "paymentInfo": serialize_payment(payment),
        }
