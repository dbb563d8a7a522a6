import logging
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from issuepay.auth import Principal, ensure_self_access, verify_token
from issuepay.config import get_settings
from issuepay.database import get_db
from issuepay.errors import NotFound
from issuepay.models import Issue, Payment, StaffApplication, User
from issuepay.reconciliation import PaymentReconciler
from issuepay.schemas import (
    CheckoutRequest,
    IssueCreate,
    IssueOut,
    PaymentOut,
    StaffCreate,
    StaffOut,
    StaffStatusUpdate,
    UserCreate,
    UserOut,
)
from issuepay.staffing import approve_staff_application
from issuepay.stripe_service import get_checkout_provider

logger = logging.getLogger(__name__)

router = APIRouter()


# users

@router.post("/users")
def create_user(request: UserCreate, db: Session = Depends(get_db)):
    if db.query(User).filter_by(email=request.email).first():
        return {"message": "user exist"}

    user = User(email=request.email, name=request.name, photo_url=request.photo_url, role="user")
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        return {"message": "user exist"}
    db.refresh(user)
    return UserOut.model_validate(user).model_dump(by_alias=True, mode="json")


# issues

@router.get("/issues", response_model=List[IssueOut])
def list_issues(email: Optional[str] = None, db: Session = Depends(get_db)):
    query = db.query(Issue)
    if email:
        query = query.filter_by(email=email)
    return query.order_by(Issue.created_at.desc()).all()


@router.get("/issues/{issue_id}", response_model=IssueOut)
def get_issue(issue_id: str, db: Session = Depends(get_db)):
    issue = db.get(Issue, issue_id)
    if issue is None:
        raise NotFound("issue not found")
    return issue


@router.post("/issues", response_model=IssueOut)
def create_issue(request: IssueCreate, db: Session = Depends(get_db)):
    issue = Issue(**request.model_dump())
    db.add(issue)
    db.commit()
    db.refresh(issue)
    return issue


@router.delete("/issues/{issue_id}")
def delete_issue(issue_id: str, db: Session = Depends(get_db)):
    deleted = db.query(Issue).filter_by(id=issue_id).delete()
    db.commit()
    return {"deletedCount": deleted}


# payments

@router.post("/payment-checkout-session")
def create_checkout_session(request: CheckoutRequest, provider=Depends(get_checkout_provider)):
    url = provider.create_checkout_session(
        request.cost, request.issue_title, request.email, request.issue_id
    )
    return {"url": url}


@router.post("/create-checkout-session")
def create_checkout_session_legacy(request: CheckoutRequest, provider=Depends(get_checkout_provider)):
    url = provider.create_checkout_session(
        request.cost, request.issue_title, request.email, request.issue_id,
        success_template=get_settings().LEGACY_SUCCESS_URL_TEMPLATE,
    )
    return {"url": url}


@router.patch("/payment-success")
def payment_success(
    session_id: Optional[str] = None,
    db: Session = Depends(get_db),
    provider=Depends(get_checkout_provider),
):
    return PaymentReconciler(db, provider).reconcile(session_id)


@router.get("/payments", response_model=List[PaymentOut])
def list_payments(
    email: Optional[str] = None,
    principal: Principal = Depends(verify_token),
    db: Session = Depends(get_db),
):
    email = email or principal.email
    ensure_self_access(email, principal)
    return (
        db.query(Payment)
        .filter_by(email=email)
        .order_by(Payment.paid_at.desc())
        .all()
    )


# staffs

@router.get("/staffs", response_model=List[StaffOut])
def list_staffs(status: Optional[str] = None, db: Session = Depends(get_db)):
    query = db.query(StaffApplication)
    if status:
        query = query.filter_by(status=status)
    return query.all()


@router.post("/staffs", response_model=StaffOut)
def create_staff(request: StaffCreate, db: Session = Depends(get_db)):
    application = StaffApplication(email=request.email, name=request.name, status="pending")
    db.add(application)
    db.commit()
    db.refresh(application)
    return application


@router.patch("/staffs/{application_id}")
def update_staff(
    application_id: str,
    request: StaffStatusUpdate,
    principal: Principal = Depends(verify_token),
    db: Session = Depends(get_db),
):
    application, role_updated = approve_staff_application(
        db, application_id, request.status, request.email
    )
    logger.info("Staff application %s updated by %s", application_id, principal.email)
    body = StaffOut.model_validate(application).model_dump(by_alias=True, mode="json")
    body["roleUpdated"] = role_updated
    return body
