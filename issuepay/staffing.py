import logging
from typing import Optional

from sqlalchemy.orm import Session

from issuepay.errors import NotFound, ValidationError
from issuepay.models import StaffApplication, User

logger = logging.getLogger(__name__)

APPROVED = "approved"
STAFF_ROLE = "staff"


def approve_staff_application(db: Session, application_id: str, status: str,
                              email: Optional[str] = None):
    """Set an application's status; approval promotes the applicant to staff.

    Both writes share one commit, so an approved application never sits next
    to an unpromoted user. Returns ``(application, role_updated)``.
    """
    if not status:
        raise ValidationError("status is required")

    application = db.get(StaffApplication, application_id)
    if application is None:
        raise NotFound("staff application not found")

    application.status = status
    role_updated = False

    if status == APPROVED:
        applicant_email = email or application.email
        user = db.query(User).filter_by(email=applicant_email).first()
        if user is None:
            logger.warning("Approved application %s but no user registered as %s",
                           application_id, applicant_email)
        elif user.role != STAFF_ROLE:
            user.role = STAFF_ROLE
            role_updated = True

    db.commit()
    db.refresh(application)

    logger.info("Staff application %s set to %s (role updated: %s)",
                application_id, status, role_updated)
    return application, role_updated
