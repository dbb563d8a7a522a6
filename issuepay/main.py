import logging

import stripe
from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from starlette.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from issuepay.config import get_settings
from issuepay.database import Base, engine, get_db
from issuepay.errors import register_error_handlers
from issuepay.reconciliation import PaymentReconciler
from issuepay.routes import router
from issuepay.stripe_service import get_checkout_provider

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

CHECKOUT_COMPLETED_EVENTS = {
    "checkout.session.completed",
    "checkout.session.async_payment_succeeded",
}

app = FastAPI(title="Issue Reporting Service")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_error_handlers(app)
app.include_router(router)

Base.metadata.create_all(bind=engine)


@app.get("/", response_class=PlainTextResponse)
def root():
    return "Issue is reporting"


@app.post("/webhook")
async def stripe_webhook(
    request: Request,
    stripe_signature: str = Header(None),
    db: Session = Depends(get_db),
    provider=Depends(get_checkout_provider),
):
    payload = await request.body()

    try:
        event = stripe.Webhook.construct_event(
            payload,
            stripe_signature,
            get_settings().STRIPE_WEBHOOK_SECRET
        )
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid payload")
    except stripe.SignatureVerificationError:
        raise HTTPException(status_code=400, detail="Invalid signature")

    logger.info("Received Stripe event %s", event["type"])
    if event["type"] in CHECKOUT_COMPLETED_EVENTS:
        session_id = event["data"]["object"]["id"]
        reconciler = PaymentReconciler(db, provider)
        result = await run_in_threadpool(reconciler.reconcile, session_id)
        logger.info("Webhook reconciliation for %s: success=%s", session_id, result["success"])

    return {"ok": True}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("issuepay.main:app", host="0.0.0.0", port=settings.PORT)
