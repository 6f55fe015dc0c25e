"""
Billing Service - Stripe Checkout, Customer Portal and subscription webhooks
"""
import stripe
import structlog
from typing import Optional

from constants import TIER_FREE, TIER_PRO
from exceptions import BillingNotConfiguredException, ValidationException
from repositories.user_repository import UserRepository
from settings import get_setting, stripe_configured

logger = structlog.get_logger("billing")

ACTIVE_SUBSCRIPTION_STATUSES = ("active", "trialing")


def _configure():
    if not stripe_configured():
        raise BillingNotConfiguredException()
    stripe.api_key = get_setting("stripe", "secret_key")


def _web_origin():
    return get_setting("server", "web_origin", "http://localhost:5173").rstrip("/")


def normalize_country(country) -> Optional[str]:
    value = country.strip().upper() if isinstance(country, str) else ""
    return value if len(value) == 2 else None


def price_for_country(country) -> str:
    """Regional price id; BR users need STRIPE_PRICE_ID_BR"""
    if normalize_country(country) == "BR":
        price_id = (get_setting("stripe", "price_id_br") or "").strip()
        if not price_id:
            raise BillingNotConfiguredException(
                "Pro pricing for Brazil is not configured. Set STRIPE_PRICE_ID_BR in the server environment."
            )
        return price_id
    price_id = (get_setting("stripe", "price_id") or "").strip()
    if not price_id:
        raise BillingNotConfiguredException("Payments are not configured for your region")
    return price_id


def ensure_customer(user) -> str:
    if user.stripe_customer_id:
        return user.stripe_customer_id
    customer = stripe.Customer.create(email=user.email, metadata={"userId": user.id})
    UserRepository.update(user.id, stripe_customer_id=customer.id)
    logger.info("stripe_customer_created", user_id=user.id)
    return customer.id


def create_checkout_session(user) -> str:
    _configure()
    price_id = price_for_country(user.country)
    customer_id = ensure_customer(user)
    origin = _web_origin()
    session = stripe.checkout.Session.create(
        customer=customer_id,
        client_reference_id=user.id,
        mode="subscription",
        payment_method_types=["card"],
        line_items=[{"price": price_id, "quantity": 1}],
        success_url=f"{origin}/tiers?session_id={{CHECKOUT_SESSION_ID}}",
        cancel_url=f"{origin}/tiers?canceled=1",
        subscription_data={"metadata": {"userId": user.id}},
    )
    logger.info("checkout_session_created", user_id=user.id)
    return session.url


def create_portal_session(user) -> str:
    _configure()
    if not user.stripe_customer_id:
        raise ValidationException("No subscription to manage")
    session = stripe.billing_portal.Session.create(
        customer=user.stripe_customer_id,
        return_url=f"{_web_origin()}/tiers",
    )
    return session.url


def construct_event(payload: bytes, signature: Optional[str]):
    """Verify and parse a webhook body; raises ValidationException on a bad signature"""
    secret = get_setting("stripe", "webhook_secret")
    if not secret or not stripe_configured():
        raise BillingNotConfiguredException("Webhook not configured")
    if not signature:
        raise ValidationException("Missing stripe-signature")
    stripe.api_key = get_setting("stripe", "secret_key")
    try:
        return stripe.Webhook.construct_event(payload, signature, secret)
    except (ValueError, stripe.SignatureVerificationError) as e:
        logger.warning("stripe_webhook_rejected", error=str(e))
        raise ValidationException("Invalid signature")


def _field(obj, name):
    if obj is None:
        return None
    try:
        return obj[name]
    except (KeyError, TypeError):
        return getattr(obj, name, None)


def set_tier(user_id, tier) -> bool:
    if not user_id:
        return False
    user = UserRepository.update(user_id, tier=tier)
    if user is None:
        logger.warning("stripe_webhook_unknown_user", user_id=user_id)
        return False
    logger.info("tier_changed", user_id=user_id, tier=tier)
    return True


def handle_event(event) -> bool:
    """Apply a verified event. Returns True when a user tier changed."""
    event_type = _field(event, "type")
    obj = _field(_field(event, "data"), "object")

    if event_type == "checkout.session.completed":
        return set_tier(_field(obj, "client_reference_id"), TIER_PRO)

    if event_type in ("customer.subscription.updated", "customer.subscription.deleted"):
        status = _field(obj, "status")
        tier = TIER_PRO if status in ACTIVE_SUBSCRIPTION_STATUSES else TIER_FREE
        metadata = _field(obj, "metadata") or {}
        user_id = _field(metadata, "userId")
        if not user_id:
            customer_id = _field(obj, "customer")
            user = UserRepository.get_by_stripe_customer(customer_id) if customer_id else None
            user_id = user.id if user else None
        return set_tier(user_id, tier)

    logger.debug("stripe_webhook_ignored", event_type=event_type)
    return False
