"""
Stripe Routes - Pro subscription checkout, portal and webhook
"""

from flask import Blueprint, request, jsonify
from flask_login import current_user, login_required
import stripe
import structlog

from api_responses import error_response, ErrorCode
from services import billing_service

logger = structlog.get_logger("billing")

stripe_bp = Blueprint("stripe", __name__, url_prefix="/api/stripe")


@stripe_bp.route("/create-checkout-session", methods=["POST"])
@login_required
def create_checkout_session():
    try:
        url = billing_service.create_checkout_session(current_user)
    except stripe.StripeError as e:
        logger.error("checkout_session_failed", user_id=current_user.id, error=str(e))
        url = None
    if not url:
        return error_response(ErrorCode.INTERNAL_ERROR, message="Failed to create checkout session", status_code=500)
    return jsonify({"url": url})


@stripe_bp.route("/create-portal-session", methods=["POST"])
@login_required
def create_portal_session():
    try:
        url = billing_service.create_portal_session(current_user)
    except stripe.StripeError as e:
        logger.error("portal_session_failed", user_id=current_user.id, error=str(e))
        url = None
    if not url:
        return error_response(
            ErrorCode.INTERNAL_ERROR, message="Failed to open subscription management", status_code=500
        )
    return jsonify({"url": url})


@stripe_bp.route("/webhook", methods=["POST"])
def webhook():
    """Signature is checked against the raw body, so it is read before any JSON parsing"""
    payload = request.get_data()
    event = billing_service.construct_event(payload, request.headers.get("Stripe-Signature"))
    billing_service.handle_event(event)
    return jsonify({"received": True})
