"""Customer session routes: session check, sign in, registration, sign out"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ..core.session import CartSessionResolver
from ..dependencies import get_customer_auth, get_session_resolver, get_site_verifier
from ..models.requests import LoginRequest, RegisterRequest
from ..services.customer_admin import SiteCustomerVerifier
from ..services.customer_auth import CustomerAuthService
from ..services.platform_client import PlatformAPIError
from .responses import error_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])

MIN_PASSWORD_LENGTH = 8


@router.get("/session")
async def get_session(
    request: Request,
    sessions: CartSessionResolver = Depends(get_session_resolver),
):
    """Whether the current customer cookie belongs to a valid customer"""
    return {"authenticated": await sessions.is_authenticated(request)}


@router.post("/login")
async def login(
    body: LoginRequest,
    sessions: CartSessionResolver = Depends(get_session_resolver),
    auth: CustomerAuthService = Depends(get_customer_auth),
    verifier: SiteCustomerVerifier = Depends(get_site_verifier),
):
    """Sign in with email and password; sets the customer cookies"""
    email = (body.email or "").strip()
    password = body.password or ""
    if not email or not password:
        return error_response("Email and password are required.", 400)

    try:
        payload = await auth.create_customer_access_token(email, password)
        token = payload.customer_access_token
        if not token:
            message = payload.customer_user_errors[0].message if payload.customer_user_errors else None
            return error_response(message or "Unable to sign in.", 401)

        customer = await auth.get_customer_by_access_token(token.access_token)
        if not customer:
            return error_response("Unable to load customer profile.", 401)

        if verifier.enabled:
            try:
                verified = await verifier.is_site_customer(customer.id)
            except PlatformAPIError as e:
                logger.warning(f"Site customer check failed for {customer.id}: {e}")
                verified = False
            if not verified:
                return error_response("This account is not verified for this storefront.", 403)
    except PlatformAPIError as e:
        logger.error(f"Customer login failed: {e}")
        return error_response("Failed to sign in.", 500)

    response = JSONResponse({"success": True})
    sessions.set_customer_cookies(response, token.access_token, customer.id, token.expires_at)
    return response


@router.post("/register")
async def register(
    body: RegisterRequest,
    sessions: CartSessionResolver = Depends(get_session_resolver),
    auth: CustomerAuthService = Depends(get_customer_auth),
    verifier: SiteCustomerVerifier = Depends(get_site_verifier),
):
    """Create a customer, tag it as a site customer and sign it in"""
    email = (body.email or "").strip()
    password = body.password or ""
    first_name = (body.first_name or "").strip() or None
    last_name = (body.last_name or "").strip() or None

    if not email or not password:
        return error_response("Email and password are required.", 400)
    if len(password) < MIN_PASSWORD_LENGTH:
        return error_response(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.", 400)

    try:
        created = await auth.create_customer(email, password, first_name, last_name)
        if not created.customer:
            message = created.customer_user_errors[0].message if created.customer_user_errors else None
            return error_response(message or "Unable to create customer.", 400)

        customer = created.customer
        await verifier.add_site_tag(customer.id)

        payload = await auth.create_customer_access_token(email, password)
        token = payload.customer_access_token
        if not token:
            message = payload.customer_user_errors[0].message if payload.customer_user_errors else None
            return error_response(message or "Account created but sign-in failed.", 500)
    except PlatformAPIError as e:
        logger.error(f"Customer registration failed: {e}")
        return error_response("Failed to register customer.", 500)

    response = JSONResponse({"success": True})
    sessions.set_customer_cookies(response, token.access_token, customer.id, token.expires_at)
    return response


@router.post("/logout")
async def logout(sessions: CartSessionResolver = Depends(get_session_resolver)):
    """Clear the customer cookies"""
    response = JSONResponse({"success": True})
    sessions.clear_customer_cookies(response)
    return response
