# storefront/routers/admin.py
from fastapi import APIRouter, Depends

from storefront.dependencies import get_admin_service
from storefront.schemas.admin import AdminSessionRead, AdminSignIn, RememberedEmail
from storefront.services.admin_service import AdminSessionService

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/remembered-email", response_model=RememberedEmail)
def get_remembered_email(service: AdminSessionService = Depends(get_admin_service)):
    """
    Email to prefill on the login form, if "remember me" was ticked.
    """
    return RememberedEmail(email=service.get_remembered_email())


@router.post("/session", response_model=AdminSessionRead)
def sign_in(
    payload: AdminSignIn,
    service: AdminSessionService = Depends(get_admin_service),
):
    """
    Sign in with Supabase Auth. Only active admin_users may sign in.
    """
    session = service.sign_in(payload)
    return AdminSessionRead(session=session, notifications=service.notifier.drain())


@router.get("/session", response_model=AdminSessionRead)
def get_session_state(service: AdminSessionService = Depends(get_admin_service)):
    """
    Current admin session, or null when signed out or expired.
    """
    return AdminSessionRead(session=service.get_active_session())


@router.delete("/session", response_model=AdminSessionRead)
def sign_out(service: AdminSessionService = Depends(get_admin_service)):
    service.sign_out()
    return AdminSessionRead(session=None, notifications=service.notifier.drain())
