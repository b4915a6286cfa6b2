"""
Authentication: password hashing, login/logout and the current principal.

Sessions are server-side. The browser only holds a signed session id in an
HTTP-only cookie; every request re-reads the user so role changes, deactivation
and partner links take effect without logging in again.
"""
from typing import Optional

from fastapi import Depends, Request, Response
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from .config import get_settings
from .database import get_db
from .errors import AuthenticationFailed
from .logging_config import auth_logger
from .models.user import User
from .principals import (
    Principal,
    Role,
    AdminPrincipal,
    BrandPrincipal,
    PartnerPrincipal,
    ImpersonatedBrandPrincipal,
)
from .sessions import SessionRecord, SessionStore, sign_session_id, unsign_session_id
from .stores.partners import RetailPartnerStore
from .stores.users import BrandStore, UserStore

settings = get_settings()

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash. Raises ValueError for an unrecognised hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password for storage."""
    return pwd_context.hash(password)


def authenticate(db: Session, username: str, password: str) -> User:
    """
    Check a username/password pair.

    Unknown user, inactive user and wrong password all raise the same
    AuthenticationFailed so callers cannot tell which one happened.
    """
    users = UserStore(db)

    if settings.demo_login_allowed and username == settings.demo_username and password == settings.demo_password:
        demo = users.get_by_username(settings.demo_username)
        if demo is not None and demo.is_active:
            auth_logger.warning("Demo login used", user_id=demo.id)
            return demo

    user = users.get_by_username(username)
    if user is None or not user.is_active:
        # Spend the same hashing time as a real check
        pwd_context.dummy_verify()
        auth_logger.info("Login failed", username=username)
        raise AuthenticationFailed()

    try:
        valid = verify_password(password, user.hashed_password)
    except (ValueError, TypeError):
        auth_logger.warning("Stored password hash is malformed", user_id=user.id)
        raise AuthenticationFailed()

    if not valid:
        auth_logger.info("Login failed", user_id=user.id)
        raise AuthenticationFailed()
    return user


# ============================================================
# SESSION COOKIE
# ============================================================

def get_session_store(request: Request) -> SessionStore:
    """The process-wide session store built at startup."""
    return request.app.state.session_store


def set_session_cookie(response: Response, sid: str) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=sign_session_id(sid, settings.secret_key),
        max_age=settings.session_max_age_seconds,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.session_cookie_name,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
        path="/",
    )


def start_session(store: SessionStore, response: Response, user: User,
                  previous: Optional[SessionRecord] = None) -> SessionRecord:
    """Issue a fresh session id on login; any session the browser already had is dropped."""
    if previous is not None:
        store.delete(previous.sid)
    record = store.create(user.id)
    set_session_cookie(response, record.sid)
    auth_logger.info("Login succeeded", user_id=user.id, role=user.role)
    return record


def end_session(store: SessionStore, response: Response, record: Optional[SessionRecord]) -> None:
    if record is not None:
        store.delete(record.sid)
        auth_logger.info("Logout", user_id=record.user_id)
    clear_session_cookie(response)


# ============================================================
# CURRENT PRINCIPAL
# ============================================================

def get_current_session(
    request: Request,
    store: SessionStore = Depends(get_session_store),
) -> Optional[SessionRecord]:
    """The live session behind the request cookie, if any."""
    sid = unsign_session_id(request.cookies.get(settings.session_cookie_name), settings.secret_key)
    if sid is None:
        return None
    return store.get(sid)


def build_principal(db: Session, record: SessionRecord) -> Optional[Principal]:
    """Rebuild the principal for a session from the current user row."""
    user = UserStore(db).get(record.user_id)
    if user is None or not user.is_active:
        return None

    if user.role == Role.ADMIN.value:
        if record.impersonated_brand_id is not None:
            if BrandStore(db).get(record.impersonated_brand_id) is not None:
                return ImpersonatedBrandPrincipal(admin_id=user.id, brand_id=record.impersonated_brand_id)
            auth_logger.warning(
                "Impersonated brand no longer exists",
                user_id=user.id,
                brand_id=record.impersonated_brand_id,
            )
        return AdminPrincipal(user.id)

    if user.role == Role.BRAND.value:
        return BrandPrincipal(user.id)

    if user.role == Role.PARTNER.value:
        links = RetailPartnerStore(db).linked_to_user(user.id)
        return PartnerPrincipal(
            user_id=user.id,
            brand_ids=frozenset(p.brand_id for p in links),
            partner_ids=frozenset(p.id for p in links),
        )

    auth_logger.warning("User has an unknown role", user_id=user.id, role=user.role)
    return None


def get_current_principal(
    record: Optional[SessionRecord] = Depends(get_current_session),
    db: Session = Depends(get_db),
) -> Optional[Principal]:
    """The principal for this request, or None when unauthenticated."""
    if record is None:
        return None
    return build_principal(db, record)
