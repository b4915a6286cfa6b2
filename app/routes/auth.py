"""
Authentication routes: register, login, logout and the current user.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from ..access import require_authenticated
from ..auth import (
    authenticate,
    end_session,
    get_current_session,
    get_password_hash,
    get_session_store,
    start_session,
)
from ..config import get_settings
from ..database import get_db
from ..limiter import limiter
from ..logging_config import auth_logger
from ..principals import Principal, Role, describe
from ..schemas.auth import UserCreate, UserLogin, user_to_dict
from ..sessions import SessionRecord, SessionStore
from ..stores.invites import InviteStore
from ..stores.partners import RetailPartnerStore
from ..stores.users import BrandStore, UserStore

settings = get_settings()

router = APIRouter(prefix="/api", tags=["auth"])


def _register_partner(db: Session, data: UserCreate):
    """Create a partner user from an invite and link it to the inviting brand's partner row."""
    invites = InviteStore(db)
    invite = invites.verify(data.invite_token)

    user = UserStore(db).create(
        username=data.username,
        email=data.email,
        hashed_password=get_password_hash(data.password),
        name=data.name,
        role=Role.PARTNER,
        commit=False,
    )

    partners = RetailPartnerStore(db)
    partner = partners.find_by_email(invite.brand_id, invite.email)
    if partner is not None and partner.user_id is None:
        partner.user_id = user.id
    else:
        partners.create(
            invite.brand_id,
            {"name": invite.name, "contact_email": invite.email, "user_id": user.id},
            commit=False,
        )
    invites.accept(invite, commit=False)
    db.commit()
    db.refresh(user)
    auth_logger.info("Partner registered from invite", user_id=user.id, brand_id=invite.brand_id)
    return user


@router.post("/register", status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.register_rate_limit)
def register(
    request: Request,
    response: Response,
    user_data: UserCreate,
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
    current: Optional[SessionRecord] = Depends(get_current_session),
):
    """Register a brand account, or a partner account when an invite token is given. Logs the new user in."""
    if user_data.invite_token:
        user = _register_partner(db, user_data)
    else:
        user = UserStore(db).create(
            username=user_data.username,
            email=user_data.email,
            hashed_password=get_password_hash(user_data.password),
            name=user_data.name,
            role=Role.BRAND,
            commit=False,
        )
        BrandStore(db).create_for_owner(user, name=user_data.name)
        auth_logger.info("Brand registered", user_id=user.id)

    start_session(store, response, user, previous=current)
    return user_to_dict(user)


@router.post("/login")
@limiter.limit(settings.login_rate_limit)
def login(
    request: Request,
    response: Response,
    credentials: UserLogin,
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
    current: Optional[SessionRecord] = Depends(get_current_session),
):
    """Login with JSON body (username/password). Sets the session cookie."""
    user = authenticate(db, credentials.username, credentials.password)
    start_session(store, response, user, previous=current)
    return user_to_dict(user)


@router.post("/logout")
def logout(
    response: Response,
    store: SessionStore = Depends(get_session_store),
    current: Optional[SessionRecord] = Depends(get_current_session),
):
    """End the session. Succeeds even without one."""
    end_session(store, response, current)
    return {"message": "Logged out"}


@router.get("/user")
def get_me(
    principal: Principal = Depends(require_authenticated),
    current: SessionRecord = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """The signed-in user and the principal it is acting as."""
    user = UserStore(db).get(current.user_id)
    return {**user_to_dict(user), "principal": describe(principal)}
