"""
Partner invitations, persisted so they survive restarts and are shared
between workers.
"""
import secrets
from datetime import timedelta
from typing import Optional

from ..clock import utcnow
from ..errors import Gone, not_found
from ..models.invite import Invite
from .base import TenantScopedStore


class InviteStore(TenantScopedStore):
    model = Invite
    resource_name = "Invite"

    def issue(self, brand_id: int, email: str, name: str, expiry_days: int,
              message: Optional[str] = None, role: str = "partner") -> Invite:
        invite = Invite(
            token=secrets.token_urlsafe(24),
            brand_id=brand_id,
            email=email,
            name=name,
            role=role,
            message=message,
            expires_at=utcnow() + timedelta(days=expiry_days),
        )
        self.db.add(invite)
        self.db.commit()
        self.db.refresh(invite)
        return invite

    def get_by_token(self, token: str) -> Optional[Invite]:
        return self.db.query(Invite).filter(Invite.token == token).first()

    def pending(self, scope):
        if scope.is_empty:
            return []
        return [i for i in self.list_by_tenant(scope) if i.accepted_at is None and i.expires_at > utcnow()]

    def verify(self, token: str) -> Invite:
        """Return an open invite. Expired invites are removed and reported as gone."""
        invite = self.get_by_token(token)
        if invite is None or invite.accepted_at is not None:
            raise not_found("Invite")
        if invite.expires_at <= utcnow():
            self.delete(invite)
            raise Gone("Invite has expired")
        return invite

    def accept(self, invite: Invite, commit: bool = True) -> Invite:
        invite.accepted_at = utcnow()
        if commit:
            self.db.commit()
        return invite
