"""
Social account store. An account belongs to a retail partner, so its tenant
is that partner's brand.
"""
from typing import Any, Dict, List

from sqlalchemy.exc import IntegrityError

from ..errors import ConflictError
from ..models.retail_partner import RetailPartner
from ..models.social_account import SocialAccount
from .base import TenantScopedStore


class SocialAccountStore(TenantScopedStore):
    model = SocialAccount
    resource_name = "Social account"

    @property
    def brand_column(self):
        return RetailPartner.brand_id

    def brand_id_of(self, record) -> int:
        return record.partner.brand_id

    def base_query(self):
        return self.db.query(SocialAccount).join(RetailPartner, SocialAccount.partner_id == RetailPartner.id)

    def partner_criterion(self, principal):
        return SocialAccount.partner_id.in_(sorted(principal.partner_ids))

    def partner_can_access(self, principal, record) -> bool:
        return record.partner_id in principal.partner_ids

    def list_for_partner_record(self, partner_id: int) -> List[SocialAccount]:
        return (
            self.db.query(SocialAccount)
            .filter(SocialAccount.partner_id == partner_id)
            .order_by(SocialAccount.created_at.desc(), SocialAccount.id.desc())
            .all()
        )

    def find(self, platform: str, account_id: str):
        return (
            self.db.query(SocialAccount)
            .filter(SocialAccount.platform == platform, SocialAccount.account_id == account_id)
            .first()
        )

    def create_for_partner(self, partner: RetailPartner, data: Dict[str, Any]) -> SocialAccount:
        """Connect an account to ``partner``. One external account can be connected once."""
        if self.find(data["platform"], data["account_id"]) is not None:
            raise ConflictError("Social account already connected")
        data = {k: v for k, v in data.items() if k not in ("id", "partner_id", "brand_id")}
        data.setdefault("status", "active")
        account = SocialAccount(**{**data, "partner_id": partner.id})
        self.db.add(account)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("Social account already connected")
        self.db.refresh(account)
        return account
