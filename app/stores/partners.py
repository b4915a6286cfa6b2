"""
Retail partner store.
"""
from typing import Any, Dict, List

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from ..clock import utcnow
from ..errors import ConflictError
from ..logging_config import db_logger
from ..models.retail_partner import RetailPartner
from ..models.social_account import SocialAccount
from ..schemas.partners import RetailPartnerCreate
from ..tenancy import TenantScope
from .base import TenantScopedStore

DEFAULT_PARTNER_TAGS = ["Urban", "Outdoor", "Premium", "Sale", "Family", "Summer", "Winter", "Gear"]

MISSING_FIELDS_ERROR = "Missing required fields (name and contactEmail)"


class RetailPartnerStore(TenantScopedStore):
    model = RetailPartner
    resource_name = "Retail partner"

    def partner_criterion(self, principal):
        # A partner user sees its own partner rows only
        return RetailPartner.user_id == principal.user_id

    def partner_can_access(self, principal, record) -> bool:
        return record.user_id == principal.user_id

    def linked_to_user(self, user_id: int) -> List[RetailPartner]:
        return self.db.query(RetailPartner).filter(RetailPartner.user_id == user_id).all()

    def get_many(self, brand_id: int, partner_ids) -> List[RetailPartner]:
        """Partners of one brand among ``partner_ids``; ids of other brands are left out."""
        if not partner_ids:
            return []
        return (
            self.db.query(RetailPartner)
            .filter(RetailPartner.brand_id == brand_id, RetailPartner.id.in_(list(partner_ids)))
            .order_by(RetailPartner.id)
            .all()
        )

    def find_by_email(self, brand_id: int, email: str):
        return (
            self.db.query(RetailPartner)
            .filter(RetailPartner.brand_id == brand_id, RetailPartner.contact_email == email)
            .first()
        )

    # ------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------

    def create(self, brand_id: int, data: Dict[str, Any], commit: bool = True) -> RetailPartner:
        data = {k: v for k, v in data.items() if k not in ("id", "connection_date")}
        data.setdefault("status", "pending")
        data.setdefault("extra", {})
        partner = RetailPartner(**{**data, "brand_id": brand_id})
        if partner.status == "active":
            partner.connection_date = utcnow()
        self.db.add(partner)
        if commit:
            self.db.commit()
            self.db.refresh(partner)
        else:
            self.db.flush()
        return partner

    def update(self, record: RetailPartner, data: Dict[str, Any]) -> RetailPartner:
        """
        Partial update. Entering ``active`` from any other status stamps
        ``connection_date``; an update to an already active partner keeps it.
        """
        data = {k: v for k, v in (data or {}).items() if k not in ("id", "brand_id", "connection_date")}
        if not data:
            return record
        if data.get("status") == "active" and record.status != "active":
            data["connection_date"] = utcnow()
        return super().update(record, data)

    def delete(self, record: RetailPartner) -> None:
        """Refuses to delete a partner that still has connected social accounts."""
        accounts = (
            self.db.query(SocialAccount)
            .filter(SocialAccount.partner_id == record.id)
            .count()
        )
        if accounts:
            raise ConflictError(
                "Retail partner has connected social accounts",
                detail={"socialAccounts": accounts},
            )
        super().delete(record)

    # ------------------------------------------------------------
    # Tags and bulk import
    # ------------------------------------------------------------

    def tags(self, scope: TenantScope) -> List[str]:
        found = set()
        for partner in self.list_by_tenant(scope):
            found.update(partner.tags)
        if not found:
            return list(DEFAULT_PARTNER_TAGS)
        return sorted(found)

    def bulk_import(self, brand_id: int, items: List[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Create partners one by one. A bad item is reported and skipped; items
        already committed stay committed.
        """
        created = []
        errors = []
        for index, item in enumerate(items):
            item = item if isinstance(item, dict) else {}
            if not item.get("name") or not (item.get("contactEmail") or item.get("contact_email")):
                errors.append({"index": index, "partner": item, "error": MISSING_FIELDS_ERROR})
                continue
            try:
                payload = RetailPartnerCreate.model_validate(item)
            except ValidationError as e:
                first = e.errors()[0]
                field = ".".join(str(part) for part in first["loc"])
                errors.append({"index": index, "partner": item, "error": f"{field}: {first['msg']}"})
                continue
            try:
                created.append(self.create(brand_id, payload.to_fields(exclude={"brand_id"})))
            except SQLAlchemyError as e:
                self.db.rollback()
                db_logger.warning("Bulk partner import item failed", index=index, brand_id=brand_id, error=str(e))
                errors.append({"index": index, "partner": item, "error": "Failed to create partner"})

        db_logger.info(
            "Bulk partner import finished",
            brand_id=brand_id,
            created=len(created),
            failed=len(errors),
        )
        return {"created": created, "errors": errors}
