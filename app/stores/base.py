"""
Tenant-scoped resource store.

Each store wraps one SQLAlchemy model and knows how to walk a record's
ownership chain back to its brand. Routes never filter by tenant themselves;
they ask a store for ``list_by_tenant(scope)``.
"""
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..principals import PartnerPrincipal
from ..tenancy import TenantScope


class TenantScopedStore:
    model = None
    resource_name = "Resource"

    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------
    # Ownership
    # ------------------------------------------------------------

    @property
    def brand_column(self):
        return self.model.brand_id

    def brand_id_of(self, record) -> Optional[int]:
        return record.brand_id

    def partner_criterion(self, principal: PartnerPrincipal):
        """Extra row restriction for partner users; None when brand membership is enough."""
        return None

    def partner_can_access(self, principal: PartnerPrincipal, record) -> bool:
        return self.brand_id_of(record) in principal.brand_ids

    # ------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------

    def base_query(self):
        return self.db.query(self.model)

    def scoped_query(self, scope: TenantScope, principal=None):
        query = self.base_query()
        criterion = scope.filter(self.brand_column)
        if criterion is not None:
            query = query.filter(criterion)
        if isinstance(principal, PartnerPrincipal):
            narrowed = self.partner_criterion(principal)
            if narrowed is not None:
                query = query.filter(narrowed)
        return query

    def get(self, record_id: int):
        return self.db.get(self.model, record_id)

    def _apply_filters(self, query, filters: Dict[str, Any]):
        for column, value in filters.items():
            if value is not None:
                query = query.filter(getattr(self.model, column) == value)
        return query

    def list_by_tenant(self, scope: TenantScope, principal=None, **filters) -> List[Any]:
        if scope.is_empty:
            return []
        query = self._apply_filters(self.scoped_query(scope, principal), filters)
        return query.order_by(self.model.created_at.desc(), self.model.id.desc()).all()

    def count_by_tenant(self, scope: TenantScope, principal=None, **filters) -> int:
        if scope.is_empty:
            return 0
        return self._apply_filters(self.scoped_query(scope, principal), filters).count()

    # ------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------

    def create(self, brand_id: int, data: Dict[str, Any]):
        record = self.model(**{**data, "brand_id": brand_id})
        self.db.add(record)
        self.db.commit()
        self.db.refresh(record)
        return record

    def update(self, record, data: Dict[str, Any]):
        """Merge ``data`` over ``record``. An empty payload touches nothing."""
        data = {k: v for k, v in (data or {}).items() if k not in ("id", "brand_id")}
        if not data:
            return record
        for key, value in data.items():
            setattr(record, key, value)
        self.db.commit()
        self.db.refresh(record)
        return record

    def delete(self, record) -> None:
        self.db.delete(record)
        self.db.commit()
