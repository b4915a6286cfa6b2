"""
Media library store.
"""
from typing import List, Optional

from ..models.media import MediaItem
from ..tenancy import TenantScope
from .base import TenantScopedStore


class MediaStore(TenantScopedStore):
    model = MediaItem
    resource_name = "Media item"

    def search(self, scope: TenantScope, file_type: Optional[str] = None, tag: Optional[str] = None) -> List[MediaItem]:
        items = self.list_by_tenant(scope, file_type=file_type)
        if tag:
            # tags is a JSON column, filtered here to stay portable across backends
            wanted = tag.lower()
            items = [i for i in items if any(t.lower() == wanted for t in (i.tags or []))]
        return items
