"""
Evergreen rotation: hand each selected partner one of the brand's evergreen
posts, avoiding posts that partner has already been given until every post
has been used.
"""
import random
from datetime import datetime
from typing import Dict, List, Set

from sqlalchemy.orm import Session

from ..errors import NotFound
from ..logging_config import get_logger
from ..models.content_post import ContentPost
from ..models.post_assignment import PostAssignment
from ..stores.partners import RetailPartnerStore
from ..stores.posts import ContentPostStore
from ..tenancy import TenantScope

logger = get_logger("evergreen")


def previous_selections(db: Session, brand_id: int, partner_ids: List[int]) -> Dict[int, Set[int]]:
    """Evergreen post ids already handed to each partner by earlier rotations."""
    seen: Dict[int, Set[int]] = {pid: set() for pid in partner_ids}
    rows = (
        db.query(PostAssignment)
        .join(ContentPost, PostAssignment.post_id == ContentPost.id)
        .filter(
            ContentPost.brand_id == brand_id,
            ContentPost.is_evergreen.is_(True),
            PostAssignment.partner_id.in_(partner_ids),
        )
        .all()
    )
    for assignment in rows:
        selected = (assignment.extra or {}).get("selectedEvergreenPostId")
        if selected is not None:
            seen[assignment.partner_id].add(selected)
    return seen


def schedule_rotation(
    db: Session,
    brand_id: int,
    creator_id: int,
    scheduled_date: datetime,
    platforms: List[str],
    partner_ids: List[int],
    rng: random.Random = None,
) -> dict:
    rng = rng or random.Random()
    posts = ContentPostStore(db)

    partners = RetailPartnerStore(db).get_many(brand_id, partner_ids)
    if not partners:
        raise NotFound("No matching retail partners found for this brand")

    candidates = [
        p for p in posts.evergreen(TenantScope.of(brand_id))
        if not (p.extra or {}).get("isScheduledEvergreen")
        and all(platform in (p.platforms or []) for platform in platforms)
    ]
    if not candidates:
        raise NotFound("No evergreen content supports the selected platforms")

    seen = previous_selections(db, brand_id, [p.id for p in partners])

    parent = posts.create(
        brand_id,
        {
            "title": f"Evergreen Content - {scheduled_date.date().isoformat()}",
            "description": (
                f"Automated evergreen content for {len(partners)} partners on {', '.join(platforms)}"
            ),
            "platforms": list(platforms),
            "status": "scheduled",
            "scheduled_date": scheduled_date,
            "is_evergreen": True,
            "extra": {"partnerCount": len(partners), "isScheduledEvergreen": True},
        },
        creator_id=creator_id,
    )

    results = []
    for partner in partners:
        fresh = [p for p in candidates if p.id not in seen[partner.id]]
        # Once everything has been used, start over from the full set
        selected = rng.choice(fresh or candidates)
        assignment = PostAssignment(
            post_id=parent.id,
            partner_id=partner.id,
            status="pending",
            extra={
                "selectedEvergreenPostId": selected.id,
                "originalTitle": selected.title,
                "originalDescription": selected.description,
                "originalImageUrl": selected.image_url,
            },
        )
        db.add(assignment)
        results.append((assignment, selected, partner))
    db.commit()

    logger.info(
        "Evergreen rotation scheduled",
        brand_id=brand_id,
        post_id=parent.id,
        partners=len(partners),
    )
    db.refresh(parent)
    return {"parent": parent, "assignments": results}
