import uuid
from fastapi import APIRouter, Depends
from app.db.session import AsyncSessionLocal
from app.api.deps import require_user_id
from app.services.match_details_service import MatchDetailsService

router = APIRouter(prefix="/groups", tags=["groups"])


@router.get("/{group_id}/match-details")
async def group_match_details(group_id: uuid.UUID, user_id: uuid.UUID = Depends(require_user_id)):
    async with AsyncSessionLocal() as session:
        return await MatchDetailsService(session).get_match_details(user_id, group_id)
