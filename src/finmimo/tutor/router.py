"""Study tutor endpoint."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends

from finmimo.auth.dependencies import get_current_user
from finmimo.db.models import User
from finmimo.tutor.schemas import TutorRequest, TutorResponse
from finmimo.tutor.service import TutorContext, answer

logger = structlog.get_logger()

router = APIRouter(prefix="/api/ai", tags=["Tutor"])


@router.post("/tutor", response_model=TutorResponse)
async def tutor(
    body: TutorRequest,
    user: User = Depends(get_current_user),
) -> TutorResponse:
    """Answer a study question. Requests for investment picks are refused."""
    context = TutorContext(**body.context.model_dump()) if body.context else None
    result = answer(body.message, context)
    if result.is_guardrailed:
        logger.info("tutor_guardrailed", user_id=user.id)
    return TutorResponse(reply=result.reply, is_guardrailed=result.is_guardrailed)
