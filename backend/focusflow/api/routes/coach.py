"""Coaching chat route"""

from fastapi import APIRouter, Depends
from focusflow.core.auth import get_current_user
from focusflow.core.coach import reply_to
from focusflow.core.logging_config import get_logger
from focusflow.schemas.stats import ChatReply, ChatRequest
from focusflow.schemas.users import User

router = APIRouter(tags=["coach"])

logger = get_logger(__name__)


@router.post("/ai-chat", response_model=ChatReply)
def chat(request: ChatRequest, current_user: User = Depends(get_current_user)):
    topic, reply = reply_to(request.message)
    logger.info("coach_reply", user_id=current_user.id, topic=topic)
    return ChatReply(reply=reply, topic=topic)
