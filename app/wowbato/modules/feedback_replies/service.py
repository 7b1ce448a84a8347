from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from app.wowbato.audit import record_event
from app.wowbato.errors import PermissionDenied, RecordNotFound, ValidationError
from app.wowbato.modules.feedback.service import get_feedback_row
from app.wowbato.utils import clean_str

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.wowbato.identity import Identity
    from app.wowbato.modules.feedback_replies.models import FeedbackReply


def _content(payload: dict) -> str:
    content = clean_str(payload.get("feedback_reply"))
    if not content:
        raise ValidationError("reply cannot be empty")
    return content


def create_reply(s: "Session", feedback_id: int, payload: dict, identity: "Identity") -> "FeedbackReply":
    from app.wowbato.modules.feedback_replies.models import FeedbackReply

    content = _content(payload)
    feedback = get_feedback_row(s, identity.barangay_id, feedback_id)

    now = datetime.utcnow()
    reply = FeedbackReply(
        content=content,
        feedback_id=feedback.id,
        user_id=identity.user_id,
        created_at=now,
        updated_at=now,
    )
    s.add(reply)
    s.flush()
    record_event(
        s,
        actor=identity,
        action="feedback_reply.create",
        entity_type="FeedbackReply",
        entity_id=reply.id,
        metadata={"feedback_id": feedback.id},
    )
    return reply


def list_replies(s: "Session", barangay_id: int, feedback_id: int) -> list[dict]:
    from app.wowbato.modules.feedback_replies.models import FeedbackReply

    feedback = get_feedback_row(s, barangay_id, feedback_id)
    rows = (
        s.query(FeedbackReply)
        .filter(FeedbackReply.feedback_id == feedback.id)
        .order_by(FeedbackReply.created_at.asc(), FeedbackReply.id.asc())
        .all()
    )
    return [r.to_dict() for r in rows]


def _get_reply_row(s: "Session", barangay_id: int, reply_id: int) -> "FeedbackReply":
    from app.wowbato.modules.feedback.models import Feedback
    from app.wowbato.modules.feedback_replies.models import FeedbackReply
    from app.wowbato.modules.projects.models import Project

    reply = (
        s.query(FeedbackReply)
        .join(Feedback, Feedback.id == FeedbackReply.feedback_id)
        .join(Project, Project.id == Feedback.project_id)
        .filter(FeedbackReply.id == reply_id, Project.barangay_id == barangay_id)
        .one_or_none()
    )
    if reply is None:
        raise RecordNotFound(f"reply not found: reply ID {reply_id}")
    return reply


def edit_reply(s: "Session", reply_id: int, payload: dict, identity: "Identity") -> "FeedbackReply":
    content = _content(payload)
    reply = _get_reply_row(s, identity.barangay_id, reply_id)
    if reply.user_id != identity.user_id:
        raise PermissionDenied("Forbidden: only the author can edit this reply")

    reply.content = content
    reply.updated_at = datetime.utcnow()
    record_event(s, actor=identity, action="feedback_reply.update", entity_type="FeedbackReply", entity_id=reply.id)
    return reply


def delete_reply(s: "Session", reply_id: int, identity: "Identity") -> None:
    from app.wowbato.modules.feedback_replies.models import FeedbackReply

    reply = _get_reply_row(s, identity.barangay_id, reply_id)
    if reply.user_id != identity.user_id and not identity.is_admin:
        raise PermissionDenied("Forbidden: only the author or an administrator can delete this reply")

    affected = s.query(FeedbackReply).filter(FeedbackReply.id == reply.id).delete(synchronize_session=False)
    if affected != 1:
        raise RecordNotFound(f"reply not found: reply ID {reply_id}")
    record_event(s, actor=identity, action="feedback_reply.delete", entity_type="FeedbackReply", entity_id=reply_id)
