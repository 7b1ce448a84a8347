from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from app.wowbato.audit import record_event
from app.wowbato.errors import PermissionDenied, RecordNotFound, ValidationError
from app.wowbato.models import User
from app.wowbato.modules.projects.service import get_project_row
from app.wowbato.utils import clean_str

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.wowbato.identity import Identity
    from app.wowbato.modules.feedback.models import Feedback


def _content(payload: dict) -> str:
    content = clean_str(payload.get("content"))
    if not content:
        raise ValidationError("feedback content cannot be empty")
    return content


def create_feedback(s: "Session", project_id: int, payload: dict, identity: "Identity") -> "Feedback":
    """Post feedback on a project; the author's current role is stored with it."""
    from app.wowbato.modules.feedback.models import Feedback

    content = _content(payload)
    project = get_project_row(s, identity.barangay_id, project_id)

    now = datetime.utcnow()
    feedback = Feedback(
        content=content,
        role=identity.role,
        user_id=identity.user_id,
        project_id=project.id,
        created_at=now,
        updated_at=now,
    )
    s.add(feedback)
    s.flush()
    record_event(
        s,
        actor=identity,
        action="feedback.create",
        entity_type="Feedback",
        entity_id=feedback.id,
        metadata={"project_id": project.id},
    )
    return feedback


def get_feedback_row(s: "Session", barangay_id: int, feedback_id: int) -> "Feedback":
    from app.wowbato.modules.feedback.models import Feedback
    from app.wowbato.modules.projects.models import Project

    feedback = (
        s.query(Feedback)
        .join(Project, Project.id == Feedback.project_id)
        .filter(Feedback.id == feedback_id, Project.barangay_id == barangay_id)
        .one_or_none()
    )
    if feedback is None:
        raise RecordNotFound(f"feedback not found: feedback ID {feedback_id}")
    return feedback


def list_feedback(s: "Session", barangay_id: int, project_id: int) -> list[dict]:
    """Feedback on one project, oldest first, with the author's name."""
    from app.wowbato.modules.feedback.models import Feedback

    project = get_project_row(s, barangay_id, project_id)
    rows = (
        s.query(Feedback, User.first_name, User.last_name)
        .join(User, User.id == Feedback.user_id)
        .filter(Feedback.project_id == project.id)
        .order_by(Feedback.created_at.asc(), Feedback.id.asc())
        .all()
    )
    return [
        {
            "feedback_id": f.id,
            "content": f.content,
            "role": f.role,
            "user_id": f.user_id,
            "project_id": f.project_id,
            "first_name": first_name,
            "last_name": last_name,
            "created_at": f.created_at.isoformat(),
        }
        for f, first_name, last_name in rows
    ]


def edit_feedback(s: "Session", feedback_id: int, payload: dict, identity: "Identity") -> "Feedback":
    content = _content(payload)
    feedback = get_feedback_row(s, identity.barangay_id, feedback_id)
    if feedback.user_id != identity.user_id:
        raise PermissionDenied("Forbidden: only the author can edit this feedback")

    feedback.content = content
    feedback.updated_at = datetime.utcnow()
    record_event(s, actor=identity, action="feedback.update", entity_type="Feedback", entity_id=feedback.id)
    return feedback


def delete_feedback(s: "Session", feedback_id: int, identity: "Identity") -> None:
    from app.wowbato.modules.feedback.models import Feedback

    feedback = get_feedback_row(s, identity.barangay_id, feedback_id)
    if feedback.user_id != identity.user_id and not identity.is_admin:
        raise PermissionDenied("Forbidden: only the author or an administrator can delete this feedback")

    affected = s.query(Feedback).filter(Feedback.id == feedback.id).delete(synchronize_session=False)
    if affected != 1:
        raise RecordNotFound(f"feedback not found: feedback ID {feedback_id}")
    record_event(
        s,
        actor=identity,
        action="feedback.delete",
        entity_type="Feedback",
        entity_id=feedback_id,
        metadata={"author_user_id": feedback.user_id},
    )
