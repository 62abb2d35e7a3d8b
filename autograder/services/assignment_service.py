# autograder/services/assignment_service.py
from typing import Optional

from sqlalchemy.orm import Session

from autograder.models.assignment import Assignment
from autograder.models.user import User
from autograder.schemas.assignment import AssignmentCreate
from autograder.schemas.assignment_config import parse_assignment_config_for_type


def create_assignment(
    db: Session,
    *,
    obj_in: AssignmentCreate,
    teacher: Optional[User] = None,
) -> Assignment:
    """
    teacher creates an assignment; the config is validated for its type and stored camelCase
    """
    config_json = None
    if obj_in.assignment_config is not None:
        config = parse_assignment_config_for_type(obj_in.type, obj_in.assignment_config)
        config_json = config.model_dump(mode="json", by_alias=True, exclude_unset=True)

    db_obj = Assignment(
        teacher_id=teacher.id if teacher else None,
        title=obj_in.title,
        type=obj_in.type,
        assignment_config=config_json,
        due_at=obj_in.due_at,
    )
    db.add(db_obj)
    db.commit()
    db.refresh(db_obj)
    return db_obj


def get_assignment(db: Session, assignment_id: int) -> Optional[Assignment]:
    return db.get(Assignment, assignment_id)
