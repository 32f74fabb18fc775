from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from learnpath.config import get_db
from learnpath.models.models import User as UserModel
from learnpath.routes.responses import enrollment_response
from learnpath.schemas.progress_schemas import EnrollmentResponse
from learnpath.schemas.user_schemas import GrantCourseRequest, UpdatePermissionsRequest, User, UserListResponse
from learnpath.services.enrollment_service import EnrollmentService
from learnpath.utils.auth import get_permissions, to_user_schema
from learnpath.utils.common import commit_or_raise
from learnpath.utils.errors import NotFoundError
from learnpath.utils.logger import configure_logging
from learnpath.utils.permissions import Action, PermissionSet, require

logger = configure_logging()

admin_routes = APIRouter(prefix="/admin")


def _get_user(db: Session, user_id: int) -> UserModel:
    user = db.query(UserModel).filter(UserModel.id == user_id).first()
    if user is None:
        raise NotFoundError("User", user_id)
    return user


@admin_routes.get("/users", response_model=UserListResponse)
async def list_users(permissions: PermissionSet = Depends(get_permissions), db: Session = Depends(get_db)) -> UserListResponse:
    require(permissions, Action.MANAGE_ACCOUNTS)
    users = db.query(UserModel).order_by(UserModel.id.asc()).all()
    return UserListResponse(users=[to_user_schema(u) for u in users])


@admin_routes.put("/users/{user_id}/permissions", response_model=User)
async def update_permissions(
    user_id: int,
    request: UpdatePermissionsRequest,
    permissions: PermissionSet = Depends(get_permissions),
    db: Session = Depends(get_db),
) -> User:
    """Replace a user's capability list. Unknown capability names are rejected."""
    require(permissions, Action.MANAGE_ACCOUNTS)
    user = _get_user(db, user_id)
    user.permissions = PermissionSet.from_names(request.permissions).to_names()
    commit_or_raise(db, "update permissions")
    db.refresh(user)
    logger.info("permissions updated user_id=%s permissions=%s", user_id, user.permissions)
    return to_user_schema(user)


@admin_routes.post("/users/{user_id}/grant-course", response_model=EnrollmentResponse)
async def grant_course(
    user_id: int,
    request: GrantCourseRequest,
    permissions: PermissionSet = Depends(get_permissions),
    db: Session = Depends(get_db),
) -> EnrollmentResponse:
    """Enroll a user in a course without payment."""
    require(permissions, Action.GRANT_COURSE)
    _get_user(db, user_id)
    enrollment = EnrollmentService(db).grant(user_id, request.course_id)
    logger.info("course granted user_id=%s course_id=%s", user_id, request.course_id)
    return enrollment_response(enrollment)
