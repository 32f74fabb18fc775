from pydantic import BaseModel
from typing import Optional


class User(BaseModel):
    id: int
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    permissions: list[str] = []


class UserListResponse(BaseModel):
    users: list[User]


class UpdatePermissionsRequest(BaseModel):
    permissions: list[str]


class GrantCourseRequest(BaseModel):
    course_id: str
