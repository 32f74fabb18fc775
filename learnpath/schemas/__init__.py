"""
API schemas package. Import from submodules or from this package.

Example:
    from learnpath.schemas import CourseResponse, AttemptResponse
    from learnpath.schemas.course_schemas import CourseResponse
"""

from learnpath.schemas.auth_schemas import (
    AuthTokenPayload,
    LoginRequest,
    LoginResponse,
    LogoutResponse,
    RegisterRequest,
    RegisterResponse,
)
from learnpath.schemas.user_schemas import (
    GrantCourseRequest,
    UpdatePermissionsRequest,
    User,
    UserListResponse,
)
from learnpath.schemas.course_schemas import (
    ContentType,
    CourseResponse,
    CourseListResponse,
    CreateCourseRequest,
    UpdateCourseRequest,
    ModuleResponse,
    CreateModuleRequest,
    UpdateModuleRequest,
    LessonResponse,
    LessonContentResponse,
    CreateLessonRequest,
    UpdateLessonRequest,
    ViewerLesson,
    ViewerModule,
    CourseViewerResponse,
)
from learnpath.schemas.quiz_schemas import (
    QuizKind,
    QuestionType,
    CreateQuizRequest,
    UpdateQuizRequest,
    CreateQuestionRequest,
    QuestionResponse,
    AuthoringQuestionResponse,
    QuizResponse,
    AuthoringQuizResponse,
    SubmitAttemptRequest,
    AttemptResponse,
    AttemptListResponse,
)
from learnpath.schemas.progress_schemas import (
    LessonProgressRequest,
    LessonProgressResponse,
    CourseProgressResponse,
    RecordProgressResponse,
    EnrollmentResponse,
    EnrollmentListResponse,
    AccessResponse,
    CourseAccessResponse,
)

__all__ = [
    # auth
    "AuthTokenPayload",
    "LoginRequest",
    "LoginResponse",
    "LogoutResponse",
    "RegisterRequest",
    "RegisterResponse",
    # user
    "GrantCourseRequest",
    "UpdatePermissionsRequest",
    "User",
    "UserListResponse",
    # course
    "ContentType",
    "CourseResponse",
    "CourseListResponse",
    "CreateCourseRequest",
    "UpdateCourseRequest",
    "ModuleResponse",
    "CreateModuleRequest",
    "UpdateModuleRequest",
    "LessonResponse",
    "LessonContentResponse",
    "CreateLessonRequest",
    "UpdateLessonRequest",
    "ViewerLesson",
    "ViewerModule",
    "CourseViewerResponse",
    # quiz
    "QuizKind",
    "QuestionType",
    "CreateQuizRequest",
    "UpdateQuizRequest",
    "CreateQuestionRequest",
    "QuestionResponse",
    "AuthoringQuestionResponse",
    "QuizResponse",
    "AuthoringQuizResponse",
    "SubmitAttemptRequest",
    "AttemptResponse",
    "AttemptListResponse",
    # progress
    "LessonProgressRequest",
    "LessonProgressResponse",
    "CourseProgressResponse",
    "RecordProgressResponse",
    "EnrollmentResponse",
    "EnrollmentListResponse",
    "AccessResponse",
    "CourseAccessResponse",
]
