from app.schemas.common import MediaSchema, PageMeta
from app.schemas.question import (
    QuestionOptionResponse,
    QuestionPublicResponse,
    QuestionReference,
    SubjectGroup,
)
from app.schemas.student_question import (
    AnswerSubmitRequest,
    AnswerSubmitResponse,
    CategoryStat,
    SessionReference,
    StudentQuestionPageResponse,
    StudentQuestionResponse,
    StudentStatsResponse,
    TestAnswerListResponse,
    TestAnswerResponse,
)
from app.schemas.test_session import (
    CategoryPerformance,
    SubjectPerformance,
    TestSessionCloseRequest,
    TestSessionCreateRequest,
    TestSessionFilters,
    TestSessionListResponse,
    TestSessionResponse,
    TestSessionStartRequest,
    TestSessionSummaryResponse,
    TestSessionWithQuestionsResponse,
)

__all__ = [
    "MediaSchema",
    "PageMeta",
    "QuestionOptionResponse",
    "QuestionPublicResponse",
    "QuestionReference",
    "SubjectGroup",
    "TestSessionFilters",
    "TestSessionCreateRequest",
    "TestSessionCloseRequest",
    "TestSessionStartRequest",
    "TestSessionResponse",
    "TestSessionWithQuestionsResponse",
    "SubjectPerformance",
    "CategoryPerformance",
    "TestSessionSummaryResponse",
    "TestSessionListResponse",
    "AnswerSubmitRequest",
    "AnswerSubmitResponse",
    "TestAnswerResponse",
    "TestAnswerListResponse",
    "SessionReference",
    "StudentQuestionResponse",
    "StudentQuestionPageResponse",
    "CategoryStat",
    "StudentStatsResponse",
]
