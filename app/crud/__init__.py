from app.crud.question import (
    get_approved_questions_by_ids,
    get_question_by_id,
    get_questions_by_ids,
    get_random_approved_questions,
)
from app.crud.student_question import (
    count_student_answers,
    get_student_question,
    get_student_question_history,
    get_student_questions_by_session,
    get_student_questions_by_sessions,
    get_student_questions_by_student,
    upsert_student_question,
)
from app.crud.test_session import (
    create_test_session,
    get_test_session_by_id,
    get_test_sessions_by_ids,
    get_test_sessions_by_student,
    get_test_sessions_page,
    recompute_test_session_counters,
    update_test_session_status,
)

__all__ = [
    "get_question_by_id",
    "get_approved_questions_by_ids",
    "get_questions_by_ids",
    "get_random_approved_questions",
    "create_test_session",
    "get_test_session_by_id",
    "get_test_sessions_by_ids",
    "get_test_sessions_by_student",
    "get_test_sessions_page",
    "recompute_test_session_counters",
    "update_test_session_status",
    "count_student_answers",
    "get_student_question",
    "upsert_student_question",
    "get_student_questions_by_session",
    "get_student_questions_by_sessions",
    "get_student_questions_by_student",
    "get_student_question_history",
]
