from app.services.answer_service import (
    get_test_answers,
    recompute_session_counters,
    submit_answer,
)
from app.services.history_service import (
    question_history,
    session_questions,
)
from app.services.session_service import (
    close_session,
    get_owned_test_session,
    get_session,
    list_sessions,
    open_session,
    start_session,
)
from app.services.stats_service import (
    get_student_stats,
    performance_by_category,
    session_counters,
    student_stats,
)

__all__ = [
    "open_session",
    "start_session",
    "list_sessions",
    "get_session",
    "close_session",
    "get_owned_test_session",
    "submit_answer",
    "get_test_answers",
    "recompute_session_counters",
    "session_counters",
    "student_stats",
    "performance_by_category",
    "get_student_stats",
    "question_history",
    "session_questions",
]
