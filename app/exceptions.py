"""커스텀 예외 클래스 정의"""


class BaseAppError(Exception):
    """애플리케이션 기본 예외 클래스"""

    error_code = "InternalError"

    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class InvalidInputError(BaseAppError):
    """잘못된 요청 데이터 (400)"""

    error_code = "InvalidInput"

    def __init__(self, message: str):
        super().__init__(message, status_code=400)


class NotFoundError(BaseAppError):
    """참조 대상이 존재하지 않음 (404)"""

    error_code = "NotFound"

    def __init__(self, message: str):
        super().__init__(message, status_code=404)


class TestSessionNotFoundError(NotFoundError):
    """시험 세션을 찾을 수 없을 때 발생하는 예외 (404)"""

    __test__ = False

    def __init__(self, test_session_id: str):
        self.test_session_id = test_session_id
        super().__init__(f"Test session not found: {test_session_id}")


class QuestionNotFoundError(NotFoundError):
    """문제를 찾을 수 없을 때 발생하는 예외 (404)"""

    def __init__(self, question_id: int):
        self.question_id = question_id
        super().__init__(f"Question not found: {question_id}")


class ForbiddenError(BaseAppError):
    """다른 학생의 시험 세션에 접근할 때 발생하는 예외 (403)"""

    error_code = "Forbidden"

    def __init__(self, message: str = "Not authorized to access this test session"):
        super().__init__(message, status_code=403)


class InvalidStateError(BaseAppError):
    """현재 세션 상태에서 허용되지 않는 작업 (409)"""

    error_code = "InvalidState"

    def __init__(self, message: str):
        super().__init__(message, status_code=409)


class UnsupportedDatabaseError(BaseAppError):
    """답안 upsert를 지원하지 않는 DB dialect (500, 설정 오류)"""

    def __init__(self, dialect: str):
        self.dialect = dialect
        super().__init__(f"Unsupported database dialect for answer upsert: {dialect}")
