"""답안 원장 CRUD 테스트"""
from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.crud import student_question as student_question_crud
from app.exceptions import BaseAppError, UnsupportedDatabaseError
from app.models import Category


@pytest.mark.asyncio
async def test_upsert_unsupported_dialect():
    """ON CONFLICT를 지원하지 않는 DB면 설정 오류 (쿼리 실행 전)"""
    mock_db_session = AsyncMock(spec=AsyncSession)
    mock_db_session.get_bind.return_value.dialect.name = "mysql"

    with pytest.raises(UnsupportedDatabaseError, match="mysql") as exc_info:
        await student_question_crud.upsert_student_question(
            mock_db_session,
            student_id="student-1",
            question_id=1,
            test_session_id="ts-1",
            selected_answer=0,
            is_correct=False,
            snapshot={},
            submitted_at=datetime.now(timezone.utc),
        )

    assert isinstance(exc_info.value, BaseAppError)
    assert exc_info.value.status_code == 500
    mock_db_session.execute.assert_not_called()


@pytest.mark.asyncio
async def test_count_student_answers(test_db_session, add_question, client, student_headers):
    """(카테고리, 정답 여부)별 개수와 플래그 수"""
    q1 = await add_question(correct_answer=1)
    q2 = await add_question(correct_answer=1)
    q3 = await add_question(correct_answer=1)
    response = await client.post(
        "/api/v1/tests", json={"questionIds": [q1.id, q2.id, q3.id]}, headers=student_headers
    )
    session_id = response.json()["session"]["id"]
    for question_id, answer in ((q1.id, 1), (q2.id, 0), (q3.id, -1)):
        await client.post(
            "/api/v1/student-questions/submit",
            json={"testSessionId": session_id, "questionId": question_id, "selectedAnswer": answer},
            headers=student_headers,
        )

    rows = await student_question_crud.count_student_answers(test_db_session, "student-1")

    assert sorted(rows, key=lambda r: r[1]) == [
        (Category.BASIC_SCIENCES, False, 2, 1),
        (Category.BASIC_SCIENCES, True, 1, 0),
    ]
    assert await student_question_crud.count_student_answers(test_db_session, "student-2") == []
