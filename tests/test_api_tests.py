"""Tests(시험 세션) API 통합 테스트"""
import pytest

from app.models import Category, Difficulty


async def _create_session(client, headers, question_ids, **filters):
    body = {"questionIds": question_ids}
    if filters:
        body["filters"] = filters
    return await client.post("/api/v1/tests", json=body, headers=headers)


@pytest.mark.asyncio
async def test_create_test_session(client, add_question, student_headers):
    """시험 세션 생성 (정답/해설 미포함)"""
    q1 = await add_question(correct_answer=1)
    q2 = await add_question(correct_answer=0, option_count=3)

    response = await _create_session(
        client, student_headers, [q2.id, q1.id], difficulty="medium", count=2
    )

    assert response.status_code == 201
    data = response.json()
    session = data["session"]
    assert session["student_id"] == "student-1"
    assert session["questions"] == [q2.id, q1.id]
    assert session["total_questions"] == 2
    assert session["total_options"] == 7
    assert session["status"] == "proceeding"
    assert session["correct_answers"] == 0
    assert session["incorrect_answers"] == 0
    assert session["flagged_answers"] == 0
    assert session["completed_at"] is None
    assert session["score_percentage"] == 0
    assert session["filters"] == {"difficulty": "medium", "count": 2}

    assert [q["id"] for q in data["questions"]] == [q2.id, q1.id]
    for question in data["questions"]:
        assert "correct_answer" not in question
        assert "explanation" not in question
        assert question["options"][0]["text"] == "선택지1"


@pytest.mark.asyncio
async def test_create_test_session_unapproved_question(client, add_question, student_headers):
    """승인되지 않은 문제가 포함되면 InvalidInput"""
    q1 = await add_question()
    q2 = await add_question(approved=False)

    response = await _create_session(client, student_headers, [q1.id, q2.id])

    assert response.status_code == 400
    data = response.json()
    assert data["error"] == "InvalidInput"
    assert data["detail"] == "One or more questions not found or not approved"


@pytest.mark.asyncio
async def test_create_test_session_missing_question(client, add_question, student_headers):
    """존재하지 않는 문제 ID"""
    q1 = await add_question()

    response = await _create_session(client, student_headers, [q1.id, 9999])

    assert response.status_code == 400
    assert response.json()["error"] == "InvalidInput"


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [
    {"questionIds": []},
    {"questionIds": "1"},
    {"questionIds": ["1", "2"]},
    {"questionIds": [1, True]},
    {"questionIds": [1, 1]},
    {},
])
async def test_create_test_session_invalid_body(client, student_headers, body):
    """문제 ID 목록이 비었거나 정수 리스트가 아니면 InvalidInput"""
    response = await client.post("/api/v1/tests", json=body, headers=student_headers)

    assert response.status_code == 400
    assert response.json()["error"] == "InvalidInput"


@pytest.mark.asyncio
async def test_create_test_session_requires_student(client, add_question):
    """학생 ID 헤더 누락"""
    q1 = await add_question()

    response = await client.post("/api/v1/tests", json={"questionIds": [q1.id]})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_get_test_session(client, add_question, student_headers, other_student_headers):
    """시험 세션 상세 조회 및 소유자 확인"""
    q1 = await add_question()
    created = (await _create_session(client, student_headers, [q1.id])).json()
    session_id = created["session"]["id"]

    response = await client.get(f"/api/v1/tests/{session_id}", headers=student_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["session"]["id"] == session_id
    assert [q["id"] for q in data["questions"]] == [q1.id]

    response = await client.get(f"/api/v1/tests/{session_id}", headers=other_student_headers)
    assert response.status_code == 403
    assert response.json()["error"] == "Forbidden"

    response = await client.get("/api/v1/tests/not-a-session", headers=student_headers)
    assert response.status_code == 404
    assert response.json()["error"] == "NotFound"


@pytest.mark.asyncio
async def test_get_test_session_hides_unapproved_questions(
    client, test_db_session, add_question, student_headers
):
    """세션 생성 후 승인 취소된 문제는 상세 조회에서 제외"""
    q1 = await add_question()
    q2 = await add_question()
    created = (await _create_session(client, student_headers, [q1.id, q2.id])).json()

    q2.approved = False
    await test_db_session.commit()

    response = await client.get(f"/api/v1/tests/{created['session']['id']}", headers=student_headers)

    data = response.json()
    assert data["session"]["questions"] == [q1.id, q2.id]
    assert [q["id"] for q in data["questions"]] == [q1.id]


@pytest.mark.asyncio
async def test_close_test_session(client, add_question, student_headers):
    """시험 종료 후 다시 종료하면 InvalidState"""
    q1 = await add_question()
    session_id = (await _create_session(client, student_headers, [q1.id])).json()["session"]["id"]

    response = await client.put(
        f"/api/v1/tests/{session_id}", json={"status": "succeeded"}, headers=student_headers
    )
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "succeeded"
    assert data["completed_at"] is not None

    response = await client.put(
        f"/api/v1/tests/{session_id}", json={"status": "canceled"}, headers=student_headers
    )
    assert response.status_code == 409
    assert response.json()["error"] == "InvalidState"
    assert response.json()["detail"] == "Cannot update a completed or canceled test session"


@pytest.mark.asyncio
@pytest.mark.parametrize("status_value", ["proceeding", "done"])
async def test_close_test_session_invalid_status(client, add_question, student_headers, status_value):
    """succeeded/canceled 외의 상태"""
    q1 = await add_question()
    session_id = (await _create_session(client, student_headers, [q1.id])).json()["session"]["id"]

    response = await client.put(
        f"/api/v1/tests/{session_id}", json={"status": status_value}, headers=student_headers
    )

    assert response.status_code == 400
    assert response.json()["error"] == "InvalidInput"


@pytest.mark.asyncio
async def test_close_test_session_forbidden(client, add_question, student_headers, other_student_headers):
    """다른 학생의 세션 종료 시도"""
    q1 = await add_question()
    session_id = (await _create_session(client, student_headers, [q1.id])).json()["session"]["id"]

    response = await client.put(
        f"/api/v1/tests/{session_id}", json={"status": "canceled"}, headers=other_student_headers
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_list_test_sessions(client, add_question, student_headers, other_student_headers):
    """시험 세션 목록 (최신순, 상태/카테고리 필터, 페이지네이션)"""
    basic = await add_question(category=Category.BASIC_SCIENCES)
    organ = await add_question(
        category=Category.ORGAN_SYSTEMS,
        subjects=[{"name": "Cardiology", "topics": ["Arrhythmia"]}],
    )

    first = (await _create_session(client, student_headers, [basic.id])).json()["session"]["id"]
    second = (await _create_session(client, student_headers, [organ.id])).json()["session"]["id"]
    await _create_session(client, other_student_headers, [basic.id])
    await client.put(f"/api/v1/tests/{first}", json={"status": "canceled"}, headers=student_headers)

    response = await client.get("/api/v1/tests", headers=student_headers)
    data = response.json()
    assert response.status_code == 200
    assert data["total"] == 2
    assert [s["id"] for s in data["sessions"]] == [second, first]

    response = await client.get("/api/v1/tests", params={"status": "canceled"}, headers=student_headers)
    assert [s["id"] for s in response.json()["sessions"]] == [first]

    response = await client.get(
        "/api/v1/tests", params={"category": "Organ Systems"}, headers=student_headers
    )
    assert [s["id"] for s in response.json()["sessions"]] == [second]

    response = await client.get(
        "/api/v1/tests", params={"topic": ["Bones", "Nothing"]}, headers=student_headers
    )
    assert [s["id"] for s in response.json()["sessions"]] == [first]

    response = await client.get(
        "/api/v1/tests", params={"page": 2, "limit": 1}, headers=student_headers
    )
    data = response.json()
    assert data["total"] == 2
    assert data["pages"] == 2
    assert [s["id"] for s in data["sessions"]] == [first]


@pytest.mark.asyncio
async def test_list_test_sessions_performance_by_category(client, add_question, student_headers):
    """목록의 카테고리/과목별 성적"""
    q1 = await add_question(correct_answer=1)
    q2 = await add_question(correct_answer=1)
    session_id = (await _create_session(client, student_headers, [q1.id, q2.id])).json()["session"]["id"]

    for question_id, answer in ((q1.id, 1), (q2.id, 0)):
        await client.post(
            "/api/v1/student-questions/submit",
            json={"testSessionId": session_id, "questionId": question_id, "selectedAnswer": answer},
            headers=student_headers,
        )

    response = await client.get("/api/v1/tests", headers=student_headers)

    performance = response.json()["sessions"][0]["performance_by_category"]
    assert performance["Basic Sciences"]["correct"] == 1
    assert performance["Basic Sciences"]["incorrect"] == 1
    assert performance["Basic Sciences"]["subjects"]["Anatomy"] == {
        "correct": 1,
        "incorrect": 1,
        "flagged": 0,
    }


@pytest.mark.asyncio
async def test_health(client):
    """헬스 체크 (인증 헤더 불필요)"""
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}

    response = await client.get("/")
    assert response.status_code == 200
    assert "version" in response.json()


START_URL = "/api/v1/tests/start"


@pytest.mark.asyncio
async def test_start_test_session_with_filters(client, add_question, student_headers):
    """카테고리/난이도 조건에 맞는 승인된 문제만 출제"""
    easy = [await add_question(difficulty=Difficulty.EASY) for _ in range(3)]
    await add_question(difficulty=Difficulty.HARD)
    await add_question(difficulty=Difficulty.EASY, category=Category.ORGAN_SYSTEMS)
    await add_question(difficulty=Difficulty.EASY, approved=False)

    response = await client.post(
        START_URL,
        json={"category": "Basic Sciences", "difficulty": "easy", "count": 2},
        headers=student_headers,
    )

    assert response.status_code == 201
    data = response.json()
    session = data["session"]
    assert session["total_questions"] == 2
    assert len(set(session["questions"])) == 2
    assert set(session["questions"]) <= {q.id for q in easy}
    assert [q["id"] for q in data["questions"]] == session["questions"]
    assert session["filters"] == {"category": "Basic Sciences", "difficulty": "easy", "count": 2}
    for question in data["questions"]:
        assert "correct_answer" not in question


@pytest.mark.asyncio
async def test_start_test_session_count_capped_by_pool(client, add_question, student_headers):
    """가능한 문제 수보다 많이 요청하면 있는 만큼만 출제"""
    pool = [await add_question() for _ in range(3)]

    response = await client.post(START_URL, json={"count": 50}, headers=student_headers)

    assert response.status_code == 201
    session = response.json()["session"]
    assert sorted(session["questions"]) == sorted(q.id for q in pool)
    assert session["total_options"] == 12
    assert session["filters"]["count"] == 3


@pytest.mark.asyncio
async def test_start_test_session_default_count(client, add_question, student_headers):
    """count 생략 시 10문제"""
    for _ in range(12):
        await add_question()

    response = await client.post(START_URL, json={}, headers=student_headers)

    assert response.status_code == 201
    assert response.json()["session"]["total_questions"] == 10


@pytest.mark.asyncio
async def test_start_test_session_subject_topic_filters(client, add_question, student_headers):
    """과목/토픽 조건은 둘 다 만족하는 문제만"""
    match = await add_question(subjects=[{"name": "Cardiology", "topics": ["Arrhythmia"]}])
    await add_question(subjects=[{"name": "Cardiology", "topics": ["Valves"]}])
    await add_question(subjects=[{"name": "Anatomy", "topics": ["Arrhythmia"]}])

    response = await client.post(
        START_URL,
        json={"subjects": ["Cardiology"], "topics": ["Arrhythmia"], "count": 5},
        headers=student_headers,
    )

    assert response.status_code == 201
    assert response.json()["session"]["questions"] == [match.id]


@pytest.mark.asyncio
async def test_start_test_session_no_questions(client, add_question, student_headers):
    """조건에 맞는 문제가 없으면 NotFound"""
    await add_question(difficulty=Difficulty.EASY)
    await add_question(difficulty=Difficulty.HARD, approved=False)

    response = await client.post(START_URL, json={"difficulty": "hard"}, headers=student_headers)

    assert response.status_code == 404
    data = response.json()
    assert data["error"] == "NotFound"
    assert data["detail"] == "No questions available for the selected filters"


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{"count": 0}, {"difficulty": "impossible"}, {"category": "Unknown"}])
async def test_start_test_session_invalid_body(client, student_headers, body):
    response = await client.post(START_URL, json=body, headers=student_headers)

    assert response.status_code == 400
    assert response.json()["error"] == "InvalidInput"
