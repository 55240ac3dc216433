"""테스트 공통 fixture (임시 SQLite DB + ASGI 클라이언트)"""
import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from app.main import app
from app.models import Base, Category, Difficulty, Question, get_db

STUDENT_ID = "student-1"
OTHER_STUDENT_ID = "student-2"


def make_options(count: int = 4) -> list[dict]:
    return [{"text": f"선택지{i + 1}", "media": []} for i in range(count)]


@pytest.fixture
async def test_engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, expire_on_commit=False)


@pytest.fixture
async def test_db_session(session_factory):
    """테스트 데이터 준비/검증용 DB 세션"""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    """get_db를 테스트 DB로 교체한 비동기 클라이언트"""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def student_headers():
    return {"X-Student-Id": STUDENT_ID}


@pytest.fixture
def other_student_headers():
    return {"X-Student-Id": OTHER_STUDENT_ID}


@pytest.fixture
def add_question(test_db_session):
    """문제 생성 헬퍼"""
    async def _add_question(
        correct_answer: int = 0,
        option_count: int = 4,
        category: Category = Category.BASIC_SCIENCES,
        subjects: list[dict] | None = None,
        approved: bool = True,
        **kwargs,
    ) -> Question:
        question = Question(
            question_text=kwargs.pop("question_text", "테스트 문제"),
            question_media=[],
            options=make_options(option_count),
            correct_answer=correct_answer,
            explanation=kwargs.pop("explanation", "해설"),
            explanation_media=[],
            category=category,
            subjects=subjects if subjects is not None else [{"name": "Anatomy", "topics": ["Bones"]}],
            difficulty=kwargs.pop("difficulty", Difficulty.MEDIUM),
            tags=[],
            approved=approved,
            **kwargs,
        )
        test_db_session.add(question)
        await test_db_session.commit()
        await test_db_session.refresh(question)
        return question

    return _add_question
