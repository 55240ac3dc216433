import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import Pagination, get_current_student_id
from app.models.base import get_db
from app.models.question import Category
from app.models.test_session import TestSessionStatus
from app.schemas import test_session as test_session_schema
from app.services import session_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/tests", tags=["tests"])


@router.post(
    "",
    response_model=test_session_schema.TestSessionWithQuestionsResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_test_session(
    request: test_session_schema.TestSessionCreateRequest,
    student_id: str = Depends(get_current_student_id),
    db: AsyncSession = Depends(get_db),
):
    """시험 세션 생성 API"""
    return await session_service.open_session(db, student_id, request)


@router.post(
    "/start",
    response_model=test_session_schema.TestSessionWithQuestionsResponse,
    status_code=status.HTTP_201_CREATED,
)
async def start_test_session(
    request: test_session_schema.TestSessionStartRequest,
    student_id: str = Depends(get_current_student_id),
    db: AsyncSession = Depends(get_db),
):
    """조건별 무작위 출제로 시험 시작 API"""
    return await session_service.start_session(db, student_id, request)


@router.get("", response_model=test_session_schema.TestSessionListResponse)
async def list_test_sessions(
    status_filter: TestSessionStatus | None = Query(None, alias="status"),
    category: Category | None = Query(None),
    subject: list[str] | None = Query(None),
    topic: list[str] | None = Query(None),
    pagination: Pagination = Depends(),
    student_id: str = Depends(get_current_student_id),
    db: AsyncSession = Depends(get_db),
):
    """시험 세션 목록 API (상태/카테고리/과목/토픽 필터)"""
    return await session_service.list_sessions(
        db,
        student_id,
        status=status_filter,
        category=category,
        subjects=subject,
        topics=topic,
        page=pagination.page,
        page_size=pagination.page_size,
    )


@router.get("/{test_session_id}", response_model=test_session_schema.TestSessionWithQuestionsResponse)
async def get_test_session(
    test_session_id: str,
    student_id: str = Depends(get_current_student_id),
    db: AsyncSession = Depends(get_db),
):
    """시험 세션 상세 API"""
    return await session_service.get_session(db, student_id, test_session_id)


@router.put("/{test_session_id}", response_model=test_session_schema.TestSessionResponse)
async def close_test_session(
    test_session_id: str,
    request: test_session_schema.TestSessionCloseRequest,
    student_id: str = Depends(get_current_student_id),
    db: AsyncSession = Depends(get_db),
):
    """시험 종료/취소 API"""
    return await session_service.close_session(db, student_id, test_session_id, request.status)
