from fastapi import Header, HTTPException, Query, status

from app.core.config import settings


async def get_current_student_id(
    x_student_id: str | None = Header(None, description="인증 프록시가 주입한 학생 ID"),
) -> str:
    """인증된 학생 ID (상위 인증 계층을 신뢰, 재검증하지 않음)"""
    if not x_student_id or not x_student_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-Student-Id header",
        )
    return x_student_id.strip()


class Pagination:
    """page/page_size 쿼리 파라미터"""

    def __init__(
        self,
        page: int = Query(1, ge=1, description="페이지 (1부터)"),
        page_size: int = Query(
            settings.default_page_size,
            ge=1,
            le=settings.max_page_size,
            alias="limit",
            description="페이지 크기",
        ),
    ):
        self.page = page
        self.page_size = page_size
