import math
from typing import Literal

from pydantic import BaseModel, Field


class MediaSchema(BaseModel):
    """첨부 미디어"""
    type: Literal["image", "video", "raw", "url"]
    path: str
    filename: str
    originalname: str
    mimetype: str
    size: int | None = None


def page_count(total: int, page_size: int) -> int:
    """전체 페이지 수 (항목이 없으면 0)"""
    if page_size <= 0:
        return 0
    return math.ceil(total / page_size)


class PageMeta(BaseModel):
    total: int = Field(..., ge=0, description="조건에 맞는 전체 항목 수")
    page: int = Field(..., ge=1)
    pages: int = Field(..., ge=0)
