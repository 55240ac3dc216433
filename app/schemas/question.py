from pydantic import BaseModel, Field

from app.models.question import Category, Difficulty
from app.schemas.common import MediaSchema


class QuestionOptionResponse(BaseModel):
    """문제 선택지"""
    text: str
    media: list[MediaSchema] = Field(default_factory=list)


class SubjectGroup(BaseModel):
    """과목과 그 하위 토픽"""
    name: str
    topics: list[str] = Field(default_factory=list)


class QuestionPublicResponse(BaseModel):
    """시험 화면용 문제 스키마 (정답/해설 제외)"""
    id: int
    question_text: str
    question_media: list[MediaSchema] = Field(default_factory=list)
    options: list[QuestionOptionResponse]
    category: Category
    subjects: list[SubjectGroup] = Field(default_factory=list)
    difficulty: Difficulty
    tags: list[str] = Field(default_factory=list)
    source_url: str | None = None

    model_config = {"from_attributes": True}


class QuestionReference(BaseModel):
    """이력 조회용 최소 문제 정보"""
    id: int
    question_text: str
    question_media: list[MediaSchema] = Field(default_factory=list)

    model_config = {"from_attributes": True}
