import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

TITLE_MAX_LENGTH = 255


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class _PostFields(_CamelModel):
    title: Optional[str] = None
    content: Optional[str] = None

    @field_validator("title")
    @classmethod
    def check_title(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        if not value:
            raise ValueError("title must not be blank")
        if len(value) > TITLE_MAX_LENGTH:
            raise ValueError(f"title must be at most {TITLE_MAX_LENGTH} characters")
        return value

    @field_validator("content")
    @classmethod
    def check_content(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            raise ValueError("content must not be blank")
        return value


class PostCreate(_PostFields):
    """Create payload; omitted fields are filled with placeholders server-side."""


class PostUpdate(_PostFields):
    """Partial update; ``None`` leaves the stored value untouched."""


class Post(_CamelModel):
    id: uuid.UUID
    title: str
    content: str
    author_id: uuid.UUID
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class PostSummary(_CamelModel):
    id: uuid.UUID
    title: str
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class PostUpdateResult(_CamelModel):
    id: uuid.UUID
    affected_rows: int
    updated_at: datetime


class PostDeleteResult(_CamelModel):
    id: uuid.UUID


class PaginatedPosts(_CamelModel):
    items: List[Post]
    page: int
    page_size: int
    total_count: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool
