"""
Blog Post Model

Articles and video entries written through the admin editor and served
publicly once published.

Usage:
    from portfolio_api.models.post import Post

    post = Post(
        title="Building a portfolio with FastAPI",
        slug="building-a-portfolio-with-fastapi-m5x2k1a0",
        content="<p>...</p>",
        category=PostCategory.TUTORIAL.value,
    )
"""

from datetime import datetime
from enum import Enum
from typing import Optional, List

from sqlmodel import Field, SQLModel, Column
from sqlalchemy import DateTime, Text, Index, JSON

from portfolio_api.core.timeutils import utcnow


class PostCategory(str, Enum):
    TECHNOLOGY = "Technology"
    PROGRAMMING = "Programming"
    CAREER = "Career"
    PROJECTS = "Projects"
    LIFE = "Life"
    TUTORIAL = "Tutorial"
    OTHER = "Other"


class PostStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class PostType(str, Enum):
    ARTICLE = "article"
    VIDEO = "video"


class Post(SQLModel, table=True):
    """
    Blog post.

    Attributes:
        id: Primary key
        slug: URL-friendly unique identifier derived from the title
        title: Post title
        excerpt: Short summary for list views, derived from content when not given
        content: Full HTML content
        cover_image: Cover image URL ("" when none)
        post_type: "article" or "video"
        video_url: Embedded video URL for video posts
        category: One of PostCategory
        tags: JSON array of lowercase tags
        author: Author display name
        status: One of PostStatus
        featured: Whether the post is pinned on the blog page
        views: Public view counter
        read_time: Estimated read time in minutes
        published_at: First time the post became published (never overwritten)
        created_at: When the record was created
        updated_at: When the record was last modified
    """

    __tablename__ = "post"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(max_length=200)
    slug: str = Field(unique=True, index=True, max_length=255)
    excerpt: str = Field(default="", max_length=500)
    content: str = Field(sa_column=Column(Text, nullable=False))
    cover_image: str = Field(default="")
    post_type: str = Field(default=PostType.ARTICLE.value, max_length=20)
    video_url: Optional[str] = Field(default=None)
    category: str = Field(default=PostCategory.OTHER.value, max_length=50, index=True)
    tags: List[str] = Field(default_factory=list, sa_column=Column(JSON, default=[]))
    author: str = Field(default="", max_length=100)
    status: str = Field(default=PostStatus.DRAFT.value, max_length=20)
    featured: bool = Field(default=False)
    views: int = Field(default=0)
    read_time: int = Field(default=1)  # minutes
    published_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime(timezone=True)))
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))

    __table_args__ = (
        # Public listing: published posts by date
        Index("ix_post_status_published", "status", "published_at"),
        # Admin listing by last edit
        Index("ix_post_updated", "updated_at"),
    )

    @property
    def is_published(self) -> bool:
        return self.status == PostStatus.PUBLISHED.value


__all__ = ["Post", "PostCategory", "PostStatus", "PostType"]
