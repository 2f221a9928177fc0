"""
Post Store

Persistence and lifecycle of blog posts: derived fields (slug, excerpt,
read time), publication timestamps, public visibility and view counting.

Usage:
    store = PostStore(session)
    post = store.create({"title": "Hello World!!!", "content": "...", "status": "published"})
    post = store.get_public_by_slug(post.slug)  # views + 1
"""

import json
from collections import Counter
from typing import Any, Dict, List, Mapping, Optional, Union

from sqlalchemy import String, cast, func, or_, update
from sqlmodel import Session, select, desc

from portfolio_api.core.config import settings
from portfolio_api.core.errors import FieldError, NotFound, ValidationFailed
from portfolio_api.core.logging_config import get_logger
from portfolio_api.core.timeutils import utcnow
from portfolio_api.core.validation import validate_payload
from portfolio_api.models.post import Post, PostCategory, PostStatus, PostType
from portfolio_api.schemas import VIDEO_URL_REQUIRED, PostUpdate, PostWrite
from portfolio_api.services.pagination import Page, paginate
from portfolio_api.services.post_fields import (
    calculate_read_time,
    derive_excerpt,
    generate_slug,
)

logger = get_logger(__name__)

TAG_LIMIT = 20
LIKE_ESCAPE = "\\"


def _like_literal(value: str) -> str:
    """Escape LIKE wildcards so user input matches literally."""
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def post_to_dict(post: Post, include_content: bool = True) -> Dict[str, Any]:
    # getattr reloads attributes a later commit expired; model_dump would not
    return {
        name: getattr(post, name)
        for name in Post.model_fields
        if include_content or name != "content"
    }


class PostStore:
    def __init__(self, session: Session):
        self.session = session

    # ============== WRITES ==============

    def create(self, fields: Union[PostWrite, Mapping[str, Any]]) -> Post:
        data = validate_payload(PostWrite, fields)
        now = utcnow()
        status = data.status or PostStatus.DRAFT.value

        post = Post(
            title=data.title,
            slug=generate_slug(data.title),
            excerpt=data.excerpt or derive_excerpt(data.content),
            content=data.content,
            cover_image=data.cover_image or "",
            post_type=data.post_type or PostType.ARTICLE.value,
            video_url=data.video_url,
            category=data.category or PostCategory.OTHER.value,
            tags=list(data.tags or []),
            author=settings.DEFAULT_AUTHOR,
            status=status,
            featured=bool(data.featured),
            views=0,
            read_time=calculate_read_time(data.content),
            published_at=now if status == PostStatus.PUBLISHED.value else None,
            created_at=now,
            updated_at=now,
        )
        self.session.add(post)
        self.session.commit()
        self.session.refresh(post)

        logger.info("Post created", post_id=post.id, slug=post.slug, status=post.status)
        return post

    def update(self, post_id: int, fields: Union[PostUpdate, Mapping[str, Any]]) -> Post:
        """
        Replace a post's editable fields.

        Title and content are required; optional fields left out keep their
        stored value. Derived fields only change when their source changed.
        """
        data = validate_payload(PostUpdate, fields)
        post = self.get(post_id)

        post_type = data.post_type or post.post_type
        if post_type == PostType.VIDEO.value and not (data.video_url or post.video_url):
            raise ValidationFailed([FieldError("video_url", VIDEO_URL_REQUIRED)])

        if data.title != post.title:
            post.title = data.title
            post.slug = generate_slug(data.title)

        if data.content != post.content:
            post.content = data.content
            post.read_time = calculate_read_time(data.content)

        if data.excerpt is not None:
            post.excerpt = data.excerpt
        if not post.excerpt and post.content:
            post.excerpt = derive_excerpt(post.content)

        if data.category is not None:
            post.category = data.category
        if data.tags is not None:
            post.tags = list(data.tags)
        if data.status is not None:
            post.status = data.status
        if data.cover_image is not None:
            post.cover_image = data.cover_image
        if data.featured is not None:
            post.featured = data.featured
        if data.post_type is not None:
            post.post_type = data.post_type
        if data.video_url is not None:
            post.video_url = data.video_url

        now = utcnow()
        if post.is_published and post.published_at is None:
            post.published_at = now
        post.updated_at = now

        self.session.add(post)
        self.session.commit()
        self.session.refresh(post)

        logger.info("Post updated", post_id=post.id, slug=post.slug, status=post.status)
        return post

    def delete(self, post_id: int) -> None:
        post = self.get(post_id)
        self.session.delete(post)
        self.session.commit()
        logger.info("Post deleted", post_id=post_id)

    # ============== READS ==============

    def get(self, post_id: int) -> Post:
        """Any post by id, whatever its status (admin view)."""
        post = self.session.get(Post, post_id)
        if post is None:
            raise NotFound("Post not found")
        return post

    def get_public_by_slug(self, slug: str) -> Post:
        """
        A published post by slug, counting one view.

        The increment is a single UPDATE so concurrent readers never lose
        views. Drafts and archived posts are reported exactly like missing ones.
        """
        statement = (
            update(Post)
            .where(Post.slug == slug, Post.status == PostStatus.PUBLISHED.value)
            .values(views=Post.views + 1)
        )
        result = self.session.execute(statement)
        if result.rowcount == 0:
            self.session.rollback()
            raise NotFound("Post not found")
        self.session.commit()

        post = self.session.exec(select(Post).where(Post.slug == slug)).first()
        if post is None:
            raise NotFound("Post not found")
        return post

    def list_public(
        self,
        category: Optional[str] = None,
        tag: Optional[str] = None,
        search: Optional[str] = None,
        featured: Optional[bool] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Page[Post]:
        """Published posts, newest publication first."""
        statement = select(Post).where(Post.status == PostStatus.PUBLISHED.value)

        if category:
            statement = statement.where(Post.category == category)
        if tag:
            # Tags live in a JSON array; match the serialized, quoted element
            needle = _like_literal(json.dumps(tag.strip().lower()))
            statement = statement.where(cast(Post.tags, String).like(f"%{needle}%", escape=LIKE_ESCAPE))
        if featured:
            statement = statement.where(Post.featured == True)  # noqa: E712
        if search:
            terms = search.split()
            if terms:
                conditions = []
                for term in terms:
                    pattern = f"%{_like_literal(term)}%"
                    conditions.append(Post.title.ilike(pattern, escape=LIKE_ESCAPE))
                    conditions.append(Post.content.ilike(pattern, escape=LIKE_ESCAPE))
                statement = statement.where(or_(*conditions))

        statement = statement.order_by(desc(Post.published_at), desc(Post.id))
        return paginate(self.session, statement, page, limit)

    def list_admin(
        self,
        status: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Page[Post]:
        """Every post, most recently edited first."""
        statement = select(Post)
        if status:
            statement = statement.where(Post.status == status)
        statement = statement.order_by(desc(Post.updated_at), desc(Post.id))
        return paginate(self.session, statement, page, limit)

    def categories(self) -> List[Dict[str, Any]]:
        rows = self.session.exec(
            select(Post.category, func.count(Post.id))
            .where(Post.status == PostStatus.PUBLISHED.value)
            .group_by(Post.category)
        ).all()
        counts = [{"name": name, "count": count} for name, count in rows]
        return sorted(counts, key=lambda c: (-c["count"], c["name"]))

    def tags(self, limit: int = TAG_LIMIT) -> List[Dict[str, Any]]:
        rows = self.session.exec(
            select(Post.tags).where(Post.status == PostStatus.PUBLISHED.value)
        ).all()

        counter: Counter = Counter()
        for tags in rows:
            # set() so a duplicated tag on one post counts once
            counter.update(set(tags or []))

        ranked = sorted(counter.items(), key=lambda item: (-item[1], item[0]))
        return [{"name": name, "count": count} for name, count in ranked[:limit]]

    def stats(self) -> Dict[str, Any]:
        by_status = {status.value: 0 for status in PostStatus}
        rows = self.session.exec(
            select(Post.status, func.count(Post.id)).group_by(Post.status)
        ).all()
        for status, count in rows:
            by_status[status] = count

        total_views = self.session.exec(select(func.coalesce(func.sum(Post.views), 0))).one()

        return {
            "total_posts": sum(by_status.values()),
            "by_status": by_status,
            "total_views": int(total_views or 0),
        }
