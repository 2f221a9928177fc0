from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, Request, status
from sqlmodel import Session

from portfolio_api.api.deps import get_session, require_admin
from portfolio_api.api.responses import envelope
from portfolio_api.core.config import settings
from portfolio_api.core.errors import RateLimited, Unauthorized
from portfolio_api.core.logging_config import get_logger
from portfolio_api.core.rate_limit import get_client_ip, rate_limiter
from portfolio_api.core.security import admin_enabled, verify_admin_secret
from portfolio_api.core.validation import validate_payload
from portfolio_api.models.post import PostCategory, PostStatus
from portfolio_api.schemas import AdminAuthRequest
from portfolio_api.services.post_store import PostStore, post_to_dict

router = APIRouter()
logger = get_logger(__name__)


# ============== PUBLIC ==============


@router.get("")
def list_posts(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    category: Optional[PostCategory] = None,
    tag: Optional[str] = None,
    search: Optional[str] = None,
    featured: Optional[bool] = None,
    session: Session = Depends(get_session),
) -> Any:
    """Published posts, newest first. Content is left out of list items."""
    result = PostStore(session).list_public(
        category=category.value if category else None,
        tag=tag,
        search=search,
        featured=featured,
        page=page,
        limit=limit,
    )
    return envelope(
        data=[post_to_dict(p, include_content=False) for p in result.items],
        page=result,
    )


@router.get("/categories")
def list_categories(session: Session = Depends(get_session)) -> Any:
    return envelope(data=PostStore(session).categories())


@router.get("/tags")
def list_tags(session: Session = Depends(get_session)) -> Any:
    return envelope(data=PostStore(session).tags())


# ============== ADMIN ==============


@router.post("/admin/auth")
def admin_auth(
    request: Request,
    payload: Any = Body(default=None),
) -> Any:
    """
    Check the admin password for the dashboard login form.
    Repeated failures lock the client IP out for ADMIN_LOCKOUT_SECONDS.
    """
    key = f"admin_auth:{get_client_ip(request)}"
    is_limited, retry_after = rate_limiter.is_rate_limited(key, max_requests=10, window_seconds=60)
    if is_limited:
        raise RateLimited(retry_after, f"Too many login attempts. Please try again in {retry_after} seconds.")

    rate_limiter.record_request(key)

    if not admin_enabled():
        raise Unauthorized("Admin access is disabled")

    data = validate_payload(AdminAuthRequest, payload if payload is not None else {})
    if not verify_admin_secret(data.password):
        is_locked, remaining = rate_limiter.record_failed_login(
            key,
            lockout_threshold=settings.ADMIN_LOCKOUT_THRESHOLD,
            lockout_seconds=settings.ADMIN_LOCKOUT_SECONDS,
        )
        logger.warning("Admin authentication failed", key=key, locked=is_locked)
        if is_locked:
            raise RateLimited(
                remaining,
                f"Too many failed attempts. Try again in {remaining} seconds.",
            )
        raise Unauthorized("Invalid password")

    rate_limiter.record_successful_login(key)
    return envelope(message="Authentication successful")


@router.get("/admin/all", dependencies=[Depends(require_admin)])
def list_all_posts(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    status: Optional[PostStatus] = None,
    session: Session = Depends(get_session),
) -> Any:
    result = PostStore(session).list_admin(
        status=status.value if status else None,
        page=page,
        limit=limit,
    )
    return envelope(data=[post_to_dict(p) for p in result.items], page=result)


@router.get("/admin/stats", dependencies=[Depends(require_admin)])
def post_stats(session: Session = Depends(get_session)) -> Any:
    return envelope(data=PostStore(session).stats())


@router.get("/admin/{post_id}", dependencies=[Depends(require_admin)])
def get_post_admin(post_id: int, session: Session = Depends(get_session)) -> Any:
    return envelope(data=post_to_dict(PostStore(session).get(post_id)))


@router.post("/admin", status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_admin)])
def create_post(payload: Any = Body(default=None), session: Session = Depends(get_session)) -> Any:
    post = PostStore(session).create(payload)
    return envelope(message="Post created successfully", data=post_to_dict(post))


@router.put("/admin/{post_id}", dependencies=[Depends(require_admin)])
def update_post(
    post_id: int,
    payload: Any = Body(default=None),
    session: Session = Depends(get_session),
) -> Any:
    post = PostStore(session).update(post_id, payload)
    return envelope(message="Post updated successfully", data=post_to_dict(post))


@router.delete("/admin/{post_id}", dependencies=[Depends(require_admin)])
def delete_post(post_id: int, session: Session = Depends(get_session)) -> Any:
    PostStore(session).delete(post_id)
    return envelope(message="Post deleted successfully")


# Declared last so it never shadows the fixed paths above
@router.get("/{slug}")
def get_post(slug: str, session: Session = Depends(get_session)) -> Any:
    """A published post by slug. Each successful read counts one view."""
    post = PostStore(session).get_public_by_slug(slug)
    return envelope(data=post_to_dict(post))
