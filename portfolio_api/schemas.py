"""
Request schemas: the validation layer for contact and post submissions.

Every field is checked independently so a failing payload reports all of
its violations together. Values come out trimmed and normalized.
"""

from typing import Any, List, Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, Field, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

from portfolio_api.models.contact import ContactStatus
from portfolio_api.models.post import PostCategory, PostStatus, PostType

CATEGORY_VALUES = [c.value for c in PostCategory]
POST_STATUS_VALUES = [s.value for s in PostStatus]
POST_TYPE_VALUES = [t.value for t in PostType]
CONTACT_STATUS_VALUES = [s.value for s in ContactStatus]

GMAIL_DOMAINS = {"gmail.com", "googlemail.com"}


def _fail(error_type: str, message: str) -> PydanticCustomError:
    return PydanticCustomError(error_type, message)


def clean_text(
    value: Any,
    label: str,
    *,
    required: bool = False,
    min_length: Optional[int] = None,
    max_length: Optional[int] = None,
    length_message: Optional[str] = None,
) -> Optional[str]:
    """Trim a text field and enforce presence and length bounds."""
    if value is None:
        if required:
            raise _fail("missing", f"{label} is required")
        return None
    if not isinstance(value, str):
        raise _fail("string_type", f"{label} must be a string")

    value = value.strip()
    if not value:
        if required:
            raise _fail("missing", f"{label} is required")
        return None

    too_short = min_length is not None and len(value) < min_length
    too_long = max_length is not None and len(value) > max_length
    if too_short or too_long:
        raise _fail("length", length_message or f"{label} has an invalid length")
    return value


def normalize_email(value: str) -> str:
    """
    Validate syntax (no DNS lookups) and normalize an email address.

    The whole address is lowercased. Gmail addresses also lose dots and
    "+tag" suffixes in the local part so aliases collapse to one sender.
    """
    try:
        result = validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        raise _fail("email", "Please provide a valid email")

    local = result.local_part.lower()
    domain = result.domain.lower()
    if domain in GMAIL_DOMAINS:
        local = local.split("+", 1)[0].replace(".", "")
        domain = "gmail.com"
    return f"{local}@{domain}"


def _choice(value: Any, choices: List[str], message: str) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str) and value in choices:
        return value
    raise _fail("enum", message)


# ============== CONTACTS ==============


class ContactCreate(BaseModel):
    name: str = Field(default=None, validate_default=True)
    email: str = Field(default=None, validate_default=True)
    subject: Optional[str] = None
    message: str = Field(default=None, validate_default=True)

    @field_validator("name", mode="before")
    @classmethod
    def check_name(cls, v: Any) -> Optional[str]:
        return clean_text(v, "Name", required=True, min_length=2, max_length=100,
                          length_message="Name must be 2-100 characters")

    @field_validator("email", mode="before")
    @classmethod
    def check_email(cls, v: Any) -> str:
        email = clean_text(v, "Email", required=True)
        return normalize_email(email)

    @field_validator("subject", mode="before")
    @classmethod
    def check_subject(cls, v: Any) -> Optional[str]:
        return clean_text(v, "Subject", max_length=200,
                          length_message="Subject cannot exceed 200 characters")

    @field_validator("message", mode="before")
    @classmethod
    def check_message(cls, v: Any) -> Optional[str]:
        return clean_text(v, "Message", required=True, min_length=10, max_length=5000,
                          length_message="Message must be 10-5000 characters")


class ContactStatusUpdate(BaseModel):
    status: str = Field(default=None, validate_default=True)

    @field_validator("status", mode="before")
    @classmethod
    def check_status(cls, v: Any) -> str:
        message = f"Status must be one of: {', '.join(CONTACT_STATUS_VALUES)}"
        if v is None:
            raise _fail("missing", message)
        return _choice(v, CONTACT_STATUS_VALUES, message)


# ============== POSTS ==============


VIDEO_URL_REQUIRED = "Video URL is required for video posts"


class PostWrite(BaseModel):
    """Payload for creating a post. Title and content are always required."""

    title: str = Field(default=None, validate_default=True)
    content: str = Field(default=None, validate_default=True)
    excerpt: Optional[str] = None
    category: Optional[str] = None
    status: Optional[str] = None
    tags: Optional[List[str]] = None
    cover_image: Optional[str] = None
    featured: Optional[bool] = None
    post_type: Optional[str] = None
    video_url: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("title", mode="before")
    @classmethod
    def check_title(cls, v: Any) -> Optional[str]:
        return clean_text(v, "Title", required=True, min_length=5, max_length=200,
                          length_message="Title must be 5-200 characters")

    @field_validator("content", mode="before")
    @classmethod
    def check_content(cls, v: Any) -> Optional[str]:
        return clean_text(v, "Content", required=True, min_length=50,
                          length_message="Content must be at least 50 characters")

    @field_validator("excerpt", mode="before")
    @classmethod
    def check_excerpt(cls, v: Any) -> Optional[str]:
        return clean_text(v, "Excerpt", max_length=500,
                          length_message="Excerpt cannot exceed 500 characters")

    @field_validator("category", mode="before")
    @classmethod
    def check_category(cls, v: Any) -> Optional[str]:
        return _choice(v, CATEGORY_VALUES, "Invalid category")

    @field_validator("status", mode="before")
    @classmethod
    def check_status(cls, v: Any) -> Optional[str]:
        return _choice(v, POST_STATUS_VALUES, "Invalid status")

    @field_validator("tags", mode="before")
    @classmethod
    def check_tags(cls, v: Any) -> Optional[List[str]]:
        if v is None:
            return None
        if not isinstance(v, (list, tuple)) or not all(isinstance(t, str) for t in v):
            raise _fail("tags", "Tags must be an array of strings")
        tags: List[str] = []
        for tag in v:
            tag = tag.strip().lower()
            if tag and tag not in tags:
                tags.append(tag)
        return tags

    @field_validator("cover_image", mode="before")
    @classmethod
    def check_cover_image(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        if not isinstance(v, str):
            raise _fail("string_type", "Cover image must be a string")
        return v.strip()

    @field_validator("post_type", mode="before")
    @classmethod
    def check_post_type(cls, v: Any) -> Optional[str]:
        return _choice(v, POST_TYPE_VALUES, "Invalid post type")

    @field_validator("video_url", mode="before")
    @classmethod
    def check_video_url(cls, v: Any, info: ValidationInfo) -> Optional[str]:
        url = clean_text(v, "Video URL", max_length=500,
                         length_message="Video URL cannot exceed 500 characters")
        if url is None and info.data.get("post_type") == PostType.VIDEO.value:
            raise _fail("missing", VIDEO_URL_REQUIRED)
        return url


class PostUpdate(PostWrite):
    """
    Payload for replacing a stored post.

    A video post may omit video_url and keep the stored one, so the
    requirement is checked by PostStore.update against the merged record.
    """

    @field_validator("video_url", mode="before")
    @classmethod
    def check_video_url(cls, v: Any, info: ValidationInfo) -> Optional[str]:
        return clean_text(v, "Video URL", max_length=500,
                          length_message="Video URL cannot exceed 500 characters")


class AdminAuthRequest(BaseModel):
    password: Optional[str] = None
