from .contact import Contact, ContactStatus
from .post import Post, PostCategory, PostStatus, PostType

__all__ = [
    "Contact",
    "ContactStatus",
    "Post",
    "PostCategory",
    "PostStatus",
    "PostType",
]
