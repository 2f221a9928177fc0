"""
Seed the blog with posts from a JSON file (default: data/seeds/posts.json).

Each entry is a post payload as accepted by POST /api/posts/admin. Posts
whose title already exists are skipped, so the script can be re-run.

Usage:
    python scripts/seed_posts.py [path/to/posts.json]
"""

import json
import os
import sys

from sqlmodel import Session, select

from portfolio_api.core.errors import ErrorHandler, ValidationFailed
from portfolio_api.db import create_db_and_tables, engine
from portfolio_api.models.post import Post
from portfolio_api.services.post_store import PostStore

SEEDS_PATH = "data/seeds/posts.json"


def seed_posts(path: str = SEEDS_PATH) -> int:
    if not os.path.exists(path):
        print(f"Seeds file not found at {path}")
        return 0

    # A malformed seeds file is logged with its path, then aborts the run
    with ErrorHandler("load_post_seeds", context={"path": path}, reraise=True):
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)

    create_db_and_tables()

    count = 0
    with Session(engine) as session:
        store = PostStore(session)
        for item in data:
            title = (item.get("title") or "").strip()
            existing = session.exec(select(Post).where(Post.title == title)).first()
            if existing:
                print(f"Skipping existing post: {title}")
                continue

            try:
                post = store.create(item)
            except ValidationFailed as e:
                problems = ", ".join(f"{err.field}: {err.message}" for err in e.errors)
                print(f"Invalid post '{title}': {problems}")
                continue

            print(f"Created {post.status} post: {post.slug}")
            count += 1

    print(f"Seeded {count} posts.")
    return count


if __name__ == "__main__":
    seed_posts(sys.argv[1] if len(sys.argv) > 1 else SEEDS_PATH)
