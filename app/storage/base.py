import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple

from app.storage.records import (
    CategoryRecord,
    CommentRecord,
    CommentWithAuthor,
    LikeRecord,
    PostRecord,
    PostWithAuthor,
    UserRecord,
)

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    ("JavaScript", "javascript"),
    ("React", "react"),
    ("Node.js", "nodejs"),
    ("CSS", "css"),
    ("DevOps", "devops"),
    ("Python", "python"),
    ("Machine Learning", "machine-learning"),
    ("Databases", "databases"),
    ("Programming", "programming"),
    ("Tech", "tech"),
    ("Lifestyle", "lifestyle"),
    ("Health", "health"),
    ("Travel", "travel"),
    ("Food", "food"),
    ("Fashion", "fashion"),
    ("Books", "books"),
    ("Movies", "movies"),
    ("Music", "music"),
    ("Sports", "sports"),
    ("Gaming", "gaming"),
    ("Finance", "finance"),
    ("Career", "career"),
    ("Education", "education"),
    ("Science", "science"),
    ("Other", "other"),
]

# Fields a post update may touch
POST_UPDATE_FIELDS = {"title", "slug", "content", "excerpt",
                      "cover_image", "category", "published"}
USER_UPDATE_FIELDS = {"name", "bio", "avatar_url"}


class StorageError(Exception):
    """Raised when the backing store fails."""


class DuplicateKeyError(StorageError):
    """Raised when a write would break a uniqueness constraint."""

    def __init__(self, field: str, value, message: str | None = None):
        super().__init__(message or f"{field} '{value}' already exists")
        self.field = field
        self.value = value


def build_comment_tree(comments: List[CommentWithAuthor]) -> List[CommentWithAuthor]:
    """
    Group a flat, oldest-first comment list into reply trees.

    Roots keep their input order and every reply list stays in creation
    order. A reply whose parent is not in the list is dropped.
    """
    by_id: Dict[int, CommentWithAuthor] = {}
    for comment in comments:
        comment.replies = []
        by_id[comment.id] = comment

    roots: List[CommentWithAuthor] = []
    for comment in comments:
        if comment.parent_id is None:
            roots.append(comment)
            continue
        parent = by_id.get(comment.parent_id)
        if parent is not None:
            parent.replies.append(comment)
    return roots


class Storage(ABC):
    """Repository interface shared by the in-memory and database stores."""

    # Users

    @abstractmethod
    def get_user(self, user_id: int) -> Optional[UserRecord]: ...

    @abstractmethod
    def get_user_by_username(self, username: str) -> Optional[UserRecord]: ...

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[UserRecord]: ...

    @abstractmethod
    def create_user(self, username: str, email: str, password: str, name: str,
                    bio: str = "", avatar_url: Optional[str] = None) -> UserRecord: ...

    @abstractmethod
    def update_user(self, user_id: int, **fields) -> Optional[UserRecord]: ...

    # Posts

    @abstractmethod
    def create_post(self, author_id: int, **fields) -> PostRecord: ...

    @abstractmethod
    def get_post_by_id(self, post_id: int) -> Optional[PostRecord]: ...

    @abstractmethod
    def get_post_by_slug(self, slug: str) -> Optional[PostWithAuthor]: ...

    @abstractmethod
    def get_posts(self, page: int = 1, limit: int = 10,
                  category: Optional[str] = None) -> Tuple[List[PostWithAuthor], int]: ...

    def get_featured_posts(self, limit: int = 3) -> List[PostWithAuthor]:
        # Featured is simply the most recent posts
        posts, _ = self.get_posts(page=1, limit=limit)
        return posts

    @abstractmethod
    def get_posts_by_author(self, author_id: int) -> List[PostWithAuthor]: ...

    @abstractmethod
    def update_post(self, post_id: int, **fields) -> Optional[PostRecord]: ...

    @abstractmethod
    def delete_post(self, post_id: int) -> bool: ...

    # Comments

    @abstractmethod
    def create_comment(self, post_id: int, author_id: int, content: str,
                       parent_id: Optional[int] = None) -> CommentRecord: ...

    @abstractmethod
    def get_comment_by_id(self, comment_id: int) -> Optional[CommentRecord]: ...

    @abstractmethod
    def list_comments(self, post_id: int) -> List[CommentWithAuthor]:
        """Flat list of a post's comments with authors, oldest first."""

    @abstractmethod
    def list_reply_ids(self, comment_id: int) -> List[int]:
        """Ids of the direct replies to a comment."""

    def get_comments_by_post_id(self, post_id: int) -> List[CommentWithAuthor]:
        return build_comment_tree(self.list_comments(post_id))

    def collect_thread_ids(self, comment_id: int) -> List[int]:
        """The comment id followed by the ids of every reply beneath it."""
        ids = [comment_id]
        pending = [comment_id]
        while pending:
            children = self.list_reply_ids(pending.pop())
            ids.extend(children)
            pending.extend(children)
        return ids

    @abstractmethod
    def delete_comment(self, comment_id: int) -> bool: ...

    # Likes

    @abstractmethod
    def like_post(self, post_id: int, user_id: int) -> Tuple[LikeRecord, bool]: ...

    @abstractmethod
    def unlike_post(self, post_id: int, user_id: int) -> bool: ...

    @abstractmethod
    def check_liked(self, post_id: int, user_id: int) -> bool: ...

    @abstractmethod
    def get_like_count(self, post_id: int) -> int: ...

    # Categories

    @abstractmethod
    def get_categories(self) -> List[CategoryRecord]: ...

    @abstractmethod
    def get_category(self, name_or_slug: str) -> Optional[CategoryRecord]: ...

    @abstractmethod
    def create_category(self, name: str, slug: str) -> CategoryRecord: ...

    def seed_categories(self) -> int:
        if self.get_categories():
            return 0
        for name, slug in DEFAULT_CATEGORIES:
            self.create_category(name=name, slug=slug)
        logger.info(f"Seeded {len(DEFAULT_CATEGORIES)} categories")
        return len(DEFAULT_CATEGORIES)

    def resolve_category_name(self, category: Optional[str]) -> Optional[str]:
        """Map a category filter (name or slug) onto the stored post category."""
        if not category:
            return None
        found = self.get_category(category)
        return found.name if found else category
