import itertools
import logging
import threading
from dataclasses import asdict, replace
from typing import Dict, List, Optional, Tuple

from app.models.base import utcnow
from app.storage.base import (
    POST_UPDATE_FIELDS,
    USER_UPDATE_FIELDS,
    DuplicateKeyError,
    Storage,
)
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


class MemoryStorage(Storage):
    """Storage kept in process-local dicts. Data is lost on restart."""

    def __init__(self):
        self._lock = threading.RLock()
        self._users: Dict[int, UserRecord] = {}
        self._posts: Dict[int, PostRecord] = {}
        self._comments: Dict[int, CommentRecord] = {}
        self._likes: Dict[int, LikeRecord] = {}
        self._categories: Dict[int, CategoryRecord] = {}
        self._ids = {name: itertools.count(1) for name in
                     ("users", "posts", "comments", "likes", "categories")}

    def _next_id(self, table: str) -> int:
        return next(self._ids[table])

    def _with_author(self, post: PostRecord) -> Optional[PostWithAuthor]:
        author = self._users.get(post.author_id)
        if author is None:
            return None
        return PostWithAuthor(**asdict(post), author=replace(author))

    def _newest_first(self, posts) -> List[PostRecord]:
        return sorted(posts, key=lambda p: (p.created_at, p.id), reverse=True)

    def _bump_category(self, name: str, delta: int):
        for category in self._categories.values():
            if category.name == name:
                category.post_count += delta
                return

    # Users

    def get_user(self, user_id: int) -> Optional[UserRecord]:
        with self._lock:
            user = self._users.get(user_id)
            return replace(user) if user else None

    def get_user_by_username(self, username: str) -> Optional[UserRecord]:
        username = username.strip().lower()
        with self._lock:
            for user in self._users.values():
                if user.username == username:
                    return replace(user)
        return None

    def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        email = email.strip().lower()
        with self._lock:
            for user in self._users.values():
                if user.email == email:
                    return replace(user)
        return None

    def create_user(self, username: str, email: str, password: str, name: str,
                    bio: str = "", avatar_url: Optional[str] = None) -> UserRecord:
        with self._lock:
            username = username.strip().lower()
            email = email.strip().lower()
            if self.get_user_by_username(username):
                raise DuplicateKeyError("username", username)
            if self.get_user_by_email(email):
                raise DuplicateKeyError("email", email)
            user = UserRecord(
                id=self._next_id("users"),
                username=username,
                email=email,
                password=password,
                name=name.strip(),
                bio=bio or "",
                avatar_url=avatar_url,
                created_at=utcnow(),
            )
            self._users[user.id] = user
            return replace(user)

    def update_user(self, user_id: int, **fields) -> Optional[UserRecord]:
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return None
            for key, value in fields.items():
                if key in USER_UPDATE_FIELDS:
                    setattr(user, key, value)
            return replace(user)

    # Posts

    def create_post(self, author_id: int, **fields) -> PostRecord:
        with self._lock:
            slug = fields["slug"].strip().lower()
            if any(p.slug == slug for p in self._posts.values()):
                raise DuplicateKeyError("slug", slug)
            now = utcnow()
            post = PostRecord(
                id=self._next_id("posts"),
                title=fields["title"].strip(),
                slug=slug,
                content=fields["content"],
                excerpt=fields["excerpt"],
                author_id=author_id,
                category=fields["category"],
                cover_image=fields.get("cover_image"),
                published=fields.get("published", True),
                like_count=0,
                comment_count=0,
                created_at=now,
                updated_at=now,
            )
            self._posts[post.id] = post
            self._bump_category(post.category, 1)
            return replace(post)

    def get_post_by_id(self, post_id: int) -> Optional[PostRecord]:
        with self._lock:
            post = self._posts.get(post_id)
            return replace(post) if post else None

    def get_post_by_slug(self, slug: str) -> Optional[PostWithAuthor]:
        slug = slug.strip().lower()
        with self._lock:
            for post in self._posts.values():
                if post.slug == slug:
                    return self._with_author(post)
        return None

    def get_posts(self, page: int = 1, limit: int = 10,
                  category: Optional[str] = None) -> Tuple[List[PostWithAuthor], int]:
        with self._lock:
            name = self.resolve_category_name(category)
            matching = [p for p in self._posts.values()
                        if name is None or p.category == name]
            ordered = self._newest_first(matching)
            skip = (page - 1) * limit
            window = ordered[skip:skip + limit]
            posts = [wa for wa in (self._with_author(p) for p in window) if wa]
            return posts, len(matching)

    def get_posts_by_author(self, author_id: int) -> List[PostWithAuthor]:
        with self._lock:
            mine = [p for p in self._posts.values() if p.author_id == author_id]
            return [wa for wa in (self._with_author(p) for p in self._newest_first(mine)) if wa]

    def update_post(self, post_id: int, **fields) -> Optional[PostRecord]:
        with self._lock:
            post = self._posts.get(post_id)
            if post is None:
                return None
            if "slug" in fields and fields["slug"] is not None:
                fields["slug"] = fields["slug"].strip().lower()
                clash = any(p.slug == fields["slug"] and p.id != post_id
                            for p in self._posts.values())
                if clash:
                    raise DuplicateKeyError("slug", fields["slug"])
            old_category = post.category
            for key, value in fields.items():
                if key in POST_UPDATE_FIELDS:
                    setattr(post, key, value)
            if post.category != old_category:
                self._bump_category(old_category, -1)
                self._bump_category(post.category, 1)
            post.updated_at = utcnow()
            return replace(post)

    def delete_post(self, post_id: int) -> bool:
        with self._lock:
            post = self._posts.pop(post_id, None)
            if post is None:
                return False
            self._comments = {cid: c for cid, c in self._comments.items()
                              if c.post_id != post_id}
            self._likes = {lid: like for lid, like in self._likes.items()
                           if like.post_id != post_id}
            self._bump_category(post.category, -1)
            return True

    # Comments

    def create_comment(self, post_id: int, author_id: int, content: str,
                       parent_id: Optional[int] = None) -> CommentRecord:
        with self._lock:
            comment = CommentRecord(
                id=self._next_id("comments"),
                content=content,
                post_id=post_id,
                author_id=author_id,
                parent_id=parent_id,
                created_at=utcnow(),
            )
            self._comments[comment.id] = comment
            post = self._posts.get(post_id)
            if post is not None:
                post.comment_count += 1
            return replace(comment)

    def get_comment_by_id(self, comment_id: int) -> Optional[CommentRecord]:
        with self._lock:
            comment = self._comments.get(comment_id)
            return replace(comment) if comment else None

    def list_comments(self, post_id: int) -> List[CommentWithAuthor]:
        with self._lock:
            mine = sorted((c for c in self._comments.values() if c.post_id == post_id),
                          key=lambda c: (c.created_at, c.id))
            result = []
            for comment in mine:
                author = self._users.get(comment.author_id)
                if author is None:
                    continue
                result.append(CommentWithAuthor(
                    **asdict(comment), author=replace(author)))
            return result

    def list_reply_ids(self, comment_id: int) -> List[int]:
        with self._lock:
            return [c.id for c in self._comments.values() if c.parent_id == comment_id]

    def delete_comment(self, comment_id: int) -> bool:
        with self._lock:
            comment = self._comments.get(comment_id)
            if comment is None:
                return False
            thread_ids = self.collect_thread_ids(comment_id)
            for cid in thread_ids:
                self._comments.pop(cid, None)
            post = self._posts.get(comment.post_id)
            if post is not None:
                post.comment_count -= len(thread_ids)
            logger.debug(
                f"Deleted comment {comment_id} with {len(thread_ids) - 1} replies")
            return True

    # Likes

    def _find_like(self, post_id: int, user_id: int) -> Optional[LikeRecord]:
        with self._lock:
            for like in self._likes.values():
                if like.post_id == post_id and like.user_id == user_id:
                    return like
        return None

    def like_post(self, post_id: int, user_id: int) -> Tuple[LikeRecord, bool]:
        with self._lock:
            existing = self._find_like(post_id, user_id)
            if existing is not None:
                return replace(existing), False
            like = LikeRecord(id=self._next_id("likes"), post_id=post_id,
                              user_id=user_id, created_at=utcnow())
            self._likes[like.id] = like
            post = self._posts.get(post_id)
            if post is not None:
                post.like_count += 1
            return replace(like), True

    def unlike_post(self, post_id: int, user_id: int) -> bool:
        with self._lock:
            like = self._find_like(post_id, user_id)
            if like is None:
                return False
            del self._likes[like.id]
            post = self._posts.get(post_id)
            if post is not None:
                post.like_count -= 1
            return True

    def check_liked(self, post_id: int, user_id: int) -> bool:
        return self._find_like(post_id, user_id) is not None

    def get_like_count(self, post_id: int) -> int:
        with self._lock:
            post = self._posts.get(post_id)
            return post.like_count if post else 0

    # Categories

    def get_categories(self) -> List[CategoryRecord]:
        with self._lock:
            categories = sorted(self._categories.values(), key=lambda c: c.name)
            return [replace(c) for c in categories]

    def get_category(self, name_or_slug: str) -> Optional[CategoryRecord]:
        slug = name_or_slug.strip().lower()
        with self._lock:
            for category in self._categories.values():
                if category.name == name_or_slug or category.slug == slug:
                    return replace(category)
        return None

    def create_category(self, name: str, slug: str) -> CategoryRecord:
        with self._lock:
            name = name.strip()
            slug = slug.strip().lower()
            for category in self._categories.values():
                if category.name == name:
                    raise DuplicateKeyError("name", name)
                if category.slug == slug:
                    raise DuplicateKeyError("slug", slug)
            # Posts may already use this category name
            existing = sum(1 for p in self._posts.values() if p.category == name)
            category = CategoryRecord(id=self._next_id("categories"), name=name,
                                      slug=slug, post_count=existing,
                                      created_at=utcnow())
            self._categories[category.id] = category
            return replace(category)
