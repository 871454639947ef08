import logging
from functools import wraps
from typing import List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from app.models import Category, Comment, Like, Post, User
from app.models.base import utcnow
from app.storage.base import (
    POST_UPDATE_FIELDS,
    USER_UPDATE_FIELDS,
    DuplicateKeyError,
    Storage,
    StorageError,
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


def guarded(action: str):
    """Roll back and re-raise database failures as storage errors."""
    def decorator(fn):
        @wraps(fn)
        def wrapper(self, *args, **kwargs):
            try:
                return fn(self, *args, **kwargs)
            except IntegrityError as e:
                self.db.rollback()
                logger.warning(f"Constraint violation while {action}: {e.orig}")
                raise DuplicateKeyError(
                    "record", None, f"Constraint violated while {action}") from e
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.exception(f"Error {action}")
                raise StorageError(f"Failed {action}") from e
        return wrapper
    return decorator


def _to_user(row: User) -> UserRecord:
    return UserRecord(
        id=row.id,
        username=row.username,
        email=row.email,
        password=row.password,
        name=row.name,
        bio=row.bio or "",
        avatar_url=row.avatar_url,
        created_at=row.created_at,
    )


def _post_fields(row: Post) -> dict:
    return dict(
        id=row.id,
        title=row.title,
        slug=row.slug,
        content=row.content,
        excerpt=row.excerpt,
        author_id=row.author_id,
        category=row.category,
        cover_image=row.cover_image,
        published=row.published,
        like_count=row.like_count,
        comment_count=row.comment_count,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _to_post(row: Post) -> PostRecord:
    return PostRecord(**_post_fields(row))


def _to_post_with_author(row: Post) -> Optional[PostWithAuthor]:
    if row.author is None:
        return None
    return PostWithAuthor(**_post_fields(row), author=_to_user(row.author))


def _to_comment(row: Comment) -> CommentRecord:
    return CommentRecord(
        id=row.id,
        content=row.content,
        post_id=row.post_id,
        author_id=row.author_id,
        parent_id=row.parent_id,
        created_at=row.created_at,
    )


def _to_like(row: Like) -> LikeRecord:
    return LikeRecord(id=row.id, post_id=row.post_id, user_id=row.user_id,
                      created_at=row.created_at)


def _to_category(row: Category) -> CategoryRecord:
    return CategoryRecord(id=row.id, name=row.name, slug=row.slug,
                          post_count=row.post_count, created_at=row.created_at)


class DatabaseStorage(Storage):
    """Storage backed by the SQLAlchemy models in app.models."""

    def __init__(self, db: Session):
        self.db = db

    def _posts_query(self):
        return self.db.query(Post).options(joinedload(Post.author))

    def _bump_post(self, post_id: int, column, delta: int):
        self.db.query(Post).filter(Post.id == post_id).update(
            {column: column + delta}, synchronize_session=False)

    def _bump_category(self, name: str, delta: int):
        self.db.query(Category).filter(Category.name == name).update(
            {Category.post_count: Category.post_count + delta},
            synchronize_session=False)

    # Users

    @guarded("fetching user")
    def get_user(self, user_id: int) -> Optional[UserRecord]:
        row = self.db.get(User, user_id)
        return _to_user(row) if row else None

    @guarded("fetching user by username")
    def get_user_by_username(self, username: str) -> Optional[UserRecord]:
        row = self.db.query(User).filter(
            User.username == username.strip().lower()).first()
        return _to_user(row) if row else None

    @guarded("fetching user by email")
    def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        row = self.db.query(User).filter(
            User.email == email.strip().lower()).first()
        return _to_user(row) if row else None

    @guarded("creating user")
    def create_user(self, username: str, email: str, password: str, name: str,
                    bio: str = "", avatar_url: Optional[str] = None) -> UserRecord:
        username = username.strip().lower()
        email = email.strip().lower()
        if self.db.query(User).filter(User.username == username).first():
            raise DuplicateKeyError("username", username)
        if self.db.query(User).filter(User.email == email).first():
            raise DuplicateKeyError("email", email)
        row = User(username=username, email=email, password=password,
                   name=name.strip(), bio=bio or "", avatar_url=avatar_url)
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return _to_user(row)

    @guarded("updating user")
    def update_user(self, user_id: int, **fields) -> Optional[UserRecord]:
        row = self.db.get(User, user_id)
        if row is None:
            return None
        for key, value in fields.items():
            if key in USER_UPDATE_FIELDS:
                setattr(row, key, value)
        self.db.commit()
        self.db.refresh(row)
        return _to_user(row)

    # Posts

    @guarded("creating post")
    def create_post(self, author_id: int, **fields) -> PostRecord:
        slug = fields["slug"].strip().lower()
        if self.db.query(Post).filter(Post.slug == slug).first():
            raise DuplicateKeyError("slug", slug)
        row = Post(
            title=fields["title"].strip(),
            slug=slug,
            content=fields["content"],
            excerpt=fields["excerpt"],
            cover_image=fields.get("cover_image"),
            author_id=author_id,
            category=fields["category"],
            published=fields.get("published", True),
            like_count=0,
            comment_count=0,
        )
        self.db.add(row)
        self._bump_category(row.category, 1)
        self.db.commit()
        self.db.refresh(row)
        return _to_post(row)

    @guarded("fetching post")
    def get_post_by_id(self, post_id: int) -> Optional[PostRecord]:
        row = self.db.get(Post, post_id)
        return _to_post(row) if row else None

    @guarded("fetching post by slug")
    def get_post_by_slug(self, slug: str) -> Optional[PostWithAuthor]:
        row = self._posts_query().filter(
            Post.slug == slug.strip().lower()).first()
        return _to_post_with_author(row) if row else None

    @guarded("fetching posts")
    def get_posts(self, page: int = 1, limit: int = 10,
                  category: Optional[str] = None) -> Tuple[List[PostWithAuthor], int]:
        query = self._posts_query()
        name = self.resolve_category_name(category)
        if name is not None:
            query = query.filter(Post.category == name)
        total = query.count()
        rows = query.order_by(Post.created_at.desc(), Post.id.desc()) \
            .offset((page - 1) * limit).limit(limit).all()
        posts = [p for p in (_to_post_with_author(r) for r in rows) if p]
        return posts, total

    @guarded("fetching posts by author")
    def get_posts_by_author(self, author_id: int) -> List[PostWithAuthor]:
        rows = self._posts_query().filter(Post.author_id == author_id) \
            .order_by(Post.created_at.desc(), Post.id.desc()).all()
        return [p for p in (_to_post_with_author(r) for r in rows) if p]

    @guarded("updating post")
    def update_post(self, post_id: int, **fields) -> Optional[PostRecord]:
        row = self.db.get(Post, post_id)
        if row is None:
            return None
        if fields.get("slug") is not None:
            fields["slug"] = fields["slug"].strip().lower()
            clash = self.db.query(Post).filter(
                Post.slug == fields["slug"], Post.id != post_id).first()
            if clash:
                raise DuplicateKeyError("slug", fields["slug"])
        old_category = row.category
        for key, value in fields.items():
            if key in POST_UPDATE_FIELDS:
                setattr(row, key, value)
        if row.category != old_category:
            self._bump_category(old_category, -1)
            self._bump_category(row.category, 1)
        row.updated_at = utcnow()
        self.db.commit()
        self.db.refresh(row)
        return _to_post(row)

    @guarded("deleting post")
    def delete_post(self, post_id: int) -> bool:
        row = self.db.get(Post, post_id)
        if row is None:
            return False
        self.db.query(Comment).filter(Comment.post_id == post_id) \
            .delete(synchronize_session=False)
        self.db.query(Like).filter(Like.post_id == post_id) \
            .delete(synchronize_session=False)
        self._bump_category(row.category, -1)
        self.db.delete(row)
        self.db.commit()
        return True

    # Comments

    @guarded("creating comment")
    def create_comment(self, post_id: int, author_id: int, content: str,
                       parent_id: Optional[int] = None) -> CommentRecord:
        row = Comment(content=content, post_id=post_id,
                      author_id=author_id, parent_id=parent_id)
        self.db.add(row)
        self._bump_post(post_id, Post.comment_count, 1)
        self.db.commit()
        self.db.refresh(row)
        return _to_comment(row)

    @guarded("fetching comment")
    def get_comment_by_id(self, comment_id: int) -> Optional[CommentRecord]:
        row = self.db.get(Comment, comment_id)
        return _to_comment(row) if row else None

    @guarded("fetching comments")
    def list_comments(self, post_id: int) -> List[CommentWithAuthor]:
        rows = self.db.query(Comment).options(joinedload(Comment.author)) \
            .filter(Comment.post_id == post_id) \
            .order_by(Comment.created_at.asc(), Comment.id.asc()).all()
        return [
            CommentWithAuthor(**vars(_to_comment(r)), author=_to_user(r.author))
            for r in rows if r.author is not None
        ]

    def list_reply_ids(self, comment_id: int) -> List[int]:
        rows = self.db.query(Comment.id).filter(
            Comment.parent_id == comment_id).all()
        return [r.id for r in rows]

    @guarded("deleting comment")
    def delete_comment(self, comment_id: int) -> bool:
        row = self.db.get(Comment, comment_id)
        if row is None:
            return False
        post_id = row.post_id
        thread_ids = self.collect_thread_ids(comment_id)
        self.db.query(Comment).filter(Comment.id.in_(thread_ids)) \
            .delete(synchronize_session=False)
        self._bump_post(post_id, Post.comment_count, -len(thread_ids))
        self.db.commit()
        logger.debug(
            f"Deleted comment {comment_id} with {len(thread_ids) - 1} replies")
        return True

    # Likes

    def _find_like(self, post_id: int, user_id: int) -> Optional[Like]:
        return self.db.query(Like).filter(
            Like.post_id == post_id, Like.user_id == user_id).first()

    @guarded("liking post")
    def like_post(self, post_id: int, user_id: int) -> Tuple[LikeRecord, bool]:
        existing = self._find_like(post_id, user_id)
        if existing is not None:
            return _to_like(existing), False
        row = Like(post_id=post_id, user_id=user_id)
        self.db.add(row)
        try:
            self.db.flush()
        except IntegrityError:
            # Another request liked the post between the check and the insert
            self.db.rollback()
            existing = self._find_like(post_id, user_id)
            if existing is None:
                raise
            return _to_like(existing), False
        self._bump_post(post_id, Post.like_count, 1)
        self.db.commit()
        self.db.refresh(row)
        return _to_like(row), True

    @guarded("unliking post")
    def unlike_post(self, post_id: int, user_id: int) -> bool:
        row = self._find_like(post_id, user_id)
        if row is None:
            return False
        self.db.delete(row)
        self._bump_post(post_id, Post.like_count, -1)
        self.db.commit()
        return True

    @guarded("checking like status")
    def check_liked(self, post_id: int, user_id: int) -> bool:
        return self._find_like(post_id, user_id) is not None

    @guarded("counting likes")
    def get_like_count(self, post_id: int) -> int:
        count = self.db.query(Post.like_count).filter(
            Post.id == post_id).scalar()
        return count or 0

    # Categories

    @guarded("fetching categories")
    def get_categories(self) -> List[CategoryRecord]:
        rows = self.db.query(Category).order_by(Category.name.asc()).all()
        return [_to_category(r) for r in rows]

    @guarded("fetching category")
    def get_category(self, name_or_slug: str) -> Optional[CategoryRecord]:
        row = self.db.query(Category).filter(or_(
            Category.name == name_or_slug,
            Category.slug == name_or_slug.strip().lower(),
        )).first()
        return _to_category(row) if row else None

    @guarded("creating category")
    def create_category(self, name: str, slug: str) -> CategoryRecord:
        name = name.strip()
        slug = slug.strip().lower()
        if self.db.query(Category).filter(Category.name == name).first():
            raise DuplicateKeyError("name", name)
        if self.db.query(Category).filter(Category.slug == slug).first():
            raise DuplicateKeyError("slug", slug)
        # Posts may already use this category name
        existing = self.db.query(func.count(Post.id)).filter(
            Post.category == name).scalar()
        row = Category(name=name, slug=slug, post_count=existing or 0)
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return _to_category(row)
