from sqlalchemy import Column, Integer, ForeignKey, UniqueConstraint
from app.db.session import Base
from app.models.base import UTCDateTime, utcnow


class Like(Base):
    __tablename__ = "likes"
    # A user can only like a post once
    __table_args__ = (UniqueConstraint(
        "post_id", "user_id", name="uq_likes_post_user"),)

    id = Column(Integer, primary_key=True, index=True)
    post_id = Column(Integer, ForeignKey(
        "posts.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(UTCDateTime, default=utcnow, nullable=False)
