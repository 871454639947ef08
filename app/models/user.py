from sqlalchemy import Column, Integer, String, Text
from sqlalchemy.orm import relationship
from app.db.session import Base
from app.models.base import UTCDateTime, utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, nullable=False, index=True)
    email = Column(String, unique=True, nullable=False, index=True)
    password = Column(String, nullable=False)
    name = Column(String(100), nullable=False)
    bio = Column(Text, default="")
    avatar_url = Column(String, nullable=True)
    created_at = Column(UTCDateTime, default=utcnow, nullable=False)

    posts = relationship("Post", back_populates="author")
