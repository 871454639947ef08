from app.models.user import User
from app.models.post import Post
from app.models.comment import Comment
from app.models.like import Like
from app.models.category import Category

__all__ = ["User", "Post", "Comment", "Like", "Category"]
