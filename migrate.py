from app.db.session import engine, Base
from app.models.user import User  # Import User model here
from app.models.post import Post  # Import Post model here
from app.models.comment import Comment  # Import Comment model here
from app.models.like import Like  # Import Like model here
from app.models.category import Category  # Import Category model here


def run_migrations():
    print("Running database migrations...")
    Base.metadata.create_all(bind=engine)
    print("Migrations completed successfully.")


if __name__ == "__main__":
    run_migrations()
