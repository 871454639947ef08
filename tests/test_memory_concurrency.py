"""
The in-memory store is shared by FastAPI's threadpool workers, so reads
must stay consistent while another thread writes.
"""
import threading

from app.storage.memory import MemoryStorage


def run_threads(targets):
    threads = [threading.Thread(target=t) for t in targets]
    for t in threads:
        t.start()
    for t in threads:
        t.join()


def test_reads_survive_concurrent_writes():
    store = MemoryStorage()
    store.seed_categories()
    user = store.create_user("alice", "alice@example.com", "hash", "Alice")
    post = store.create_post(user.id, title="Seed", slug="seed", content="c",
                             excerpt="e", category="Python")
    errors = []
    done = threading.Event()

    def writer():
        try:
            for i in range(500):
                created = store.create_post(user.id, title=f"P{i}", slug=f"p-{i}",
                                            content="c", excerpt="e", category="Python")
                comment = store.create_comment(created.id, user.id, "hi")
                store.create_comment(created.id, user.id, "reply", parent_id=comment.id)
                store.like_post(created.id, user.id)
        except Exception as e:
            errors.append(e)
        finally:
            done.set()

    def reader():
        try:
            while not done.is_set():
                store.get_posts(page=1, limit=5)
                store.get_posts_by_author(user.id)
                store.get_post_by_slug("seed")
                store.get_comments_by_post_id(post.id)
                store.check_liked(post.id, user.id)
                store.get_category("python")
                store.get_categories()
        except Exception as e:
            errors.append(e)

    run_threads([writer] + [reader] * 4)

    assert errors == []
    _, total = store.get_posts()
    assert total == 501
    assert store.get_category("Python").post_count == 501
