"""Blog resource manager"""
from typing import Any, Dict, List, Optional, Protocol

from sqlalchemy.orm import Session

from blogapi.database import store_errors
from blogapi.errors import NotFoundError, UpstreamError
from blogapi.middleware.monitoring import record_blog_broadcast
from blogapi.models.blog import Blog
from blogapi.schemas.blog import BlogResponse
from blogapi.utils.logger import logger
from blogapi.utils.broadcast import BLOGS_CHANNEL, NEW_BLOG_EVENT

NEW_BLOG_MESSAGE = "A new blog has been created!"

# Largest value a signed 64-bit INTEGER column can hold
MAX_BLOG_ID = 2 ** 63 - 1


class Publisher(Protocol):
    is_configured: bool

    def publish(self, channel: str, event: str, data: Dict[str, Any]) -> None: ...


class BlogManager:
    """CRUD over blog posts; creation is broadcast on ``blogs-channel``"""

    def __init__(self, db: Session, publisher: Publisher):
        self.db = db
        self.publisher = publisher

    def list_blogs(self) -> List[Blog]:
        with store_errors(self.db, "Error retrieving blogs"):
            return (
                self.db.query(Blog)
                .order_by(Blog.created_at.asc(), Blog.id.asc())
                .all()
            )

    def get_blog(self, blog_id: int) -> Blog:
        if not 1 <= blog_id <= MAX_BLOG_ID:
            raise NotFoundError("Blog not found")
        with store_errors(self.db, "Error retrieving blog"):
            blog = self.db.get(Blog, blog_id)
        if blog is None:
            raise NotFoundError("Blog not found")
        return blog

    def create_blog(self, title: str, snippet: str, body: str) -> Blog:
        """Persist a post, then broadcast it.

        The post is committed before publishing; a failed broadcast is logged and
        does not affect the result.
        """
        with store_errors(self.db, "Error creating blog"):
            blog = Blog(title=title, snippet=snippet, body=body)
            self.db.add(blog)
            self.db.commit()
            self.db.refresh(blog)

        logger.info(f"Created blog {blog.id}", extra={"blog_id": blog.id, "action": "create_blog"})
        self._broadcast_created(blog)
        return blog

    def _broadcast_created(self, blog: Blog) -> None:
        if not self.publisher.is_configured:
            record_blog_broadcast("skipped")
            logger.debug("Push service not configured; new-blog event skipped", extra={"blog_id": blog.id})
            return

        payload = {
            "message": NEW_BLOG_MESSAGE,
            "blog": BlogResponse.model_validate(blog).model_dump(mode="json"),
        }
        try:
            self.publisher.publish(BLOGS_CHANNEL, NEW_BLOG_EVENT, payload)
        except UpstreamError as exc:
            record_blog_broadcast("failed")
            logger.error(
                "new-blog broadcast failed",
                extra={"blog_id": blog.id, "action": "publish", "error": str(exc)},
            )
            return
        record_blog_broadcast("published")

    def update_blog(
        self,
        blog_id: int,
        title: Optional[str] = None,
        snippet: Optional[str] = None,
        body: Optional[str] = None,
    ) -> Blog:
        blog = self.get_blog(blog_id)
        changes = {"title": title, "snippet": snippet, "body": body}

        with store_errors(self.db, "Error updating blog"):
            for field, value in changes.items():
                if value is not None:
                    setattr(blog, field, value)
            self.db.commit()
            self.db.refresh(blog)

        logger.info(f"Updated blog {blog_id}", extra={"blog_id": blog_id, "action": "update_blog"})
        return blog

    def delete_blog(self, blog_id: int) -> None:
        blog = self.get_blog(blog_id)
        with store_errors(self.db, "Error deleting blog"):
            self.db.delete(blog)
            self.db.commit()

        logger.info(f"Deleted blog {blog_id}", extra={"blog_id": blog_id, "action": "delete_blog"})
