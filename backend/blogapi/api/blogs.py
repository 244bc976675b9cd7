"""Blog endpoints"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Request, status

from blogapi.api.deps import Identity, bearer_auth, get_blog_manager, optional_create_guard
from blogapi.middleware.rate_limit import get_rate_limit, limiter
from blogapi.schemas.auth import MessageResponse
from blogapi.schemas.blog import BlogCreate, BlogResponse, BlogUpdate
from blogapi.services.blogs import BlogManager

router = APIRouter(prefix="/api/blogs", tags=["blogs"])


@router.get("", response_model=List[BlogResponse])
@limiter.limit(get_rate_limit("blog_read"))
def list_blogs(
    request: Request,
    blogs: BlogManager = Depends(get_blog_manager),
    _: Identity = Depends(bearer_auth),
):
    """List all blogs, oldest first"""
    return blogs.list_blogs()


@router.get("/{blog_id}", response_model=BlogResponse)
@limiter.limit(get_rate_limit("blog_read"))
def get_blog(
    request: Request,
    blog_id: int,
    blogs: BlogManager = Depends(get_blog_manager),
    _: Identity = Depends(bearer_auth),
):
    """Get a blog by ID"""
    return blogs.get_blog(blog_id)


@router.post("", response_model=BlogResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(get_rate_limit("blog_write"))
def create_blog(
    request: Request,
    blog_data: BlogCreate,
    blogs: BlogManager = Depends(get_blog_manager),
    _: Optional[Identity] = Depends(optional_create_guard),
):
    """
    Create a blog and broadcast a ``new-blog`` event on ``blogs-channel``

    Unauthenticated unless BLOG_CREATE_REQUIRES_AUTH is enabled.
    """
    return blogs.create_blog(blog_data.title, blog_data.snippet, blog_data.body)


@router.put("/{blog_id}", response_model=MessageResponse)
@limiter.limit(get_rate_limit("blog_write"))
def update_blog(
    request: Request,
    blog_id: int,
    blog_data: BlogUpdate,
    blogs: BlogManager = Depends(get_blog_manager),
    _: Identity = Depends(bearer_auth),
):
    """Update a blog; omitted fields are left unchanged"""
    blogs.update_blog(blog_id, blog_data.title, blog_data.snippet, blog_data.body)
    return MessageResponse(message="Blog updated successfully")


@router.delete("/{blog_id}", response_model=MessageResponse)
@limiter.limit(get_rate_limit("blog_write"))
def delete_blog(
    request: Request,
    blog_id: int,
    blogs: BlogManager = Depends(get_blog_manager),
    _: Identity = Depends(bearer_auth),
):
    """Delete a blog permanently"""
    blogs.delete_blog(blog_id)
    return MessageResponse(message="Blog deleted successfully")
