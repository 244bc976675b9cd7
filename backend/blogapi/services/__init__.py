"""Domain services.

Each service is built per request around an explicit database session and the
process-wide collaborators it needs; none of them reach for global state.
"""
from blogapi.services.auth_flow import AuthFlow, LoginResult
from blogapi.services.blogs import BlogManager
from blogapi.services.credentials import SessionStore, UserStore

__all__ = ["AuthFlow", "BlogManager", "LoginResult", "SessionStore", "UserStore"]
