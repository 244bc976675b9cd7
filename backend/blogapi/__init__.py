"""Blog API: JWT-authenticated blog CRUD with email verification and push notifications"""

__version__ = "1.0.0"
