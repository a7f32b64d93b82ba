"""
Bearer token authentication.
"""

from .tokens import JWTCredentialValidator, issue_token

__all__ = ["JWTCredentialValidator", "issue_token"]
