"""
Tadpoles API Layer.

This package handles all communication with the Tadpoles remote API.
"""

from .auth import TadpolesAuthenticator
from .client import AttachmentPayload, TadpolesAPIClient

__all__ = ["AttachmentPayload", "TadpolesAPIClient", "TadpolesAuthenticator"]
