"""Identity primitives consumed by the authorization core."""

from .actor import Actor
from .errors import AuthenticationError, NotAuthorizedError
from .pipeline import HeaderAuthenticator

__all__ = ["Actor", "AuthenticationError", "HeaderAuthenticator", "NotAuthorizedError"]
