"""local storage of the registry API key."""
from .store import CredentialStore

__all__ = [
    "CredentialStore",
]
