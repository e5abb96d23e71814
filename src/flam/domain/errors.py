from typing import Optional

class FlamError(Exception):
    """base class for exceptions in flam."""
    pass

class NotAuthenticatedError(FlamError):
    """raised when a privileged command runs without a stored API key."""
    def __init__(self, message: str = "You are not logged in. Run `flam login <email> <password>` first."):
        super().__init__(message)

class ManifestError(FlamError):
    """raised when the local package manifest is missing or malformed."""
    pass

class PublishError(FlamError):
    """raised when a publish cannot start because of local state."""
    pass

class RegistryError(FlamError):
    """raised when the registry rejects a request or cannot be reached."""
    def __init__(self, message: str, status_code: Optional[int] = None, server_message: Optional[str] = None):
        self.status_code = status_code
        # the registry's own error text, when the response carried one
        self.server_message = server_message
        super().__init__(message)

class InstallError(FlamError):
    """raised when a package cannot be downloaded or written to disk."""
    pass
