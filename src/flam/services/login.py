import logging

from ..credentials import CredentialStore
from ..registry.client import RegistryClient
from ..ui.progress import ProgressManager

logger = logging.getLogger(__name__)


class LoginService:
    """exchanges an email/password pair for a stored API key."""
    
    def __init__(
        self,
        registry_client: RegistryClient,
        store: CredentialStore,
        progress_manager: ProgressManager = None
    ):
        self.registry_client = registry_client
        self.store = store
        self.progress_manager = progress_manager or ProgressManager()
    
    def login(self, email: str, password: str) -> None:
        """
        log in and save the resulting API key.
        
        the key is only written once both exchanges succeeded, so a failed
        login leaves any previous credential untouched.
        
        raises:
            RegistryError: if either exchange fails
            OSError: if the key cannot be written
        """
        with self.progress_manager.spinner("authenticating"):
            session_token = self.registry_client.login(email, password)
        
        with self.progress_manager.spinner("requesting API key"):
            api_key = self.registry_client.create_api_token(session_token)
        
        self.store.save(api_key)
        logger.debug(f"logged in as {email}")
