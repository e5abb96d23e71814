import logging
from pathlib import Path

from ..credentials import CredentialStore
from ..domain.errors import NotAuthenticatedError, PublishError
from ..domain.models import PackageDescriptor
from ..project.manifest import read_descriptor
from ..registry.client import RegistryClient
from ..ui.progress import ProgressManager
from ..utils.streams import ArchiveReader

logger = logging.getLogger(__name__)


class PublishService:
    """uploads a package archive with the metadata from the local manifest."""
    
    def __init__(
        self, 
        registry_client: RegistryClient, 
        store: CredentialStore,
        project_dir: Path,
        progress_manager: ProgressManager = None
    ):
        self.registry_client = registry_client
        self.store = store
        self.project_dir = project_dir
        self.progress_manager = progress_manager or ProgressManager()
    
    def prepare(self) -> tuple[str, PackageDescriptor]:
        """
        check the local preconditions for a publish.
        
        returns:
            tuple of (api_key, descriptor)
            
        raises:
            NotAuthenticatedError: if no API key is stored
            ManifestError: if the manifest is missing or malformed
        """
        api_key = self.store.load()
        if not api_key:
            raise NotAuthenticatedError()
        
        descriptor = read_descriptor(self.project_dir)
        return api_key, descriptor
    
    def publish(self, archive_path: Path) -> str:
        """
        publish an archive to the registry.
        
        args:
            archive_path: path to the package .zip
            
        returns:
            the registry's confirmation message
        """
        api_key, descriptor = self.prepare()
        return self.upload(archive_path, descriptor, api_key)
    
    def upload(self, archive_path: Path, descriptor: PackageDescriptor, api_key: str) -> str:
        """stream the archive to the registry; no request is made for a missing file."""
        if not archive_path.is_file():
            raise PublishError(f"Package archive not found: {archive_path}")
        
        try:
            with ArchiveReader(archive_path) as archive:
                with self.progress_manager.spinner(f"uploading {archive_path.name}"):
                    message = self.registry_client.publish(descriptor, archive, api_key)
                logger.debug(f"uploaded {archive.bytes_read} bytes from {archive_path}")
        except OSError as e:
            raise PublishError(f"Could not read {archive_path}: {e}") from e

        return message
