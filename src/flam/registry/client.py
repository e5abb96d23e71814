from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Iterator, List, Optional

from ..domain.models import PackageDescriptor, PackageDetails, SearchResult
from ..utils.streams import ArchiveReader

class DownloadStream(ABC):
    """an open download whose body is consumed exactly once."""
    total: Optional[int] = None

    @abstractmethod
    def iter_bytes(self) -> Iterator[bytes]:
        pass

class RegistryClient(ABC):
    @abstractmethod
    def login(self, email: str, password: str) -> str:
        """Exchange credentials for a short-lived session token."""
        pass

    @abstractmethod
    def create_api_token(self, session_token: str) -> str:
        """Exchange a session token for a long-lived API key."""
        pass

    @abstractmethod
    def publish(self, descriptor: PackageDescriptor, archive: ArchiveReader, api_key: str) -> str:
        """Upload an archive with its metadata; returns the registry's message."""
        pass

    @abstractmethod
    def search(self, query: str) -> List[SearchResult]:
        """Search the catalog."""
        pass

    @abstractmethod
    def get_package_details(self, package_name: str) -> PackageDetails:
        """Get details (latest version) for a package."""
        pass

    @abstractmethod
    def download_package(self, package_name: str, version: str) -> AbstractContextManager[DownloadStream]:
        """Open a streamed download of the package artifact."""
        pass
