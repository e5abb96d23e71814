import logging
from pathlib import Path

from ..config import INSTALL_DIR_NAME
from ..domain.errors import InstallError, RegistryError
from ..registry.client import RegistryClient
from ..ui.progress import ProgressManager
from ..utils.streams import ArchiveWriter

logger = logging.getLogger(__name__)


class InstallService:
    """downloads the latest version of a package into the install directory."""

    def __init__(
        self,
        registry_client: RegistryClient,
        project_dir: Path,
        install_dir_name: str = INSTALL_DIR_NAME,
        progress_manager: ProgressManager = None
    ):
        self.registry_client = registry_client
        self.install_dir = project_dir / install_dir_name
        self.progress_manager = progress_manager or ProgressManager()

    def resolve_version(self, package_name: str) -> str:
        """
        look up the latest published version.

        raises:
            InstallError: if the package is unknown or the registry fails
        """
        try:
            with self.progress_manager.spinner(f"looking up {package_name}"):
                details = self.registry_client.get_package_details(package_name)
        except RegistryError as e:
            raise InstallError(self._describe(package_name, e)) from e
        return details.version

    def install(self, package_name: str, version: str = None) -> Path:
        """
        install a package.

        args:
            package_name: exact package name
            version: already resolved version; looked up when omitted

        returns:
            path to the installed archive
        """
        if version is None:
            version = self.resolve_version(package_name)

        target = self.install_dir / f"{package_name}-{version}.zip"

        try:
            with self.registry_client.download_package(package_name, version) as stream:
                # only create the directory once the registry accepted the download
                self.install_dir.mkdir(parents=True, exist_ok=True)

                with ArchiveWriter(target) as writer:
                    with self.progress_manager.download_progress(
                        f"{package_name}@{version}", stream.total
                    ) as (progress, task_id):
                        for chunk in stream.iter_bytes():
                            writer.write(chunk)
                            progress.advance(task_id, len(chunk))
                    writer.finish()
        except RegistryError as e:
            raise InstallError(self._describe(package_name, e)) from e
        except OSError as e:
            raise InstallError(f"Could not write {target}: {e}") from e

        logger.debug(f"installed {package_name}@{version} to {target}")
        return target

    @staticmethod
    def _describe(package_name: str, error: RegistryError) -> str:
        # a bare 404 means the name is unknown
        if error.status_code == 404 and error.server_message is None:
            return f"Package \"{package_name}\" was not found."
        return str(error)
