from typing import List

from rich.text import Text

from ..domain.models import SearchResult
from ..registry.client import RegistryClient
from ..ui.progress import ProgressManager

NO_RESULTS = "No packages found."


class SearchService:
    def __init__(self, registry_client: RegistryClient, progress_manager: ProgressManager = None):
        self.registry_client = registry_client
        self.progress_manager = progress_manager or ProgressManager()

    def search(self, query: str) -> List[SearchResult]:
        with self.progress_manager.spinner(f"searching for \"{query}\""):
            return self.registry_client.search(query)

    @staticmethod
    def render(results: List[SearchResult]) -> List[Text]:
        """one line per result in registry order, or a single no-results line."""
        if not results:
            return [Text(NO_RESULTS, style="white")]
        # Text.assemble never parses markup, so registry strings print verbatim
        return [
            Text.assemble(
                (r.package_name, "bold cyan"),
                "@",
                (r.version, "yellow"),
                " - ",
                (r.description or "", "white"),
                " (",
                (r.author or "", "bright_black"),
                ")",
            )
            for r in results
        ]
