"""
Determines the effective manifest URL and document for a run, following a
manifest's declared move to a new location only once that location is proven.
"""

import logging

from pydantic import ValidationError

from build_updater.exceptions import TransferError, TransferErrorKind
from build_updater.models.manifest import ManifestDocument
from build_updater.transfer.client import TransferClient

log = logging.getLogger(__name__)


class ManifestResolver:
    """Fetches the remote manifest and handles URL migration."""

    def __init__(self, transfer: TransferClient):
        self.transfer = transfer

    async def fetch_document(self, url: str) -> ManifestDocument:
        """
        Fetches and parses one manifest document.

        Raises:
            TransferError: If the URL is unreachable or the document is malformed.
        """
        data = await self.transfer.fetch_json(url)
        try:
            return ManifestDocument.model_validate(data)
        except ValidationError as e:
            raise TransferError(
                f"Manifest at {url} has an invalid shape: {e}",
                url,
                TransferErrorKind.MALFORMED,
            ) from e

    async def resolve(self, initial_url: str) -> tuple[str, ManifestDocument]:
        """
        Returns (effective_url, document).

        A manifest whose manifestUrl points elsewhere is a migration request. The
        new location is adopted only if its document can actually be fetched and
        parsed; otherwise the run continues with the document from the old URL.
        """
        initial_url = initial_url.strip()
        first = await self.fetch_document(initial_url)

        declared = first.manifest_url
        if not declared:
            return initial_url, first.with_manifest_url(initial_url)
        if declared == initial_url:
            return initial_url, first

        log.info(f"Manifest declares a new location: {declared}")
        try:
            candidate = await self.fetch_document(declared)
        except Exception as e:
            log.warning(
                f"Migration target is not usable ({e}). "
                f"Staying on {initial_url} for this run."
            )
            return initial_url, first

        if not candidate.manifest_url:
            candidate = candidate.with_manifest_url(declared)
        log.info(f"Manifest migrated to {declared}")
        return declared, candidate
