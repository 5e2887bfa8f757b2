"""Duplicate detection against previously imported statement rows."""

import logging
from typing import Optional

from fintrack.database.base import Database

logger = logging.getLogger(__name__)


class DeduplicationGate:
    """Known import hashes of one user and source.

    The hash set is fetched once per commit run; every committed hash is added
    right away, so a row repeated inside the same batch is caught as well.
    """

    def __init__(self, db: Database, user_id: str, source: str):
        self.db = db
        self.user_id = user_id
        self.source = source
        self._hashes: Optional[set[str]] = None

    def load(self) -> None:
        """Fetch the previously imported hashes from the database."""
        self._hashes = self.db.get_imported_hashes(self.user_id, self.source)
        logger.debug(
            "Loaded %d imported hashes for %s/%s", len(self._hashes), self.user_id, self.source
        )

    @property
    def hashes(self) -> set[str]:
        if self._hashes is None:
            self.load()
        return self._hashes

    def is_duplicate(self, hash: str) -> bool:
        return hash in self.hashes

    def remember(self, hash: str) -> None:
        """Mark a hash as known without writing provenance."""
        self.hashes.add(hash)

    def record(self, transaction_id: int, hash: str) -> None:
        """Write the provenance record of a committed transaction."""
        self.db.create_imported_record(
            user_id=self.user_id,
            transaction_id=transaction_id,
            hash=hash,
            source=self.source,
        )
        self.remember(hash)
