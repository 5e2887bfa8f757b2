"""Mirror transactions for QIF transfers between two mapped accounts."""

import logging
from dataclasses import dataclass
from typing import Optional

from fintrack.domain.category import CategoryService
from fintrack.domain.dedup import DeduplicationGate
from fintrack.domain.entities import Account, ParsedTransaction, TransactionType
from fintrack.domain.transaction import TransactionService

logger = logging.getLogger(__name__)

PAIRED_SUFFIX = "-paired"


def paired_hash(hash: str) -> str:
    return f"{hash}{PAIRED_SUFFIX}"


def transfer_description(row: ParsedTransaction) -> str:
    """Description of the transfer row itself, e.g. ``To Savings``."""
    if row.type is TransactionType.EXPENSE:
        return f"To {row.transfer_account}"
    return f"From {row.transfer_account}"


@dataclass(frozen=True)
class PairingResult:
    transaction_id: Optional[int]
    reason: Optional[str] = None


class TransferPairing:
    """Creates the counterpart of a committed transfer row.

    An expense of X in account A marked ``[B]`` becomes an income of X in B
    described ``From A`` (and the other way around), booked in the system
    Transfer In / Transfer Out category.
    """

    def __init__(
        self,
        transaction_service: TransactionService,
        category_service: CategoryService,
        gate: DeduplicationGate,
    ):
        self.transaction_service = transaction_service
        self.gate = gate
        self._transfer_out, self._transfer_in = category_service.get_transfer_categories()
        self._warned = False

    def pair(
        self,
        row: ParsedTransaction,
        source_account_name: str,
        target: Optional[Account],
    ) -> PairingResult:
        """Create the mirror of ``row`` in ``target``.

        Args:
            row: The committed transfer row
            source_account_name: QIF account the row was read under
            target: App account mapped to the row's transfer account, if any

        Returns:
            PairingResult with the new transaction ID, or the reason nothing
            was created
        """
        if not row.is_transfer or not row.transfer_account:
            return PairingResult(None, "not a transfer")
        if target is None:
            logger.info(
                "Transfer account '%s' is not mapped, importing one side only",
                row.transfer_account,
            )
            return PairingResult(None, "counterpart not mapped")
        if self._transfer_out is None or self._transfer_in is None:
            if not self._warned:
                logger.warning(
                    "Transfer In/Out categories are missing, skipping transfer pairing"
                )
                self._warned = True
            return PairingResult(None, "transfer categories missing")

        mirror_hash = paired_hash(row.hash)
        if self.gate.is_duplicate(mirror_hash):
            return PairingResult(None, "already imported")

        if row.type is TransactionType.EXPENSE:
            description = f"From {source_account_name}"
            category = self._transfer_in
        else:
            description = f"To {source_account_name}"
            category = self._transfer_out

        transaction_id = self.transaction_service.create_transaction(
            account_id=target.id,
            date=row.date,
            amount=row.amount,
            transaction_type=row.type.opposite,
            currency=target.currency,
            description=description,
            category_id=category.id,
            merchant_name=description,
            source_name=self.gate.source,
        )
        self.gate.record(transaction_id, mirror_hash)
        logger.debug("Paired transfer %s into account %d", row.hash, target.id)
        return PairingResult(transaction_id)
