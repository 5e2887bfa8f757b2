"""Bank detection for PDF statements."""

import logging
import re

from fintrack.parsers.base import BankId

logger = logging.getLogger(__name__)

DEFAULT_BANK = BankId.TRUSTEE

BANK_MARKERS: dict[BankId, tuple[str, ...]] = {
    BankId.PRIVAT: ("ПРИВАТБАНК", "ПриватБанк", "PrivatBank", "Privat24", "SAMDNWFC"),
    BankId.TRUSTEE: (
        "Trustee",
        "TRUSTEE",
        "Trustee Wallet",
        "Per Period:",
        "Card number:",
        "Date and time of operation",
    ),
}

# Privat rows start with a date line, a time line and the masked card number
PRIVAT_ROW_PATTERN = re.compile(r"\d{2}\.\d{2}\.\d{4}\n\d{2}:\d{2}\n\d{6}\*+\d{4}")
TRUSTEE_ROW_PATTERN = re.compile(r"\d{4}\.\d{2}\.\d{2},\s*\d{2}:\d{2}")


def _has_marker(text: str, markers: tuple[str, ...]) -> bool:
    if any(marker in text for marker in markers):
        return True
    lowered = text.lower()
    return any(marker.lower() in lowered for marker in markers)


def detect_bank(text: str) -> BankId:
    """Classify extracted PDF text as a Trustee or Privat statement.

    Never raises: text that cannot be told apart falls back to DEFAULT_BANK.
    """
    matched = [bank for bank, markers in BANK_MARKERS.items() if _has_marker(text, markers)]
    if len(matched) == 1:
        logger.debug("Detected %s by marker", matched[0].value)
        return matched[0]

    normalized = "\n".join(line.strip() for line in text.splitlines())
    if PRIVAT_ROW_PATTERN.search(normalized):
        logger.debug("Detected privat by row layout")
        return BankId.PRIVAT
    if TRUSTEE_ROW_PATTERN.search(normalized):
        logger.debug("Detected trustee by row layout")
        return BankId.TRUSTEE

    logger.info("Could not determine bank, defaulting to %s", DEFAULT_BANK.value)
    return DEFAULT_BANK
