"""Tests for PDF bank detection and text extraction."""

import pytest
from fintrack.domain.errors import StatementParseError
from fintrack.parsers import pdf_text
from fintrack.parsers.base import BankId
from fintrack.parsers.detector import detect_bank
from fintrack.parsers.trustee import TrusteeParser


def test_detects_trustee_by_marker(fixtures_dir):
    assert detect_bank((fixtures_dir / "trustee.txt").read_text()) == BankId.TRUSTEE


def test_detects_privat_by_marker(fixtures_dir):
    assert detect_bank((fixtures_dir / "privat.txt").read_text()) == BankId.PRIVAT


def test_marker_match_is_case_insensitive():
    assert detect_bank("Statement issued by privat24") == BankId.PRIVAT


def test_detects_privat_by_row_layout():
    text = "Statement\n  01.11.2025\n  10:00\n  545708******2220\nSILPO\n-100,00\nUAH"
    assert detect_bank(text) == BankId.PRIVAT


def test_detects_trustee_by_row_layout():
    assert detect_bank("Statement\n2025.11.01, 10:00 Shop -1.00 EUR") == BankId.TRUSTEE


def test_privat_row_layout_wins_over_trustee_layout():
    text = "22.11.2025\n20:35\n545708******2220\nMETRO\n2025.11.01, 15:41 Bar -2.18 EUR"
    assert detect_bank(text) == BankId.PRIVAT


def test_unknown_text_defaults_to_trustee():
    assert detect_bank("") == BankId.TRUSTEE
    assert detect_bank("Card statement PrivatBank, Per Period: whatever") == BankId.TRUSTEE


def test_extract_pdf_text_rejects_non_pdf():
    with pytest.raises(StatementParseError, match="Could not read PDF file"):
        pdf_text.extract_pdf_text(b"definitely not a pdf")


def test_pdf_parser_parses_extracted_text(monkeypatch, fixtures_dir):
    text = (fixtures_dir / "trustee.txt").read_text()
    monkeypatch.setattr(pdf_text, "extract_pdf_text", lambda data: text)

    result = TrusteeParser().parse(b"%PDF-1.4")

    assert len(result.transactions) == 3
