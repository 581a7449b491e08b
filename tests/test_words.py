"""Rupee amounts spelled in the Indian numbering system."""

from decimal import Decimal

import pytest

from services.words import amount_in_words, rupees_in_words


class TestAmountInWords:

    @pytest.mark.parametrize("amount,words", [
        (0, "Zero"),
        (7, "Seven"),
        (19, "Nineteen"),
        (40, "Forty"),
        (99, "Ninety Nine"),
        (100, "One Hundred"),
        (105, "One Hundred Five"),
        (1000, "One Thousand"),
        (20500, "Twenty Thousand Five Hundred"),
        (100000, "One Lakh"),
        (1234567, "Twelve Lakh Thirty Four Thousand Five Hundred Sixty Seven"),
        (10000000, "One Crore"),
        (25030000, "Two Crore Fifty Lakh Thirty Thousand"),
    ])
    def test_groupings(self, amount, words):
        assert amount_in_words(amount) == words

    def test_crore_count_above_ninety_nine(self):
        """Large crore counts are themselves spelled with lakh/thousand groups."""
        assert amount_in_words(1_00_00_00_000) == "One Hundred Crore"
        assert amount_in_words(12_34_00_00_000) == "One Thousand Two Hundred Thirty Four Crore"

    def test_no_trailing_whitespace(self):
        for n in (20, 100, 1000, 100000, 10000000):
            text = amount_in_words(n)
            assert text == text.strip()
            assert "  " not in text

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            amount_in_words(-1)


class TestRupeesInWords:

    def test_receipt_phrase(self):
        assert rupees_in_words(50000) == "Indian Rupee Fifty Thousand Only"

    def test_paise_spelled(self):
        assert rupees_in_words(Decimal("1500.75")) == "Indian Rupee One Thousand Five Hundred and Seventy Five Paise Only"

    def test_sub_rupee_amount(self):
        assert rupees_in_words(Decimal("0.50")) == "Indian Rupee Zero and Fifty Paise Only"

    def test_whole_rupees_have_no_paise(self):
        assert rupees_in_words(Decimal("2000.00")) == "Indian Rupee Two Thousand Only"
