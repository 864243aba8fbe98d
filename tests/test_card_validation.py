"""
Unit tests for card validation rules.

These run against pitaka.cards directly, without the database or the API.
"""

from datetime import date

import pytest

from pitaka.cards import (
    CardCandidate,
    detect_network,
    luhn_valid,
    mask,
    validate_card_candidate,
    validate_expiry,
)
from pitaka.exceptions import InvalidRequestError


TODAY = date(2026, 3, 15)


def _candidate(**overrides) -> CardCandidate:
    fields = {
        "card_number": "4111 1111 1111 1111",
        "cardholder_name": "  Juan Dela Cruz ",
        "expiry_month": "8",
        "expiry_year": "29",
        "cvv": "123",
    }
    fields.update(overrides)
    return CardCandidate(**fields)


class TestNetworkDetection:
    @pytest.mark.parametrize(
        "number, network",
        [
            ("4111111111111111", "VISA"),
            ("5555555555554444", "MASTERCARD"),
            ("2223003122003222", "MASTERCARD"),
            ("378282246310005", "AMEX"),
            ("6011111111111117", "DISCOVER"),
            ("6221260000000000", "DISCOVER"),
            ("3530111333300000", "JCB"),
            ("6200000000000005", "UNION_PAY"),
            ("9999999999999995", None),
        ],
    )
    def test_detect(self, number, network):
        assert detect_network(number) == network

    def test_separators_ignored(self):
        assert detect_network("4111-1111 1111-1111") == "VISA"


class TestLuhn:
    @pytest.mark.parametrize(
        "number",
        ["4111111111111111", "378282246310005", "6011111111111117", "79927398713"],
    )
    def test_valid(self, number):
        assert luhn_valid(number)

    @pytest.mark.parametrize("number", ["4111111111111112", "79927398710", ""])
    def test_invalid(self, number):
        assert not luhn_valid(number)


class TestMask:
    def test_sixteen_digit_card(self):
        assert mask("4111111111111111", "VISA") == "•••• •••• •••• 1111"

    def test_amex_grouping(self):
        assert mask("378282246310005", "AMEX") == "•••• •••••• 0005"


class TestExpiry:
    def test_valid(self):
        assert validate_expiry("08", "29", TODAY) == (8, 29)

    @pytest.mark.parametrize("month", ["0", "13", "ab", ""])
    def test_bad_month(self, month):
        with pytest.raises(InvalidRequestError, match="expiry month"):
            validate_expiry(month, "29", TODAY)

    @pytest.mark.parametrize("year", ["25", "47", "2x"])
    def test_year_outside_window(self, year):
        with pytest.raises(InvalidRequestError, match="expiry year"):
            validate_expiry("08", year, TODAY)

    def test_window_edges(self):
        assert validate_expiry("01", "26", TODAY) == (1, 26)
        assert validate_expiry("12", "46", TODAY) == (12, 46)


class TestValidateCandidate:
    def test_valid_visa(self):
        card = validate_card_candidate(_candidate(), TODAY)
        assert card.digits == "4111111111111111"
        assert card.network == "VISA"
        assert card.last_four == "1111"
        assert card.cardholder_name == "Juan Dela Cruz"
        assert (card.expiry_month, card.expiry_year) == (8, 29)

    @pytest.mark.parametrize("number", ["411111111111", "41111111111111111111"])
    def test_number_length(self, number):
        with pytest.raises(InvalidRequestError, match="Invalid card number"):
            validate_card_candidate(_candidate(card_number=number), TODAY)

    def test_luhn_checked(self):
        with pytest.raises(InvalidRequestError, match="Invalid card number"):
            validate_card_candidate(_candidate(card_number="4111111111111112"), TODAY)

    def test_unknown_network(self):
        with pytest.raises(InvalidRequestError, match="Unsupported card network"):
            validate_card_candidate(_candidate(card_number="9999999999999995"), TODAY)

    @pytest.mark.parametrize(
        "number, cvv",
        [
            ("4111111111111111", "1234"),
            ("4111111111111111", "12"),
            ("378282246310005", "123"),
            ("4111111111111111", "12a"),
        ],
    )
    def test_cvv_length_by_network(self, number, cvv):
        with pytest.raises(InvalidRequestError, match="CVV"):
            validate_card_candidate(_candidate(card_number=number, cvv=cvv), TODAY)

    def test_amex_four_digit_cvv(self):
        card = validate_card_candidate(
            _candidate(card_number="378282246310005", cvv="1234"), TODAY
        )
        assert card.network == "AMEX"

    def test_blank_name(self):
        with pytest.raises(InvalidRequestError, match="Cardholder name"):
            validate_card_candidate(_candidate(cardholder_name="   "), TODAY)
