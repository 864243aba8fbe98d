"""
Card validation: network detection, Luhn checksum, CVV length, expiry,
and masking.

These are plain functions over the whole candidate card so the rules can
be checked (and tested) without touching the database. The card service
calls validate_card_candidate() before anything is encrypted or stored.
"""

import re
from dataclasses import dataclass
from datetime import date

from pitaka.exceptions import InvalidRequestError


# Checked in order; Discover's 622 prefix must win over UnionPay's 62
NETWORK_PATTERNS: list[tuple[str, re.Pattern]] = [
    ("VISA", re.compile(r"^4")),
    ("MASTERCARD", re.compile(r"^(5[1-5]|2[2-7])")),
    ("AMEX", re.compile(r"^3[47]")),
    ("DISCOVER", re.compile(r"^(6011|65|64[4-9]|622)")),
    ("JCB", re.compile(r"^35")),
    ("UNION_PAY", re.compile(r"^62")),
]

MIN_CARD_DIGITS = 13
MAX_CARD_DIGITS = 19
EXPIRY_YEAR_WINDOW = 20


@dataclass
class CardCandidate:
    card_number: str
    cardholder_name: str
    expiry_month: str
    expiry_year: str
    cvv: str


@dataclass
class ValidatedCard:
    """A candidate that passed every rule, with derived display fields."""
    digits: str
    network: str
    masked_number: str
    last_four: str
    cardholder_name: str
    expiry_month: int
    expiry_year: int
    cvv: str


def clean_number(card_number: str) -> str:
    """Strip spaces, dashes and anything else that isn't a digit."""
    return re.sub(r"\D", "", card_number)


def detect_network(card_number: str) -> str | None:
    digits = clean_number(card_number)
    for network, pattern in NETWORK_PATTERNS:
        if pattern.match(digits):
            return network
    return None


def luhn_valid(card_number: str) -> bool:
    """
    Luhn (mod 10) checksum.

    Walking right to left, every second digit is doubled (minus 9 if the
    result exceeds 9). The number is valid when the total is a multiple of 10.
    """
    digits = clean_number(card_number)
    if not digits:
        return False

    total = 0
    double = False
    for ch in reversed(digits):
        digit = int(ch)
        if double:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
        double = not double
    return total % 10 == 0


def required_cvv_length(network: str) -> int:
    return 4 if network == "AMEX" else 3


def mask(card_number: str, network: str) -> str:
    """Hide everything but the last four digits, grouped the way the network prints them."""
    last_four = clean_number(card_number)[-4:]
    if network == "AMEX":
        return f"•••• •••••• {last_four}"
    return f"•••• •••• •••• {last_four}"


def validate_card_candidate(candidate: CardCandidate, today: date | None = None) -> ValidatedCard:
    """
    Check a candidate card against every rule and return the validated form.

    Raises:
        InvalidRequestError: Naming the first rule the candidate breaks.
    """
    today = today or date.today()
    digits = clean_number(candidate.card_number)

    if not MIN_CARD_DIGITS <= len(digits) <= MAX_CARD_DIGITS:
        raise InvalidRequestError("Invalid card number")
    if not luhn_valid(digits):
        raise InvalidRequestError("Invalid card number")

    network = detect_network(digits)
    if network is None:
        raise InvalidRequestError("Unsupported card network")

    cvv_length = required_cvv_length(network)
    if not re.fullmatch(rf"\d{{{cvv_length}}}", candidate.cvv.strip()):
        raise InvalidRequestError(
            "CVV must be the correct length (3 digits, or 4 for AMEX cards)"
        )

    expiry_month, expiry_year = validate_expiry(candidate.expiry_month, candidate.expiry_year, today)

    name = candidate.cardholder_name.strip()
    if not name:
        raise InvalidRequestError("Cardholder name is required")

    return ValidatedCard(
        digits=digits,
        network=network,
        masked_number=mask(digits, network),
        last_four=digits[-4:],
        cardholder_name=name,
        expiry_month=expiry_month,
        expiry_year=expiry_year,
        cvv=candidate.cvv.strip(),
    )


def validate_expiry(month: str, year: str, today: date | None = None) -> tuple[int, int]:
    """
    Parse an expiry month (01-12) and two-digit year.

    The year must fall between this year and EXPIRY_YEAR_WINDOW years out.
    """
    today = today or date.today()

    month_text = month.strip()
    if not month_text.isdigit() or not 1 <= int(month_text) <= 12:
        raise InvalidRequestError("Invalid expiry month. Must be between 01-12")

    current_year = today.year % 100
    year_text = year.strip()
    if not year_text.isdigit() or not current_year <= int(year_text) <= current_year + EXPIRY_YEAR_WINDOW:
        raise InvalidRequestError(
            f"Invalid expiry year. Must be between {current_year:02d} "
            f"and {current_year + EXPIRY_YEAR_WINDOW:02d}"
        )

    return int(month_text), int(year_text)
