from __future__ import annotations

import re
from datetime import date
from decimal import Decimal
from enum import IntEnum

from email_validator import EmailNotValidError, validate_email

_NON_DIGITS = re.compile(r"\D")
_NON_ALNUM = re.compile(r"[^A-Za-z0-9]")
_NATIONAL_ID = re.compile(r"^\d{9}[A-Z]{2}$")
_PASSPORT = re.compile(r"^[A-Z]{2}\d{6,8}$")
_LETTERS = re.compile(r"^[^\W\d_]+( [^\W\d_]+)*$")
_DIGITS = re.compile(r"^\d+$")
_ALNUM = re.compile(r"^[A-Za-z0-9]+$")
_ASCII_LOWER = re.compile(r"[a-z]")
_ASCII_UPPER = re.compile(r"[A-Z]")
_SPECIAL = re.compile(r"[!@#$%^&*(),.?\"':;{}|<>]")

MAX_AGE_YEARS = 120


class PasswordStrength(IntEnum):
    VERY_WEAK = 1
    WEAK = 2
    MEDIUM = 3
    STRONG = 4
    VERY_STRONG = 5


PASSWORD_STRENGTH_LABELS = {
    PasswordStrength.VERY_WEAK: "Very weak",
    PasswordStrength.WEAK: "Weak",
    PasswordStrength.MEDIUM: "Medium",
    PasswordStrength.STRONG: "Strong",
    PasswordStrength.VERY_STRONG: "Very strong",
}


def is_valid_email(email: str | None) -> bool:
    if not email or not email.strip():
        return False
    try:
        validate_email(email.strip(), check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def _phone_digits(phone: str) -> str:
    return _NON_DIGITS.sub("", phone)


def is_valid_angola_phone(phone: str | None) -> bool:
    """9 local digits starting with 9, or 12 digits starting with country code 244."""
    if not phone or not phone.strip():
        return False
    digits = _phone_digits(phone)
    if len(digits) == 9:
        return digits.startswith("9")
    if len(digits) == 12:
        return digits.startswith("244")
    return False


def format_angola_phone(phone: str | None) -> str:
    if not phone or not phone.strip():
        return ""
    digits = _phone_digits(phone)
    if len(digits) == 12 and digits.startswith("244"):
        local = digits[3:]
    elif len(digits) == 9 and digits.startswith("9"):
        local = digits
    else:
        return phone
    return f"+244 {local[0:3]} {local[3:6]} {local[6:9]}"


def normalize_document(document: str) -> str:
    return _NON_ALNUM.sub("", document).upper()


def is_valid_national_id(document: str | None) -> bool:
    if not document or not document.strip():
        return False
    return bool(_NATIONAL_ID.match(normalize_document(document)))


def is_valid_passport(document: str | None) -> bool:
    if not document or not document.strip():
        return False
    return bool(_PASSPORT.match(normalize_document(document)))


def is_only_letters(text: str | None) -> bool:
    if not text or not text.strip():
        return False
    return bool(_LETTERS.match(text.strip()))


def is_only_digits(text: str | None) -> bool:
    if not text:
        return False
    return bool(_DIGITS.match(text))


def is_alphanumeric(text: str | None) -> bool:
    if not text:
        return False
    return bool(_ALNUM.match(text))


def _ean_check_digit(body: str, even_weight: int, odd_weight: int) -> int:
    total = 0
    for index, char in enumerate(body):
        weight = even_weight if index % 2 == 0 else odd_weight
        total += int(char) * weight
    return (10 - total % 10) % 10


def is_valid_ean13(code: str | None) -> bool:
    code = _NON_DIGITS.sub("", code or "")
    if len(code) != 13:
        return False
    return _ean_check_digit(code[:12], 1, 3) == int(code[12])


def is_valid_ean8(code: str | None) -> bool:
    code = _NON_DIGITS.sub("", code or "")
    if len(code) != 8:
        return False
    return _ean_check_digit(code[:7], 3, 1) == int(code[7])


def is_valid_barcode(code: str | None) -> bool:
    code = _NON_DIGITS.sub("", code or "")
    if len(code) == 13:
        return is_valid_ean13(code)
    if len(code) == 8:
        return is_valid_ean8(code)
    return False


def is_in_date_range(value: date, start: date, end: date) -> bool:
    return start <= value <= end


def _years_before(day: date, years: int) -> date:
    try:
        return day.replace(year=day.year - years)
    except ValueError:
        # 29 February in a non-leap target year
        return day.replace(year=day.year - years, day=28)


def is_valid_birth_date(birth_date: date, today: date | None = None) -> bool:
    today = today or date.today()
    return _years_before(today, MAX_AGE_YEARS) <= birth_date <= today


def age_on(birth_date: date, today: date | None = None) -> int:
    today = today or date.today()
    age = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        age -= 1
    return age


def is_in_range(value: Decimal | int | float, minimum: Decimal | int | float, maximum: Decimal | int | float) -> bool:
    return minimum <= value <= maximum


def is_positive(value: Decimal | int | float) -> bool:
    return value > 0


def is_non_negative(value: Decimal | int | float) -> bool:
    return value >= 0


def password_strength(password: str | None) -> PasswordStrength:
    if not password:
        return PasswordStrength.VERY_WEAK

    score = 0
    if len(password) >= 8:
        score += 1
    if len(password) >= 12:
        score += 1
    if _ASCII_LOWER.search(password):
        score += 1
    if _ASCII_UPPER.search(password):
        score += 1
    if any(char.isdigit() for char in password):
        score += 1
    if _SPECIAL.search(password):
        score += 1
    if len(set(password)) >= len(password) * 0.7:
        score += 1

    if score <= 1:
        return PasswordStrength.VERY_WEAK
    if score <= 3:
        return PasswordStrength.WEAK
    if score <= 5:
        return PasswordStrength.MEDIUM
    if score == 6:
        return PasswordStrength.STRONG
    return PasswordStrength.VERY_STRONG


def password_strength_label(strength: PasswordStrength) -> str:
    return PASSWORD_STRENGTH_LABELS.get(strength, "Unknown")


def collect_errors(*checks: tuple[bool, str]) -> list[str]:
    """Return the messages of every ``(is_valid, message)`` pair that failed."""
    return [message for is_valid, message in checks if not is_valid]
