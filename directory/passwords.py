"""
Password policy and hashing for registrants.

Registrants (donors, hospitals, ambulance owners) are not Django auth
users, but they share Django's hashers and password validation
framework.  The policy is configured in ``AUTH_PASSWORD_VALIDATORS``:
at least six characters with at least one letter and one digit.
"""
import re

from django.contrib.auth.hashers import check_password, make_password
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError

_LETTER = re.compile(r'[A-Za-z]')
_DIGIT = re.compile(r'[0-9]')


class LetterAndDigitValidator:
    """Require at least one ASCII letter and one digit."""

    def validate(self, password, user=None):
        if not _LETTER.search(password or '') or not _DIGIT.search(password or ''):
            raise DjangoValidationError(
                'Password must contain both letters and numbers',
                code='password_letters_and_digits',
            )

    def get_help_text(self):
        return 'Your password must contain both letters and numbers.'


def policy_errors(password):
    """Return the list of policy messages ``password`` violates."""
    if not password:
        return ['Password is required']
    try:
        validate_password(password)
    except DjangoValidationError as e:
        return list(e.messages)
    return []


def hash_password(password):
    return make_password(password)


def verify_password(password, digest):
    if not password or not digest:
        return False
    return check_password(password, digest)
