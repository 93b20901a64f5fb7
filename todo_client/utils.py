"""String helpers for generating test data."""

from __future__ import annotations

import random
import string

_ALLOWED_CHARS = string.ascii_letters + string.digits


def generate_random_string(length: int = 10) -> str:
    """Return a random string of ASCII letters and digits of the given length."""
    return "".join(random.choices(_ALLOWED_CHARS, k=length))
