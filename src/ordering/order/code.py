"""Public order codes: six decimal digits, never starting with zero."""

import re
import secrets

ORDER_CODE_PATTERN = re.compile(r"^[1-9][0-9]{5}$")


def generate_order_code() -> str:
    return str(100_000 + secrets.randbelow(900_000))


def is_order_code(value: str) -> bool:
    return bool(ORDER_CODE_PATTERN.match(value))
