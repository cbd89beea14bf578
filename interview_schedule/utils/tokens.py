# Public schedule tokens: 32 random bytes, hex encoded.

import re
import secrets

TOKEN_BYTES = 32

_TOKEN_RE = re.compile(r"^[a-f0-9]{64}$")


def generate_schedule_token() -> str:
    return secrets.token_hex(TOKEN_BYTES)


def is_valid_token_format(token: str | None) -> bool:
    if not token:
        return False
    return bool(_TOKEN_RE.match(token))
