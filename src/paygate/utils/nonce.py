import secrets
import string
import time

_ALPHABET = string.ascii_letters + string.digits


def new_nonce(length: int = 32) -> str:
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


def unix_timestamp() -> str:
    return str(int(time.time()))
