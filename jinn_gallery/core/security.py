import hashlib
import hmac
import secrets

# scrypt parameters; 64-byte key, stored as "<hex hash>.<hex salt>"
_N, _R, _P, _DKLEN = 16384, 8, 1, 64


def _derive(password: str, salt: str) -> bytes:
    return hashlib.scrypt(password.encode(), salt=salt.encode(), n=_N, r=_R, p=_P, dklen=_DKLEN)


def hash_password(password: str) -> str:
    salt = secrets.token_hex(16)
    return f"{_derive(password, salt).hex()}.{salt}"


def verify_password(supplied: str, stored: str) -> bool:
    try:
        hashed, salt = stored.split(".", 1)
        expected = bytes.fromhex(hashed)
    except ValueError:
        return False
    return hmac.compare_digest(expected, _derive(supplied, salt))
