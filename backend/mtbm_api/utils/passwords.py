"""Password and one-time code hashing"""
import hashlib
import secrets

from passlib.context import CryptContext


pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a password against its bcrypt hash; malformed hashes never match"""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        return False


def generate_numeric_code(length: int = 6) -> str:
    """Cryptographically random zero-padded numeric code"""
    return str(secrets.randbelow(10 ** length)).zfill(length)


def hash_code(code: str) -> str:
    """SHA-256 digest used to store reset codes"""
    return hashlib.sha256(code.encode("utf-8")).hexdigest()
