"""
Security utilities: password hashing, JWT tokens, Fernet encryption, and
card fingerprints.

1. PASSWORD HASHING (Argon2)
   - Passwords are never stored in plaintext
   - passlib's CryptContext with the argon2 scheme (Argon2id)

2. JWT TOKENS
   - After login the user receives a signed JWT whose "sub" claim is the user ID
   - Signed with SECRET_KEY using HS256, expires after ACCESS_TOKEN_EXPIRE_MINUTES

3. FERNET ENCRYPTION (AES-128-CBC + HMAC-SHA256)
   - Encrypts card numbers and CVVs at rest
   - Key comes from CARD_ENCRYPTION_KEY, never hardcoded

4. CARD FINGERPRINTS (HMAC-SHA256)
   - Fernet ciphertexts are randomized, so two encryptions of the same
     card number never compare equal. A keyed hash gives a stable value
     to put a UNIQUE constraint on without storing the number in the clear.
"""

import hashlib
import hmac
from datetime import datetime, timedelta, timezone

from cryptography.fernet import Fernet
from jose import jwt
from passlib.context import CryptContext

from pitaka.config import settings


# ---------------------------------------------------------------------------
# 1. Password Hashing (Argon2)
# ---------------------------------------------------------------------------

# deprecated="auto" lets passlib re-hash old schemes transparently on login
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(plain_password: str) -> str:
    """
    Hash a plaintext password using Argon2id.

    Args:
        plain_password: The password from the signup form.

    Returns:
        The encoded Argon2 hash, salt and parameters included.
    """
    return pwd_context.hash(plain_password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plaintext password against a stored Argon2 hash (constant time).

    Args:
        plain_password: The password from the login form.
        hashed_password: User.hashed_password.

    Returns:
        Whether they match.
    """
    return pwd_context.verify(plain_password, hashed_password)


# ---------------------------------------------------------------------------
# 2. JWT Tokens
# ---------------------------------------------------------------------------


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """
    Create a signed JWT access token.

    Args:
        data: Dictionary of claims to encode (must include "sub").
        expires_delta: Optional custom expiration time. Defaults to
                       ACCESS_TOKEN_EXPIRE_MINUTES from settings.

    Returns:
        An encoded JWT string.
    """
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )

    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict:
    """
    Decode and verify a JWT access token.

    Returns:
        The claims; "sub" holds the user id.

    Raises:
        JWTError: If the token is expired, tampered with, or invalid.
    """
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])


# ---------------------------------------------------------------------------
# 3. Fernet Encryption (for card data at rest)
# ---------------------------------------------------------------------------

_fernet = Fernet(settings.CARD_ENCRYPTION_KEY.encode())


def encrypt_value(plaintext: str) -> bytes:
    """
    Encrypt a card number or CVV with the CARD_ENCRYPTION_KEY.

    Args:
        plaintext: The digits to protect.

    Returns:
        Fernet token bytes for a LargeBinary column.
    """
    return _fernet.encrypt(plaintext.encode())


def decrypt_value(ciphertext: bytes) -> str:
    """
    Decrypt a Fernet-encrypted value back to plaintext.

    Args:
        ciphertext: Bytes written by encrypt_value().

    Returns:
        The original string.

    Raises:
        cryptography.fernet.InvalidToken: If the data is corrupted or
            the encryption key doesn't match.
    """
    return _fernet.decrypt(ciphertext).decode()


# ---------------------------------------------------------------------------
# 4. Card fingerprints
# ---------------------------------------------------------------------------


def card_fingerprint(card_number: str) -> str:
    """
    Keyed SHA-256 digest of a card number, hex encoded.

    Fernet output is randomized, so the fingerprint is what the unique
    constraint on saved cards compares.

    Args:
        card_number: Digits only, no spaces.

    Returns:
        64 hex characters.
    """
    return hmac.new(
        settings.SECRET_KEY.encode(),
        card_number.encode(),
        hashlib.sha256,
    ).hexdigest()
