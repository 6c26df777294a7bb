from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import jwt
from passlib.context import CryptContext
import hashlib

DEFAULT_ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_HOURS = 24


def build_password_context(rounds: Optional[int] = None) -> CryptContext:
    """Create the bcrypt context; ``rounds`` None keeps passlib's default cost"""
    options = {
        "schemes": ["bcrypt"],
        "deprecated": "auto",
        # bcrypt 4.x compatibility: explicitly handle password length
        "bcrypt__ident": "2b",
    }
    if rounds is not None:
        options["bcrypt__rounds"] = rounds
    return CryptContext(**options)


pwd_context = build_password_context()


def configure_password_hashing(rounds: Optional[int] = None) -> None:
    """Rebuild the module context with the configured cost factor"""
    global pwd_context
    pwd_context = build_password_context(rounds)


BCRYPT_MAX_BYTES = 72


def _prepare_password(senha: str) -> str:
    """
    bcrypt ignores everything past 72 bytes, so longer passwords are
    reduced to their SHA-256 hex digest (64 ASCII bytes) before hashing.
    """
    raw = senha.encode("utf-8")
    if len(raw) > BCRYPT_MAX_BYTES:
        return hashlib.sha256(raw).hexdigest()
    return senha


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash (constant-time comparison inside bcrypt)"""
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(_prepare_password(plain_password), hashed_password)
    except ValueError:
        # stored value is not a recognised hash
        return False


def get_password_hash(password: str) -> str:
    """Generate password hash"""
    return pwd_context.hash(_prepare_password(password))


def create_access_token(
    data: dict,
    secret_key: str,
    expires_delta: Optional[timedelta] = None,
    algorithm: str = DEFAULT_ALGORITHM,
) -> str:
    """Create JWT access token"""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(hours=ACCESS_TOKEN_EXPIRE_HOURS)

    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, secret_key, algorithm=algorithm)
    return encoded_jwt


def decode_access_token(token: str, secret_key: str, algorithm: str = DEFAULT_ALGORITHM) -> dict:
    """Verify signature and expiry; raises jose.JWTError on any failure.

    Only ``algorithm`` is accepted, so a token whose header names another
    algorithm (``none``, RS256 with the secret as public key, ...) is rejected.
    """
    return jwt.decode(token, secret_key, algorithms=[algorithm])
