import hashlib
import secrets

MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_LENGTH = 128


def hash_password(raw_password: str) -> str:
    """Return salted SHA256 hash for a raw password."""

    salt = secrets.token_hex(16)
    digest = hashlib.sha256(f"{salt}{raw_password}".encode("utf-8")).hexdigest()
    return f"{salt}${digest}"


def verify_password(raw_password: str, stored_hash: str) -> bool:
    try:
        salt, checksum = stored_hash.split("$", 1)
    except ValueError:
        return False
    digest = hashlib.sha256(f"{salt}{raw_password}".encode("utf-8")).hexdigest()
    return secrets.compare_digest(digest, checksum)


def validate_password(raw_password: str) -> list[str]:
    """Return the list of unmet strength rules (empty when the password is acceptable)."""
    errors: list[str] = []
    if len(raw_password) < MIN_PASSWORD_LENGTH:
        errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if len(raw_password) > MAX_PASSWORD_LENGTH:
        errors.append(f"Password must be at most {MAX_PASSWORD_LENGTH} characters long")
    if not any(char.isalpha() for char in raw_password):
        errors.append("Password must contain at least one letter")
    if not any(char.isdigit() for char in raw_password):
        errors.append("Password must contain at least one digit")
    return errors
