"""Password hashing helpers (argon2 through passlib's CryptContext)."""

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

# Hashed once at import so every unknown-email sign-in costs exactly one verify
_DUMMY_HASH = pwd_context.hash("mesto-timing-equalizer")


def hash_password(password: str) -> str:
    """Return a salted one-way hash of `password`."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check `plain_password` against a stored hash in constant time."""
    return pwd_context.verify(plain_password, hashed_password)


def burn_verification() -> None:
    """
    Run one throwaway verification.

    Sign-in calls this when the email is unknown so that response time does
    not tell an attacker whether an account exists.
    """
    pwd_context.verify("not-the-password", _DUMMY_HASH)
