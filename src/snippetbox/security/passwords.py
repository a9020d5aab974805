"""Password hashing with argon2id.

Hashes are PHC-format strings (``$argon2id$v=19$m=...``) safe to store
as-is. Hashing is deliberately slow, so async callers run these
functions on a worker thread (see ``snippetbox.models.users``).

Usage::

    from snippetbox.security.passwords import hash_password, verify_password

    hashed = hash_password("my-password")
    ok = verify_password("my-password", hashed)
"""

from argon2 import PasswordHasher
from argon2.exceptions import VerifyMismatchError

# PasswordHasher is thread-safe and carries no per-call state.
_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    """Hash *password* with argon2id.

    Raises:
        ValueError: If *password* is empty.
    """
    if not password:
        msg = "Password must not be empty."
        raise ValueError(msg)
    return _hasher.hash(password)


def verify_password(password: str, phc_hash: str) -> bool:
    """Check *password* against a stored hash.

    Returns ``False`` on mismatch. A stored value that is not an argon2
    hash at all raises ``argon2.exceptions.InvalidHashError``; that is
    corrupt data, not a wrong password.
    """
    if not password:
        return False
    try:
        return _hasher.verify(phc_hash, password)
    except VerifyMismatchError:
        return False


def needs_rehash(phc_hash: str) -> bool:
    """True when *phc_hash* was made with weaker parameters than the current ones."""
    return _hasher.check_needs_rehash(phc_hash)
