"""
auth/passwords.py -- Password hashing (argon2id via argon2-cffi).

Security design decisions:
  Algorithm: argon2id with fixed cost parameters (19 MiB memory, 2 passes,
       1 lane, 32-byte digest, 16-byte salt). Memory hardness makes offline
       GPU attacks expensive while a single hash stays in the tens of
       milliseconds on a server core.

  Format: PasswordHasher.hash() returns a PHC string
       ($argon2id$v=19$m=19456,t=2,p=1$<salt>$<digest>). Algorithm, parameters
       and salt travel with the digest, so verification needs nothing else
       and a future parameter change does not break existing hashes.

  Fail closed: verify_password() returns False for a missing, empty or
       malformed hash and never raises. A NULL hash is never a match.

  Timing: DUMMY_HASH lets sign-in run one full verification even when the
       username does not exist, so response time does not reveal which
       usernames are registered.

Hashing is CPU and memory bound. Callers on the request path must run it
off the event loop (sync FastAPI handlers already run on the thread pool).
"""

from __future__ import annotations

from argon2 import PasswordHasher, Type
from argon2.exceptions import InvalidHashError, VerificationError

MEMORY_COST_KIB = 19456
TIME_COST = 2
PARALLELISM = 1
HASH_LEN = 32
SALT_LEN = 16

_hasher = PasswordHasher(
    time_cost=TIME_COST,
    memory_cost=MEMORY_COST_KIB,
    parallelism=PARALLELISM,
    hash_len=HASH_LEN,
    salt_len=SALT_LEN,
    type=Type.ID,
)


def hash_password(plain: str) -> str:
    """Return a salted argon2id PHC string for plain. Non-deterministic per call."""
    return _hasher.hash(plain)


def verify_password(hashed: str | None, plain: str) -> bool:
    """Return True if plain matches hashed; False on mismatch or bad input."""
    if not hashed:
        return False
    try:
        return _hasher.verify(hashed, plain)
    except (VerificationError, InvalidHashError):
        return False


# Computed once at import so the first unknown-username sign-in is not
# measurably slower than the ones after it.
DUMMY_HASH: str = hash_password("postboard-timing-equalizer")
