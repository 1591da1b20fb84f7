"""
auth/service.py -- Sign-in and sign-up flows.

Both functions take already-validated form values (core/forms.py) and a
UserStore, do blocking work (argon2, database), and either return the User
or raise a core.errors.FormError. Session issuance is left to the caller so
the flows stay free of transport concerns.

Sign-in [non-enumeration]:
  Unknown username, account without a password hash, and wrong password all
  end in the same InvalidCredentials error, and all three run exactly one
  argon2 verification (against DUMMY_HASH when there is no real hash), so
  neither the message nor the latency says whether the username exists.

Sign-up [uniqueness]:
  The email and username pre-checks only exist to produce a friendly field
  error. The UNIQUE constraints are authoritative: when the INSERT loses a
  race, the checks are re-run against storage to name the conflicting field.

Layer rule: no imports from api/, web/, or posts/.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from auth.models import User
from auth.passwords import DUMMY_HASH, hash_password, verify_password
from auth.store import UserStore
from auth.tokens import RECORD_ID_ENTROPY, generate_id
from core.errors import AccountNotCreated, EmailTaken, InvalidCredentials, UsernameTaken

logger = logging.getLogger("postboard.auth")


def authenticate_user(store: UserStore, username: str, password: str) -> User:
    """Return the User whose credentials match, or raise InvalidCredentials."""
    user = store.get_by_username(username)
    if user is None or user.hashed_password is None:
        # Equalize timing -- do NOT return before running argon2
        verify_password(DUMMY_HASH, password)
        logger.info("Sign-in rejected")
        raise InvalidCredentials()
    if not verify_password(user.hashed_password, password):
        logger.info("Sign-in rejected")
        raise InvalidCredentials()
    return user


def _raise_if_taken(store: UserStore, username: str, email: str) -> None:
    # Email is checked before username so the reported field is deterministic.
    if store.get_by_email(email) is not None:
        raise EmailTaken()
    if store.get_by_username(username) is not None:
        raise UsernameTaken()


def register_user(store: UserStore, username: str, email: str, password: str) -> User:
    """Create a password account and return it.

    Raises EmailTaken / UsernameTaken on a uniqueness conflict (pre-check or
    storage constraint) and AccountNotCreated on any other storage failure.
    """
    _raise_if_taken(store, username, email)

    user = User(
        id=generate_id(RECORD_ID_ENTROPY),
        username=username,
        email=email,
        hashed_password=hash_password(password),
    )
    try:
        store.create_user(user)
    except IntegrityError as exc:
        logger.info("Sign-up lost a uniqueness race for %r", username)
        try:
            _raise_if_taken(store, username, email)
        except SQLAlchemyError:
            logger.exception("Could not re-check uniqueness after IntegrityError")
        raise AccountNotCreated() from exc
    except SQLAlchemyError as exc:
        logger.exception("Could not insert user %r", username)
        raise AccountNotCreated() from exc

    logger.info("User %s signed up as %r", user.id, username)
    return user
