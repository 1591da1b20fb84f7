"""
tests/test_auth_service.py -- Sign-in and sign-up flows.

Coverage:
  - sign-up creates a verifiable argon2id account
  - duplicate email / username reported on the right field (email first)
  - a lost uniqueness race still reports the conflicting field
  - storage failures become AccountNotCreated without leaking the cause
  - sign-in: wrong password, unknown user, and hash-less account are
    indistinguishable and each runs exactly one argon2 verification
"""

from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

import auth.service as service
from auth.models import User
from auth.passwords import DUMMY_HASH, verify_password
from auth.service import authenticate_user, register_user
from auth.store import UserStore
from core.errors import AccountNotCreated, EmailTaken, InvalidCredentials, UsernameTaken


class TestRegisterUser:
    def test_creates_account_with_argon2id_hash(self, user_store: UserStore):
        user = register_user(user_store, "alice", "alice@example.com", "pw123456")
        assert len(user.id) == 16
        assert user.hashed_password.startswith("$argon2id$")
        assert user.hashed_password != "pw123456"

        stored = user_store.get_by_username("alice")
        assert stored.id == user.id
        assert verify_password(stored.hashed_password, "pw123456")

    def test_duplicate_email_reports_email(self, user_store: UserStore):
        register_user(user_store, "alice", "alice@example.com", "pw123456")
        with pytest.raises(EmailTaken) as excinfo:
            register_user(user_store, "alice2", "alice@example.com", "pw123456")
        assert excinfo.value.fields == {"email": ["E-mail already exists."]}

    def test_duplicate_username_reports_username(self, user_store: UserStore):
        register_user(user_store, "alice", "alice@example.com", "pw123456")
        with pytest.raises(UsernameTaken) as excinfo:
            register_user(user_store, "alice", "other@example.com", "pw123456")
        assert excinfo.value.fields == {"username": ["Username already taken."]}

    def test_email_conflict_wins_over_username_conflict(self, user_store: UserStore):
        register_user(user_store, "alice", "alice@example.com", "pw123456")
        with pytest.raises(EmailTaken):
            register_user(user_store, "alice", "alice@example.com", "pw123456")

    def test_lost_race_reports_the_conflicting_field(self, user_store: UserStore, monkeypatch):
        register_user(user_store, "alice", "alice@example.com", "pw123456")
        real_lookup = user_store.get_by_username
        calls = []

        def racing_lookup(username: str):
            # First lookup is the pre-check, which the other request beat.
            calls.append(username)
            return None if len(calls) == 1 else real_lookup(username)

        monkeypatch.setattr(user_store, "get_by_username", racing_lookup)
        with pytest.raises(UsernameTaken):
            register_user(user_store, "alice", "fresh@example.com", "pw123456")
        assert len(calls) == 2

    def test_integrity_error_without_visible_conflict(self, user_store: UserStore, monkeypatch):
        def failing_insert(user: User) -> None:
            raise IntegrityError("INSERT INTO users", {}, Exception("constraint failed"))

        monkeypatch.setattr(user_store, "create_user", failing_insert)
        with pytest.raises(AccountNotCreated):
            register_user(user_store, "alice", "alice@example.com", "pw123456")

    def test_storage_failure_is_generic(self, user_store: UserStore, monkeypatch):
        def failing_insert(user: User) -> None:
            raise OperationalError("INSERT INTO users", {}, Exception("disk I/O error"))

        monkeypatch.setattr(user_store, "create_user", failing_insert)
        with pytest.raises(AccountNotCreated) as excinfo:
            register_user(user_store, "alice", "alice@example.com", "pw123456")
        assert excinfo.value.message == "Could not create account. Try again."
        assert "disk" not in str(excinfo.value)
        assert excinfo.value.fields == {}
        assert user_store.get_by_username("alice") is None


class TestAuthenticateUser:
    def test_correct_credentials_return_user(self, user_store: UserStore):
        created = register_user(user_store, "alice", "alice@example.com", "pw123456")
        user = authenticate_user(user_store, "alice", "pw123456")
        assert user.id == created.id

    def test_wrong_password(self, user_store: UserStore):
        register_user(user_store, "alice", "alice@example.com", "pw123456")
        with pytest.raises(InvalidCredentials):
            authenticate_user(user_store, "alice", "wrongpass")

    def test_username_is_case_sensitive(self, user_store: UserStore):
        register_user(user_store, "alice", "alice@example.com", "pw123456")
        with pytest.raises(InvalidCredentials):
            authenticate_user(user_store, "Alice", "pw123456")

    def test_failures_are_indistinguishable(self, user_store: UserStore):
        register_user(user_store, "alice", "alice@example.com", "pw123456")
        user_store.create_user(User(id="nohash", username="carol", email="carol@example.com"))

        errors = []
        for username, password in [("alice", "wrongpass"), ("nobody", "pw123456"), ("carol", "pw123456")]:
            with pytest.raises(InvalidCredentials) as excinfo:
                authenticate_user(user_store, username, password)
            errors.append((excinfo.value.code, excinfo.value.message, excinfo.value.fields))

        assert errors[0] == errors[1] == errors[2]
        assert errors[0] == (
            "bad_credentials",
            "Incorrect username or password.",
            {"password": ["Incorrect username or password."]},
        )

    @pytest.mark.parametrize("username", ["nobody", "carol"])
    def test_missing_hash_still_runs_one_verification(self, user_store: UserStore, monkeypatch, username):
        user_store.create_user(User(id="nohash", username="carol", email="carol@example.com"))
        seen = []

        def spy(hashed, plain):
            seen.append(hashed)
            return False

        monkeypatch.setattr(service, "verify_password", spy)
        with pytest.raises(InvalidCredentials):
            authenticate_user(user_store, username, "pw123456")
        assert seen == [DUMMY_HASH]
