"""
tests/test_reset.py -- Unit tests for the admin-code-gated password reset flow.

Covers:
  - existence is checked before the admin code, for both operations
  - wrong admin code on an existing user
  - reset round trip: new password verifies, old password no longer does
  - reset re-checks independently of any earlier check
  - an empty new password or an unset ADMIN_CODE never writes
"""

from __future__ import annotations

import logging

import pytest

from auth.errors import VerificationError, VerificationFailure
from auth.reset import check_reset_eligibility, reset_password
from auth.tokens import verify_credentials
from core.config import get_settings

ADMIN_CODE = "667"  # set by conftest.py


class TestCheckResetEligibility:
    def test_unknown_user(self, store) -> None:
        outcome = check_reset_eligibility(store, "bob", ADMIN_CODE)
        assert outcome.success is False
        assert outcome.exists is False
        assert outcome.message == "Username doesn't exist"

    def test_unknown_user_takes_precedence_over_wrong_code(self, store) -> None:
        outcome = check_reset_eligibility(store, "bob", "wrong")
        assert outcome.message == "Username doesn't exist"

    def test_wrong_admin_code(self, store) -> None:
        outcome = check_reset_eligibility(store, "alice", "666")
        assert outcome.success is False
        assert outcome.exists is True
        assert outcome.authorized is False
        assert outcome.message == "Wrong admin code"

    def test_wrong_admin_code_is_logged_at_info(self, store, caplog) -> None:
        with caplog.at_level(logging.INFO, logger="authgate.auth"):
            check_reset_eligibility(store, "alice", "666")
        records = [r for r in caplog.records if "wrong admin code" in r.getMessage()]
        assert [r.levelno for r in records] == [logging.INFO]
        assert "666" not in caplog.text

    def test_empty_admin_code_is_wrong(self, store) -> None:
        assert check_reset_eligibility(store, "alice", "").message == "Wrong admin code"

    def test_code_match_is_exact(self, store) -> None:
        assert check_reset_eligibility(store, "alice", ADMIN_CODE + " ").success is False

    def test_correct_admin_code(self, store) -> None:
        outcome = check_reset_eligibility(store, "alice", ADMIN_CODE)
        assert outcome.success is True
        assert outcome.exists and outcome.authorized
        assert outcome.message == "User found, admin code verified."

    def test_check_does_not_modify_password(self, store) -> None:
        check_reset_eligibility(store, "alice", ADMIN_CODE)
        assert verify_credentials(store, "alice", "hunter2").username == "alice"


class TestResetPassword:
    def test_round_trip(self, store) -> None:
        outcome = reset_password(store, "alice", ADMIN_CODE, "new-secret")
        assert outcome.success is True
        assert outcome.message == "Password updated successfully!"

        assert verify_credentials(store, "alice", "new-secret").username == "alice"
        with pytest.raises(VerificationError) as exc_info:
            verify_credentials(store, "alice", "hunter2")
        assert exc_info.value.failure is VerificationFailure.INVALID_CREDENTIALS

    def test_stored_hash_is_not_plaintext(self, store) -> None:
        reset_password(store, "alice", ADMIN_CODE, "new-secret")
        stored = store.get_by_username("alice").password_hash
        assert stored and "new-secret" not in stored

    def test_unknown_user(self, store) -> None:
        outcome = reset_password(store, "bob", ADMIN_CODE, "x")
        assert outcome.success is False
        assert outcome.message == "Username doesn't exist"
        assert store.get_by_username("bob") is None

    def test_unknown_user_takes_precedence_over_wrong_code(self, store) -> None:
        assert reset_password(store, "bob", "wrong", "x").message == "Username doesn't exist"

    def test_wrong_admin_code_leaves_hash_untouched(self, store) -> None:
        before = store.get_by_username("alice").password_hash
        outcome = reset_password(store, "alice", "666", "new-secret")
        assert outcome.success is False
        assert outcome.message == "Wrong admin code"
        assert store.get_by_username("alice").password_hash == before

    def test_reset_without_prior_check(self, store) -> None:
        assert reset_password(store, "dave", ADMIN_CODE, "battery-staple").success is True
        assert verify_credentials(store, "dave", "battery-staple").username == "dave"

    def test_prior_check_does_not_authorize_reset(self, store) -> None:
        assert check_reset_eligibility(store, "alice", ADMIN_CODE).success is True
        assert reset_password(store, "alice", "wrong", "new-secret").message == "Wrong admin code"

    def test_repairs_record_without_hash(self, store) -> None:
        assert reset_password(store, "nohash", ADMIN_CODE, "fixed").success is True
        assert verify_credentials(store, "nohash", "fixed").username == "nohash"

    def test_empty_new_password_is_refused(self, store) -> None:
        before = store.get_by_username("alice").password_hash
        outcome = reset_password(store, "alice", ADMIN_CODE, "")
        assert outcome.success is False
        assert outcome.exists is True
        assert outcome.authorized is True
        assert outcome.message == "New password is required"
        assert store.get_by_username("alice").password_hash == before


def test_unset_admin_code_disables_resets(store, monkeypatch) -> None:
    disabled = get_settings().model_copy(update={"admin_code": ""})
    monkeypatch.setattr("auth.reset.get_settings", lambda: disabled)

    assert check_reset_eligibility(store, "alice", "").message == "Wrong admin code"
    assert reset_password(store, "alice", "", "new-secret").message == "Wrong admin code"
    assert verify_credentials(store, "alice", "hunter2").username == "alice"
