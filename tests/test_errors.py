"""Tests for the error taxonomy."""

import pytest

from poisongame.errors import (
    ALL_ERRORS,
    InvalidProof,
    MatchNotFound,
    NotAdmin,
    PoisonGameError,
    error_from_code,
)


class TestErrorCodes:
    """Stable codes let clients rebuild errors without class identity."""

    def test_codes_are_one_to_thirteen(self):
        assert sorted(cls.code for cls in ALL_ERRORS) == list(range(1, 14))

    def test_every_error_is_a_poison_game_error(self):
        assert all(issubclass(cls, PoisonGameError) for cls in ALL_ERRORS)

    def test_error_from_code(self):
        error = error_from_code(8, "bad proof")
        assert isinstance(error, InvalidProof)
        assert error.message == "bad proof"

    def test_unknown_code(self):
        with pytest.raises(ValueError, match="Unknown error code"):
            error_from_code(99)

    def test_default_message(self):
        error = NotAdmin()
        assert error.message == NotAdmin.default_message
        assert str(error) == NotAdmin.default_message

    def test_to_dict(self):
        assert MatchNotFound("no session 4").to_dict() == {
            "error": "MatchNotFound",
            "code": 1,
            "message": "no session 4",
        }
