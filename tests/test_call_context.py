"""Tests for poisongame.engine.auth."""

import pytest

from poisongame.engine.auth import Authorization, AuthorizationError, CallContext


class TestCallContext:
    """Tests for authorization checks."""

    def test_require_auth(self):
        ctx = CallContext.for_caller("alice")
        ctx.require_auth("alice")
        with pytest.raises(AuthorizationError) as exc_info:
            ctx.require_auth("bob")
        assert exc_info.value.address == "bob"
        assert exc_info.value.args_required is None

    def test_scoped_authorization_also_satisfies_require_auth(self):
        ctx = CallContext.from_authorizations([Authorization("alice", (1, 10))])
        ctx.require_auth("alice")

    def test_require_auth_for_args_exact_match(self):
        ctx = CallContext.from_authorizations([Authorization("alice", (1, 10))])
        ctx.require_auth_for_args("alice", (1, 10))
        ctx.require_auth_for_args("alice", [1, 10])

        with pytest.raises(AuthorizationError, match=r"\(1, 11\)"):
            ctx.require_auth_for_args("alice", (1, 11))

    def test_unscoped_does_not_satisfy_scoped_check(self):
        ctx = CallContext.for_caller("alice")
        with pytest.raises(AuthorizationError):
            ctx.require_auth_for_args("alice", (1, 10))
