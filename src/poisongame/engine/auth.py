"""Caller authentication for match operations.

Every mutating operation runs inside a CallContext that lists the
authorizations its caller presented. The transport layer (web session,
signed start intent, test harness) is responsible for establishing those
authorizations; the engine only checks that the right ones are present.

Two checks are available:
- require_auth(address): the address authorized this call at all
- require_auth_for_args(address, args): the address authorized this call
  with exactly these arguments. Used where a signed intent must not be
  replayed against a different session or wager amount.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable


class AuthorizationError(Exception):
    """Raised when a required authorization is missing."""

    def __init__(self, address: str, args: tuple | None = None) -> None:
        if args is None:
            message = f"Missing authorization for {address}"
        else:
            message = f"Missing authorization for {address} with args {args!r}"
        super().__init__(message)
        self.address = address
        self.args_required = args


@dataclass(frozen=True)
class Authorization:
    """A statement that ``address`` approves the current call.

    Attributes:
        address: Identity giving the approval
        args: Exact arguments approved, or None for approval of any arguments
    """

    address: str
    args: tuple[Any, ...] | None = None


@dataclass
class CallContext:
    """Authorizations presented with a single call."""

    authorizations: list[Authorization] = field(default_factory=list)

    @classmethod
    def for_caller(cls, address: str) -> CallContext:
        """Context for a caller authenticated without argument scoping."""
        return cls([Authorization(address)])

    @classmethod
    def from_authorizations(cls, authorizations: Iterable[Authorization]) -> CallContext:
        return cls(list(authorizations))

    def require_auth(self, address: str) -> None:
        """Require any authorization from ``address``."""
        if not any(auth.address == address for auth in self.authorizations):
            raise AuthorizationError(address)

    def require_auth_for_args(self, address: str, args: tuple[Any, ...]) -> None:
        """Require an authorization from ``address`` scoped to exactly ``args``.

        An unscoped authorization does not satisfy this check.
        """
        args = tuple(args)
        for auth in self.authorizations:
            if auth.address == address and auth.args == args:
                return
        raise AuthorizationError(address, args)
