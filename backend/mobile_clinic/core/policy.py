"""Authorization seam.

Handlers declare the action they perform; the policy stored on
``app.state.authorization_policy`` decides whether the caller's identity may
perform it. The shipped policy allows every action.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional


@dataclass(frozen=True)
class Identity:
    id: Optional[int]
    username: str

    @property
    def is_anonymous(self) -> bool:
        return self.id is None


ANONYMOUS = Identity(id=None, username="public")

AuthorizationPolicy = Callable[[Identity, str], bool]


def allow_all(identity: Identity, action: str) -> bool:
    return True


def deny_anonymous_writes(identity: Identity, action: str) -> bool:
    if action.endswith(".read"):
        return True
    return not identity.is_anonymous
