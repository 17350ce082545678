"""
auth/sessions.py -- Server-side refresh token registry.

A session is the refresh token stored on the user row. There is exactly one
per user: establish() overwrites whatever was stored, so every login or
registration invalidates the previous refresh token. revoke() clears it.

No compare-and-swap: two concurrent logins for the same user each write their
own token and the last write wins.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

from auth.models import TokenPair, User
from auth.store import UserStore
from auth.tokens import TokenIssuer


class SessionRegistry:
    def __init__(self, store: UserStore, issuer: TokenIssuer) -> None:
        self.store = store
        self.issuer = issuer

    def establish(self, user: User) -> TokenPair:
        """Issue a fresh token pair and persist its refresh token.

        Raises TokenIssuanceError if signing fails (nothing is written in that
        case). Persistence errors propagate unchanged.
        """
        tokens = self.issuer.issue_pair(user)
        self.store.set_refresh_token(user.id, tokens.refresh_token)
        return tokens

    def revoke(self, user_id: int) -> None:
        """Clear the stored refresh token. Revoking twice is not an error."""
        self.store.clear_refresh_token(user_id)
