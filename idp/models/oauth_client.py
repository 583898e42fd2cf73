from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class OAuthClient:
    id: str
    authorized_domains: tuple[str, ...]  # exact-match redirect URI allow-list

    def allows_redirect(self, redirect_uri: str) -> bool:
        # Byte-exact membership: no prefix, substring or normalization.
        return any(redirect_uri == uri for uri in self.authorized_domains)
