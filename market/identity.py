"""
Bidirectional correlation between remote product identifiers and the small
numeric aliases dashboards work with.

Aliases are handed out once per remote identifier and kept for the whole
session, so refetching the catalog never renumbers products.
"""

from collections.abc import Iterable


class IdentityMap:
    def __init__(self):
        self._alias_by_remote: dict[str, int] = {}
        self._remote_by_alias: dict[int, str] = {}
        self._last_alias = 0

    def __len__(self) -> int:
        return len(self._alias_by_remote)

    def __contains__(self, alias: object) -> bool:
        return alias in self._remote_by_alias

    def alias_for(self, remote_id: str) -> int:
        """Alias of ``remote_id``, assigning the next free one on first sight."""
        alias = self._alias_by_remote.get(remote_id)
        if alias is None:
            alias = self._next_free(self._last_alias + 1)
            self._bind(alias, remote_id)
        return alias

    def remote_id_for(self, alias: int) -> str | None:
        return self._remote_by_alias.get(alias)

    def reserve(self, alias: int) -> None:
        """Keep ``alias`` (held by a product with no remote row) from being reassigned."""
        self._last_alias = max(self._last_alias, alias)

    def next_local_alias(self, existing: Iterable[int]) -> int:
        """One past the largest alias in ``existing`` (0 if empty), skipping bound aliases."""
        alias = self._next_free(max(existing, default=0) + 1)
        self.reserve(alias)
        return alias

    def forget(self, alias: int) -> None:
        remote_id = self._remote_by_alias.pop(alias, None)
        if remote_id is not None:
            del self._alias_by_remote[remote_id]

    def _bind(self, alias: int, remote_id: str) -> None:
        self._alias_by_remote[remote_id] = alias
        self._remote_by_alias[alias] = remote_id
        self.reserve(alias)

    def _next_free(self, candidate: int) -> int:
        while candidate in self._remote_by_alias:
            candidate += 1
        return candidate
