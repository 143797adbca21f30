"""Online player roster kept from player_info packets."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from types import MappingProxyType

log = logging.getLogger(__name__)


class PlayerRegistry:
    """Maps player UUIDs to the display name they were first seen with."""

    def __init__(self) -> None:
        self._players: dict[uuid.UUID, str] = {}

    def __len__(self) -> int:
        return len(self._players)

    def __contains__(self, player_id: object) -> bool:
        return player_id in self._players

    def apply_add(self, player_id: uuid.UUID, name: str) -> None:
        """Record *player_id* unless it is already known (first name wins)."""
        if player_id in self._players:
            return
        self._players[player_id] = name
        log.debug(f"Player added: {name} ({player_id})")

    def apply_remove(self, player_id: uuid.UUID) -> None:
        """Forget *player_id*; unknown IDs are ignored."""
        name = self._players.pop(player_id, None)
        if name is not None:
            log.debug(f"Player removed: {name} ({player_id})")

    def snapshot(self) -> Mapping[uuid.UUID, str]:
        """Read-only copy of the current roster."""
        return MappingProxyType(dict(self._players))
