from __future__ import annotations

import uuid

import pytest

from mc_console_client.players import PlayerRegistry

A = uuid.UUID(int=1)
B = uuid.UUID(int=2)


def test_first_seen_name_wins() -> None:
    registry = PlayerRegistry()
    registry.apply_add(A, "x")
    registry.apply_add(A, "renamed")
    assert dict(registry.snapshot()) == {A: "x"}


def test_removing_absent_player_is_noop() -> None:
    registry = PlayerRegistry()
    registry.apply_add(A, "x")
    registry.apply_remove(B)
    assert dict(registry.snapshot()) == {A: "x"}


def test_snapshot_after_add_add_remove() -> None:
    registry = PlayerRegistry()
    registry.apply_add(A, "x")
    registry.apply_add(B, "y")
    registry.apply_remove(A)
    assert dict(registry.snapshot()) == {B: "y"}
    assert len(registry) == 1
    assert B in registry and A not in registry


def test_snapshot_is_read_only_and_detached() -> None:
    registry = PlayerRegistry()
    registry.apply_add(A, "x")
    snapshot = registry.snapshot()
    with pytest.raises(TypeError):
        snapshot[B] = "y"  # type: ignore[index]
    registry.apply_remove(A)
    assert dict(snapshot) == {A: "x"}
