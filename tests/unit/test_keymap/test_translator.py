"""Tests for the key substitution table."""

from __future__ import annotations

import json
from pathlib import Path

from keyrelay.keymap.store import StateStore
from keyrelay.keymap.translator import KeyTranslator, parse_mapping_text


class TestParseMappingText:
    def test_pairs(self) -> None:
        assert parse_mapping_text("a=b,c=d") == [("a", "b"), ("c", "d")]

    def test_drops_pieces_without_single_equals(self) -> None:
        assert parse_mapping_text("a=b,cd,e=f=g,h=i") == [("a", "b"), ("h", "i")]

    def test_keeps_length_checks_for_remap(self) -> None:
        assert parse_mapping_text("ab=c") == [("ab", "c")]

    def test_empty(self) -> None:
        assert parse_mapping_text("") == []


class TestTranslate:
    def test_unmapped_returns_none(self) -> None:
        assert KeyTranslator().translate("x") is None

    def test_initial_mappings(self) -> None:
        t = KeyTranslator({"a": "z", "1": "!"})
        assert t.translate("a") == "z"
        assert t.translate("1") == "!"
        assert len(t) == 2

    def test_initial_mappings_skip_invalid(self) -> None:
        t = KeyTranslator({"a": "z", "bad": "x", "c": ""})
        assert t.mappings == {"a": "z"}

    def test_mappings_is_snapshot(self) -> None:
        t = KeyTranslator({"a": "z"})
        snapshot = t.mappings
        snapshot["b"] = "y"
        assert t.translate("b") is None


class TestRemap:
    def test_valid_pairs_translate(self) -> None:
        t = KeyTranslator()
        t.remap([("a", "b"), ("c", "d")])
        assert t.translate("a") == "b"
        assert t.translate("c") == "d"

    def test_later_pair_overwrites(self) -> None:
        t = KeyTranslator({"a": "b"})
        t.remap([("a", "x"), ("a", "y")])
        assert t.translate("a") == "y"

    def test_invalid_pairs_leave_other_keys(self) -> None:
        t = KeyTranslator({"a": "b", "m": "n"})
        result = t.remap([("ab", "c"), ("c", ""), ("", "q"), ("x", "yy"), ("k", "l")])
        assert result == {"a": "b", "m": "n", "k": "l"}

    def test_malformed_entries_skipped(self) -> None:
        t = KeyTranslator()
        t.remap([("a",), None, ("b", "c", "d"), ("e", "f")])  # type: ignore[list-item]
        assert t.mappings == {"e": "f"}

    def test_idempotent(self) -> None:
        t = KeyTranslator()
        batch = [("a", "z"), ("q", "w")]
        first = t.remap(batch)
        second = t.remap(batch)
        assert first == second == {"a": "z", "q": "w"}

    def test_accepts_generator(self) -> None:
        t = KeyTranslator()
        t.remap((c, c.upper()) for c in "abc")
        assert t.mappings == {"a": "A", "b": "B", "c": "C"}


class TestPersistence:
    def test_remap_persists(self, store: StateStore, state_path: Path) -> None:
        t = KeyTranslator(store=store)
        t.remap([("a", "z")])
        data = json.loads(state_path.read_text())
        assert data["KeyMappings"] == {"a": "z"}

    def test_round_trip_through_store(self, store: StateStore) -> None:
        KeyTranslator(store=store).remap([("a", "z"), ("\u00e9", "e")])
        reloaded = KeyTranslator.from_state(store.load_or_default(), store)
        assert reloaded.translate("a") == "z"
        assert reloaded.translate("\u00e9") == "e"

    def test_persist_keeps_last_used_address(self, store: StateStore) -> None:
        state = store.load_or_default()
        state.last_used_ip_address = "10.0.0.9"
        store.save(state)
        KeyTranslator(store=store).remap([("a", "z")])
        assert store.load().last_used_ip_address == "10.0.0.9"

    def test_invalid_batch_still_persists_existing(self, store: StateStore) -> None:
        t = KeyTranslator({"a": "z"}, store=store)
        t.remap([("bad", "pair")])
        assert store.load().key_mappings == {"a": "z"}
