"""Character substitution table applied to host keystrokes.

The translator maps one input character to one output character. It is
loaded once at startup from the state store and only changes through
:meth:`KeyTranslator.remap`, which persists the table after every call.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from keyrelay.domain.models import SavedState
from keyrelay.keymap.store import StateStore

logger = logging.getLogger(__name__)


def _is_char(value: object) -> bool:
    return isinstance(value, str) and len(value) == 1


def parse_mapping_text(text: str) -> list[tuple[str, str]]:
    """Split ``"a=b,c=d"`` into ``[("a", "b"), ("c", "d")]``.

    Pieces that do not contain exactly one ``=`` are dropped. Length
    checks are left to :meth:`KeyTranslator.remap`.
    """
    pairs: list[tuple[str, str]] = []
    for piece in text.split(","):
        parts = piece.split("=")
        if len(parts) == 2:
            pairs.append((parts[0], parts[1]))
    return pairs


class KeyTranslator:
    """Input character -> output character lookup.

    Usage::

        translator = KeyTranslator.from_state(store.load_or_default(), store)
        translator.remap([("a", "z")])
        translator.translate("a")  # "z"
        translator.translate("x")  # None
    """

    def __init__(
        self,
        mappings: Mapping[str, str] | None = None,
        store: StateStore | None = None,
    ) -> None:
        self._mappings: dict[str, str] = {}
        self._store = store
        for key, value in (mappings or {}).items():
            if _is_char(key) and _is_char(value):
                self._mappings[key] = value
            else:
                logger.warning("Skipping invalid key mapping %r -> %r", key, value)

    @classmethod
    def from_state(cls, state: SavedState, store: StateStore | None = None) -> KeyTranslator:
        logger.info("Loading %d key mapping(s)", len(state.key_mappings))
        return cls(state.key_mappings, store=store)

    @property
    def mappings(self) -> dict[str, str]:
        return dict(self._mappings)

    def __len__(self) -> int:
        return len(self._mappings)

    def translate(self, char: str) -> str | None:
        """Return the mapped character, or None when ``char`` is unmapped."""
        return self._mappings.get(char)

    def remap(self, batch: Iterable[tuple[str, str]]) -> dict[str, str]:
        """Apply a batch of (input, output) pairs and persist the result.

        Pairs where either side is not exactly one character are
        discarded; the rest of the batch is still applied.

        Returns:
            A snapshot of the mapping after the batch.
        """
        applied = 0
        for pair in batch:
            try:
                source, target = pair
            except (TypeError, ValueError):
                logger.debug("Discarding malformed mapping entry %r", pair)
                continue
            if not (_is_char(source) and _is_char(target)):
                logger.debug("Discarding mapping %r -> %r", source, target)
                continue
            self._mappings[source] = target
            applied += 1

        self._persist()
        logger.info("Applied %d key mapping(s), %d total", applied, len(self._mappings))
        return self.mappings

    def _persist(self) -> None:
        if self._store is None:
            return
        state = self._store.load_or_default()
        state.key_mappings = dict(self._mappings)
        self._store.save(state)
        logger.info("Key mappings saved to %s", self._store.path)
