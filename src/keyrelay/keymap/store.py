"""JSON persistence for the key mappings and the last-used host address."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from keyrelay.domain.models import SavedState
from keyrelay.errors import StateStoreError

logger = logging.getLogger(__name__)

DEFAULT_STATE_PATH = Path("program.settings")


class StateStore:
    """Reads and writes :class:`SavedState` as an indented JSON object.

    A missing file is not an error: ``load()`` returns None and the
    caller falls back to defaults.
    """

    def __init__(self, path: Path | str = DEFAULT_STATE_PATH) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> SavedState | None:
        """Load persisted state, or None if the file does not exist."""
        logger.debug("Loading state from %s", self._path)
        if not self._path.exists():
            return None
        try:
            raw = self._path.read_text(encoding="utf-8")
            data = json.loads(raw) if raw.strip() else {}
            return SavedState.model_validate(data or {})
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            raise StateStoreError(f"Cannot read state file {self._path}: {e}") from e

    def load_or_default(self) -> SavedState:
        return self.load() or SavedState()

    def save(self, state: SavedState) -> None:
        """Write the state, replacing any previous file."""
        logger.debug("Saving state to %s", self._path)
        payload = state.model_dump_json(by_alias=True, indent=2)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(payload, encoding="utf-8")
        except OSError as e:
            raise StateStoreError(f"Cannot write state file {self._path}: {e}") from e
