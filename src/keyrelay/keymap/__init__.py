"""Key substitution table and its on-disk persistence.

Public API:
    KeyTranslator -- Input char -> output char lookup
    StateStore -- JSON state file (mappings + last-used address)
    parse_mapping_text -- Parse the ``a=b,c=d`` command syntax
"""

from keyrelay.keymap.store import StateStore
from keyrelay.keymap.translator import KeyTranslator, parse_mapping_text

__all__ = ["KeyTranslator", "StateStore", "parse_mapping_text"]
