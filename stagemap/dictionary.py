"""
Translation lookup for editor texts.

Keys are dotted paths such as 'l10n.unnamedStage'. Texts can be overridden
from a YAML file with the same nesting:

    l10n:
      unnamedStage: Namenlose Station
      contentRequired: Bitte einen Inhalt wählen.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

logger = logging.getLogger(__name__)

DEFAULT_TEXTS = {
    "l10n.unnamedStage": "Unnamed stage",
    "l10n.contentRequired": "Please choose content for this stage.",
    "l10n.confirmationDialogRemoveHeader": "Remove stage",
    "l10n.confirmationDialogRemoveDialog": "Are you sure you want to remove this stage?",
    "l10n.confirmationDialogRemoveCancel": "Cancel",
    "l10n.confirmationDialogRemoveConfirm": "Remove stage",
    "l10n.noNeighbors": "There are no other stages to connect to.",
}


def flatten_texts(data: Dict[str, Any], prefix: str = "") -> Dict[str, str]:
    """Flatten nested mappings into dotted keys."""
    flat = {}
    for key, value in data.items():
        dotted = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, dict):
            flat.update(flatten_texts(value, dotted))
        elif value is not None:
            flat[dotted] = str(value)
    return flat


class Dictionary:
    """Key -> display text lookup with built-in English defaults."""

    def __init__(self, texts: Optional[Dict[str, Any]] = None):
        self._texts: Dict[str, str] = dict(DEFAULT_TEXTS)
        if texts:
            self.update(texts)

    def update(self, texts: Dict[str, Any]) -> None:
        self._texts.update(flatten_texts(texts))

    def get(self, key: str) -> str:
        """Text for `key`; unknown keys come back unchanged so gaps stay visible."""
        if key not in self._texts:
            logger.debug(f"No text for key '{key}'")
            return key
        return self._texts[key]

    def __contains__(self, key: str) -> bool:
        return key in self._texts

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "Dictionary":
        """
        Load texts from a YAML file on top of the defaults.

        A missing or unreadable file logs a warning and yields the defaults.
        """
        path = Path(path)
        dictionary = cls()
        if not path.exists():
            logger.warning(f"Dictionary file {path} not found, using default texts")
            return dictionary
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (yaml.YAMLError, OSError) as e:
            logger.warning(f"Failed to load dictionary from {path}: {e}")
            return dictionary
        if not isinstance(data, dict):
            logger.warning(f"Dictionary file {path} must contain a mapping, using default texts")
            return dictionary
        dictionary.update(data)
        return dictionary
