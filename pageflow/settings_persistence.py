"""Settings persistence for per-document header and footer preferences.

This module provides persistent storage for header text, footer template and
the page-number toggle, indexed by document path. Settings are stored in an
OS-appropriate location and survive application restarts. Documents that
have not been saved yet share one entry.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import platformdirs

from .model import HeaderFooterConfig

logger = logging.getLogger(__name__)

# Key used for documents without a path
UNTITLED_KEY = "<untitled>"

HEADER_TEXT = "header_text"
FOOTER_TEMPLATE = "footer_template"
SHOW_PAGE_NUMBERS = "show_page_numbers"


class SettingsPersistence:
    """Manages persistent storage of per-document settings.

    Settings are stored in a JSON file in the user's config directory,
    indexed by the absolute path of the document being edited.
    """

    def __init__(self, config_dir: Optional[Path] = None):
        """Initialize settings persistence.

        Args:
            config_dir: Directory for the settings file; defaults to the
                platform config directory.
        """
        if config_dir is None:
            config_dir = Path(platformdirs.user_config_dir("pageflow"))
        self._config_dir = Path(config_dir)
        self._settings_file = self._config_dir / "settings.json"
        self._settings_cache: Optional[Dict[str, Dict[str, Any]]] = None

    @property
    def settings_file(self) -> Path:
        return self._settings_file

    def _ensure_config_dir(self) -> None:
        """Ensure the config directory exists."""
        try:
            self._config_dir.mkdir(parents=True, exist_ok=True)
        except (OSError, PermissionError) as e:
            logger.warning(f"Could not create config directory {self._config_dir}: {e}")

    def _load_all_settings(self) -> Dict[str, Dict[str, Any]]:
        """Load all settings from disk.

        Returns:
            Dictionary mapping document keys to their settings.
            Returns empty dict if file doesn't exist or can't be read.
        """
        if self._settings_cache is not None:
            return self._settings_cache

        if not self._settings_file.exists():
            self._settings_cache = {}
            return self._settings_cache

        try:
            with open(self._settings_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Could not load settings from {self._settings_file}: {e}")
            self._settings_cache = {}
            return self._settings_cache

        if not isinstance(data, dict):
            logger.warning("Settings file has invalid format (not a dict), ignoring")
            data = {}
        self._settings_cache = data
        return self._settings_cache

    def _save_all_settings(self, settings: Dict[str, Dict[str, Any]]) -> bool:
        """Save all settings to disk atomically.

        Args:
            settings: Dictionary mapping document keys to their settings.

        Returns:
            True if save was successful, False otherwise.
        """
        self._ensure_config_dir()
        temp_file = self._settings_file.with_suffix('.tmp')

        try:
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump(settings, f, indent=2)
            temp_file.replace(self._settings_file)
            self._settings_cache = settings
            return True

        except OSError as e:
            logger.warning(f"Could not save settings to {self._settings_file}: {e}")
            try:
                if temp_file.exists():
                    temp_file.unlink()
            except OSError:
                pass
            return False

    def _document_key(self, document_path: Optional[str]) -> Optional[str]:
        if document_path is None:
            return UNTITLED_KEY
        try:
            return os.path.abspath(document_path)
        except (OSError, ValueError):
            logger.warning(f"Invalid document path: {document_path}")
            return None

    def load_settings(self, document_path: Optional[str]) -> Dict[str, Any]:
        """Load settings for a specific document.

        Args:
            document_path: Path to the document, or None for an unsaved one.

        Returns:
            Dictionary of settings for the document. Empty dict if no
            settings exist or the path is invalid.
        """
        key = self._document_key(document_path)
        if key is None:
            return {}

        doc_settings = self._load_all_settings().get(key, {})
        if not isinstance(doc_settings, dict):
            logger.warning(f"Settings for {key} are not a dict, ignoring")
            return {}

        return doc_settings.copy()

    def save_settings(self, document_path: Optional[str], settings: Dict[str, Any]) -> bool:
        """Save settings for a specific document.

        Args:
            document_path: Path to the document, or None for an unsaved one.
            settings: Dictionary of settings to save.

        Returns:
            True if save was successful, False otherwise.
        """
        key = self._document_key(document_path)
        if key is None:
            return False

        all_settings = dict(self._load_all_settings())
        all_settings[key] = settings
        return self._save_all_settings(all_settings)

    def validate_setting(self, key: str, value: Any) -> bool:
        """Validate a setting value.

        Args:
            key: Setting key name.
            value: Setting value to validate.

        Returns:
            True if setting is valid, False otherwise.
        """
        if value is None:
            return True  # None is valid (means "not set")

        if key in (HEADER_TEXT, FOOTER_TEMPLATE):
            return isinstance(value, str)

        if key == SHOW_PAGE_NUMBERS:
            return isinstance(value, bool)

        # Unknown settings are considered valid (forward compatibility)
        return True

    def load_header_footer(self, document_path: Optional[str]) -> HeaderFooterConfig:
        """Load the header/footer configuration for a document.

        Invalid or missing values fall back to the defaults.
        """
        settings = self.load_settings(document_path)
        defaults = HeaderFooterConfig()
        values = {}
        for key, default in defaults.to_dict().items():
            value = settings.get(key)
            if value is None or not self.validate_setting(key, value):
                if value is not None:
                    logger.warning(f"Ignoring invalid value for {key}: {value!r}")
                value = default
            values[key] = value
        return HeaderFooterConfig(**values)

    def save_header_footer(self, document_path: Optional[str],
                           config: HeaderFooterConfig) -> bool:
        """Save the header/footer configuration for a document."""
        settings = self.load_settings(document_path)
        settings.update(config.to_dict())
        return self.save_settings(document_path, settings)

    def clear_cache(self) -> None:
        """Clear the in-memory cache of settings."""
        self._settings_cache = None


# Global instance
_persistence: Optional[SettingsPersistence] = None


def get_persistence() -> SettingsPersistence:
    """Get the global settings persistence instance.

    Returns:
        The singleton SettingsPersistence instance.
    """
    global _persistence
    if _persistence is None:
        _persistence = SettingsPersistence()
    return _persistence
