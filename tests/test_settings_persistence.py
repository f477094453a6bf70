"""Unit tests for header/footer settings persistence."""

import json
import os
import shutil
import tempfile
import unittest
from pathlib import Path

from pageflow.model import HeaderFooterConfig
from pageflow.settings_persistence import SettingsPersistence, UNTITLED_KEY, get_persistence


class TestSettingsPersistence(unittest.TestCase):
    """Test settings persistence functionality."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = os.path.realpath(tempfile.mkdtemp())
        self.persistence = SettingsPersistence(config_dir=Path(self.temp_dir))
        self.test_doc_path = os.path.join(self.temp_dir, "brief.txt")

    def tearDown(self):
        """Clean up test fixtures."""
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)

    def test_save_and_load_settings(self):
        settings = {"header_text": "Exhibit A", "show_page_numbers": False}
        self.assertTrue(self.persistence.save_settings(self.test_doc_path, settings))
        self.assertEqual(self.persistence.load_settings(self.test_doc_path), settings)

    def test_load_nonexistent_document(self):
        self.assertEqual(self.persistence.load_settings("/nonexistent/document.txt"), {})

    def test_untitled_document_has_its_own_entry(self):
        """Unsaved documents share one settings entry."""
        self.persistence.save_settings(None, {"header_text": "Draft"})
        self.assertEqual(self.persistence.load_settings(None), {"header_text": "Draft"})
        with open(self.persistence.settings_file, encoding="utf-8") as f:
            self.assertIn(UNTITLED_KEY, json.load(f))

    def test_relative_and_absolute_paths_match(self):
        cwd = os.getcwd()
        try:
            os.chdir(self.temp_dir)
            self.persistence.save_settings("brief.txt", {"header_text": "H"})
        finally:
            os.chdir(cwd)
        self.assertEqual(self.persistence.load_settings(self.test_doc_path), {"header_text": "H"})

    def test_persists_across_instances(self):
        self.persistence.save_settings(self.test_doc_path, {"footer_template": "{page}"})
        fresh = SettingsPersistence(config_dir=Path(self.temp_dir))
        self.assertEqual(fresh.load_settings(self.test_doc_path), {"footer_template": "{page}"})

    def test_corrupted_settings_file(self):
        Path(self.temp_dir).mkdir(exist_ok=True)
        self.persistence.settings_file.write_text("{ not json", encoding="utf-8")
        self.assertEqual(self.persistence.load_settings(self.test_doc_path), {})

    def test_non_dict_settings_file(self):
        self.persistence.settings_file.write_text("[1, 2, 3]", encoding="utf-8")
        self.assertEqual(self.persistence.load_settings(self.test_doc_path), {})

    def test_save_failure_returns_false(self):
        blocker = Path(self.temp_dir) / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        persistence = SettingsPersistence(config_dir=blocker / "config")
        self.assertFalse(persistence.save_settings(self.test_doc_path, {"header_text": "H"}))

    def test_validate_setting(self):
        self.assertTrue(self.persistence.validate_setting("header_text", "Exhibit"))
        self.assertFalse(self.persistence.validate_setting("header_text", 3))
        self.assertTrue(self.persistence.validate_setting("footer_template", "Page {page}"))
        self.assertTrue(self.persistence.validate_setting("show_page_numbers", True))
        self.assertFalse(self.persistence.validate_setting("show_page_numbers", "yes"))
        self.assertTrue(self.persistence.validate_setting("show_page_numbers", None))
        self.assertTrue(self.persistence.validate_setting("unknown", 42))

    def test_header_footer_round_trip(self):
        config = HeaderFooterConfig("Exhibit A", "Page {page} of 3", False)
        self.assertTrue(self.persistence.save_header_footer(self.test_doc_path, config))
        self.persistence.clear_cache()
        self.assertEqual(self.persistence.load_header_footer(self.test_doc_path), config)

    def test_header_footer_defaults(self):
        self.assertEqual(self.persistence.load_header_footer(self.test_doc_path),
                         HeaderFooterConfig())

    def test_invalid_values_fall_back_to_defaults(self):
        self.persistence.save_settings(self.test_doc_path, {
            "header_text": "Kept",
            "footer_template": 12,
            "show_page_numbers": "no",
        })
        config = self.persistence.load_header_footer(self.test_doc_path)
        self.assertEqual(config, HeaderFooterConfig(header_text="Kept"))

    def test_save_header_footer_keeps_other_settings(self):
        self.persistence.save_settings(self.test_doc_path, {"zoom": 2})
        self.persistence.save_header_footer(self.test_doc_path, HeaderFooterConfig("H"))
        settings = self.persistence.load_settings(self.test_doc_path)
        self.assertEqual(settings["zoom"], 2)
        self.assertEqual(settings["header_text"], "H")


def test_get_persistence_is_singleton():
    assert get_persistence() is get_persistence()
