import os
import shutil
import tempfile
import unittest
from unittest.mock import patch

from feeds_tui import config


class TestConfigLoading(unittest.TestCase):
    def setUp(self):
        self.test_dir = tempfile.mkdtemp()
        self.config_path = os.path.join(self.test_dir, ".config/feeds/config.json")

    def tearDown(self):
        shutil.rmtree(self.test_dir)

    def test_default_config_is_created(self):
        loaded = config.load_config(self.config_path)

        self.assertTrue(os.path.exists(self.config_path))
        self.assertEqual(loaded["mode"], "all")
        self.assertIn("statusbar_keybindings", loaded["ui"])

    def test_saved_config_round_trips(self):
        config.save_config({"mode": "starred"}, self.config_path)
        self.assertEqual(config.load_config(self.config_path), {"mode": "starred"})

    def test_corrupt_config_returns_empty(self):
        os.makedirs(os.path.dirname(self.config_path))
        with open(self.config_path, "w") as f:
            f.write("{oops")
        self.assertEqual(config.load_config(self.config_path), {})

    @patch("feeds_tui.config.logging.basicConfig")
    def test_setup_logging_without_debug(self, mock_basic_config):
        self.assertIsNone(config.setup_logging(False))
        mock_basic_config.assert_called_once()

    @patch("feeds_tui.config.logging.basicConfig")
    def test_setup_logging_with_debug_returns_path(self, mock_basic_config):
        path = config.setup_logging(True)
        self.assertTrue(path.startswith("/tmp/feeds_debug_"))
        self.assertEqual(mock_basic_config.call_args.kwargs["filename"], path)


if __name__ == "__main__":
    unittest.main()
