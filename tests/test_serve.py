"""Tests for the process entrypoint, logging setup and debugger probe."""

import logging
import os
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

from app import serve
from app.core import config as config_module
from app.core.config import LoggingSettings
from app.core.debugger import is_debugger_attached
from app.core.logging import configure_logging


class _EntrypointTestCase(unittest.TestCase):
    """Isolates host settings from the real environment and .env file."""

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.tmp_path = Path(self._tmp.name)
        config_module.get_host_settings.cache_clear()
        self.addCleanup(config_module.get_host_settings.cache_clear)
        # configure_logging touches the root logger; restore it afterwards.
        root = logging.getLogger()
        saved_handlers, saved_level = list(root.handlers), root.level

        def _restore() -> None:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)

        self.addCleanup(_restore)

    def environ(self, **overrides: str) -> dict[str, str]:
        env = {
            "APP_ENV": "prod",
            "APP_SETTINGS_FILE": str(self.tmp_path / "appsettings.json"),
            "STATIC_DIR": str(self.tmp_path / "wwwroot"),
        }
        env.update(overrides)
        return env


class TestServeMain(_EntrypointTestCase):
    """main() resolves settings before serving and exits 1 on failure."""

    def test_missing_settings_file_exits_nonzero(self) -> None:
        with patch.dict(os.environ, self.environ(), clear=True), patch.object(
            serve.uvicorn, "run"
        ) as run:
            self.assertEqual(serve.main(), 1)
        run.assert_not_called()

    def test_malformed_settings_file_exits_nonzero(self) -> None:
        (self.tmp_path / "appsettings.json").write_text("{not json", encoding="utf-8")
        with patch.dict(os.environ, self.environ(), clear=True), patch.object(
            serve.uvicorn, "run"
        ) as run:
            self.assertEqual(serve.main(), 1)
        run.assert_not_called()

    def test_missing_index_document_exits_nonzero(self) -> None:
        (self.tmp_path / "appsettings.json").write_text("{}", encoding="utf-8")
        (self.tmp_path / "wwwroot").mkdir()
        with patch.dict(os.environ, self.environ(), clear=True), patch.object(
            serve.uvicorn, "run"
        ) as run:
            self.assertEqual(serve.main(), 1)
        run.assert_not_called()

    def test_valid_configuration_runs_server(self) -> None:
        (self.tmp_path / "appsettings.json").write_text(
            '{"AppSettings": {"EnableHttpsRedirect": false}}', encoding="utf-8"
        )
        static_dir = self.tmp_path / "wwwroot"
        static_dir.mkdir()
        (static_dir / "index.html").write_text("<html></html>", encoding="utf-8")
        run = MagicMock()
        with patch.dict(os.environ, self.environ(PORT="8081"), clear=True), patch.object(
            serve.uvicorn, "run", run
        ):
            self.assertEqual(serve.main(), 0)
        run.assert_called_once()
        application = run.call_args.args[0]
        self.assertFalse(application.state.settings.app_settings.enable_https_redirect)
        self.assertEqual(run.call_args.kwargs["port"], 8081)


class TestConfigureLogging(_EntrypointTestCase):
    """configure_logging applies the LogLevel map and does not stack handlers."""

    def test_applies_levels(self) -> None:
        configure_logging(
            LoggingSettings(log_level={"default": "Warning", "spa.test": "Debug"})
        )
        self.assertEqual(logging.getLogger().level, logging.WARNING)
        self.assertEqual(logging.getLogger("spa.test").level, logging.DEBUG)

    def test_repeated_calls_replace_handler(self) -> None:
        before = len(logging.getLogger().handlers)
        configure_logging(LoggingSettings())
        configure_logging(LoggingSettings())
        self.assertEqual(len(logging.getLogger().handlers), before + 1)


class TestDebuggerProbe(unittest.TestCase):
    """is_debugger_attached reflects an installed trace function."""

    def test_trace_function_counts_as_debugger(self) -> None:
        with patch.object(sys, "gettrace", return_value=lambda *args: None):
            self.assertTrue(is_debugger_attached())

    def test_no_trace_and_no_monitoring_tool(self) -> None:
        monitoring = MagicMock()
        monitoring.get_tool.return_value = None
        with patch.object(sys, "gettrace", return_value=None), patch.object(
            sys, "monitoring", monitoring, create=True
        ):
            self.assertFalse(is_debugger_attached())

    def test_monitoring_debugger_slot(self) -> None:
        monitoring = MagicMock()
        monitoring.get_tool.return_value = "debugpy"
        with patch.object(sys, "gettrace", return_value=None), patch.object(
            sys, "monitoring", monitoring, create=True
        ):
            self.assertTrue(is_debugger_attached())


if __name__ == "__main__":
    unittest.main()
