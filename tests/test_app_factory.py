"""
Tests for application startup.
"""
import importlib
import logging
import sys

from stylerewards import create_app


class TestCreateApp:

    def test_testing_config(self):
        app = create_app('testing')
        assert app.config['TESTING'] is True
        assert app.config['DEFAULT_POINTS_PER_DOLLAR'] == 10

    def test_test_config_overrides(self):
        app = create_app('testing', test_config={'STATS_CACHE_TIMEOUT': 5})
        assert app.config['STATS_CACHE_TIMEOUT'] == 5


class TestEntryPoint:

    def test_startup_logged_not_printed(self, monkeypatch, caplog, capsys):
        """run.py reports readiness through logging."""
        monkeypatch.setenv('FLASK_ENV', 'testing')
        monkeypatch.delitem(sys.modules, 'run', raising=False)
        caplog.set_level(logging.INFO, logger='stylerewards.run')

        run = importlib.import_module('run')

        assert run.app.config['TESTING'] is True
        assert 'StyleRewards ready' in caplog.text
        assert capsys.readouterr().out == ''
