"""Tests for configuration loading and logging setup."""

import logging

import pytest

from sprint_engine.config import CONFIG_ENV_VAR, EngineConfig, load_config
from sprint_engine.logging_config import LOGGER_NAME, setup_logging
from sprint_engine.workflow.exceptions import ValidationError


class TestLoadConfig:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        config = load_config()
        assert config == EngineConfig()
        assert config.velocity_sprint_count == 6
        assert config.wip_limits == {"in_progress": 5, "in_review": 3, "in_testing": 3}

    def test_yaml_values(self, tmp_path):
        path = tmp_path / "engine.yaml"
        path.write_text("velocity_sprint_count: 3\nbehind_deviation: -20\nlog_level: DEBUG\n")
        config = load_config(path)
        assert config.velocity_sprint_count == 3
        assert config.behind_deviation == -20
        assert config.log_level == "DEBUG"
        assert config.max_capacity == 500

    def test_env_var(self, tmp_path, monkeypatch):
        path = tmp_path / "engine.yaml"
        path.write_text("workload_top_n: 4\n")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(path))
        assert load_config().workload_top_n == 4

    def test_empty_file(self, tmp_path):
        path = tmp_path / "engine.yaml"
        path.write_text("")
        assert load_config(path) == EngineConfig()

    def test_partial_wip_limits_merge(self, tmp_path):
        path = tmp_path / "engine.yaml"
        path.write_text("wip_limits:\n  in_progress: 2\n  todo: 10\n")
        config = load_config(path)
        assert config.wip_limits == {"in_progress": 2, "in_review": 3, "in_testing": 3, "todo": 10}

    def test_unknown_key(self, tmp_path):
        path = tmp_path / "engine.yaml"
        path.write_text("velocity_count: 3\n")
        with pytest.raises(ValidationError) as exc:
            load_config(path)
        assert exc.value.field == "velocity_count"

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "engine.yaml"
        path.write_text("- one\n- two\n")
        with pytest.raises(ValidationError):
            load_config(path)


class TestLogging:
    def test_console_only(self):
        logger = setup_logging("warning")
        assert logger.name == LOGGER_NAME
        assert len(logger.handlers) == 1
        assert logger.handlers[0].level == logging.WARNING

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "engine.log"
        logger = setup_logging("INFO", log_file)
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 2

        logging.getLogger("sprint_engine.test").debug("written to file")
        for handler in logger.handlers:
            handler.flush()
        assert "written to file" in log_file.read_text()
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()

    def test_repeat_call_replaces_handlers(self):
        setup_logging("INFO")
        logger = setup_logging("INFO")
        assert len(logger.handlers) == 1

    def test_unknown_level_falls_back(self):
        logger = setup_logging("chatty")
        assert logger.handlers[0].level == logging.INFO
