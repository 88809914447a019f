"""Tests for config file parsing."""

from taskpad.config import Config, load_config


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_config(tmp_path / "nope.conf") == Config()

    def test_parses_values(self, tmp_path):
        conf = tmp_path / "taskpad.conf"
        conf.write_text(
            "# taskpad settings\n"
            "DATA_DIR = ~/tasks\n"
            'DEFAULT_PRIORITY = "High" # quoted with comment\n'
            "strict_projects = yes\n"
            "log_level = info\n"
        )
        config = load_config(conf)
        assert config.data_dir == "~/tasks"
        assert config.default_priority == "High"
        assert config.strict_projects is True
        assert config.log_level == "INFO"

    def test_unquoted_inline_comment_stripped(self, tmp_path):
        conf = tmp_path / "taskpad.conf"
        conf.write_text("default_priority = Low # everything is low\n")
        assert load_config(conf).default_priority == "Low"

    def test_false_values(self, tmp_path):
        conf = tmp_path / "taskpad.conf"
        conf.write_text("strict_projects = off\n")
        assert load_config(conf).strict_projects is False

    def test_ignores_unknown_keys_and_junk(self, tmp_path):
        conf = tmp_path / "taskpad.conf"
        conf.write_text("colour = blue\nnot a setting\n\ndata_dir='/srv/tasks'\n")
        config = load_config(conf)
        assert config.data_dir == "/srv/tasks"
        assert config.default_priority == "Medium"
