"""Tests for the YAML application config."""

from pathlib import Path

from classroom.config.app_config import DB_PATH_ENV, load_app_config


def write_config(root: Path, text: str) -> None:
    config_dir = root / "data" / "config"
    config_dir.mkdir(parents=True)
    (config_dir / "classroom_v1.yaml").write_text(text, encoding="utf-8")


class TestLoadAppConfig:
    """Loading, defaults and overrides."""

    def test_defaults_without_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv(DB_PATH_ENV, raising=False)
        config = load_app_config()

        assert config.quiz.feedback_seconds == 2.0
        assert config.llm.model == "gpt-4"
        assert config.db_path == Path("db/classroom.db")

    def test_partial_file_merges_with_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        write_config(tmp_path, "quiz:\n  feedback_seconds: 0.5\nllm:\n  model: local-model\n")
        config = load_app_config()

        assert config.quiz.feedback_seconds == 0.5
        assert config.llm.model == "local-model"
        assert config.llm.temperature == 0.7

    def test_cached_until_reload(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        first = load_app_config()
        write_config(tmp_path, "quiz:\n  feedback_seconds: 1\n")

        assert load_app_config() is first
        assert load_app_config(force_reload=True).quiz.feedback_seconds == 1.0

    def test_env_overrides_db_path(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv(DB_PATH_ENV, str(tmp_path / "other.db"))
        assert load_app_config().db_path == tmp_path / "other.db"

    def test_api_key_from_env(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        assert load_app_config().llm.get_api_key() == "sk-test"
