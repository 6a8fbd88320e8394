import pytest

from match_insight.config import Settings


def test_defaults_when_environment_is_empty():
    settings = Settings.from_env({})

    assert settings.llm_model == "gpt-4o-2024-08-06"
    assert settings.llm_fallback_models == ()
    assert settings.provider_timeout_seconds == 10.0
    assert settings.llm_timeout_seconds == 120.0
    assert settings.fixture_refresh_seconds == 900.0
    assert settings.max_workers == 8
    assert settings.log_level == "INFO"


def test_values_are_read_from_environment():
    settings = Settings.from_env(
        {
            "SOCCER_API_KEY": " token ",
            "OPENAI_API_KEY": "sk-test",
            "LLM_FALLBACK_MODELS": "gpt-4o-mini, ,gpt-4.1-mini",
            "PROVIDER_TIMEOUT_SECONDS": "2.5",
            "AGGREGATION_MAX_WORKERS": "3",
            "DATABASE_PATH": "/tmp/predictions.sqlite",
            "LOG_LEVEL": "debug",
        }
    )

    assert settings.soccer_api_key == "token"
    assert settings.llm_api_key == "sk-test"
    assert settings.llm_fallback_models == ("gpt-4o-mini", "gpt-4.1-mini")
    assert settings.provider_timeout_seconds == 2.5
    assert settings.max_workers == 3
    assert settings.database_path == "/tmp/predictions.sqlite"
    assert settings.log_level == "DEBUG"


def test_from_env_reads_os_environ(monkeypatch):
    monkeypatch.setenv("LLM_MODEL", "gpt-4o-mini")

    assert Settings.from_env().llm_model == "gpt-4o-mini"


@pytest.mark.parametrize(
    "name, value",
    [
        ("PROVIDER_TIMEOUT_SECONDS", "soon"),
        ("FIXTURE_REFRESH_SECONDS", "-1"),
        ("AGGREGATION_MAX_WORKERS", "2.5"),
        ("AGGREGATION_MAX_WORKERS", "0"),
    ],
)
def test_invalid_numbers_name_the_variable(name, value):
    with pytest.raises(ValueError, match=name):
        Settings.from_env({name: value})
