import pytest
from fastapi.testclient import TestClient
from pydantic import ValidationError as SettingsValidationError

from compliance_coach.core.config import Settings
from compliance_coach.core.constants import Environment
from compliance_coach.core.errors import ConfigurationError
from compliance_coach.main import create_app, main


def test_defaults():
    settings = Settings(_env_file=None)

    assert settings.PORT == 5000
    assert settings.RATE_LIMIT == 100
    assert settings.RATE_LIMIT_WINDOW_SECONDS == 900
    assert settings.UPSTREAM_TIMEOUT == 30
    assert settings.UPSTREAM_MAX_ATTEMPTS == 1
    assert settings.ENVIRONMENT is Environment.DEVELOPMENT
    assert settings.api_key_configured is False
    assert settings.cors_origins == ["*"]


def test_environment_from_node_env(monkeypatch):
    monkeypatch.setenv("NODE_ENV", "Production")
    monkeypatch.setenv("AZURE_OPENAI_KEY", "abc")
    monkeypatch.setenv("RATE_LIMIT", "25")

    settings = Settings(_env_file=None)

    assert settings.is_production
    assert settings.RATE_LIMIT == 25
    assert settings.AZURE_OPENAI_KEY.get_secret_value() == "abc"
    assert "abc" not in repr(settings)


def test_allowed_origins_list():
    settings = Settings(_env_file=None, ALLOWED_ORIGINS="https://a.example, ,https://b.example")

    assert settings.cors_origins == ["https://a.example", "https://b.example"]


def test_rejects_unknown_log_level():
    with pytest.raises(SettingsValidationError):
        Settings(_env_file=None, LOG_LEVEL="chatty")


def test_startup_check(make_settings):
    make_settings(ENVIRONMENT="production").check_startup()
    make_settings(AZURE_OPENAI_KEY=None).check_startup()

    with pytest.raises(ConfigurationError):
        make_settings(ENVIRONMENT="production", AZURE_OPENAI_KEY="  ").check_startup()


def test_app_refuses_to_start_in_production_without_key(make_settings):
    app = create_app(make_settings(ENVIRONMENT="production", AZURE_OPENAI_KEY=None))

    with pytest.raises(ConfigurationError):
        with TestClient(app):
            pass


def test_main_exits_before_binding(mocker, make_settings):
    mocker.patch(
        "compliance_coach.main.get_settings",
        return_value=make_settings(ENVIRONMENT="production", AZURE_OPENAI_KEY=None),
    )
    mocker.patch("compliance_coach.main.install_excepthook")
    run = mocker.patch("compliance_coach.main.uvicorn.run")

    with pytest.raises(SystemExit) as exc:
        main()

    assert exc.value.code == 1
    run.assert_not_called()


def test_main_serves_on_configured_port(mocker, make_settings):
    mocker.patch(
        "compliance_coach.main.get_settings",
        return_value=make_settings(PORT=8123),
    )
    mocker.patch("compliance_coach.main.install_excepthook")
    run = mocker.patch("compliance_coach.main.uvicorn.run")

    main()

    run.assert_called_once()
    assert run.call_args.kwargs["port"] == 8123
