"""Tests for TOML configuration loading and saving."""

import pytest

from mailsubmit.config import Config, ConfigError, get_xdg_config_home


def test_missing_file_returns_defaults(temp_dir):
    config = Config.load(temp_dir / "nope.toml")
    assert config == Config()
    assert config.host == "localhost"
    assert config.port == 587


def test_xdg_config_home(monkeypatch, temp_dir):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(temp_dir))
    assert get_xdg_config_home() == temp_dir / "mailsubmit"
    assert Config.config_file_path() == temp_dir / "mailsubmit" / "config.toml"


def test_load(temp_dir):
    path = temp_dir / "config.toml"
    path.write_text(
        """
[general]
default_from = "me@example.com"

[sender]
host = "smtp.example.com"
port = 2525
timeout = 10
username = "me@example.com"
keyring_service = "work-mail"

[headers]
X-Mailer = "mailsubmit"
Reply-To = "noreply@example.com"
""",
        encoding="utf-8",
    )

    config = Config.load(path)

    assert config.default_from == "me@example.com"
    assert config.host == "smtp.example.com"
    assert config.port == 2525
    assert config.timeout == 10.0
    assert config.validate_certs is True
    assert config.username == "me@example.com"
    assert config.keyring_service == "work-mail"
    assert list(config.headers.items()) == [
        ("X-Mailer", "mailsubmit"),
        ("Reply-To", "noreply@example.com"),
    ]


def test_save_and_load(temp_dir):
    path = temp_dir / "nested" / "config.toml"
    config = Config(
        default_from="me@example.com",
        host="smtp.example.com",
        username="me@example.com",
        headers={"X-Mailer": "mailsubmit"},
    )

    config.save(path)

    assert Config.load(path) == config
    assert "password" not in path.read_text(encoding="utf-8")


def test_save_defaults_to_xdg(monkeypatch, temp_dir):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(temp_dir))
    Config(host="smtp.example.com").save()
    assert Config.load().host == "smtp.example.com"


@pytest.mark.parametrize(
    "content",
    [
        "this is not toml",
        "[sender]\nport = 0",
        "[sender]\nport = \"587\"",
        "[sender]\ntimeout = -1",
        "[headers]\nX-Count = 3",
        "[sender]\nport = true",
    ],
)
def test_invalid_config(temp_dir, content):
    path = temp_dir / "config.toml"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError):
        Config.load(path)


@pytest.mark.parametrize(
    "content, name",
    [
        ('sender = "smtp.example.com"', "[sender]"),
        ('general = "x"', "[general]"),
        ("headers = 1", "[headers]"),
    ],
)
def test_section_must_be_table(temp_dir, content, name):
    path = temp_dir / "config.toml"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError) as exc_info:
        Config.load(path)
    assert f"{name} must be a table" in str(exc_info.value)


@pytest.mark.parametrize(
    "content, key",
    [
        ("[sender]\nhost = 1", "sender.host"),
        ("[sender]\nusername = 1", "sender.username"),
        ("[sender]\nkeyring_service = 1", "sender.keyring_service"),
        ("[general]\ndefault_from = 1", "general.default_from"),
    ],
)
def test_string_values_are_type_checked(temp_dir, content, key):
    path = temp_dir / "config.toml"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError) as exc_info:
        Config.load(path)
    assert key in str(exc_info.value)


def test_validate_certs_must_be_bool(temp_dir):
    path = temp_dir / "config.toml"
    path.write_text('[sender]\nvalidate_certs = "yes"', encoding="utf-8")

    with pytest.raises(ConfigError, match="validate_certs"):
        Config.load(path)


def test_validate_certs_false(temp_dir):
    path = temp_dir / "config.toml"
    path.write_text("[sender]\nvalidate_certs = false", encoding="utf-8")

    assert Config.load(path).validate_certs is False


def test_sender_config_anonymous():
    sender = Config(host="smtp.example.com", headers={"X-A": "1"}).sender_config()

    assert sender.host == "smtp.example.com"
    assert sender.credential is None
    assert dict(sender.headers) == {"X-A": "1"}


def test_sender_config_with_username():
    sender = Config(username="me@example.com", keyring_service="work-mail").sender_config()

    assert sender.credential.username == "me@example.com"
    assert sender.credential.keyring_service == "work-mail"
    assert sender.credential.password == ""
