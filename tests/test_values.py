"""
Tests for tooldeck value objects and the Input schema.
"""

import pytest

from tooldeck.domain.errors import ErrorKind
from tooldeck.domain.inputs import Input, InputKind, InputType, RadioOption, validate_inputs
from tooldeck.domain.values import (
    DatabaseAuthScheme,
    DatabaseConfig,
    DatabaseEngine,
    HttpMethod,
    KeyValuePair,
    RunStatus,
    validate_base_url,
    validate_pairs,
    validate_url_path,
)


# =============================================================================
# Key-value pairs and strings
# =============================================================================


class TestKeyValuePair:
    """Tests for KeyValuePair."""

    def test_key_is_trimmed(self):
        pair = KeyValuePair.create("  token ", "abc").unwrap()

        assert pair.key == "token"
        assert pair.value == "abc"
        assert str(pair) == "token=abc"

    @pytest.mark.parametrize("key", ["", "   "])
    def test_blank_key_rejected(self, key):
        result = KeyValuePair.create(key, "value")

        assert result.error.kind == ErrorKind.VALIDATION_ERROR
        assert result.error.message == "Key cannot be empty"

    def test_empty_value_rejected(self):
        assert KeyValuePair.create("key", "").is_error

    def test_length_limits(self):
        assert KeyValuePair.create("k" * 100, "v").is_ok
        assert KeyValuePair.create("k" * 101, "v").is_error
        assert KeyValuePair.create("k", "v" * 1000).is_ok
        assert KeyValuePair.create("k", "v" * 1001).is_error

    def test_validate_pairs_stops_at_first_error(self):
        result = validate_pairs([("a", "1"), ("", "2"), ("c", "")])

        assert result.error.message == "Key cannot be empty"


class TestStrings:
    """Tests for string validators."""

    @pytest.mark.parametrize(
        "url",
        ["https://api.example.com", "http://localhost:8080/v1", "https://api.example.com/{tenant}"],
    )
    def test_valid_base_urls(self, url):
        assert validate_base_url(url).unwrap() == url

    @pytest.mark.parametrize("url", ["", "ftp://example.com", "api.example.com", "https:// x"])
    def test_invalid_base_urls(self, url):
        assert validate_base_url(url).is_error

    def test_base_url_length_limit(self):
        url = "https://example.com/" + "a" * 1000
        assert validate_base_url(url).error.message == "Base URL cannot exceed 1000 characters"

    def test_blank_url_path_is_none(self):
        assert validate_url_path("   ").unwrap() is None
        assert validate_url_path(None).unwrap() is None
        assert validate_url_path(" /users ").unwrap() == "/users"


# =============================================================================
# Enums
# =============================================================================


class TestHttpMethod:
    def test_case_insensitive(self):
        assert HttpMethod.from_string("post").unwrap() == HttpMethod.POST

    def test_unknown_method(self):
        assert HttpMethod.from_string("TRACE").error.message == "Invalid HTTP method: TRACE"


class TestRunStatus:
    """Tests for RunStatus parsing and transitions."""

    def test_parse_is_case_insensitive(self):
        assert RunStatus.from_string("INVALID_CONFIGURATION").unwrap() == (
            RunStatus.INVALID_CONFIGURATION
        )
        assert RunStatus.from_string("Running").unwrap() == RunStatus.RUNNING

    def test_parse_unknown(self):
        assert RunStatus.from_string("done").is_error

    def test_display_names(self):
        assert str(RunStatus.PENDING) == "Pending"
        assert str(RunStatus.INVALID_CONFIGURATION) == "InvalidConfiguration"

    def test_terminal_states(self):
        assert not RunStatus.PENDING.is_terminal
        assert not RunStatus.RUNNING.is_terminal
        assert RunStatus.SUCCESS.is_terminal
        assert RunStatus.FAILURE.is_terminal
        assert RunStatus.INVALID_CONFIGURATION.is_terminal

    @pytest.mark.parametrize(
        "source,target",
        [
            (RunStatus.PENDING, RunStatus.RUNNING),
            (RunStatus.PENDING, RunStatus.INVALID_CONFIGURATION),
            (RunStatus.RUNNING, RunStatus.SUCCESS),
            (RunStatus.RUNNING, RunStatus.FAILURE),
            (RunStatus.RUNNING, RunStatus.INVALID_CONFIGURATION),
        ],
    )
    def test_allowed_transitions(self, source, target):
        assert source.can_transition_to(target)

    def test_no_transition_leaves_terminal_states(self):
        for terminal in (RunStatus.SUCCESS, RunStatus.FAILURE, RunStatus.INVALID_CONFIGURATION):
            for target in RunStatus:
                assert not terminal.can_transition_to(target)

    def test_no_backward_transitions(self):
        assert not RunStatus.RUNNING.can_transition_to(RunStatus.PENDING)
        assert not RunStatus.PENDING.can_transition_to(RunStatus.SUCCESS)
        assert not RunStatus.PENDING.can_transition_to(RunStatus.FAILURE)


# =============================================================================
# Database config
# =============================================================================


class TestDatabaseConfig:
    """Tests for SQL connection settings."""

    def _create(self, **overrides):
        params = {
            "database_name": "analytics",
            "host": "db.internal",
            "port": 5432,
            "username": "reporter",
            "password": "hunter2",
        }
        params.update(overrides)
        return DatabaseConfig.create(**params)

    def test_defaults(self):
        config = self._create().unwrap()

        assert config.engine == DatabaseEngine.POSTGRES
        assert config.auth_scheme == DatabaseAuthScheme.USERNAME_PASSWORD
        assert config.use_ssl is True
        assert config.enable_ssh_tunnel is False

    def test_password_is_masked(self):
        config = self._create().unwrap()

        assert config.password.get_secret_value() == "hunter2"
        assert "hunter2" not in repr(config)
        assert config.to_dict()["password"] != "hunter2"

    @pytest.mark.parametrize("engine", ["postgresql", "PG", "Postgres"])
    def test_engine_aliases(self, engine):
        assert self._create(engine=engine).unwrap().engine == DatabaseEngine.POSTGRES

    @pytest.mark.parametrize("port", [0, 65536])
    def test_port_range(self, port):
        result = self._create(port=port)
        assert result.error.message == "Database port must be between 1 and 65535"

    def test_unknown_engine(self):
        assert self._create(engine="oracle").is_error

    def test_connection_options_validated(self):
        assert self._create(connection_options=[("sslmode", "require")]).is_ok
        assert self._create(connection_options=[("", "require")]).is_error


# =============================================================================
# Input types
# =============================================================================


class TestInputType:
    """Tests for InputType factories and value validation."""

    def test_text_length_bounds(self):
        assert InputType.text(0).is_error
        assert InputType.text(501).is_error
        text = InputType.text(5).unwrap()

        assert text.validate_value("hello").is_ok
        assert text.validate_value("hello!").is_error

    def test_email(self):
        email = InputType.email()

        assert email.validate_value("ops@example.com").unwrap() == "ops@example.com"
        assert email.validate_value("not-an-email").error.message == "Value must be a valid email"

    def test_integer_and_boolean(self):
        assert InputType.integer().validate_value("-42").is_ok
        assert InputType.integer().validate_value("4.2").is_error
        assert InputType.boolean().validate_value("TRUE").is_ok
        assert InputType.boolean().validate_value("yes").is_error

    def test_date(self):
        assert InputType.date().validate_value("2026-03-01").is_ok
        assert InputType.date().validate_value("2026-13-01").is_error

    def test_currency(self):
        assert InputType.currency_of("eur").unwrap().currency == "EUR"
        assert InputType.currency_of("EURO").is_error

        usd = InputType.currency_of("USD").unwrap()
        assert usd.validate_value("10.50").is_ok
        assert usd.validate_value("-1").is_error
        assert usd.validate_value("1.234").is_error

    def test_radio(self):
        assert InputType.radio([RadioOption("only")]).is_error
        assert InputType.radio([RadioOption("a"), RadioOption("a")]).is_error

        radio = InputType.radio([RadioOption("open"), RadioOption("closed", "Closed")]).unwrap()
        assert radio.validate_value("open").is_ok
        assert radio.validate_value("pending").is_error

    def test_multi_types_check_allowed_values(self):
        multi_int = InputType.multi_integer([1, 2, 3]).unwrap()
        assert multi_int.validate_value("2").is_ok
        assert multi_int.validate_value("4").is_error

        multi_text = InputType.multi_text(10, ["red", "blue"]).unwrap()
        assert multi_text.kind == InputKind.MULTI_TEXT
        assert multi_text.max_length == 10
        assert multi_text.validate_value("red").is_ok
        assert multi_text.validate_value("green").is_error

        assert InputType.multi_email(["bad"]).is_error
        assert InputType.multi_date([]).is_error

    def test_str(self):
        assert str(InputType.text(20).unwrap()) == "text(20)"
        assert str(InputType.currency_of("USD").unwrap()) == "currency(USD)"
        assert str(InputType.email()) == "email"


class TestInput:
    """Tests for Input definitions."""

    def test_title_is_trimmed(self):
        item = Input.create("  email ", InputType.email(), required=True).unwrap()
        assert item.title == "email"

    def test_blank_title_rejected(self):
        assert Input.create(" ", InputType.email()).is_error

    def test_required_input_cannot_have_default(self):
        result = Input.create("count", InputType.integer(), required=True, default_value="1")
        assert result.is_error

    def test_default_validated_against_type(self):
        assert Input.create("count", InputType.integer(), default_value="1").is_ok
        result = Input.create("count", InputType.integer(), default_value="one")

        assert result.is_error
        assert "count" in result.error.message

    def test_duplicate_titles_rejected(self):
        first = Input.create("id", InputType.integer()).unwrap()
        second = Input.create("id", InputType.email()).unwrap()

        result = validate_inputs([first, second])

        assert result.error.message == "Duplicate input title: id"
