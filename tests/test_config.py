"""
Tests for Configuration Management
"""

import os
import sys
from pathlib import Path

import pytest
from pydantic import ValidationError

# Add the parent directory to sys.path to import src as a package
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from src.config import (
    DEFAULT_CACHE_LOCATION,
    ConfigurationError,
    Settings,
    get_settings,
    options_to_fields,
)


class TestSettings:
    """Test the Settings configuration class"""

    def setup_method(self):
        """Clean up environment before each test"""
        # Store original environment
        self.original_env = os.environ.copy()

        # Clear all archive related env vars
        for key in list(os.environ.keys()):
            if key.upper().startswith("MASTODON_"):
                del os.environ[key]

    def teardown_method(self):
        """Restore environment after each test"""
        os.environ.clear()
        os.environ.update(self.original_env)

    def test_settings_with_valid_config(self):
        """Test Settings initialization with valid configuration"""
        settings = Settings(
            host="https://mastodon.social", user_id="109", _env_file=None
        )

        assert settings.host == "https://mastodon.social"
        assert settings.user_id == "109"

    def test_settings_defaults(self):
        """Test Settings with code defaults"""
        settings = Settings(
            host="https://mastodon.social", user_id="109", _env_file=None
        )

        assert settings.remove_syndicates == []
        assert settings.cache_location == DEFAULT_CACHE_LOCATION
        assert settings.cache_location == ".cache/mastodon.json"
        assert settings.is_production is True
        assert settings.strip_hashtags is False
        assert settings.log_level == "INFO"

    def test_settings_from_environment(self):
        """Test Settings with custom environment values"""
        os.environ["MASTODON_HOST"] = "https://fosstodon.org"
        os.environ["MASTODON_USER_ID"] = "42"
        os.environ["MASTODON_REMOVE_SYNDICATES"] = '["example.com", "blog.dev"]'
        os.environ["MASTODON_CACHE_LOCATION"] = "data/posts.json"
        os.environ["MASTODON_IS_PRODUCTION"] = "false"
        os.environ["MASTODON_STRIP_HASHTAGS"] = "true"
        os.environ["MASTODON_LOG_LEVEL"] = "debug"

        settings = Settings(_env_file=None)

        assert settings.host == "https://fosstodon.org"
        assert settings.user_id == "42"
        assert settings.remove_syndicates == ["example.com", "blog.dev"]
        assert settings.cache_location == "data/posts.json"
        assert settings.is_production is False
        assert settings.strip_hashtags is True
        assert settings.log_level == "DEBUG"

    def test_boolean_env_var_parsing(self):
        """Test that boolean environment variables are parsed correctly"""
        os.environ["MASTODON_HOST"] = "https://mastodon.social"
        os.environ["MASTODON_USER_ID"] = "109"

        test_cases = [
            ("true", True),
            ("True", True),
            ("1", True),
            ("false", False),
            ("FALSE", False),
            ("0", False),
        ]

        for env_value, expected in test_cases:
            os.environ["MASTODON_IS_PRODUCTION"] = env_value
            settings = Settings(_env_file=None)
            assert (
                settings.is_production == expected
            ), f"Failed for {env_value}: expected {expected}, got {settings.is_production}"

    def test_missing_host_fails_validation(self):
        """Test that a missing host is rejected"""
        with pytest.raises(ValidationError, match="No URL provided"):
            Settings(user_id="109", _env_file=None)

    def test_missing_user_id_fails_validation(self):
        """Test that a missing user id is rejected"""
        with pytest.raises(ValidationError, match="No userID provided"):
            Settings(host="https://mastodon.social", _env_file=None)

    def test_host_must_be_http_url(self):
        """Test that a host without scheme is rejected"""
        with pytest.raises(ValidationError, match="must start with http"):
            Settings(host="mastodon.social", user_id="109", _env_file=None)

    def test_host_trailing_slash_removed(self):
        """Test that the host is normalized without trailing slash"""
        settings = Settings(
            host="https://mastodon.social/", user_id="109", _env_file=None
        )
        assert settings.host == "https://mastodon.social"

    def test_numeric_user_id_coerced_to_string(self):
        """Test that numeric account ids are accepted"""
        settings = Settings(host="https://mastodon.social", user_id=109, _env_file=None)
        assert settings.user_id == "109"

    def test_invalid_log_level(self):
        """Test that unknown log levels are rejected"""
        with pytest.raises(ValidationError, match="Unknown log level"):
            Settings(
                host="https://mastodon.social",
                user_id="109",
                log_level="LOUD",
                _env_file=None,
            )

    def test_settings_are_immutable(self):
        """Test that settings cannot be changed once built"""
        settings = Settings(
            host="https://mastodon.social", user_id="109", _env_file=None
        )
        with pytest.raises(ValidationError):
            settings.is_production = False

    def test_cache_path(self):
        """Test cache_path property"""
        settings = Settings(
            host="https://mastodon.social",
            user_id="109",
            cache_location="tmp/cache.json",
            _env_file=None,
        )
        assert settings.cache_path == Path("tmp/cache.json")


class TestGetSettings:
    """Test get_settings with build options"""

    def setup_method(self):
        self.original_env = os.environ.copy()
        for key in list(os.environ.keys()):
            if key.upper().startswith("MASTODON_"):
                del os.environ[key]

    def teardown_method(self):
        os.environ.clear()
        os.environ.update(self.original_env)

    def test_options_to_fields_maps_camel_case(self):
        """Test translation of build options to settings fields"""
        fields = options_to_fields(
            {
                "host": "https://mastodon.social",
                "userId": "109",
                "removeSyndicates": ["example.com"],
                "cacheLocation": "c.json",
                "isProduction": False,
                "stripHashtags": True,
            }
        )

        assert fields == {
            "host": "https://mastodon.social",
            "user_id": "109",
            "remove_syndicates": ["example.com"],
            "cache_location": "c.json",
            "is_production": False,
            "strip_hashtags": True,
        }

    def test_options_to_fields_ignores_unknown(self):
        """Test that unknown options are dropped"""
        fields = options_to_fields({"host": "https://a.b", "colour": "blue"})
        assert fields == {"host": "https://a.b"}

    def test_get_settings_from_options(self):
        """Test building settings from build options"""
        settings = get_settings(
            {
                "host": "https://mastodon.social",
                "userId": "109",
                "stripHashtags": True,
            },
            _env_file=None,
        )

        assert settings.host == "https://mastodon.social"
        assert settings.user_id == "109"
        assert settings.strip_hashtags is True
        assert settings.is_production is True

    def test_options_override_environment(self):
        """Test that build options win over environment variables"""
        os.environ["MASTODON_HOST"] = "https://env.social"
        os.environ["MASTODON_USER_ID"] = "1"

        settings = get_settings({"userId": "2"}, _env_file=None)

        assert settings.host == "https://env.social"
        assert settings.user_id == "2"

    def test_missing_host_raises_configuration_error(self):
        """Test friendly error for a missing host"""
        with pytest.raises(ConfigurationError) as exc_info:
            get_settings({"userId": "109"}, _env_file=None)

        message = str(exc_info.value)
        assert "Configuration incomplete" in message
        assert "host: No URL provided for the Mastodon server" in message

    def test_missing_user_id_raises_configuration_error(self):
        """Test friendly error for a missing user id"""
        with pytest.raises(ConfigurationError) as exc_info:
            get_settings({"host": "https://mastodon.social"}, _env_file=None)

        assert "user_id: No userID provided" in str(exc_info.value)

    def test_missing_everything_lists_all_problems(self):
        """Test that every missing option is reported"""
        with pytest.raises(ConfigurationError) as exc_info:
            get_settings({}, _env_file=None)

        message = str(exc_info.value)
        assert "host" in message
        assert "user_id" in message
