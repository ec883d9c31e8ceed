# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Tests for strategy configuration."""

import pytest

from microsoft_strategy import ConfigurationError, StrategyConfig


class TestStrategyConfigDefaults:
    """Tests for defaults derived from the tenant."""

    def test_defaults_with_minimal_options(self):
        """Test minimal options produce fully populated defaults."""
        config = StrategyConfig.from_options({"clientID": "ABC123", "clientSecret": "secret"})

        assert config.client_id == "ABC123"
        assert config.client_secret == "secret"
        assert config.tenant == "common"
        assert config.authorization_url == "https://login.microsoftonline.com/common/oauth2/v2.0/authorize"
        assert config.token_url == "https://login.microsoftonline.com/common/oauth2/v2.0/token"
        assert config.scope_separator == " "
        assert config.custom_headers == {}
        assert config.developer_token == ""
        assert config.api_entry_point == "https://graph.microsoft.com"
        assert config.api_version == "v1.0"
        assert config.add_upn_as_email is False

    @pytest.mark.parametrize("tenant", ["common", "organizations", "consumers", "contoso.onmicrosoft.com"])
    def test_urls_derived_from_tenant(self, tenant):
        """Test endpoint URLs embed the tenant."""
        config = StrategyConfig.from_options({"client_id": "ABC123", "tenant": tenant})

        assert config.authorization_url == f"https://login.microsoftonline.com/{tenant}/oauth2/v2.0/authorize"
        assert config.token_url == f"https://login.microsoftonline.com/{tenant}/oauth2/v2.0/token"

    def test_explicit_urls_override_tenant(self):
        """Test explicitly supplied URLs are kept verbatim."""
        config = StrategyConfig.from_options({
            "clientID": "ABC123",
            "tenant": "contoso",
            "authorizationURL": "https://login.example.com/authorize",
            "tokenURL": "https://login.example.com/token",
        })

        assert config.authorization_url == "https://login.example.com/authorize"
        assert config.token_url == "https://login.example.com/token"

    def test_empty_tenant_falls_back_to_common(self):
        """Test an empty tenant is treated as absent."""
        config = StrategyConfig.from_options({"clientID": "ABC123", "tenant": ""})

        assert config.tenant == "common"
        assert "/common/" in config.authorization_url

    def test_snake_case_and_camel_case_names(self):
        """Test both option spellings are accepted."""
        camel = StrategyConfig.from_options({
            "clientID": "ABC123",
            "callbackURL": "https://app.example.com/cb",
            "apiVersion": "beta",
            "addUPNAsEmail": True,
        })
        snake = StrategyConfig.from_options({
            "client_id": "ABC123",
            "callback_url": "https://app.example.com/cb",
            "api_version": "beta",
            "add_upn_as_email": True,
        })

        assert camel == snake

    def test_unknown_options_ignored(self):
        """Test unrecognized options do not fail validation."""
        config = StrategyConfig.from_options({"clientID": "ABC123", "passReqToCallback": True})

        assert config.client_id == "ABC123"


class TestStrategyConfigValidation:
    """Tests for configuration errors."""

    def test_none_options_raise(self):
        """Test absent options raise a configuration error."""
        with pytest.raises(ConfigurationError, match="requires options"):
            StrategyConfig.from_options(None)

    def test_empty_options_raise(self):
        """Test options without a client ID raise."""
        with pytest.raises(ConfigurationError, match="clientID parameter is required"):
            StrategyConfig.from_options({})

    def test_non_mapping_options_raise(self):
        """Test non-mapping options raise."""
        with pytest.raises(ConfigurationError, match="must be a mapping"):
            StrategyConfig.from_options(["clientID", "ABC123"])

    def test_invalid_field_type_raises(self):
        """Test pydantic validation failures become ConfigurationError."""
        with pytest.raises(ConfigurationError, match="Invalid Microsoft strategy options"):
            StrategyConfig.from_options({"clientID": "ABC123", "customHeaders": "not-a-dict"})

    def test_configuration_error_is_value_error(self):
        """Test ConfigurationError can be caught as ValueError."""
        with pytest.raises(ValueError):
            StrategyConfig.from_options(None)

    def test_config_is_frozen(self):
        """Test configuration cannot be changed after construction."""
        config = StrategyConfig.from_options({"clientID": "ABC123"})

        with pytest.raises(Exception):
            config.tenant = "contoso"
        with pytest.raises(TypeError):
            config.custom_headers["X-Injected"] = "1"
        assert config.custom_headers == {}

    def test_custom_headers_copied_from_options(self):
        """Test changing the caller's headers mapping does not change the config."""
        headers = {"X-Trace": "t-1"}
        config = StrategyConfig.from_options({"clientID": "ABC123", "customHeaders": headers})

        headers["X-Injected"] = "1"

        assert dict(config.custom_headers) == {"X-Trace": "t-1"}
        with pytest.raises(TypeError):
            config.custom_headers["X-Trace"] = "t-2"


class TestProfileSource:
    """Tests for profile source selection."""

    def test_graph_without_developer_token(self):
        """Test Graph is selected by default."""
        config = StrategyConfig.from_options({"clientID": "ABC123"})

        assert config.profile_source == "graph"

    def test_bingads_with_developer_token(self):
        """Test a developer token selects Bing Ads."""
        config = StrategyConfig.from_options({"clientID": "ABC123", "developerToken": "dev-token"})

        assert config.profile_source == "bingads"

    def test_joined_scope(self):
        """Test scope lists are joined with the separator."""
        config = StrategyConfig.from_options({
            "clientID": "ABC123",
            "scope": ["openid", "User.Read"],
            "scopeSeparator": ",",
        })

        assert config.joined_scope() == "openid,User.Read"

    def test_joined_scope_absent(self):
        """Test no scope yields None."""
        config = StrategyConfig.from_options({"clientID": "ABC123"})

        assert config.joined_scope() is None
