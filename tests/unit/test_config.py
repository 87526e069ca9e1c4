"""Tests for gateway configuration."""

import json

import pytest
import yaml

from notify_interceptors import (
    ConfigurationError,
    DuplicateInterceptorError,
    InterceptorFactory,
    NotificationInterceptor,
)
from notify_gateway.config import (
    GatewayConfig,
    build_chain_from_config,
    get_default_config,
    get_profile_config,
    load_config,
    validate_config,
)


class TestLoadConfig:
    """Test loading configuration files."""

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "gateway.yaml"
        path.write_text(yaml.safe_dump({
            'profile': 'strict',
            'interceptors': [{'type': 'filter', 'config': {'allow_identifiers': ['a*']}}]
        }))

        data = load_config(path)

        assert data['profile'] == 'strict'
        assert data['interceptors'][0]['type'] == 'filter'

    def test_load_json(self, tmp_path):
        path = tmp_path / "gateway.json"
        path.write_text(json.dumps({'log_level': 'DEBUG'}))

        assert load_config(path) == {'log_level': 'DEBUG'}

    def test_empty_yaml_is_empty_config(self, tmp_path):
        path = tmp_path / "empty.yml"
        path.write_text("")

        assert load_config(path) == {}

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")


class TestValidateConfig:
    """Test configuration validation."""

    def test_valid_config(self):
        assert validate_config({
            'log_level': 'info',
            'interceptors': [{'type': 'filter'}, {'type': 'rate_limit', 'priority': 5}]
        }) == []

    def test_collects_all_errors(self):
        errors = validate_config({
            'log_level': 'LOUD',
            'profile': 'paranoid',
            'interceptors': [
                {'config': {}},
                {'type': 'carrier_pigeon'},
                {'type': 'filter', 'priority': 'high'},
                'filter',
            ]
        })

        assert len(errors) == 6
        assert any("log_level" in e for e in errors)
        assert any("profile" in e for e in errors)
        assert any("missing 'type'" in e for e in errors)
        assert any("carrier_pigeon" in e for e in errors)
        assert any("priority" in e for e in errors)
        assert any("must be a mapping" in e for e in errors)

    def test_nested_config_must_be_mapping(self):
        errors = validate_config({'interceptors': [{'type': 'filter', 'config': 5}]})

        assert errors == ["Interceptor 0 'config' must be a mapping"]

    def test_null_nested_config_is_allowed(self):
        assert validate_config({'interceptors': [{'type': 'filter', 'config': None}]}) == []

    def test_allow_duplicates_must_be_bool(self):
        errors = validate_config({'allow_duplicates': 'maybe'})

        assert errors == ["'allow_duplicates' must be true or false"]

    def test_interceptors_must_be_list(self):
        assert validate_config({'interceptors': {'type': 'filter'}}) == ["'interceptors' must be a list"]

    def test_not_a_mapping(self):
        assert validate_config(["filter"]) != []

    def test_custom_factory_types(self):
        factory = InterceptorFactory()

        class Custom(NotificationInterceptor):
            def process(self, request, message):
                return True

        factory.register("custom", Custom)

        assert validate_config({'interceptors': [{'type': 'custom'}]}, factory) == []
        assert validate_config({'interceptors': [{'type': 'custom'}]}) != []


class TestProfiles:
    """Test built-in profiles."""

    @pytest.mark.parametrize("profile", ["default", "strict", "open"])
    def test_profiles_build(self, profile):
        config = GatewayConfig.from_dict(get_profile_config(profile))
        chain = build_chain_from_config(config)

        assert config.profile == profile
        assert chain.frozen

    def test_profile_is_a_copy(self):
        config = get_profile_config("default")
        config['interceptors'].clear()

        assert get_profile_config("default")['interceptors']

    def test_unknown_profile(self):
        with pytest.raises(ConfigurationError):
            get_profile_config("paranoid")

    def test_default_config(self):
        assert get_default_config() == {
            'profile': 'default',
            'log_level': 'INFO',
            'interceptors': [],
            'allow_duplicates': False,
        }


class TestGatewayConfig:
    """Test the typed configuration."""

    def test_from_dict_rejects_invalid(self):
        with pytest.raises(ConfigurationError):
            GatewayConfig.from_dict({'interceptors': [{'type': 'nope'}]})

    def test_build_chain_keeps_config_order(self):
        config = GatewayConfig.from_dict({
            'interceptors': [
                {'type': 'filter', 'name': 'one', 'priority': 0},
                {'type': 'filter', 'name': 'two', 'priority': 0},
                {'type': 'rate_limit', 'name': 'three', 'priority': 0},
            ]
        })

        chain = build_chain_from_config(config)

        assert [i.name for i in chain] == ["one", "two", "three"]

    def test_builtins_run_in_listed_order(self):
        config = GatewayConfig.from_dict({
            'interceptors': [
                {'type': 'filter', 'name': 'f'},
                {'type': 'rate_limit', 'name': 'r'},
            ]
        })

        chain = build_chain_from_config(config)

        assert [i.name for i in chain] == ["f", "r"]

    def test_build_chain_uses_explicit_priorities(self):
        config = GatewayConfig.from_dict({
            'interceptors': [
                {'type': 'filter', 'name': 'filter'},
                {'type': 'rate_limit', 'name': 'limiter', 'priority': 10},
            ]
        })

        chain = build_chain_from_config(config)

        assert [i.name for i in chain] == ["limiter", "filter"]

    def test_from_dict_wraps_model_errors(self):
        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            GatewayConfig.from_dict({'interceptors': [{'type': 'filter', 1: 'x'}]})

    def test_build_chain_with_custom_factory(self):
        factory = InterceptorFactory()
        instance = None

        class Singleton(NotificationInterceptor):
            def __new__(cls, config=None):
                nonlocal instance
                if instance is None:
                    instance = super().__new__(cls)
                return instance

            def process(self, request, message):
                return True

        factory.register("singleton", Singleton)
        config = GatewayConfig(interceptors=[{'type': 'singleton'}, {'type': 'singleton'}])

        with pytest.raises(DuplicateInterceptorError):
            build_chain_from_config(config, factory)
