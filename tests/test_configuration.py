"""
Tests for store options: model validation, sources, loader, builder and utils.
"""

import os
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from hotprops.domain.models import SupportedType, WatchBackend
from hotprops.framework.builder import StoreBuilder
from hotprops.framework.configuration import (
    DEFAULT_DATE_PATTERN,
    ConfigurationValidationError,
    DictOptionsSource,
    EnvironmentOptionsSource,
    OptionsLoader,
    OptionsValidator,
    StoreOptions,
    YAMLOptionsSource,
    load_options,
)
from hotprops.framework.utils import (
    create_store_builder,
    load_store,
    load_store_from_options_file,
    load_store_with_hot_reload,
)
from hotprops.infrastructure.exceptions import ConfigurationError, NotANumberError


class TestStoreOptions:
    """Test the options model."""

    def test_defaults(self):
        """Test default option values."""
        options = StoreOptions()

        assert options.date_pattern == DEFAULT_DATE_PATTERN
        assert options.locale is None
        assert options.hot_reload is True
        assert options.obfuscated_property_pattern is None
        assert options.obfuscated_property_placeholder == "******"
        assert options.poll_interval == 1.0
        assert options.watch_backend is WatchBackend.POLLING
        assert options.encoding == "iso-8859-1"

    def test_invalid_obfuscation_pattern(self):
        """Test invalid regular expressions are rejected."""
        with pytest.raises(ValueError):
            StoreOptions(obfuscated_property_pattern="([unclosed")

    def test_blank_values(self):
        """Test blank date patterns are rejected and blank locales mean default."""
        with pytest.raises(ValueError):
            StoreOptions(date_pattern="   ")

        assert StoreOptions(locale="").locale is None
        assert StoreOptions(obfuscated_property_pattern="").obfuscated_property_pattern is None

    def test_poll_interval_bounds(self):
        """Test poll interval must be positive."""
        with pytest.raises(ValueError):
            StoreOptions(poll_interval=0)

    def test_unknown_encoding(self):
        """Test unknown encodings are rejected."""
        with pytest.raises(ValueError):
            StoreOptions(encoding="not-a-codec")

    def test_unknown_field(self):
        """Test unknown fields are rejected."""
        with pytest.raises(ValueError):
            StoreOptions(hot_reloading=True)

    def test_assignment_is_validated(self):
        """Test assignments are validated."""
        options = StoreOptions()

        with pytest.raises(ValueError):
            options.poll_interval = -1

        options.watch_backend = "native"
        assert options.watch_backend is WatchBackend.NATIVE

    def test_is_obfuscated(self):
        """Test obfuscation uses a full match."""
        options = StoreOptions(obfuscated_property_pattern=r".*\.password")

        assert options.is_obfuscated("db.password")
        assert not options.is_obfuscated("db.password.hint")
        assert not StoreOptions().is_obfuscated("db.password")


class TestOptionsSources:
    """Test option sources."""

    def test_yaml_source(self):
        """Test loading options from a YAML section."""
        data = {"hotprops": {"date_pattern": "%Y-%m-%d", "hot_reload": False}, "other": {"x": 1}}

        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
            yaml.dump(data, f)
            temp_path = f.name

        try:
            source = YAMLOptionsSource(temp_path, priority=100)
            assert source.load() == {"date_pattern": "%Y-%m-%d", "hot_reload": False}
            assert source.get_priority() == 100
        finally:
            os.unlink(temp_path)

    def test_yaml_source_document_root(self, tmp_path):
        """Test reading options from the document root."""
        path = tmp_path / "options.yaml"
        path.write_text("locale: C\n")

        assert YAMLOptionsSource(path, section=None).load() == {"locale": "C"}

    def test_yaml_source_missing_section(self, tmp_path):
        """Test a document without the section yields no options."""
        path = tmp_path / "options.yaml"
        path.write_text("other:\n  x: 1\n")

        assert YAMLOptionsSource(path).load() == {}

    def test_yaml_source_file_not_found(self):
        """Test YAML source with non-existent file."""
        source = YAMLOptionsSource("/nonexistent/options.yaml")

        with pytest.raises(ConfigurationError) as exc_info:
            source.load()

        assert exc_info.value.error_code == "CONFIG_FILE_NOT_FOUND"

    def test_yaml_source_invalid_yaml(self, tmp_path):
        """Test YAML source with malformed YAML."""
        path = tmp_path / "options.yaml"
        path.write_text("hotprops: [unclosed\n")

        with pytest.raises(ConfigurationError) as exc_info:
            YAMLOptionsSource(path).load()

        assert exc_info.value.error_code == "INVALID_YAML"

    def test_yaml_source_not_a_mapping(self, tmp_path):
        """Test a section that is not a mapping."""
        path = tmp_path / "options.yaml"
        path.write_text("hotprops:\n  - a\n  - b\n")

        with pytest.raises(ConfigurationError) as exc_info:
            YAMLOptionsSource(path).load()

        assert exc_info.value.error_code == "INVALID_OPTIONS_SECTION"

    def test_environment_source(self):
        """Test loading options from environment variables."""
        env_vars = {
            'HOTPROPS_HOT_RELOAD': 'false',
            'HOTPROPS_POLL_INTERVAL': '0.5',
            'HOTPROPS_LOCALE': 'C',
            'OTHER_VAR': 'ignored',
        }

        with patch.dict('os.environ', env_vars, clear=True):
            options = EnvironmentOptionsSource("HOTPROPS_").load()

        assert options == {"hot_reload": False, "poll_interval": 0.5, "locale": "C"}

    def test_dict_source(self):
        """Test in-memory source returns a copy."""
        source = DictOptionsSource({"hot_reload": False}, priority=5)
        data = source.load()
        data["hot_reload"] = True

        assert source.load() == {"hot_reload": False}
        assert source.get_priority() == 5


class TestOptionsLoader:
    """Test priority based option loading."""

    def test_priority_order(self):
        """Test higher priority sources override lower ones."""
        loader = OptionsLoader([
            DictOptionsSource({"locale": "C", "poll_interval": 2.0}, priority=300),
            DictOptionsSource({"locale": "POSIX", "hot_reload": False}, priority=100),
        ])

        options = loader.load()

        assert options.locale == "C"
        assert options.poll_interval == 2.0
        assert options.hot_reload is False
        assert [s.get_priority() for s in loader.sources] == [100, 300]

    def test_unknown_keys_are_warned(self, caplog):
        """Test unknown keys are logged and ignored."""
        loader = OptionsLoader([DictOptionsSource({"hot_reload": False, "colour": "blue"})])

        options = loader.load()

        assert options.hot_reload is False
        assert "Unknown option key: colour" in caplog.text

    def test_invalid_value(self):
        """Test invalid values raise ConfigurationValidationError."""
        loader = OptionsLoader([DictOptionsSource({"poll_interval": "soon"})])

        with pytest.raises(ConfigurationValidationError) as exc_info:
            loader.load()

        assert "poll_interval" in exc_info.value.get_detailed_message()

    def test_load_options_file_env_and_overrides(self, tmp_path):
        """Test file, environment and overrides are combined in order."""
        path = tmp_path / "options.yaml"
        path.write_text(yaml.dump({"hotprops": {"locale": "C", "hot_reload": False, "date_pattern": "%d.%m.%Y"}}))

        with patch.dict('os.environ', {'HOTPROPS_DATE_PATTERN': '%Y/%m/%d'}):
            options = load_options(path, poll_interval=3)

        assert options.locale == "C"
        assert options.hot_reload is False
        assert options.date_pattern == "%Y/%m/%d"
        assert options.poll_interval == 3.0

    def test_numeric_environment_value_for_string_option(self):
        """Test numeric looking environment values fill string options."""
        with patch.dict('os.environ', {'HOTPROPS_OBFUSCATED_PROPERTY_PLACEHOLDER': '1234'}):
            options = load_options()

        assert options.obfuscated_property_placeholder == "1234"

    def test_numeric_environment_value_for_obfuscation_pattern(self):
        """Test a numeric looking obfuscation pattern from the environment is kept as text."""
        with patch.dict('os.environ', {'HOTPROPS_OBFUSCATED_PROPERTY_PATTERN': '1234'}):
            options = load_options()

        assert options.obfuscated_property_pattern == "1234"
        assert options.is_obfuscated("1234")
        assert not options.is_obfuscated("12345")


class TestOptionsValidator:
    """Test option validation helpers."""

    def test_validate_options_warnings(self):
        """Test unknown keys produce warnings."""
        warnings = OptionsValidator.validate_options({"hot_reload": True, "extra_key": 1})

        assert warnings == ["Unknown option key: extra_key"]

    def test_validate_options_errors(self):
        """Test invalid options raise ConfigurationValidationError."""
        with pytest.raises(ConfigurationValidationError) as exc_info:
            OptionsValidator.validate_options({"watch_backend": "carrier-pigeon"})

        assert exc_info.value.error_code == "CONFIGURATION_VALIDATION_ERROR"
        assert exc_info.value.validation_errors[0]['loc'] == ['watch_backend']

    def test_validate_environment_variables(self):
        """Test unknown prefixed variables are reported."""
        with patch.dict('os.environ', {'HOTPROPS_HOT_RELOAD': 'true', 'HOTPROPS_TYPO': 'x'}, clear=True):
            warnings = OptionsValidator.validate_environment_variables()

        assert warnings == ["Unknown environment variable: HOTPROPS_TYPO"]


class Settings:
    name = None
    age = None


class TestStoreBuilder:
    """Test assembling stores with the builder."""

    def test_build_with_bindings(self, write_properties):
        """Test builder registers bindings before loading."""
        path = write_properties("app.properties", {"name": "John", "age": "37"})
        settings = Settings()
        received = []

        with patch.dict('os.environ', {}, clear=True):
            store = (StoreBuilder()
                     .enable_hot_reload(False)
                     .add_location(path)
                     .bind_attribute("name", SupportedType.STRING, settings, "name")
                     .bind("age", SupportedType.INTEGER, received.append)
                     .build())

        with store:
            assert settings.name == "John"
            assert received == [37]
            assert store.options.hot_reload is False

    def test_build_with_yaml_and_variables(self, write_properties, tmp_path):
        """Test YAML options and location variables."""
        write_properties("prod.properties", {"token": "abc"})
        options_path = tmp_path / "options.yaml"
        options_path.write_text(yaml.dump({"hotprops": {"hot_reload": False, "obfuscated_property_pattern": "token"}}))

        store = (StoreBuilder()
                 .add_yaml_source(options_path)
                 .with_variables(profile="prod")
                 .add_location(str(tmp_path / "{profile}.properties"))
                 .build())

        with store:
            assert store.to_display_text() == "{token=******}"

    def test_overrides_beat_sources(self):
        """Test explicit options override every source."""
        with patch.dict('os.environ', {'HOTPROPS_LOCALE': 'POSIX'}):
            options = StoreBuilder().add_defaults().with_options(locale="C").build_options()

        assert options.locale == "C"

    def test_environment_is_default_source(self):
        """Test the environment is read when no source is added."""
        with patch.dict('os.environ', {'HOTPROPS_HOT_RELOAD': 'false'}):
            options = StoreBuilder().build_options()

        assert options.hot_reload is False

    def test_watch_failure_keeps_built_store(self, write_properties, watcher_factory):
        """Test a file that cannot be watched still yields a loaded store."""
        first = write_properties("a.properties", {"a": "1"})
        second = write_properties("b.properties", {"b": "2"})
        watcher_factory.failing_names.add("a.properties")
        errors = []

        store = (StoreBuilder()
                 .with_options(hot_reload=True)
                 .with_watcher_factory(watcher_factory)
                 .add_location(first, second)
                 .on_error(lambda path, error: errors.append(path))
                 .build())

        with store:
            assert store.get("a") == "1"
            assert store.get("b") == "2"
            assert not store.is_watching(first)
            assert store.is_watching(second)
            assert [os.path.basename(p) for p in errors] == ["a.properties"]

    def test_failed_build_closes_store(self, write_properties, watcher_factory):
        """Test a failing load (not a watch failure) does not leave watchers behind."""
        good = write_properties("a.properties", {"age": "1"})
        bad = write_properties("b.properties", {"age": "old"})
        builder = (StoreBuilder()
                   .with_options(hot_reload=True)
                   .with_watcher_factory(watcher_factory)
                   .add_location(good, bad)
                   .bind("age", SupportedType.INTEGER, lambda value: None))

        with pytest.raises(NotANumberError):
            builder.build()

        assert len(watcher_factory.watchers) == 1
        assert watcher_factory.watchers[0].stopped


class TestUtils:
    """Test convenience functions."""

    def test_load_store(self, write_properties):
        """Test load_store without hot reload."""
        path = write_properties("app.properties", {"a": "1"})

        with load_store(path) as store:
            assert store.get("a") == "1"
            assert store.watched_paths() == []

    def test_load_store_with_hot_reload(self, write_properties):
        """Test load_store_with_hot_reload watches the files."""
        path = write_properties("app.properties", {"a": "1"})

        with load_store_with_hot_reload(path, poll_interval=0.1) as store:
            assert store.is_watching(path)
            assert store.options.poll_interval == 0.1

        assert not store.is_watching(path)

    def test_load_store_from_options_file(self, write_properties, tmp_path):
        """Test loading with a YAML options file."""
        path = write_properties("app.properties", {"a": "1"})
        options_path = Path(tmp_path) / "options.yaml"
        options_path.write_text("hotprops:\n  hot_reload: false\n")

        with load_store_from_options_file(options_path, path, env_prefix=None) as store:
            assert store.get("a") == "1"
            assert store.options.hot_reload is False

    def test_create_store_builder(self):
        """Test builder factory."""
        assert isinstance(create_store_builder(), StoreBuilder)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
