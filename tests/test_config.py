#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ArcWeaver v0.1.0

Tests for configuration loading and validation.

Author: ArcWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import pytest
import yaml
from arcweaver.config.parser import ConfigParser, ConfigValidationError
from arcweaver.config.schema import (
    DEFAULT_CONFIG,
    load_config,
    save_config_template,
    validate_config,
)


class TestSchema:
    """Test defaults, loading and validation."""

    def test_defaults_without_file(self):
        config = load_config(None)
        assert config == DEFAULT_CONFIG
        assert config is not DEFAULT_CONFIG

    def test_load_merges_defaults(self, temp_output_dir):
        path = temp_output_dir / "config.yaml"
        path.write_text("conversion:\n  kmer_size: 31\n")

        config = load_config(path)
        assert config['conversion']['kmer_size'] == 31
        assert config['conversion']['output_format'] == 'canonical'
        assert config['output']['atomic_write'] is True

    def test_template_round_trip(self, temp_output_dir):
        path = temp_output_dir / "template.yaml"
        save_config_template(path, kmer_size=21)

        config = load_config(path)
        assert config['conversion']['kmer_size'] == 21
        assert validate_config(config) == []
        # Template writing must not leak into the defaults
        assert DEFAULT_CONFIG['conversion']['kmer_size'] is None

    def test_missing_k(self):
        assert validate_config(load_config()) == ["conversion.kmer_size is required"]
        assert validate_config(load_config(), require_kmer_size=False) == []

    @pytest.mark.parametrize("section,key,value,message", [
        ('conversion', 'kmer_size', 1, "kmer_size must be >= 2"),
        ('conversion', 'kmer_size', "31", "must be an integer"),
        ('conversion', 'output_format', "gfa", "Invalid output format"),
        ('conversion', 'warning_prefix_padding', -1, "non-negative"),
    ])
    def test_invalid_values(self, section, key, value, message):
        config = load_config()
        config['conversion']['kmer_size'] = 31
        config[section][key] = value

        errors = validate_config(config)
        assert len(errors) == 1
        assert message in errors[0]

    def test_log_level_case_insensitive(self):
        config = load_config()
        config['conversion']['kmer_size'] = 31
        config['output']['logging']['level'] = 'Info'
        assert validate_config(config) == []

        config['output']['logging']['level'] = 'chatty'
        assert validate_config(config) == ["Invalid log level: chatty"]


class TestConfigParser:
    """Test the configuration parser."""

    def test_defaults(self):
        parser = ConfigParser()
        assert parser.get('conversion.output_format') == 'canonical'
        assert parser.get('conversion.missing', 'fallback') == 'fallback'

    def test_env_substitution(self, temp_output_dir, monkeypatch):
        monkeypatch.setenv("ARCWEAVER_K", "27")
        path = temp_output_dir / "config.yaml"
        path.write_text(
            "conversion:\n"
            "  kmer_size: ${ARCWEAVER_K}\n"
            "  output_format: ${ARCWEAVER_FORMAT:-legacy}\n"
        )

        parser = ConfigParser(path)
        assert parser.get('conversion.kmer_size') == 27
        assert parser.get('conversion.output_format') == 'legacy'

    def test_cli_overrides(self):
        parser = ConfigParser()
        parser.merge_cli_overrides({
            'conversion.kmer_size': 31,
            'conversion.output_format': None,
            'output.logging.level': 'DEBUG',
        })

        assert parser.get('conversion.kmer_size') == 31
        assert parser.get('conversion.output_format') == 'canonical'
        assert parser.get('output.logging.level') == 'DEBUG'

    def test_validate(self):
        parser = ConfigParser()
        with pytest.raises(ConfigValidationError, match="kmer_size is required"):
            parser.validate()

        parser.merge_cli_overrides({'conversion.kmer_size': 31})
        assert parser.validate()

    def test_missing_file(self, temp_output_dir):
        with pytest.raises(FileNotFoundError):
            ConfigParser(temp_output_dir / "missing.yaml")

    def test_invalid_yaml(self, temp_output_dir):
        path = temp_output_dir / "broken.yaml"
        path.write_text("conversion: [unclosed\n")
        with pytest.raises(ConfigValidationError, match="Invalid YAML"):
            ConfigParser(path)

    def test_non_mapping(self, temp_output_dir):
        path = temp_output_dir / "list.yaml"
        path.write_text(yaml.dump([1, 2, 3]))
        with pytest.raises(ConfigValidationError, match="mapping"):
            ConfigParser(path)
