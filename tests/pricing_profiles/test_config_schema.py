from decimal import Decimal

import pytest

from pricing_profiles.app.config.loader import load_service_config, parse_service_config
from pricing_profiles.util.errors import ConfigError


def test_invalid_schema_version(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("schema_version: 2\ncurrency: USD\nprofiles: []\n")
    with pytest.raises(ConfigError, match="Unsupported schema_version 2"):
        load_service_config(path)


def test_defaults_applied(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("")
    config = load_service_config(path)
    assert config.schema_version == 1
    assert config.limits.max_products == 1000
    assert config.limits.max_fixed_adjustment == Decimal("1000000")
    assert config.output.columns[0] == "id"
    assert config.profiles == []


def test_catalog_path_resolved_relative_to_config(tmp_path) -> None:
    path = tmp_path / "conf" / "config.yaml"
    path.parent.mkdir()
    path.write_text("catalog:\n  path: products.csv\n")
    config = load_service_config(path)
    assert config.catalog.path == str((tmp_path / "conf" / "products.csv").resolve())


def test_profiles_and_lookup(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(
        "profiles:\n"
        "  - name: Clearance\n"
        "    adjustment_type: dynamic\n"
        "    adjustment_value: 15\n"
        "    increment_type: decrease\n"
        "    product_ids: [1, 2]\n"
    )
    config = load_service_config(path)
    profile = config.get_profile("  clearance ")
    assert profile is not None
    assert profile.to_rule().adjustment_value == Decimal("15")
    assert config.get_profile("missing") is None


def test_invalid_structure_raises_config_error() -> None:
    with pytest.raises(ConfigError, match="Invalid config"):
        parse_service_config({"limits": {"max_products": "many"}})


def test_unsupported_output_format() -> None:
    with pytest.raises(ConfigError, match="Unsupported output format json"):
        parse_service_config({"output": {"format": "json"}})


def test_missing_file_raises_config_error(tmp_path) -> None:
    with pytest.raises(ConfigError, match="Unable to read config"):
        load_service_config(tmp_path / "absent.yaml")


def test_non_mapping_config(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n")
    with pytest.raises(ConfigError, match="must be a mapping"):
        load_service_config(path)


def test_sample_config_loads(data_dir) -> None:
    config = load_service_config(data_dir / "service_config.yaml")
    assert [profile.name for profile in config.profiles] == [
        "Summer uplift",
        "Clearance",
        "Featured boot",
    ]
