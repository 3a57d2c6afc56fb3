# pyright: reportUnknownMemberType=false
import dataclasses

import pytest

from crest.config import CrestConfig
from crest.errors import InvalidOptions


def test_config_defaults_are_stable():
    config = CrestConfig(base_url="http://localhost:3002")

    assert config.base_url == "http://localhost:3002"
    assert config.require_callback is False
    assert config.session_id is None
    assert config.user_agent is None
    assert config.verify_tls is True
    assert config.timeout_seconds is None
    assert config.max_workers == 4


def test_config_strips_trailing_slashes():
    assert CrestConfig(base_url="http://localhost:3002/").base_url == (
        "http://localhost:3002"
    )
    assert CrestConfig(base_url="http://h//").base_url == "http://h"


def test_config_is_immutable():
    config = CrestConfig(base_url="http://h")

    with pytest.raises(dataclasses.FrozenInstanceError):
        config.base_url = "http://other"  # type: ignore[misc]


def test_config_requires_base_url():
    with pytest.raises(InvalidOptions) as excinfo:
        CrestConfig(base_url="")

    assert excinfo.value.error == "invalid-options"
    assert excinfo.value.reason == "base_url required."


def test_config_rejects_non_positive_timeout():
    with pytest.raises(InvalidOptions):
        CrestConfig(base_url="http://h", timeout_seconds=0)
    with pytest.raises(InvalidOptions):
        CrestConfig(base_url="http://h", timeout_seconds=-1)


def test_config_rejects_empty_worker_pool():
    with pytest.raises(InvalidOptions):
        CrestConfig(base_url="http://h", max_workers=0)


def test_invalid_options_is_a_value_error():
    with pytest.raises(ValueError):
        CrestConfig(base_url="")


def test_from_mapping_ignores_unknown_keys():
    config = CrestConfig.from_mapping(
        {"base_url": "http://h/", "debug": True, "session_id": "abc"}
    )

    assert config.base_url == "http://h"
    assert config.session_id == "abc"


@pytest.mark.parametrize("options", [None, "http://h", ["http://h"]])
def test_from_mapping_rejects_non_mappings(options):
    with pytest.raises(InvalidOptions):
        CrestConfig.from_mapping(options)


def test_from_mapping_requires_base_url():
    with pytest.raises(InvalidOptions) as excinfo:
        CrestConfig.from_mapping({"debug": True})

    assert excinfo.value.reason == "base_url required."
