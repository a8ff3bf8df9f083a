import json
import logging

import pytest

from serverstatus.config import Config, load_config, parse_color


def test_defaults():
    config = Config(token="secret", guild="1", channel="2")
    assert config.interval == 60
    assert config.server_id == 1
    assert config.api_version == 10
    assert config.embed_color == 0xFFA500
    assert config.logging_level == logging.ERROR
    assert config.display_address == "127.0.0.1:27015"


def test_load_from_file(tmp_path):
    filename = tmp_path / "config.json"
    filename.write_text(
        json.dumps(
            {
                "interval": 30,
                "server_id": 2,
                "guild": 123,
                "channel": 456,
                "embed_color": [0, 128, 255],
                "log_level": 2,
                "address": "play.example.com:27015",
            }
        )
    )
    config = load_config(str(filename), "secret")
    assert config.token == "secret"
    assert config.interval == 30
    assert config.server_id == 2
    assert config.guild == "123"
    assert config.channel == "456"
    assert config.embed_color == 0x0080FF
    assert config.logging_level == logging.DEBUG
    assert config.display_address == "play.example.com:27015"


def test_unknown_keys_are_ignored(caplog):
    with caplog.at_level(logging.WARNING):
        config = Config.from_dict({"channel": "2", "endpoints": {}}, "secret")
    assert config.channel == "2"
    assert "endpoints" in caplog.text


@pytest.mark.parametrize(
    "values",
    [
        {"interval": 0},
        {"server_id": 0},
        {"server_id": 11},
        {"log_level": 3},
        {"channel": ""},
    ],
)
def test_invalid_values(values):
    data = {"guild": "1", "channel": "2"}
    data.update(values)
    with pytest.raises(ValueError):
        Config.from_dict(data, "secret")


def test_silent_log_level():
    config = Config(token="secret", guild="1", channel="2", log_level=0)
    assert config.logging_level > logging.CRITICAL


def test_parse_color():
    assert parse_color(0x123456) == 0x123456
    assert parse_color("#ffa500") == 0xFFA500
    assert parse_color([255, 165, 0]) == 0xFFA500
    with pytest.raises(ValueError):
        parse_color([1, 2])
    with pytest.raises(ValueError):
        parse_color(True)
