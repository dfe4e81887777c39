import json
import logging

import pytest
from click.testing import CliRunner

from conftest import ScriptedTransport, ack, nak, reply
from rig_cli import cli as cli_module
from rig_cli.cli import cli
from rig_cli.commands import parse_frequency
from rig_sdk.bcd import encode_frequency
from rig_sdk.framing import encode_frame

# Test logger
log = logging.getLogger("test.cli")


@pytest.fixture
def scripted(monkeypatch):
    """Route the CLI's serial transport to a scripted double."""
    transport = ScriptedTransport()
    opened = {}

    def factory(port, baudrate):
        opened["port"] = port
        opened["baudrate"] = baudrate
        return transport

    monkeypatch.setattr(cli_module, "AsyncSerialTransport", factory)
    transport.opened_with = opened
    return transport


CLEAN_ENV = {"RIG_PORT": None, "RIG_MODEL": None, "RIG_BAUD": None}


def invoke(*args):
    return CliRunner().invoke(cli, ["--port", "/dev/null", *args], env=CLEAN_ENV)


@pytest.mark.parametrize("text,hz", [
    ("14074000", 14_074_000),
    ("14.074MHz", 14_074_000),
    ("14.074m", 14_074_000),
    ("7200kHz", 7_200_000),
    ("7200.5k", 7_200_500),
])
def test_parse_frequency(text, hz):
    assert parse_frequency(text) == hz


def test_models_lists_registry():
    result = CliRunner().invoke(cli, ["models"], env=CLEAN_ENV)
    assert result.exit_code == 0
    assert "IC-7300" in result.output
    assert "IC-9700" in result.output


def test_capabilities_without_radio():
    result = CliRunner().invoke(cli, ["--json", "--model", "IC-7100", "capabilities"], env=CLEAN_ENV)
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["name"] == "IC-7100"
    assert data["capabilities"]["vfo_model"] == "currentOnly"


def test_read_frequency(scripted):
    log.info("=== Starting test_read_frequency ===")
    scripted.queue(reply(0x94, b"\x03", encode_frequency(14_074_000)))
    result = invoke("--model", "IC-7300", "frequency")
    assert result.exit_code == 0, result.output
    assert "frequency: 14074000" in result.output
    assert scripted.opened_with == {"port": "/dev/null", "baudrate": 115200}
    assert not scripted.is_open
    log.info("✓ test_read_frequency passed")


def test_set_frequency_on_vfo(scripted):
    scripted.queue(ack(0x94), ack(0x94))
    result = invoke("--model", "IC-7300", "frequency", "7.074MHz", "--vfo", "B")
    assert result.exit_code == 0, result.output
    assert scripted.writes == [
        encode_frame(0x94, b"\x07", b"\x01"),
        encode_frame(0x94, b"\x05", encode_frequency(7_074_000)),
    ]


def test_baud_and_address_override(scripted):
    scripted.queue(ack(0x42))
    result = invoke("--model", "IC-7300", "--baud", "9600", "--address", "0x42", "ptt", "off")
    assert result.exit_code == 0, result.output
    assert scripted.opened_with["baudrate"] == 9600
    assert scripted.writes == [encode_frame(0x42, b"\x1c\x00", b"\x00")]


def test_rejected_command_exits_1(scripted):
    scripted.queue(nak(0x94))
    result = invoke("--model", "IC-7300", "mode", "cw")
    assert result.exit_code == 1
    assert "rejected" in result.output


def test_vfo_on_current_only_radio(scripted):
    result = invoke("--model", "IC-705", "vfo", "A")
    assert result.exit_code == 1
    assert scripted.writes == []


def test_missing_model_is_usage_error(scripted):
    result = invoke("frequency")
    assert result.exit_code == 2


def test_json_status(scripted):
    scripted.queue(
        reply(0x94, b"\x03", encode_frequency(14_074_000)),
        reply(0x94, b"\x04", b"\x01\x01"),
        reply(0x94, b"\x1c\x00", b"\x00"),
        reply(0x94, b"\x0f", b"\x00"),
    )
    result = invoke("--json", "--model", "IC-7300", "status")
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data == {
        "radio": "Icom IC-7300",
        "frequency": 14_074_000,
        "mode": "USB",
        "ptt": False,
        "split": False,
    }
