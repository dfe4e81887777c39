"""rig CLI: click interface for the rig SDK."""

import asyncio
import json as _json
import logging
import sys

import click

from rig_sdk import AsyncSerialTransport, RigController, RigError, configure_logging, get_radio

logger = logging.getLogger("rig_cli")


class Connection:
    """Manages a lazy, persistent connection to the radio."""

    def __init__(self, port=None, model=None, baud=None, address=None):
        self.port = port
        self.model = model
        self.baud = baud
        self.address = address
        self._rig = None
        self._loop = None

    def _get_loop(self):
        if self._loop is None or self._loop.is_closed():
            self._loop = asyncio.new_event_loop()
            asyncio.set_event_loop(self._loop)
        return self._loop

    @property
    def radio(self):
        """Radio definition for --model, with --address applied."""
        if not self.model:
            raise click.UsageError("No radio model specified. Use --model (or set RIG_MODEL).")
        try:
            radio = get_radio(self.model)
        except RigError as e:
            raise click.UsageError(str(e))
        if self.address is not None:
            radio = radio.with_address(self.address)
        return radio

    @property
    def rig(self) -> RigController:
        if self._rig is None:
            self._connect()
            assert self._rig is not None
        return self._rig

    def _connect(self):
        radio = self.radio
        if not self.port:
            raise click.UsageError("No serial port specified. Use --port (or set RIG_PORT).")
        transport = AsyncSerialTransport(self.port, self.baud or radio.default_baudrate)
        rig = RigController(radio, transport=transport)
        try:
            self._get_loop().run_until_complete(rig.connect())
        except RigError as e:
            raise click.ClickException(f"Connection error: {e}")
        self._rig = rig

    def run(self, coro):
        """Run an async coroutine synchronously."""
        return self._get_loop().run_until_complete(coro)

    def close(self):
        if self._rig:
            try:
                self._get_loop().run_until_complete(self._rig.disconnect())
            except RigError as e:
                logger.warning(f"Error while disconnecting: {e}")
            self._rig = None
        if self._loop and not self._loop.is_closed():
            self._loop.close()
            self._loop = None


def output(data, label=None):
    """Print result in human-readable or JSON format."""
    use_json = click.get_current_context().find_root().params.get("use_json", False)
    if use_json:
        click.echo(_json.dumps(data, indent=2, default=str))
    elif isinstance(data, dict):
        for k, v in data.items():
            click.echo(f"{k}: {v}")
    elif label:
        click.echo(f"{label}: {data}")
    else:
        click.echo(data)


def _parse_address(ctx, param, value):
    if value is None:
        return None
    try:
        address = int(value, 0)
    except ValueError:
        raise click.BadParameter(f"{value!r} is not a number (use e.g. 0x94)")
    if not 0 <= address <= 0xFF:
        raise click.BadParameter("CI-V address must be between 0x00 and 0xFF")
    return address


pass_conn = click.make_pass_decorator(Connection)


@click.group()
@click.option(
    "--port", "-p", envvar="RIG_PORT", help="Serial port (e.g. /dev/ttyUSB0)"
)
@click.option(
    "--model", "-m", envvar="RIG_MODEL", help="Radio model (e.g. IC-7300, see 'rig models')"
)
@click.option(
    "--baud", envvar="RIG_BAUD", type=int, default=None, help="Baud rate (default: model's)"
)
@click.option(
    "--address", callback=_parse_address, default=None, help="Override the CI-V address (e.g. 0x94)"
)
@click.option("--json", "use_json", is_flag=True, help="Output as JSON")
@click.version_option(package_name="rig-sdk")
@click.pass_context
def cli(ctx, port, model, baud, address, use_json):
    """CI-V radio control CLI."""
    configure_logging()
    ctx.obj = Connection(port=port, model=model, baud=baud, address=address)
    ctx.call_on_close(ctx.obj.close)


def main():
    """Entry point."""
    try:
        cli(standalone_mode=False)
    except click.exceptions.Abort:
        pass
    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)
    except RigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


# Import commands to register them on the cli group
from . import commands  # noqa: E402, F401
