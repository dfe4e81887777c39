"""rig CLI commands."""

import click

from rig_sdk import RADIOS, VFO, Mode, RigError

from .cli import cli, output, pass_conn

ON_OFF = click.Choice(["on", "off"], case_sensitive=False)
VFO_NAMES = click.Choice([v.value for v in VFO], case_sensitive=False)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def parse_frequency(value: str) -> int:
    """Parse frequency string to Hz.

    Accepts:
        - Pure numbers: interpreted as Hz (e.g., 14074000)
        - MHz suffix: 14.074MHz, 14.074M (megahertz)
        - kHz suffix: 7200kHz, 7200k, 7200.5kHz (kilohertz)

    Returns:
        Frequency in Hz as integer.
    """
    v = value.strip().upper()
    if v.endswith("MHZ"):
        return round(float(v[:-3]) * 1_000_000)
    if v.endswith("M"):
        return round(float(v[:-1]) * 1_000_000)
    if v.endswith("KHZ"):
        return round(float(v[:-3]) * 1_000)
    if v.endswith("K"):
        return round(float(v[:-1]) * 1_000)
    return int(v)


def _run(conn, coro):
    """Run a controller call, turning SDK errors into click errors."""
    try:
        return conn.run(coro)
    except RigError as e:
        raise click.ClickException(str(e))


def _get_set(conn, getter, setter, value, label):
    """Generic get/set helper for simple value commands."""
    if value is None:
        output(_run(conn, getter()), label)
    else:
        _run(conn, setter(value))
        output("OK")


# ---------------------------------------------------------------------------
# Info commands
# ---------------------------------------------------------------------------


@cli.command()
def models():
    """List supported radio models."""
    use_json = click.get_current_context().find_root().params.get("use_json", False)
    if use_json:
        output([radio.to_dict() for radio in RADIOS.values()])
        return
    for radio in RADIOS.values():
        click.echo(
            f"{radio.name:<14} {radio.manufacturer:<6} 0x{radio.address:02X}  "
            f"{radio.default_baudrate:>6} baud  {radio.capabilities.vfo_model.value}"
        )


@cli.command()
@pass_conn
def capabilities(conn):
    """Show capabilities of the selected model (no radio needed)."""
    output(conn.radio.to_dict())


@cli.command()
@pass_conn
def status(conn):
    """Show frequency, mode, PTT and split of the current VFO."""
    output(_run(conn, conn.rig.get_status()))


# ---------------------------------------------------------------------------
# Frequency / mode / VFO
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("value", required=False, type=str)
@click.option("--vfo", type=VFO_NAMES, default=None, help="Target VFO (default: current)")
@pass_conn
def frequency(conn, value, vfo):
    """Get or set frequency (Hz, or with suffix: 14.074MHz, 7200kHz).

    Examples:
        frequency                  # Get current frequency
        frequency 14074000         # Set to 14.074 MHz (raw Hz)
        frequency 14.074MHz        # Set to 14.074 MHz
        frequency 7200k --vfo B    # Tune VFO B to 7.2 MHz
    """
    if value is None:
        output(_run(conn, conn.rig.get_frequency(vfo=vfo)), "frequency")
        return
    try:
        hz = parse_frequency(value)
    except ValueError:
        raise click.ClickException(f"Invalid frequency format: {value}")
    _run(conn, conn.rig.set_frequency(hz, vfo=vfo))
    output({"frequency": hz})


@cli.command()
@click.argument("value", required=False, type=str)
@click.option("--vfo", type=VFO_NAMES, default=None, help="Target VFO (default: current)")
@pass_conn
def mode(conn, value, vfo):
    """Get or set operating mode (USB, LSB, CW, CW-R, AM, FM, ...)."""
    if value is None:
        result = _run(conn, conn.rig.get_mode(vfo=vfo))
        output(result.value, "mode")
        return
    _run(conn, conn.rig.set_mode(value, vfo=vfo))
    output({"mode": Mode.parse(value).value})


@cli.command()
@click.argument("name", type=VFO_NAMES)
@pass_conn
def vfo(conn, name):
    """Select the current VFO (A/B or Main/Sub depending on the radio)."""
    _run(conn, conn.rig.select_vfo(name))
    output({"vfo": VFO.parse(name).value})


@cli.command()
@pass_conn
def swap(conn):
    """Exchange Main and Sub bands (dual receiver radios)."""
    _run(conn, conn.rig.exchange_bands())
    output("OK")


@cli.command()
@click.argument("state", type=ON_OFF)
@pass_conn
def dualwatch(conn, state):
    """Turn dual watch on or off (dual receiver radios)."""
    _run(conn, conn.rig.set_dualwatch(state.lower() == "on"))
    output({"dualwatch": state.lower()})


# ---------------------------------------------------------------------------
# Transmit
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("state", required=False, type=ON_OFF)
@pass_conn
def ptt(conn, state):
    """Get or set PTT (on = transmit)."""
    value = None if state is None else state.lower() == "on"
    _get_set(conn, conn.rig.get_ptt, conn.rig.set_ptt, value, "ptt")


@cli.command()
@click.argument("watts", required=False, type=int)
@pass_conn
def power(conn, watts):
    """Get or set RF power in watts."""
    _get_set(conn, conn.rig.get_power, conn.rig.set_power, watts, "power")


@cli.command()
@click.argument("state", required=False, type=ON_OFF)
@pass_conn
def split(conn, state):
    """Get or set split operation."""
    value = None if state is None else state.lower() == "on"
    _get_set(conn, conn.rig.get_split, conn.rig.set_split, value, "split")


@cli.command()
@pass_conn
def smeter(conn):
    """Read the S-meter (raw 0-255)."""
    output(_run(conn, conn.rig.get_signal_strength()), "smeter")
