"""python-hilink cli tool."""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any

import asyncclick as click
from rich import print as _do_echo
from rich.logging import RichHandler

from hilink import Client, Credentials, DeviceConfig
from hilink.enums import LoginState, PasswordType
from hilink.json import dumps as json_dumps

# echo is set to _do_echo so that it can be reset to _do_echo later after
# --json has set it to _nop_echo
echo = _do_echo

pass_client = click.make_pass_decorator(Client)


def CatchAllExceptions(cls):
    """Capture all exceptions and prints them nicely.

    Idea from https://stackoverflow.com/a/44347763 and
    https://stackoverflow.com/questions/52213375
    """

    def _handle_exception(debug, exc):
        if isinstance(exc, click.ClickException):
            raise
        echo(f"Raised error: {exc}")
        if debug:
            raise
        echo("Run with --debug enabled to see stacktrace")
        sys.exit(1)

    class _CommandCls(cls):
        _debug = False

        async def make_context(self, info_name, args, parent=None, **extra):
            self._debug = any([arg for arg in args if arg in ["--debug", "-d"]])
            try:
                return await super().make_context(
                    info_name, args, parent=parent, **extra
                )
            except Exception as exc:
                _handle_exception(self._debug, exc)

        async def invoke(self, ctx):
            try:
                return await super().invoke(ctx)
            except Exception as exc:
                _handle_exception(self._debug, exc)

    return _CommandCls


def json_formatter_cb(result, **kwargs):
    """Format and output the result as JSON, if requested."""
    if not kwargs.get("json"):
        return

    print(json_dumps(result, default=str, indent=True))


@click.group(
    invoke_without_command=True,
    cls=CatchAllExceptions(click.Group),
    result_callback=json_formatter_cb,
)
@click.option(
    "--host",
    envvar="HILINK_HOST",
    default="192.168.8.1",
    show_default=True,
    help="The host name or IP address of the device to connect to.",
)
@click.option(
    "--port",
    envvar="HILINK_PORT",
    required=False,
    type=int,
    help="The port of the device to connect to.",
)
@click.option(
    "--https/--no-https",
    envvar="HILINK_HTTPS",
    default=False,
    is_flag=True,
    help="Connect to the device using https.",
)
@click.option(
    "-d",
    "--debug",
    envvar="HILINK_DEBUG",
    default=False,
    is_flag=True,
    help="Print debug output",
)
@click.option(
    "--json/--no-json",
    envvar="HILINK_JSON",
    default=False,
    is_flag=True,
    help="Output raw device response as JSON.",
)
@click.option(
    "--timeout",
    envvar="HILINK_TIMEOUT",
    default=5,
    required=False,
    show_default=True,
    help="Timeout for device communications.",
)
@click.option(
    "--username",
    default="admin",
    show_default=True,
    envvar="HILINK_USERNAME",
    help="Username to authenticate to the device.",
)
@click.option(
    "--password",
    default=None,
    required=False,
    envvar="HILINK_PASSWORD",
    help="Password to use to authenticate to the device.",
)
@click.version_option(package_name="python-hilink")
@click.pass_context
async def cli(ctx, host, port, https, debug, json, timeout, username, password):
    """A tool for the web management api of HiLink devices."""
    # no need to perform any checks if we are just displaying the help
    if "--help" in sys.argv:
        # Context object is required to avoid crashing on sub-groups
        ctx.obj = object()
        return

    # If JSON output is requested, disable echo
    global echo
    if json:

        def _nop_echo(*args, **kwargs):
            pass

        echo = _nop_echo
    else:
        # Set back to default is required if running tests with CliRunner
        echo = _do_echo

    logging_config: dict[str, Any] = {
        "level": logging.DEBUG if debug else logging.INFO,
        "handlers": [RichHandler(show_time=False)],
        "format": "%(message)s",
    }
    logging.basicConfig(**logging_config)

    config = DeviceConfig(
        host=host,
        port_override=port,
        https=https,
        timeout=timeout,
        credentials=Credentials(username=username, password=password),
    )
    client = _create_client(config)

    @asynccontextmanager
    async def async_wrapped_client(client: Client):
        try:
            await client.open_session()
            yield client
        finally:
            await client.connection.close()

    ctx.obj = await ctx.with_async_resource(async_wrapped_client(client))

    if ctx.invoked_subcommand is None:
        return await ctx.invoke(state)


def _create_client(config: DeviceConfig) -> Client:
    return Client(config)


@cli.command()
@pass_client
@click.option(
    "--force", is_flag=True, default=False, help="Login even if already logged in."
)
async def login(client: Client, force: bool):
    """Login to the device."""
    logged_in = await client.user.login(force_new_login=force)
    if logged_in:
        echo("[green]Logged in[/green]")
    else:
        echo("[red]Login was not acknowledged[/red]")
    return {"logged_in": logged_in}


@cli.command()
@pass_client
async def logout(client: Client):
    """Logout from the device."""
    res = await client.user.logout()
    echo(f"Logout: {res}")
    return res


@cli.command()
@pass_client
async def state(client: Client):
    """Print the login state reported by the device."""
    status = await client.user.probe_state()
    if status is None:
        echo("Device does not report login state")
        return None

    try:
        state_name = LoginState(status.state).name
    except ValueError:
        state_name = str(status.state)
    try:
        password_type_name = PasswordType(status.password_type).name
    except ValueError:
        password_type_name = str(status.password_type)

    echo(f"[bold]== {client.config.host} ==[/bold]")
    echo(f"\tLogin state:   {state_name}")
    echo(f"\tPassword type: {password_type_name}")
    return {"state": status.state, "password_type": status.password_type}


@cli.command()
@pass_client
@click.argument("path")
async def get(client: Client, path: str):
    """Login and fetch the raw value of an api path, e.g. user/heartbeat."""
    await client.user.login()
    try:
        res = await client.connection.get(path)
    finally:
        # Logs out when a password was used and closes the connection
        await client.disconnect()
    echo(res)
    return res


if __name__ == "__main__":
    cli()
