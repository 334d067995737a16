import json
import logging
import platform
import signal
import sys
from typing import List

import typer

from . import __version__
from .commands.logs import LOGS_HELP, logs_action
from .config import load_config, set_dotenv_path
from .errors import ExpectedError
from .logging_setup import setup_logging
from .main import CustomMain, Main
from .usage import (
	MANIFEST_PATH,
	CommandHelp,
	build_manifest,
	capitanoize_oclif_usage,
	get_command_ids_from_manifest,
	get_commands_from_manifest,
	write_manifest,
)

logger = logging.getLogger(__name__)

app = typer.Typer(add_completion=False, no_args_is_help=True)


def _fail(error):
	typer.echo(typer.style(f"Error: {error}", fg=typer.colors.RED), err=True)
	raise typer.Exit(1)


@app.callback()
def _global_options(
	env: str = typer.Option(None, "--env", help="Path to a .env file to load settings from"),
	debug: bool = typer.Option(False, "--debug", help="Print debug logging to stderr"),
):
	"""Manage devices in the cloud and on the local network."""
	if env:
		set_dotenv_path(env)
	level = "DEBUG" if debug else load_config().log_level
	setup_logging(level)


@app.command(help=LOGS_HELP, short_help="Show device logs.")
def logs(
	uuid_or_device: str = typer.Argument(..., metavar="UUIDORDEVICE", help="Device UUID, IP address or .local hostname"),
	tail: bool = typer.Option(False, "--tail", "-t", help="Continuously stream output"),
	service: List[str] = typer.Option(
		None,
		"--service",
		"-s",
		help="Reject logs not originating from this service. "
		"This can be used in combination with --system or other --service flags.",
	),
	system: bool = typer.Option(
		False,
		"--system",
		"-S",
		help="Only show system logs. This can be used in combination with --service.",
	),
):
	try:
		logs_action(uuid_or_device, tail=tail, service=list(service) if service else None, system=system)
	except ExpectedError as e:
		_fail(e)


@app.command(
	context_settings={"ignore_unknown_options": True, "allow_extra_args": True, "help_option_names": []},
)
def version(
	all_versions: bool = typer.Option(False, "--all", "-a", help="Include Python and platform versions"),
	as_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
	"""Display version information."""
	versions = {"edgectl": __version__}
	if all_versions or as_json:
		versions["python"] = platform.python_version()
		versions["platform"] = f"{sys.platform}-{platform.machine()}"
	if as_json:
		typer.echo(json.dumps(versions, indent=2))
	elif all_versions:
		for name, value in versions.items():
			typer.echo(f"{name} version: {value}")
	else:
		typer.echo(__version__)


@app.command(hidden=True)
def manifest(
	path: str = typer.Option(MANIFEST_PATH, "--path", help="Where to write the manifest"),
):
	"""Regenerate the command manifest and list the commands it declares."""
	write_manifest(build_manifest(app, __version__), path)
	try:
		command_ids = get_command_ids_from_manifest(path)
		commands = get_commands_from_manifest(path)
	except ExpectedError as e:
		_fail(e)
	for command_id in command_ids:
		usage = " ".join(CommandHelp.compact([command_id, CommandHelp(commands[command_id]).default_usage()]))
		typer.echo(capitanoize_oclif_usage(usage))


def main(argv=None):
	# Exit quietly on Ctrl+C, including while a log stream is being tailed
	signal.signal(signal.SIGINT, lambda *_: sys.exit(130))
	runner = CustomMain(Main(typer.main.get_command(app), argv, prog_name="edgectl"))
	try:
		code = runner.run()
	except ExpectedError as e:
		typer.echo(typer.style(f"Error: {e}", fg=typer.colors.RED), err=True)
		sys.exit(1)
	except Exception as e:
		logger.debug("Unhandled error", exc_info=True)
		typer.echo(typer.style(
			f"Fatal error: {type(e).__name__}: {e}",
			fg=typer.colors.RED
		), err=True)
		sys.exit(1)
	sys.exit(code)


if __name__ == "__main__":
	main()
