# Top-level dispatch wrapped around the click command tree

import sys

import typer

VERSION_TOKENS = ("-v", "--version", "version")
HELP_TOKENS = ("-h", "help")


class Main:
	"""Runs a click command for an argv list, with the framework's help interception.

	Help is shown instead of dispatching when argv is empty, starts with
	``-h`` or ``help``, or contains ``--help`` before a ``--`` separator.

	The command may come from standalone click or from the copy typer
	vendors, so it is handled by what it provides rather than by its class.
	"""

	def __init__(self, command, argv=None, prog_name="edgectl"):
		self.command = command
		self.argv = list(sys.argv[1:] if argv is None else argv)
		self.prog_name = prog_name

	def help_override(self) -> bool:
		if not self.argv:
			return True
		if self.argv[0] in HELP_TOKENS:
			return True
		for arg in self.argv:
			if arg == "--help":
				return True
			if arg == "--":
				return False
		return False

	def version_requested(self) -> bool:
		return bool(self.argv) and self.argv[0] in VERSION_TOKENS

	def _valued_options(self):
		opts = set()
		for param in getattr(self.command, "params", []):
			if getattr(param, "param_type_name", None) != "option" or getattr(param, "is_flag", False):
				continue
			opts.update(param.opts)
		return opts

	def _help_target(self):
		valued = self._valued_options()
		skip_next = False
		for arg in self.argv:
			if skip_next:
				skip_next = False
				continue
			if arg in valued:
				skip_next = True
				continue
			if arg in HELP_TOKENS or arg.startswith("-"):
				continue
			return arg
		return None

	def show_help(self):
		with self.command.make_context(self.prog_name, [], resilient_parsing=True) as ctx:
			name = self._help_target()
			sub = self.command.get_command(ctx, name) if name and hasattr(self.command, "get_command") else None
			if sub is None:
				typer.echo(self.command.get_help(ctx))
				return
			with sub.make_context(name, [], parent=ctx, resilient_parsing=True) as sub_ctx:
				typer.echo(sub.get_help(sub_ctx))

	def dispatch(self) -> int:
		args = list(self.argv)
		if args and args[0] in ("-v", "--version"):
			args[0] = "version"
		try:
			result = self.command.main(args=args, prog_name=self.prog_name, standalone_mode=False)
		except typer.Abort:
			typer.echo("Aborted!", err=True)
			return 1
		except Exception as e:
			# Usage and parameter errors know how to print themselves
			if not (hasattr(e, "show") and hasattr(e, "exit_code")):
				raise
			e.show()
			return e.exit_code
		return result if isinstance(result, int) else 0

	def run_with(self, help_override: bool) -> int:
		if help_override:
			self.show_help()
			return 0
		return self.dispatch()

	def run(self) -> int:
		return self.run_with(self.help_override())


class CustomMain:
	"""Wraps a Main so that version requests are never treated as help requests."""

	def __init__(self, main: Main):
		self.main = main

	@property
	def argv(self):
		return self.main.argv

	def help_override(self) -> bool:
		# Let 'edgectl version --help' reach the version command
		if self.main.version_requested():
			return False
		return self.main.help_override()

	def run(self) -> int:
		return self.main.run_with(self.help_override())
