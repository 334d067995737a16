# Usage strings and the generated command manifest

import json
import re

import typer

from .errors import ManifestError, ManifestNotFoundError

MANIFEST_PATH = "./oclif.manifest.json"

_BARE_ARG_RE = re.compile(r"(?<=\s)[A-Z]+(?=(\s|$))")


def _field(obj, name, default=None):
	if isinstance(obj, dict):
		return obj.get(name, default)
	return getattr(obj, name, default)


class CommandHelp:
	"""Builds the usage line of a single command from its argument descriptors."""

	def __init__(self, command):
		self.command = command

	def arg(self, arg) -> str:
		name = str(_field(arg, "name", "")).upper()
		if _field(arg, "required", False):
			return name
		return f"[{name}]"

	def default_usage(self) -> str:
		args = _field(self.command, "args") or []
		return " ".join(CommandHelp.compact([
			" ".join(self.arg(a) for a in args if not _field(a, "hidden", False)),
		]))

	@staticmethod
	def compact(items):
		return [item for item in items if item]


def capitanoize_oclif_usage(oclif_usage) -> str:
	"""Convert e.g. 'env add NAME [VALUE]' to 'env add <name> [value]'."""
	if oclif_usage is None:
		oclif_usage = ""
	elif isinstance(oclif_usage, (list, tuple)):
		oclif_usage = ",".join(str(part) for part in oclif_usage)
	return _BARE_ARG_RE.sub(lambda m: f"<{m.group(0)}>", str(oclif_usage)).lower()


def get_commands_from_manifest(path=MANIFEST_PATH):
	try:
		with open(path, "r", encoding="utf-8") as f:
			manifest = json.load(f)
	except FileNotFoundError:
		raise ManifestNotFoundError("Oclif manifest not found.")
	return manifest.get("commands")


def get_command_ids_from_manifest(path=MANIFEST_PATH):
	commands = get_commands_from_manifest(path)
	if commands is None:
		raise ManifestError("Commands section not found in manifest.")
	return list(commands.keys())


def _describe_param(param):
	# typer may ship its own copy of click, so match on the parameter kind
	if getattr(param, "param_type_name", None) == "argument":
		return "arg", {
			"name": getattr(param, "metavar", None) or param.name,
			"required": bool(param.required),
			"hidden": bool(getattr(param, "hidden", False)),
		}
	longs = [opt for opt in param.opts if opt.startswith("--")]
	shorts = [opt for opt in param.opts + param.secondary_opts if not opt.startswith("--")]
	flag = {
		"name": (longs[0] if longs else param.opts[0]).lstrip("-"),
		"type": "boolean" if getattr(param, "is_flag", False) else "option",
		"multiple": bool(getattr(param, "multiple", False)),
		"hidden": bool(getattr(param, "hidden", False)),
	}
	if shorts:
		flag["char"] = shorts[0].lstrip("-")
	return "flag", flag


def build_manifest(app, version):
	"""Describe every command of a typer app in manifest form."""
	group = typer.main.get_command(app)
	commands = {}
	for name, command in sorted(group.commands.items()):
		args = []
		flags = {}
		for param in command.params:
			kind, described = _describe_param(param)
			if kind == "arg":
				args.append(described)
			elif described["name"] != "help":
				flags[described["name"]] = described
		help_text = (command.help or "").strip()
		commands[name] = {
			"id": name,
			"description": command.short_help or (help_text.splitlines()[0] if help_text else ""),
			"hidden": bool(command.hidden),
			"args": args,
			"flags": flags,
		}
	return {"version": version, "commands": commands}


def write_manifest(manifest, path=MANIFEST_PATH):
	with open(path, "w", encoding="utf-8") as f:
		json.dump(manifest, f, indent=2, sort_keys=True)
		f.write("\n")
