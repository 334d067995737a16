# Configuration loading for edgectl

import os
from pathlib import Path

# Lazy load dotenv - only when config is first accessed
_dotenv_loaded = False
_custom_dotenv_path = None

DEFAULT_TOKEN_FILE = os.path.join("~", ".edgectl", "token")


def _getenv(name, default):
	value = os.getenv(name)
	return value if value else default


def _read_token_file(path):
	token_path = Path(path).expanduser()
	try:
		token = token_path.read_text(encoding="utf-8").strip()
	except FileNotFoundError:
		return None
	return token or None


class EdgectlConfig:
	"""Loads configuration from environment variables and provides defaults."""
	def __init__(self):
		self.api_url = _getenv("EDGECTL_API_URL", "https://api.edgectl.io").rstrip("/")
		self.token_file = _getenv("EDGECTL_TOKEN_FILE", DEFAULT_TOKEN_FILE)
		# An explicit token wins over the token file
		self.api_token = _getenv("EDGECTL_API_TOKEN", None) or _read_token_file(self.token_file)
		self.request_timeout = int(_getenv("EDGECTL_REQUEST_TIMEOUT", "30"))
		self.device_api_port = int(_getenv("EDGECTL_DEVICE_API_PORT", "48484"))
		self.log_level = _getenv("EDGECTL_LOG_LEVEL", "WARNING").upper()


def set_dotenv_path(path: str):
	"""Set a custom .env file path to load. Must be called before load_config()."""
	global _custom_dotenv_path, _dotenv_loaded
	_custom_dotenv_path = path
	_dotenv_loaded = False  # Reset to force reload with new path


def load_config() -> EdgectlConfig:
	"""Return a config object with all settings loaded."""
	global _dotenv_loaded, _custom_dotenv_path
	if not _dotenv_loaded:
		from dotenv import load_dotenv, find_dotenv
		dotenv_path = os.getenv("DOTENV_PATH") or _custom_dotenv_path
		if dotenv_path:
			# Values from an explicitly requested file take precedence
			load_dotenv(dotenv_path, override=True)
		else:
			# Search for .env file in current directory and parents
			dotenv_path = find_dotenv(usecwd=True)
			if dotenv_path:
				load_dotenv(dotenv_path)
		_dotenv_loaded = True
	return EdgectlConfig()
