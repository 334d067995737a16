# Client for the HTTP API exposed by devices running in local mode - stdlib urllib

import ipaddress
import json
import logging
import urllib.error
import urllib.request

from ..errors import DeviceAPIError
from ..models import LogMessage

DEFAULT_DEVICE_API_PORT = 48484


def _host_for_url(address):
	try:
		if ipaddress.ip_address(address).version == 6:
			return f"[{address}]"
	except ValueError:
		pass
	return address


class DeviceAPI:
	"""Minimal client for a local mode device's supervisor API."""

	def __init__(self, address, port=DEFAULT_DEVICE_API_PORT, timeout=30, logger=None):
		self.address = address
		self.base_url = f"http://{_host_for_url(address)}:{port}"
		self.timeout = timeout
		self.logger = logger or logging.getLogger(__name__)

	def _open(self, method, path, timeout):
		url = f"{self.base_url}{path}"
		self.logger.debug("%s %s", method, url)
		req = urllib.request.Request(url, method=method)
		try:
			return urllib.request.urlopen(req, timeout=timeout)
		except urllib.error.HTTPError as e:
			raise DeviceAPIError(f"Device API error: HTTP {e.code} - {e.reason}")
		except urllib.error.URLError as e:
			raise DeviceAPIError(f"Cannot connect to device at {self.address}: {e.reason}")
		except OSError as e:
			raise DeviceAPIError(f"Cannot connect to device at {self.address}: {e}")

	def ping(self):
		"""Check the device answers. Raises DeviceAPIError if not."""
		with self._open("GET", "/ping", self.timeout) as resp:
			status = getattr(resp, "status", 200)
			if status < 200 or status >= 300:
				raise DeviceAPIError(f"Device ping failed: HTTP {status}")
			return resp.read().decode("utf-8", errors="replace").strip()

	def get_log_stream(self):
		"""Open the device's live log stream.

		The connection is opened eagerly so that failures surface here; the
		returned iterator yields a LogMessage per line until the device closes
		the connection.
		"""
		resp = self._open("GET", "/v2/local/logs", None)
		return self._iter_messages(resp)

	def _iter_messages(self, resp):
		with resp:
			for raw in resp:
				line = raw.decode("utf-8", errors="replace").strip()
				if not line:
					continue
				try:
					data = json.loads(line)
				except ValueError:
					self.logger.debug("Skipping malformed log line: %r", line)
					continue
				if not isinstance(data, dict):
					self.logger.debug("Skipping non-object log line: %r", line)
					continue
				yield LogMessage.from_dict(data)
