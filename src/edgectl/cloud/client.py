# Cloud API client - using stdlib urllib for fast imports

import http.client
import json
import logging
import threading
import urllib.error
import urllib.parse
import urllib.request

from ..config import load_config
from ..errors import (
	CloudConnectionError,
	CloudResponseError,
	DeviceNotFoundError,
	EdgectlError,
	LogStreamClosedError,
	NotLoggedInError,
)
from ..models import LogMessage

logger = logging.getLogger(__name__)

# Number of past lines replayed when a live subscription starts
SUBSCRIBE_BACKLOG = 100


def _decode_lines(resp):
	"""Yield parsed JSON objects from a newline-delimited JSON response."""
	for raw in resp:
		line = raw.decode("utf-8", errors="replace").strip()
		if not line:
			continue
		try:
			data = json.loads(line)
		except ValueError:
			logger.debug("Skipping malformed log line: %r", line)
			continue
		if isinstance(data, dict):
			yield data


class CloudClient:
	"""Minimal client for the device-management cloud API."""

	def __init__(self, api_url, token=None, timeout=30):
		self.api_url = api_url.rstrip("/")
		self.token = token
		self.timeout = timeout
		self.logs = LogsClient(self)
		self.service_names = {}

	def _headers(self):
		headers = {"Accept": "application/json"}
		if self.token:
			headers["Authorization"] = f"Bearer {self.token}"
		return headers

	def _open(self, method, path, timeout):
		url = f"{self.api_url}{path}"
		logger.debug("%s %s", method, url)
		req = urllib.request.Request(url, headers=self._headers(), method=method)
		try:
			return urllib.request.urlopen(req, timeout=timeout)
		except urllib.error.HTTPError as e:
			if e.code == 401:
				raise NotLoggedInError("Authentication failed (HTTP 401). Your API token may have expired.")
			if e.code == 404:
				raise DeviceNotFoundError(f"Not found: {path}")
			raise EdgectlError(f"Cloud API error: HTTP {e.code} - {e.reason}")
		except urllib.error.URLError as e:
			raise CloudConnectionError(f"Cannot connect to {self.api_url}: {e.reason}")
		except (OSError, http.client.HTTPException) as e:
			raise CloudConnectionError(f"Cannot connect to {self.api_url}: {e}")

	def _request(self, method, path):
		"""Make an HTTP request and decode the JSON body."""
		with self._open(method, path, self.timeout) as resp:
			try:
				raw = resp.read().decode("utf-8", errors="replace")
			except (OSError, http.client.HTTPException) as e:
				raise CloudConnectionError(f"Connection to {self.api_url} failed while reading: {e}")
		if not raw.strip():
			return None
		try:
			return json.loads(raw)
		except ValueError:
			raise CloudResponseError(f"Unexpected response from {self.api_url}{path}: not JSON")

	def whoami(self):
		return self._request("GET", "/user/v1/whoami")

	def is_logged_in(self):
		"""True when a token is configured and the API accepts it."""
		if not self.token:
			return False
		try:
			self.whoami()
		except NotLoggedInError:
			return False
		return True

	def get_service(self, service_id):
		"""Return the service record for ``service_id`` or None if unknown."""
		path = f"/v6/service({urllib.parse.quote(str(service_id), safe='')})?$select=service_name"
		try:
			body = self._request("GET", path)
		except DeviceNotFoundError:
			return None
		if not isinstance(body, dict):
			return None
		records = body.get("d")
		if not isinstance(records, list) or not records:
			return None
		return records[0] if isinstance(records[0], dict) else None


class LogsClient:
	"""Device log operations."""

	def __init__(self, client):
		self._client = client

	def _path(self, uuid, **params):
		query = {key: value for key, value in params.items() if value is not None}
		path = f"/device/v2/{urllib.parse.quote(uuid, safe='')}/logs"
		if query:
			path += "?" + urllib.parse.urlencode(query)
		return path

	def history(self, uuid, count=None):
		"""Fetch the stored log history of a device, oldest first."""
		body = self._client._request("GET", self._path(uuid, count=count))
		if not body:
			return []
		if not isinstance(body, list):
			raise CloudResponseError(f"Unexpected log history response: {type(body).__name__}")
		return [LogMessage.from_dict(item) for item in body if isinstance(item, dict)]

	def subscribe(self, uuid, count=SUBSCRIBE_BACKLOG):
		"""Return a LogSubscription for the live logs of a device.

		Call ``start()`` once listeners are registered.
		"""
		path = self._path(uuid, stream=1, count=count)
		return LogSubscription(lambda: self._client._open("GET", path, None))


class LogSubscription:
	"""Live log stream read on a background thread.

	Listeners registered with ``on("line", ...)`` receive each LogMessage,
	listeners registered with ``on("error", ...)`` receive the exception that
	ended the stream. A stream that ends cleanly is reported as
	LogStreamClosedError.
	"""

	EVENTS = ("line", "error")

	def __init__(self, open_stream):
		self._open_stream = open_stream
		self._listeners = {event: [] for event in self.EVENTS}
		self._stopped = threading.Event()
		self._thread = None

	def on(self, event, callback):
		if event not in self._listeners:
			raise ValueError(f"Unknown event '{event}'")
		self._listeners[event].append(callback)
		return self

	def start(self):
		if self._thread is None:
			self._thread = threading.Thread(target=self._run, name="log-subscription", daemon=True)
			self._thread.start()
		return self

	def unsubscribe(self):
		self._stopped.set()

	@property
	def stopped(self):
		return self._stopped.is_set()

	def _emit(self, event, payload):
		for callback in list(self._listeners[event]):
			callback(payload)

	def _run(self):
		try:
			with self._open_stream() as resp:
				for data in _decode_lines(resp):
					if self.stopped:
						return
					self._emit("line", LogMessage.from_dict(data))
			if not self.stopped:
				raise LogStreamClosedError("Log stream closed by the server")
		except Exception as e:
			if not self.stopped:
				self._emit("error", e)


def get_cloud_client():
	cfg = load_config()
	return CloudClient(
		api_url=cfg.api_url,
		token=cfg.api_token,
		timeout=cfg.request_timeout,
	)
