# Error types for edgectl


class EdgectlError(Exception):
	"""Base exception for edgectl errors."""
	pass


class ExpectedError(EdgectlError):
	"""An error with a user-friendly message, reported without a traceback."""
	pass


class ManifestNotFoundError(ExpectedError):
	"""Raised when the command manifest file does not exist."""
	pass


class ManifestError(ExpectedError):
	"""Raised when the command manifest lacks a required section."""
	pass


class DeviceUnreachableError(ExpectedError):
	"""Raised when a local mode device does not answer."""
	pass


class DeviceAPIError(EdgectlError):
	"""Raised when a request to a local device API fails."""
	pass


class NotLoggedInError(ExpectedError):
	"""Raised when a cloud command runs without credentials."""
	pass


class CloudConnectionError(ExpectedError):
	"""Raised when the cloud API is not reachable."""
	pass


class DeviceNotFoundError(ExpectedError):
	"""Raised when the cloud API does not know the requested device."""
	pass


class LogStreamClosedError(EdgectlError):
	"""Raised when a live log stream ends."""
	pass


class CloudResponseError(ExpectedError):
	"""Raised when the cloud API answers with a body that cannot be decoded."""
	pass
