# Log message model shared by the cloud and local device log sources

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional, Union

Timestamp = Union[int, float, str, None]


def _pick(data: Dict[str, Any], *keys, default=None):
	for key in keys:
		if key in data and data[key] is not None:
			return data[key]
	return default


@dataclass(frozen=True)
class LogMessage:
	"""A single device log line.

	System lines come from the device supervisor itself and carry no
	service; every other line belongs to a service, identified by
	``service_id`` in the cloud and by ``service_name`` on a local device.
	"""

	message: str
	timestamp: Timestamp = None
	created_at: Timestamp = None
	is_system: bool = False
	is_stderr: bool = False
	service_id: Optional[int] = None
	service_name: Optional[str] = None

	@classmethod
	def from_dict(cls, data: Dict[str, Any]) -> "LogMessage":
		"""Build a message from a wire record, accepting camelCase or snake_case keys."""
		return cls(
			message=str(_pick(data, "message", default="")),
			timestamp=_pick(data, "timestamp"),
			created_at=_pick(data, "createdAt", "created_at"),
			is_system=bool(_pick(data, "isSystem", "is_system", default=False)),
			is_stderr=bool(_pick(data, "isStdErr", "is_stderr", default=False)),
			service_id=_pick(data, "serviceId", "service_id"),
			service_name=_pick(data, "serviceName", "service_name"),
		)

	def with_service_name(self, service_name: str) -> "LogMessage":
		"""Return a copy of the message attributed to ``service_name``."""
		return replace(self, service_name=service_name)
