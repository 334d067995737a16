# Address classification for device identifiers

import ipaddress
import re

_DOT_LOCAL_RE = re.compile(r"^([a-z0-9-]+\.)+local$", re.IGNORECASE)


def validate_ip_address(value) -> bool:
	"""Return True for IPv4 or IPv6 address literals."""
	if not isinstance(value, str):
		return False
	try:
		ipaddress.ip_address(value.strip())
	except ValueError:
		return False
	return True


def validate_dot_local_url(value) -> bool:
	"""Return True for mDNS hostnames such as ``1a2b3c4.local``."""
	if not isinstance(value, str):
		return False
	return _DOT_LOCAL_RE.match(value.strip()) is not None


def is_local_device(value) -> bool:
	return validate_ip_address(value) or validate_dot_local_url(value)
