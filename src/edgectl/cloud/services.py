# Service id to name resolution

import logging

from ..errors import EdgectlError

logger = logging.getLogger(__name__)


def service_id_to_name(cloud, service_id):
	"""Resolve a numeric service id to its name, or None when it cannot be resolved.

	Successful lookups are cached on the client for the rest of the command.
	"""
	if service_id is None:
		return None
	cache = cloud.service_names
	if service_id in cache:
		return cache[service_id]
	try:
		service = cloud.get_service(service_id)
	except EdgectlError as e:
		logger.debug("Could not resolve service %s: %s", service_id, e)
		return None
	name = service.get("service_name") if service else None
	cache[service_id] = name
	return name
