# The logs command: show logs from a cloud device or a local mode device

import logging
import queue

from ..cloud.auth import check_logged_in
from ..cloud.client import SUBSCRIBE_BACKLOG
from ..cloud.services import service_id_to_name
from ..device.api import DeviceAPI
from ..display import display_device_logs, display_log_object
from ..errors import DeviceUnreachableError
from ..validation import validate_dot_local_url, validate_ip_address

logger = logging.getLogger(__name__)

UNKNOWN_SERVICE = "Unknown service"

LOGS_HELP = """Show logs for a specific device.

By default, the command prints all log messages and exits.

To continuously stream output, and see new logs in real time, use the --tail option.

If an IP or .local address is passed to this command, logs are displayed from
a local mode device with that address. Note that --tail is implied
when this command is provided a local mode device.

Logs from a single service can be displayed with the --service flag. Just system logs
can be shown with the --system flag. Note that these flags can be used together.

Examples:

\b
    $ edgectl logs 23c73a1
    $ edgectl logs 23c73a1 --tail
\b
    $ edgectl logs 192.168.0.31
    $ edgectl logs 192.168.0.31 --service my-service
    $ edgectl logs 192.168.0.31 --service my-service-1 --service my-service-2
\b
    $ edgectl logs 23c73a1.local --system
    $ edgectl logs 23c73a1.local --system --service my-service
"""


def normalize_services(service):
	if service is None:
		return None
	if isinstance(service, str):
		return [service]
	services = list(service)
	return services or None


def _default_cloud():
	from ..cloud.client import get_cloud_client
	return get_cloud_client()


def _default_device_api(address):
	from ..config import load_config
	cfg = load_config()
	return DeviceAPI(address, port=cfg.device_api_port, timeout=cfg.request_timeout)


def show_local_logs(address, system=False, services=None, device_api_factory=None):
	"""Stream logs from a local mode device until it disconnects."""
	device_api = (device_api_factory or _default_device_api)(address)
	logger.debug("Checking we can access device")
	try:
		device_api.ping()
	except Exception as e:
		logger.debug("Ping of %s failed: %s", address, e)
		raise DeviceUnreachableError(f"Cannot access local mode device at address {address}") from e
	log_stream = device_api.get_log_stream()
	display_device_logs(log_stream, system, services)


def _cloud_line_printer(cloud, system, services):
	def display_cloud_log(line):
		if not line.is_system:
			service_name = service_id_to_name(cloud, line.service_id)
			if service_name is None:
				service_name = UNKNOWN_SERVICE
			line = line.with_service_name(service_name)
		display_log_object(line, system, services)
	return display_cloud_log


def tail_cloud_logs(cloud, uuid, system=False, services=None):
	"""Print live logs until the stream fails; never returns normally."""
	display_cloud_log = _cloud_line_printer(cloud, system, services)
	errors = queue.Queue()
	log_stream = cloud.logs.subscribe(uuid, count=SUBSCRIBE_BACKLOG)
	log_stream.on("line", display_cloud_log)
	log_stream.on("error", errors.put)
	log_stream.start()
	# Quit with Ctrl+C; a broken connection surfaces as an error
	try:
		error = errors.get()
	finally:
		log_stream.unsubscribe()
	raise error


def print_cloud_history(cloud, uuid, system=False, services=None):
	display_cloud_log = _cloud_line_printer(cloud, system, services)
	for log_message in cloud.logs.history(uuid):
		display_cloud_log(log_message)


def logs_action(uuid_or_device, tail=False, service=None, system=False, cloud=None, device_api_factory=None):
	services = normalize_services(service)
	system = bool(system)

	if validate_ip_address(uuid_or_device) or validate_dot_local_url(uuid_or_device):
		show_local_logs(uuid_or_device, system, services, device_api_factory=device_api_factory)
		return

	cloud = cloud or _default_cloud()
	check_logged_in(cloud)
	if tail:
		tail_cloud_logs(cloud, uuid_or_device, system, services)
	else:
		print_cloud_history(cloud, uuid_or_device, system, services)
