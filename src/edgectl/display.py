# Terminal rendering of device log lines

from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence

import typer

from .models import LogMessage


def _from_epoch_ms(value):
	return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)


def format_timestamp(value, use_utc=False) -> str:
	"""Render epoch milliseconds or an ISO 8601 string as a readable time.

	Values that do not map to a calendar date are shown as given.
	"""
	text = "" if value is None else str(value).strip()
	try:
		if not text:
			moment = datetime.now(timezone.utc)
		elif isinstance(value, (int, float)):
			moment = _from_epoch_ms(value)
		elif text.isdigit():
			moment = _from_epoch_ms(int(text))
		else:
			moment = datetime.fromisoformat(text.replace("Z", "+00:00"))
			if moment.tzinfo is None:
				moment = moment.replace(tzinfo=timezone.utc)
		if not use_utc:
			moment = moment.astimezone()
	except (ValueError, OverflowError, OSError):
		return text
	return moment.strftime("%Y-%m-%d %H:%M:%S")


def should_display(log: LogMessage, system: bool, services: Optional[Sequence[str]]) -> bool:
	"""Apply the --system and --service filters.

	The two filters are a union: ``--system --service foo`` shows system
	lines and lines from ``foo``.
	"""
	if log.service_name is not None:
		if services:
			return log.service_name in services
		return not system
	# System line
	return system or not services


def format_log_line(log: LogMessage, use_utc=False) -> str:
	timestamp = log.timestamp if log.timestamp is not None else log.created_at
	parts = [f"[{format_timestamp(timestamp, use_utc=use_utc)}]"]
	if log.service_name is not None:
		parts.append(f"[{log.service_name}]")
	parts.append(log.message.rstrip("\r\n"))
	return " ".join(parts)


def display_log_object(log: LogMessage, system=False, services=None):
	if not should_display(log, system, services):
		return False
	line = format_log_line(log)
	if log.is_stderr:
		line = typer.style(line, fg=typer.colors.RED)
	elif log.service_name is None:
		line = typer.style(line, dim=True)
	typer.echo(line)
	return True


def display_device_logs(stream: Iterable[LogMessage], system=False, services=None):
	"""Display every message from a (possibly endless) stream."""
	for log in stream:
		display_log_object(log, system, services)
