# Logging setup for the edgectl CLI

import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"


def setup_logging(level="WARNING"):
	"""Route diagnostic logging to stderr so it never mixes with log output."""
	if isinstance(level, str):
		level = getattr(logging, level.upper(), logging.WARNING)
	handler = logging.StreamHandler(sys.stderr)
	handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
	root = logging.getLogger("edgectl")
	root.handlers = [handler]
	root.setLevel(level)
	root.propagate = False
	return root
