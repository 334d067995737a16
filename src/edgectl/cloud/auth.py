# Login check for cloud commands

from ..errors import NotLoggedInError


def check_logged_in(cloud):
	"""Raise NotLoggedInError unless the client holds a valid API token."""
	if not cloud.is_logged_in():
		raise NotLoggedInError(
			"You have to log in to continue.\n"
			"Set EDGECTL_API_TOKEN or write your API token to ~/.edgectl/token."
		)
