# edgectl - command-line access to device logs in the cloud and on the LAN

__version__ = "0.1.0"
