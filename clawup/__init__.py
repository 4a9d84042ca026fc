"""
clawup - one-shot provisioner for a local OpenClaw gateway container.

This package checks for a working Docker installation, collects the install
directory and port, writes a docker-compose manifest with a fresh gateway
token, and starts the service.
"""

__version__ = "0.1.0"
__author__ = "clawup contributors"
