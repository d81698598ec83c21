"""`python -m buildapi` starts the HTTP server."""

from buildapi.main import run

run()
