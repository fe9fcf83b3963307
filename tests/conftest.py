"""Global test fixtures."""

import os

import logfire

# Set the session secret before any test module builds a Config
os.environ.setdefault("IDLINK_AUTH__SESSION_SECRET", "test-session-secret-for-unit-tests")

logfire.configure(send_to_logfire=False, console=False)
