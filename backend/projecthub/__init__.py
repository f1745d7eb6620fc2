"""ProjectHub — project records admin backend, frontend host and reverse proxy."""

__version__ = "0.1.0"
