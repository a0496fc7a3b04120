"""
Core utilities shared across the roster application.

This package hosts cross-cutting pieces (settings, logging setup, CSRF
helpers) so that routers and services do not read os.environ or configure
handlers themselves.
"""
