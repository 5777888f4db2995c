from importlib.metadata import version

__version__ = version("kubemon")

# Kubemon does not configure logging at import time. The CLI calls
# configure_logging() on startup; library users configure structlog themselves.
