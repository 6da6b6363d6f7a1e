"""Launch shim that injects an instrumentation agent into a Java server command."""
from ornithe_launcher.version import __version__

__all__ = ["__version__"]
