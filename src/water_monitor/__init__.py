"""Water Monitor: meter readings, tiered water and sewage billing."""

try:
    from importlib.metadata import version as _pkg_version
    __version__ = _pkg_version("water-monitor")
except Exception:
    __version__ = "dev"
