"""Interactive helper for managing Android apps and devices over adb."""

__version__ = "0.2.0"