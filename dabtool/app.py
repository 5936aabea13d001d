"""Installed application record."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class App:
    """An application installed on a device."""

    package_name: str
    app_name: str

    @classmethod
    def from_package(cls, package_name: str) -> "App":
        """Build an app whose display name is its package name."""
        return cls(package_name=package_name, app_name=package_name)