"""Parsing of the text that adb and device shell commands print."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

NOT_AVAILABLE = "N/A"

DEVICE_PROPERTY_LABELS: dict[str, str] = {
    "ro.product.model": "Model",
    "ro.product.manufacturer": "Manufacturer",
    "ro.product.brand": "Brand",
    "ro.product.device": "Device",
    "ro.product.name": "Name",
    "ro.build.version.release": "Android Version",
    "ro.build.version.sdk": "SDK",
    "ro.build.version.codename": "Codename",
    "ro.product.board": "Board",
    "ro.product.cpu.abi": "CPU ABI",
    "ro.product.locale": "Locale",
    "ro.build.id": "Build ID",
    "ro.build.version.security_patch": "Security Patch",
}

_DEVICE_LIST_NOISE = (
    "daemon not running",
    "daemon started",
    "List of devices attached",
)

_IGNORED_SSIDS = {"<unknown ssid>", "0x0"}


@dataclass
class AppInfo:
    """Version and permission details of an installed package."""

    version_code: str = NOT_AVAILABLE
    version_name: str = NOT_AVAILABLE
    granted_permissions: list[str] = field(default_factory=list)


def parse_device_list(output: str) -> list[str]:
    """Return the device serials listed by ``adb devices -l``."""
    devices = []
    for line in output.splitlines():
        if not line or any(noise in line for noise in _DEVICE_LIST_NOISE):
            continue
        parts = line.split()
        if parts:
            devices.append(parts[0])
    return devices


def parse_package_list(output: str) -> list[str]:
    """Return package names from ``pm list packages``, sorted case-insensitively."""
    names = [line.replace("package:", "").strip() for line in output.splitlines() if line]
    return sorted(names, key=str.lower)


def find_apk_path(output: str, package_name: str) -> str | None:
    """Find the APK path of a package in ``pm list packages -f`` output."""
    wanted = package_name.strip()
    for line in output.splitlines():
        if not line:
            continue
        entry = line.replace("package:", "")
        if entry.strip().endswith(wanted):
            return entry.replace(f"={package_name}", "")
    return None


def parse_app_info(output: str) -> AppInfo:
    """Extract version and granted permissions from ``pm dump`` output."""
    info = AppInfo()
    version_code: str | None = None
    version_name: str | None = None
    for line in output.splitlines():
        trimmed = line.strip()
        if version_code is None and trimmed.startswith("versionCode="):
            tokens = trimmed.split("=")[1].split()
            version_code = tokens[0] if tokens else ""
        if version_name is None and trimmed.startswith("versionName="):
            version_name = trimmed.split("=")[1]
        is_permission = (
            "android.permission." in trimmed or "com.android.permission." in trimmed
        )
        if is_permission and "granted=true" in trimmed:
            tokens = trimmed.split(":")[0].split()
            permission = tokens[0] if tokens else ""
            if permission and permission not in info.granted_permissions:
                info.granted_permissions.append(permission)
    if version_code is not None:
        info.version_code = version_code
    if version_name is not None:
        info.version_name = version_name
    return info


def parse_device_properties(output: str) -> dict[str, str]:
    """Collect the relevant ``getprop`` entries as a key to value mapping."""
    properties: dict[str, str] = {}
    for line in output.splitlines():
        key, sep, value = line.partition("]: [")
        if not sep:
            continue
        key = key.lstrip("[")
        if key in DEVICE_PROPERTY_LABELS:
            properties[key] = value.rstrip("]")
    return properties


def device_property_rows(properties: dict[str, str]) -> list[tuple[str, str]]:
    """Return (label, value) pairs for known properties in display order."""
    return [
        (label, properties[key])
        for key, label in DEVICE_PROPERTY_LABELS.items()
        if key in properties
    ]


def parse_ipv4_addresses(output: str) -> list[str]:
    """Return the addresses (without prefix length) from ``ip -4 addr show``."""
    addresses = []
    for line in output.splitlines():
        trimmed = line.strip()
        if not trimmed.startswith("inet "):
            continue
        tokens = trimmed[len("inet "):].split()
        address = tokens[0] if tokens else ""
        addresses.append(address.split("/")[0])
    return addresses


def parse_wifi_ssid(output: str) -> str | None:
    """Return the first meaningful SSID in ``dumpsys wifi`` output."""
    for line in output.splitlines():
        index = line.find("SSID:")
        if index < 0:
            continue
        value = line[index + len("SSID:"):].strip().split(",")[0].strip()
        value = value.strip('"').strip()
        if value and value not in _IGNORED_SSIDS:
            return value
    return None


def parse_battery(output: str) -> tuple[str, str]:
    """Return (level, status) from ``dumpsys battery`` output."""
    level = NOT_AVAILABLE
    status = NOT_AVAILABLE
    for line in output.splitlines():
        trimmed = line.strip()
        if trimmed.startswith("level:"):
            level = trimmed.split(":")[1].strip()
        if trimmed.startswith("status:"):
            status = trimmed.split(":")[1].strip()
    return level, status


def _parse_number(text: str) -> float | None:
    if "_" in text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def parse_storage(output: str) -> str:
    """Summarise the first data row of ``df`` output in gigabytes."""
    for line in output.splitlines()[1:]:
        cols = line.split()
        if len(cols) < 5:
            continue
        total_kb, used_kb, free_kb = (
            _parse_number(col.replace(",", "")) or 0.0 for col in cols[1:4]
        )
        kb_per_gb = 1024.0 * 1024.0
        percent_used = used_kb / total_kb * 100.0 if total_kb > 0.0 else 0.0
        percent_free = free_kb / total_kb * 100.0 if total_kb > 0.0 else 0.0
        return (
            f"Used: {used_kb / kb_per_gb:.2f} GB ({percent_used:.1f}%)"
            f" / Total: {total_kb / kb_per_gb:.2f} GB"
            f" | Free: {free_kb / kb_per_gb:.2f} GB ({percent_free:.1f}%)"
        )
    return NOT_AVAILABLE


def _meminfo_value(line: str, prefix: str) -> float | None:
    tokens = line.replace(prefix, "").split()
    return _parse_number(tokens[0]) if tokens else None


def parse_meminfo(output: str) -> tuple[float, float]:
    """Return (total, available) RAM in gigabytes from ``/proc/meminfo``."""
    total_kb: float | None = None
    free_kb: float | None = None
    for line in output.splitlines():
        if line.startswith("MemTotal:"):
            total_kb = _meminfo_value(line, "MemTotal:")
        if line.startswith("MemAvailable:"):
            free_kb = _meminfo_value(line, "MemAvailable:")
    if total_kb is None or free_kb is None:
        return 0.0, 0.0
    return total_kb / 1024.0 / 1024.0, free_kb / 1024.0 / 1024.0


def resolve_output_path(output_path: str | Path | None, default_name: str) -> Path:
    """Choose where a pulled file goes: a given file, a given directory, or the cwd."""
    if output_path is None:
        return Path.cwd() / default_name
    path = Path(output_path)
    if path.is_dir():
        return path / default_name
    return path