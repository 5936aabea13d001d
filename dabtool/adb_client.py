"""Client that drives the ``adb`` executable for one or more devices."""

from __future__ import annotations

import shutil
import subprocess
import sys
from collections.abc import Iterable, Sequence
from pathlib import Path

from termcolor import colored

from dabtool.app import App
from dabtool.parsers import (
    NOT_AVAILABLE,
    AppInfo,
    device_property_rows,
    find_apk_path,
    parse_app_info,
    parse_battery,
    parse_device_list,
    parse_device_properties,
    parse_ipv4_addresses,
    parse_meminfo,
    parse_package_list,
    parse_storage,
    parse_wifi_ssid,
    resolve_output_path,
)

SCREENSHOT_REMOTE_PATH = "/sdcard/screen.png"
RECORDING_REMOTE_PATH = "/sdcard/demo.mp4"
RECORDING_PID_FILE = "/sdcard/screenrecord.pid"
ADB_TCP_PORT = "5555"


class AdbError(Exception):
    """Raised when adb is missing or a device operation fails."""


def _heading(text: str) -> str:
    return colored(text, "yellow", attrs=["bold", "underline"])


def _decode(data: bytes | str | None) -> str:
    if data is None:
        return ""
    if isinstance(data, str):
        return data
    return data.decode("utf-8", errors="replace")


class AdbClient:
    """Runs adb commands and presents their results."""

    def __init__(self, adb_path: str | Path | None = None) -> None:
        if adb_path is None:
            found = shutil.which("adb")
            if found is None:
                raise AdbError("ADB not found in PATH. Please install Android SDK.")
            adb_path = found
        self.adb_path = Path(adb_path)

    def run_command(self, args: Sequence[str]) -> subprocess.CompletedProcess:
        """Run adb with the given arguments and capture its output."""
        try:
            return subprocess.run(
                [str(self.adb_path), *args], capture_output=True, check=False
            )
        except OSError as exc:
            raise AdbError(f"Failed to run {self.adb_path}: {exc}") from exc

    def _stdout(self, args: Sequence[str]) -> str:
        return _decode(self.run_command(args).stdout)

    def get_device_list(self) -> list[str]:
        """Return the serials of connected devices."""
        devices = parse_device_list(self._stdout(["devices", "-l"]))
        if not devices:
            raise AdbError(
                "No connected devices found. Please connect an Android device "
                "via USB and enable USB debugging."
            )
        return devices

    def get_installed_apps(self, device: str) -> list[App]:
        """Return the installed apps, sorted by package name ignoring case."""
        output = self._stdout(["-s", device, "shell", "pm", "list", "packages"])
        return [App.from_package(name) for name in parse_package_list(output)]

    def get_device_apk_path(self, device: str, package_name: str) -> str:
        """Return the on-device path of a package's APK."""
        output = self._stdout(["-s", device, "shell", "pm", "list", "packages", "-f"])
        path = find_apk_path(output, package_name)
        if path is None:
            raise AdbError(f"Could not find APK path for {package_name}")
        return path

    def open_app(self, device: str, package_name: str) -> None:
        """Launch an app through its launcher activity."""
        self.run_command([
            "-s", device, "shell", "monkey", "-p", package_name,
            "-c", "android.intent.category.LAUNCHER", "1",
        ])

    def uninstall_app(self, device: str, package_name: str) -> None:
        """Uninstall an app, raising if adb does not report success."""
        output = self._stdout(["-s", device, "uninstall", package_name])
        if "Success" not in output:
            raise AdbError(f"Failed to uninstall app: {output.strip()}")

    def clear_app_data(self, device: str, package_name: str) -> None:
        """Clear an app's data, raising if adb does not report success."""
        output = self._stdout(["-s", device, "shell", "pm", "clear", package_name])
        if "Success" not in output:
            raise AdbError(f"Failed to clear app data: {output.strip()}")

    def force_kill_app(self, device: str, package_name: str) -> None:
        """Force-stop an app."""
        self.run_command(["-s", device, "shell", "am", "force-stop", package_name])

    def download_apk(
        self, device: str, package_name: str, output_path: str | Path | None = None
    ) -> Path:
        """Pull a package's APK to a local file and return its path."""
        apk_path = self.get_device_apk_path(device, package_name)
        output_file = resolve_output_path(output_path, f"{package_name}.apk")
        print(f"Downloading APK to {output_file}")
        self.run_command(["-s", device, "pull", apk_path, str(output_file)])
        return output_file

    def get_app_info(self, device: str, package_name: str) -> AppInfo:
        """Print and return version and granted permissions of a package."""
        output = self._stdout(["-s", device, "shell", "pm", "dump", package_name])
        info = parse_app_info(output)
        print(_heading("\nApp Info"))
        print(f"{colored('Package Name', 'cyan')}: {colored(package_name, 'green')}")
        print(f"{colored('Version Code', 'cyan')}: {colored(info.version_code, 'green')}")
        print(f"{colored('Version Name', 'cyan')}: {colored(info.version_name, 'green')}")
        print(f"{colored('Granted Permissions', 'cyan')}:")
        if not info.granted_permissions:
            print(f"  {colored('None', 'red')}")
        for permission in info.granted_permissions:
            print(f"  {colored(permission, 'blue')}")
        return info

    def get_device_info(self, device: str) -> dict[str, str]:
        """Print and return the relevant system properties of a device."""
        properties = parse_device_properties(
            self._stdout(["-s", device, "shell", "getprop"])
        )
        print(f"\n{_heading('Device Info')}")
        for label, value in device_property_rows(properties):
            print(f"{colored(f'{label:<18}', 'cyan')}: {colored(value, 'green')}")
        return properties

    def take_screenshot(self, device: str, output_path: str | Path | None = None) -> Path:
        """Capture the screen and pull the image to a local file."""
        output_file = resolve_output_path(output_path, "screen.png")
        self.run_command(["-s", device, "shell", "screencap", "-p", SCREENSHOT_REMOTE_PATH])
        self.run_command(["-s", device, "pull", SCREENSHOT_REMOTE_PATH, str(output_file)])
        print(f"Screenshot saved to {output_file}")
        return output_file

    def _stop_remote_recording(self, device: str) -> None:
        try:
            pid = self._stdout(["-s", device, "shell", "cat", RECORDING_PID_FILE]).strip()
            if pid:
                self.run_command(["-s", device, "shell", "kill", "-2", pid])
        except AdbError:
            pass

    def record_screen(self, device: str, output_path: str | Path | None = None) -> Path:
        """Record the screen until Ctrl+C, then pull the video to a local file."""
        output_file = resolve_output_path(output_path, "demo.mp4")
        print("Recording... Press Ctrl+C to stop.")
        start_cmd = (
            f"screenrecord {RECORDING_REMOTE_PATH} & echo $! > {RECORDING_PID_FILE}"
            f" && wait $(cat {RECORDING_PID_FILE})"
        )
        try:
            child = subprocess.Popen([str(self.adb_path), "-s", device, "shell", start_cmd])
        except OSError as exc:
            raise AdbError(f"Failed to run {self.adb_path}: {exc}") from exc
        try:
            returncode = child.wait()
        except KeyboardInterrupt:
            self._stop_remote_recording(device)
            returncode = child.wait()
        for args in (
            ["-s", device, "pull", RECORDING_REMOTE_PATH, str(output_file)],
            ["-s", device, "shell", "rm", RECORDING_REMOTE_PATH],
            ["-s", device, "shell", "rm", RECORDING_PID_FILE],
        ):
            try:
                self.run_command(args)
            except AdbError:
                pass
        print(f"Screen recording saved to {output_file}")
        if returncode != 0:
            raise AdbError("Screenrecord failed or was interrupted")
        return output_file

    def get_network_info(self, device: str) -> tuple[list[str], str | None]:
        """Print and return the device's IPv4 addresses and Wi-Fi SSID."""
        addresses = parse_ipv4_addresses(
            self._stdout(["-s", device, "shell", "ip", "-4", "addr", "show"])
        )
        print(f"\n{_heading('Network Interfaces (IP addresses)')}")
        for address in addresses:
            print(f"{colored('IP Address:', 'cyan')} {colored(address, 'green')}")
        ssid = parse_wifi_ssid(self._stdout(["-s", device, "shell", "dumpsys", "wifi"]))
        print(f"\n{_heading('WiFi Info')}")
        print(f"{colored('SSID:', 'cyan')} {colored(ssid or NOT_AVAILABLE, 'green')}")
        return addresses, ssid

    def enable_wifi(self, device: str) -> str:
        """Switch adb to TCP/IP and connect over Wi-Fi; return the device address."""
        output = self._stdout(["-s", device, "shell", "ip", "-4", "addr", "show", "wlan0"])
        addresses = parse_ipv4_addresses(output)
        if not addresses:
            raise AdbError(
                "Could not determine device Wi-Fi IP address. Is Wi-Fi enabled?"
            )
        ip = addresses[0]
        print(f"Enabling ADB over Wi-Fi (TCP/IP {ADB_TCP_PORT})...")
        self.run_command(["-s", device, "tcpip", ADB_TCP_PORT])
        print(f"Connecting to {ip}:{ADB_TCP_PORT}...")
        print(self._stdout(["connect", f"{ip}:{ADB_TCP_PORT}"]).strip())
        print("\nYou can now disconnect the USB cable and use ADB over Wi-Fi!")
        return ip

    def enable_usb(self, device: str) -> None:
        """Drop network connections and switch adb back to USB mode."""
        print("Disconnecting all ADB over network connections...")
        try:
            self.run_command(["disconnect"])
        except AdbError:
            pass
        print("Switching ADB back to USB mode...")
        self.run_command(["-s", device, "usb"])
        print(
            "ADB is now in USB mode. If you were connected over Wi-Fi, "
            "you may disconnect the Wi-Fi connection."
        )

    def get_device_health(self, device: str) -> None:
        """Print battery, storage, memory and network status."""
        level, status = parse_battery(
            self._stdout(["-s", device, "shell", "dumpsys", "battery"])
        )
        storage = parse_storage(self._stdout(["-s", device, "shell", "df", "/data"]))
        total_ram, free_ram = parse_meminfo(
            self._stdout(["-s", device, "shell", "cat", "/proc/meminfo"])
        )
        addresses = parse_ipv4_addresses(
            self._stdout(["-s", device, "shell", "ip", "-4", "addr", "show"])
        )
        ip = next(
            (addr for addr in addresses if addr and addr != "127.0.0.1"), NOT_AVAILABLE
        )
        ssid = parse_wifi_ssid(self._stdout(["-s", device, "shell", "dumpsys", "wifi"]))
        print(f"\n{_heading('Device Health Check')}")
        print(
            f"{colored('Battery:', 'cyan')} {colored(level, 'green')}% "
            f"(Status: {colored(status, 'green')})"
        )
        print(f"{colored('Storage:', 'cyan')} {colored(storage, 'green')}")
        print(f"{colored('RAM:', 'cyan')} {free_ram:.2f} GB free / {total_ram:.2f} GB total")
        print(
            f"{colored('Network:', 'cyan')} {colored(ip, 'green')} "
            f"(SSID: {colored(ssid or NOT_AVAILABLE, 'green')})"
        )

    def launch_url(self, device: str, url: str) -> None:
        """Open a URL or deep link on the device."""
        result = self.run_command([
            "-s", device, "shell", "am", "start",
            "-a", "android.intent.action.VIEW", "-d", url,
        ])
        stderr = _decode(result.stderr)
        if stderr.strip():
            print(
                f"{colored('Error launching URL:', 'red')} {colored(stderr, 'red')}",
                file=sys.stderr,
            )

    def _change_permissions(
        self, action: str, device: str, package_name: str, permissions: Iterable[str]
    ) -> None:
        verb = "granting" if action == "grant" else "revoking"
        for permission in permissions:
            result = self.run_command(
                ["-s", device, "shell", "pm", action, package_name, permission]
            )
            stderr = _decode(result.stderr)
            if stderr.strip():
                print(
                    f"Error {verb} {permission}: {colored(stderr, 'red')}",
                    file=sys.stderr,
                )

    def grant_permissions(
        self, device: str, package_name: str, permissions: Iterable[str]
    ) -> None:
        """Grant each permission to a package, reporting failures on stderr."""
        self._change_permissions("grant", device, package_name, permissions)

    def revoke_permissions(
        self, device: str, package_name: str, permissions: Iterable[str]
    ) -> None:
        """Revoke each permission from a package, reporting failures on stderr."""
        self._change_permissions("revoke", device, package_name, permissions)