"""Command line interface for managing apps and devices through adb."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Callable, Sequence
from enum import Enum
from pathlib import Path

from termcolor import colored

from dabtool.adb_client import AdbClient
from dabtool.app import App
from dabtool.prompts import PromptInterrupted, multi_select, select

VERSION = "0.2.0"
PAGE_SIZE = 15

ANDROID_PERMISSIONS = [
    "android.permission.CAMERA",
    "android.permission.RECORD_AUDIO",
    "android.permission.READ_CONTACTS",
    "android.permission.WRITE_CONTACTS",
    "android.permission.GET_ACCOUNTS",
    "android.permission.ACCESS_FINE_LOCATION",
    "android.permission.ACCESS_COARSE_LOCATION",
    "android.permission.ACCESS_BACKGROUND_LOCATION",
    "android.permission.READ_PHONE_STATE",
    "android.permission.CALL_PHONE",
    "android.permission.READ_CALL_LOG",
    "android.permission.WRITE_CALL_LOG",
    "android.permission.ADD_VOICEMAIL",
    "android.permission.USE_SIP",
    "android.permission.BODY_SENSORS",
    "android.permission.SEND_SMS",
    "android.permission.RECEIVE_SMS",
    "android.permission.READ_SMS",
    "android.permission.RECEIVE_WAP_PUSH",
    "android.permission.RECEIVE_MMS",
    "android.permission.READ_EXTERNAL_STORAGE",
    "android.permission.WRITE_EXTERNAL_STORAGE",
    "android.permission.INTERNET",
]


class Command(Enum):
    """Subcommands of the tool."""

    OPEN = "open"
    UNINSTALL = "uninstall"
    CLEAR = "clear"
    FORCE_KILL = "force-kill"
    DOWNLOAD = "download"
    APP_INFO = "app-info"
    DEVICE = "device"
    SCREENSHOT = "screenshot"
    RECORD = "record"
    NETWORK = "network"
    WIFI = "wifi"
    USB = "usb"
    HEALTH = "health"
    LAUNCH = "launch"
    GRANT = "grant"
    REVOKE = "revoke"


_HELP = {
    Command.OPEN: "Open an app",
    Command.UNINSTALL: "Uninstall an app",
    Command.CLEAR: "Clear app data",
    Command.FORCE_KILL: "Force kill an app",
    Command.DOWNLOAD: "Download APK",
    Command.APP_INFO: "Show app info (version, permissions, etc)",
    Command.DEVICE: "Show device info (model, manufacturer, Android version, etc)",
    Command.SCREENSHOT: "Take a screenshot of the device",
    Command.RECORD: "Record the device screen",
    Command.NETWORK: "Show network info (IP, WiFi, etc)",
    Command.WIFI: "Enable ADB over Wi-Fi",
    Command.USB: "Switch ADB back to USB mode",
    Command.HEALTH: "Device health check (battery, storage, RAM, network)",
    Command.LAUNCH: "Launch a URL or deep link in the Android device",
    Command.GRANT: "Grant permissions to an app",
    Command.REVOKE: "Revoke permissions from an app",
}

_OUTPUT_COMMANDS = {Command.DOWNLOAD, Command.SCREENSHOT, Command.RECORD}

ACTION_MENU = {
    "Open": Command.OPEN,
    "App Info": Command.APP_INFO,
    "Uninstall": Command.UNINSTALL,
    "Clear App Data": Command.CLEAR,
    "Force Kill": Command.FORCE_KILL,
    "Download APK": Command.DOWNLOAD,
    "Grant Permissions": Command.GRANT,
    "Revoke Permissions": Command.REVOKE,
}

SelectFunc = Callable[..., str]
MultiSelectFunc = Callable[..., list]


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one subparser per command."""
    parser = argparse.ArgumentParser(prog="dab", description="Android package manager CLI tool")
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    parser.set_defaults(command=None, output=None, url=None)
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    for command, help_text in _HELP.items():
        sub = subparsers.add_parser(command.value, help=help_text)
        if command in _OUTPUT_COMMANDS:
            sub.add_argument("-o", "--output", type=Path, default=None)
        if command is Command.LAUNCH:
            sub.add_argument("url", help="The URL or deep link to launch")
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse arguments, turning the command name into a Command (or None)."""
    args = build_parser().parse_args(argv)
    args.command = Command(args.command) if args.command else None
    return args


def _heading(text: str) -> None:
    print(colored(text, "yellow"))


def _run_device_command(args: argparse.Namespace, client, device: str) -> bool:
    """Run a command that needs no app; return whether one was run."""
    match args.command:
        case Command.DEVICE:
            _heading("Fetching device info...")
            client.get_device_info(device)
        case Command.NETWORK:
            _heading("Fetching network info...")
            client.get_network_info(device)
        case Command.SCREENSHOT:
            _heading("Taking screenshot...")
            client.take_screenshot(device, args.output)
        case Command.RECORD:
            _heading("Recording screen...")
            client.record_screen(device, args.output)
        case Command.WIFI:
            _heading("Setting up ADB over Wi-Fi...")
            client.enable_wifi(device)
        case Command.USB:
            _heading("Switching ADB to USB mode...")
            client.enable_usb(device)
        case Command.HEALTH:
            _heading("Checking device health...")
            client.get_device_health(device)
        case Command.LAUNCH:
            print(f"{colored('Launching:', 'green')} {colored(args.url, 'cyan')}")
            client.launch_url(device, args.url)
        case _:
            return False
    return True


def _select_app(apps: list[App], select_func: SelectFunc) -> App:
    names = [app.package_name for app in apps]
    chosen = select_func("Select app:", names, page_size=PAGE_SIZE)
    return apps[names.index(chosen)]


def _change_permissions(
    grant: bool, client, device: str, app: App, multi_select_func: MultiSelectFunc
) -> None:
    verb = "grant" if grant else "revoke"
    selected = multi_select_func(
        f"Select permissions to {verb} (space to select, enter to apply):",
        list(ANDROID_PERMISSIONS),
        page_size=PAGE_SIZE,
    )
    if not selected:
        print("No permissions selected.")
        return
    if grant:
        client.grant_permissions(device, app.package_name, selected)
        print("Permissions granted successfully.")
    else:
        client.revoke_permissions(device, app.package_name, selected)
        print("Permissions revoked successfully.")


def _run_app_command(
    command: Command,
    args: argparse.Namespace,
    client,
    device: str,
    app: App,
    multi_select_func: MultiSelectFunc,
) -> None:
    match command:
        case Command.OPEN:
            print(f"{colored('Opening', 'green')} {app.app_name}")
            client.open_app(device, app.package_name)
        case Command.UNINSTALL:
            print(f"{colored('Uninstalling', 'red')} {app.app_name}")
            client.uninstall_app(device, app.package_name)
        case Command.CLEAR:
            print(f"{colored('Clearing', 'blue')} data for {app.app_name}")
            client.clear_app_data(device, app.package_name)
        case Command.FORCE_KILL:
            print(f"{colored('Force killing', 'red')} {app.app_name}")
            client.force_kill_app(device, app.package_name)
        case Command.DOWNLOAD:
            print(f"{colored('Downloading', 'cyan')} APK for {app.app_name}")
            output = getattr(args, "output", None) if args.command is Command.DOWNLOAD else None
            path = client.download_apk(device, app.package_name, output)
            print(f"APK downloaded to {path}")
        case Command.APP_INFO:
            print(f"{colored('Fetching info for', 'yellow')} {app.app_name}")
            client.get_app_info(device, app.package_name)
        case Command.GRANT:
            _heading("Granting permissions...")
            _change_permissions(True, client, device, app, multi_select_func)
        case Command.REVOKE:
            _heading("Revoking permissions...")
            _change_permissions(False, client, device, app, multi_select_func)
        case _:
            raise ValueError(f"{command.value} is not an app command")


def run(
    args: argparse.Namespace,
    client,
    select_func: SelectFunc = select,
    multi_select_func: MultiSelectFunc = multi_select,
) -> None:
    """Pick a device, then carry out the requested command or ask for one."""
    devices = client.get_device_list()
    device = select_func("Select device:", devices) if len(devices) > 1 else devices[0]

    if _run_device_command(args, client, device):
        return

    if args.command in (Command.GRANT, Command.REVOKE):
        grant = args.command is Command.GRANT
        _heading("Granting permissions..." if grant else "Revoking permissions...")
        app = _select_app(client.get_installed_apps(device), select_func)
        _change_permissions(grant, client, device, app, multi_select_func)
        return

    _heading("Loading installed apps...")
    apps = client.get_installed_apps(device)
    if not apps:
        _heading("No installed apps found.")
        return
    app = _select_app(apps, select_func)
    command = args.command
    if command is None:
        command = ACTION_MENU[select_func("Select action:", list(ACTION_MENU))]
    _run_app_command(command, args, client, device, app, multi_select_func)


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point of the ``dab`` command; returns the exit status."""
    args = parse_args(argv)
    try:
        client = AdbClient()
        run(args, client)
    except PromptInterrupted:
        return 0
    except Exception as exc:  # every failure ends the command with a message
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())