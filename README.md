# dabtool

`dab` is an interactive command-line helper for everyday work with Android
devices over `adb`. It uses the connected device directly, or asks you to
choose one when several are attached, then lists installed packages and runs
common actions on them.

## Requirements

- Python 3.10 or later
- The `adb` executable from the Android SDK platform tools, on your `PATH`
- A device with USB debugging enabled

## Installation

```
pip install .
```

## Usage

Run without a subcommand to pick an app and then an action from a menu
(Open, App Info, Uninstall, Clear App Data, Force Kill, Download APK, Grant
Permissions, Revoke Permissions):

```
dab
```

Or go straight to an action:

| Command | What it does |
| --- | --- |
| `dab open` | Launch an app through its launcher activity |
| `dab uninstall` | Uninstall an app |
| `dab clear` | Clear an app's data |
| `dab force-kill` | Force-stop an app |
| `dab download [-o PATH]` | Pull an app's APK to a file or directory (default `<package>.apk` in the current directory) |
| `dab app-info` | Show version code, version name and granted permissions |
| `dab device` | Show model, manufacturer, Android version and other system properties |
| `dab screenshot [-o PATH]` | Save a screenshot (default `screen.png`) |
| `dab record [-o PATH]` | Record the screen until Ctrl+C (default `demo.mp4`) |
| `dab network` | Show IPv4 addresses and the Wi-Fi SSID |
| `dab wifi` | Switch adb to TCP/IP on port 5555 and connect over Wi-Fi |
| `dab usb` | Drop network connections and switch adb back to USB |
| `dab health` | Battery, storage, RAM and network at a glance |
| `dab launch URL` | Open a URL or deep link on the device |
| `dab grant` | Grant runtime permissions to an app |
| `dab revoke` | Revoke runtime permissions from an app |

`dab --version` prints the version.

Lists are shown as numbered menus, 15 entries per page; type the number of
your choice (or the entry's exact text), `n` for the next page and `p` for the
previous one. In multi-select menus, enter several numbers separated by spaces
or commas, or leave the line empty to select nothing. `dab grant` and
`dab revoke` offer a fixed list of common Android permissions. Pressing Ctrl+C
at a prompt quits quietly; any other failure is printed as `Error: ...` and the
command exits with status 1.

## Using it from Python

The pieces are usable on their own:

```python
from dabtool.adb_client import AdbClient

client = AdbClient()  # finds adb on PATH, or pass adb_path=...
device = client.get_device_list()[0]
for app in client.get_installed_apps(device):
    print(app.package_name)
```

`dabtool.parsers` holds pure functions that turn `adb` output into Python
values, such as `parse_device_list`, `parse_package_list`, `find_apk_path`,
`parse_app_info`, `parse_device_properties`, `parse_ipv4_addresses`,
`parse_wifi_ssid`, `parse_battery`, `parse_storage` and `parse_meminfo`. They
can be used without a device attached. Failures from `adb` are raised as
`dabtool.adb_client.AdbError`.

`dabtool.prompts` provides the `select` and `multi_select` menus; both take an
`input_func` so they can be driven without a terminal.

## Limitations

`dab` does not install APKs, push files, show logs or open a shell; it covers
only the commands listed above. Apps are listed by package name, not by their
human-readable label.