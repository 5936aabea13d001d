import subprocess
from pathlib import Path

import pytest

from dabtool import adb_client as adb_module
from dabtool.adb_client import AdbClient, AdbError
from dabtool.app import App

DEVICE = "FAKE0001"


class FakeAdb:
    """Stands in for subprocess.run, answering by argument list."""

    def __init__(self, responses=None):
        self.responses = responses or {}
        self.calls = []

    def __call__(self, cmd, **kwargs):
        args = tuple(cmd[1:])
        self.calls.append(args)
        stdout, stderr = self.responses.get(args, ("", ""))
        return subprocess.CompletedProcess(
            cmd, 0, stdout=stdout.encode(), stderr=stderr.encode()
        )


@pytest.fixture
def fake(monkeypatch):
    runner = FakeAdb()
    monkeypatch.setattr(adb_module.subprocess, "run", runner)
    return runner


@pytest.fixture
def client(fake):
    return AdbClient("/opt/fake/adb")


def test_missing_adb_raises(monkeypatch):
    monkeypatch.setattr(adb_module.shutil, "which", lambda name: None)
    with pytest.raises(AdbError, match="ADB not found in PATH"):
        AdbClient()


def test_adb_found_on_path(monkeypatch):
    monkeypatch.setattr(adb_module.shutil, "which", lambda name: "/opt/fake/adb")
    assert AdbClient().adb_path == Path("/opt/fake/adb")


def test_run_command_passes_adb_path(client, fake):
    result = client.run_command(["version"])
    assert result.args[0] == "/opt/fake/adb"
    assert fake.calls == [("version",)]


def test_get_device_list(client, fake):
    fake.responses[("devices", "-l")] = (
        "* daemon not running; starting now\n"
        "List of devices attached\n"
        f"{DEVICE} device usb:1-1 model:Test\n"
        "\n",
        "",
    )
    assert client.get_device_list() == [DEVICE]


def test_get_device_list_empty_raises(client, fake):
    fake.responses[("devices", "-l")] = ("List of devices attached\n\n", "")
    with pytest.raises(AdbError, match="No connected devices"):
        client.get_device_list()


def test_get_installed_apps_sorted(client, fake):
    fake.responses[("-s", DEVICE, "shell", "pm", "list", "packages")] = (
        "package:org.zeta\npackage:com.Beta\npackage:com.alpha\n",
        "",
    )
    apps = client.get_installed_apps(DEVICE)
    assert apps == [
        App.from_package("com.alpha"),
        App.from_package("com.Beta"),
        App.from_package("org.zeta"),
    ]


def test_get_device_apk_path(client, fake):
    fake.responses[("-s", DEVICE, "shell", "pm", "list", "packages", "-f")] = (
        "package:/data/app/com.other/base.apk=com.other\n"
        "package:/data/app/com.example/base.apk=com.example\n",
        "",
    )
    assert client.get_device_apk_path(DEVICE, "com.example") == "/data/app/com.example/base.apk"


def test_get_device_apk_path_missing(client, fake):
    with pytest.raises(AdbError, match="Could not find APK path for com.example"):
        client.get_device_apk_path(DEVICE, "com.example")


def test_open_app_command(client, fake):
    client.open_app(DEVICE, "com.example")
    assert fake.calls == [(
        "-s", DEVICE, "shell", "monkey", "-p", "com.example",
        "-c", "android.intent.category.LAUNCHER", "1",
    )]


def test_uninstall_success(client, fake):
    fake.responses[("-s", DEVICE, "uninstall", "com.example")] = ("Success\n", "")
    client.uninstall_app(DEVICE, "com.example")
    assert fake.calls == [("-s", DEVICE, "uninstall", "com.example")]


def test_uninstall_failure(client, fake):
    fake.responses[("-s", DEVICE, "uninstall", "com.example")] = ("Failure [DELETE_FAILED]\n", "")
    with pytest.raises(AdbError, match=r"Failed to uninstall app: Failure \[DELETE_FAILED\]"):
        client.uninstall_app(DEVICE, "com.example")


def test_clear_app_data_failure(client, fake):
    with pytest.raises(AdbError, match="Failed to clear app data"):
        client.clear_app_data(DEVICE, "com.example")


def test_force_kill_command(client, fake):
    client.force_kill_app(DEVICE, "com.example")
    assert fake.calls == [("-s", DEVICE, "shell", "am", "force-stop", "com.example")]


def test_download_apk_into_directory(client, fake, tmp_path):
    fake.responses[("-s", DEVICE, "shell", "pm", "list", "packages", "-f")] = (
        "package:/data/app/com.example/base.apk=com.example\n",
        "",
    )
    result = client.download_apk(DEVICE, "com.example", tmp_path)
    assert result == tmp_path / "com.example.apk"
    assert fake.calls[-1] == (
        "-s", DEVICE, "pull", "/data/app/com.example/base.apk", str(result)
    )


def test_get_app_info(client, fake, capsys):
    fake.responses[("-s", DEVICE, "shell", "pm", "dump", "com.example")] = (
        "    versionCode=42 minSdk=21\n"
        "    versionName=1.2.3\n"
        "      android.permission.CAMERA: granted=true\n"
        "      android.permission.CAMERA: granted=true\n",
        "",
    )
    info = client.get_app_info(DEVICE, "com.example")
    assert info.version_code == "42"
    assert info.version_name == "1.2.3"
    assert info.granted_permissions == ["android.permission.CAMERA"]
    assert "android.permission.CAMERA" in capsys.readouterr().out


def test_get_device_info(client, fake, capsys):
    fake.responses[("-s", DEVICE, "shell", "getprop")] = (
        "[ro.product.model]: [Pixel Test]\n[ro.unrelated]: [x]\n",
        "",
    )
    props = client.get_device_info(DEVICE)
    assert props == {"ro.product.model": "Pixel Test"}
    out = capsys.readouterr().out
    assert "Model" in out
    assert "Pixel Test" in out


def test_take_screenshot(client, fake, tmp_path):
    target = tmp_path / "shot.png"
    assert client.take_screenshot(DEVICE, target) == target
    assert fake.calls == [
        ("-s", DEVICE, "shell", "screencap", "-p", "/sdcard/screen.png"),
        ("-s", DEVICE, "pull", "/sdcard/screen.png", str(target)),
    ]


class _FakeChild:
    def __init__(self, code):
        self.code = code

    def wait(self):
        return self.code


def test_record_screen_success(client, fake, tmp_path, monkeypatch):
    monkeypatch.setattr(adb_module.subprocess, "Popen", lambda cmd: _FakeChild(0))
    result = client.record_screen(DEVICE, tmp_path)
    assert result == tmp_path / "demo.mp4"
    assert ("-s", DEVICE, "pull", "/sdcard/demo.mp4", str(result)) in fake.calls
    assert ("-s", DEVICE, "shell", "rm", "/sdcard/screenrecord.pid") in fake.calls


def test_record_screen_failure(client, fake, tmp_path, monkeypatch):
    monkeypatch.setattr(adb_module.subprocess, "Popen", lambda cmd: _FakeChild(1))
    with pytest.raises(AdbError, match="Screenrecord failed"):
        client.record_screen(DEVICE, tmp_path)


def test_get_network_info(client, fake):
    fake.responses[("-s", DEVICE, "shell", "ip", "-4", "addr", "show")] = (
        "    inet 127.0.0.1/8 scope host lo\n    inet 10.0.0.5/24 brd x wlan0\n",
        "",
    )
    fake.responses[("-s", DEVICE, "shell", "dumpsys", "wifi")] = (
        'mWifiInfo SSID: "HomeNet", BSSID: x\n',
        "",
    )
    assert client.get_network_info(DEVICE) == (["127.0.0.1", "10.0.0.5"], "HomeNet")


def test_enable_wifi_without_ip_raises(client, fake):
    with pytest.raises(AdbError, match="Could not determine device Wi-Fi IP"):
        client.enable_wifi(DEVICE)


def test_enable_wifi_connects(client, fake):
    fake.responses[("-s", DEVICE, "shell", "ip", "-4", "addr", "show", "wlan0")] = (
        "    inet 10.0.0.5/24 brd x wlan0\n",
        "",
    )
    assert client.enable_wifi(DEVICE) == "10.0.0.5"
    assert ("-s", DEVICE, "tcpip", "5555") in fake.calls
    assert ("connect", "10.0.0.5:5555") in fake.calls


def test_enable_usb(client, fake):
    client.enable_usb(DEVICE)
    assert fake.calls == [("disconnect",), ("-s", DEVICE, "usb")]


def test_device_health_reports(client, fake, capsys):
    fake.responses[("-s", DEVICE, "shell", "dumpsys", "battery")] = (
        "  status: 2\n  level: 87\n",
        "",
    )
    client.get_device_health(DEVICE)
    out = capsys.readouterr().out
    assert "87" in out
    assert "Device Health Check" in out


def test_launch_url_reports_error(client, fake, capsys):
    args = ("-s", DEVICE, "shell", "am", "start",
            "-a", "android.intent.action.VIEW", "-d", "myapp://home")
    fake.responses[args] = ("", "Error: Activity not started")
    client.launch_url(DEVICE, "myapp://home")
    assert fake.calls == [args]
    assert "Activity not started" in capsys.readouterr().err


PERMS = ["android.permission.CAMERA", "android.permission.READ_SMS"]


def test_grant_permissions_runs_pm_grant(client, fake):
    client.grant_permissions(DEVICE, "com.example", PERMS)
    assert fake.calls == [
        ("-s", DEVICE, "shell", "pm", "grant", "com.example", "android.permission.CAMERA"),
        ("-s", DEVICE, "shell", "pm", "grant", "com.example", "android.permission.READ_SMS"),
    ]


def test_revoke_permissions_runs_pm_revoke(client, fake):
    client.revoke_permissions(DEVICE, "com.example", PERMS)
    assert fake.calls == [
        ("-s", DEVICE, "shell", "pm", "revoke", "com.example", "android.permission.CAMERA"),
        ("-s", DEVICE, "shell", "pm", "revoke", "com.example", "android.permission.READ_SMS"),
    ]


def test_grant_permissions_reports_error(client, fake, capsys):
    args = ("-s", DEVICE, "shell", "pm", "grant", "com.example", "android.permission.CAMERA")
    fake.responses[args] = ("", "Exception: bad permission")
    client.grant_permissions(DEVICE, "com.example", ["android.permission.CAMERA"])
    err = capsys.readouterr().err
    assert "Error granting android.permission.CAMERA" in err
    assert "bad permission" in err