"""Tests for NeoForge version parsing and installer plumbing."""

import sys

import pytest

from atomiclaunch.errors import (
    BaseVersionMissing,
    LoaderInstallFailed,
    LoaderVersionNotFound,
    ProcessSpawnFailed,
)
from atomiclaunch.modloaders import LoaderKind
from atomiclaunch.modloaders.neoforge import (
    NeoForgeInstaller,
    full_version,
    neoforge_id,
    parse_minecraft_version,
    parse_versions,
)
from atomiclaunch.utils.files import read_json, write_json_atomic
from atomiclaunch.utils.platform import Platform


def test_parse_minecraft_version():
    assert parse_minecraft_version("20.4.237") == "1.20.4"
    assert parse_minecraft_version("21.0.10") == "1.21"
    assert parse_minecraft_version("20.2.3-beta") == "1.20.2"
    assert parse_minecraft_version("19.2.1") is None
    assert parse_minecraft_version("garbage") is None


def test_parse_versions_newest_first():
    versions = parse_versions(["1.20.1-47.1.79", "20.4.237", "21.0.0-alpha.1", "21.0.10"])
    assert [v.fullVersion for v in versions] == ["21.0.10", "20.4.237", "1.20.1-47.1.79"]
    old = versions[-1]
    assert (old.minecraftVersion, old.neoforgeVersion) == ("1.20.1", "47.1.79")


def test_version_ids():
    assert full_version("1.20.4", "20.4.237") == "20.4.237"
    assert full_version("1.20.1", "47.1.79") == "1.20.1-47.1.79"
    assert neoforge_id("1.20.4", "20.4.237") == "neoforge-20.4.237"


@pytest.mark.asyncio
async def test_versions_from_maven_api(paths, http, meta):
    neoforge = NeoForgeInstaller(paths, http, meta.endpoints())
    assert await neoforge.get_supported_game_versions() == ["1.21", "1.20.4", "1.20.1"]
    assert await neoforge.get_compatible_loader("1.20.4") == "20.4.237"
    with pytest.raises(LoaderVersionNotFound):
        await neoforge.get_compatible_loader("1.16.5")


@pytest.mark.asyncio
async def test_install_requires_base_version(paths, http, meta):
    neoforge = NeoForgeInstaller(paths, http, meta.endpoints())
    with pytest.raises(BaseVersionMissing):
        await neoforge.install_neoforge("1.20.4", "20.4.237")
    assert meta.hits == []


def test_launcher_profile_is_created_once(paths):
    neoforge = NeoForgeInstaller(paths, http=None)
    neoforge.ensure_launcher_profile()
    assert read_json(paths.launcher_profiles_path)["version"] == 3

    paths.launcher_profiles_path.write_text('{"profiles": {"x": {}}}', encoding="utf-8")
    neoforge.ensure_launcher_profile()
    assert read_json(paths.launcher_profiles_path) == {"profiles": {"x": {}}}


NEOFORGE_ID = "neoforge-20.4.237"
NEOFORGE_LIBRARY = "net/neoforged/neoforge/20.4.237/neoforge-20.4.237-universal.jar"

WRITES_PROFILE = f"""#!/bin/sh
echo "Extracting json"
mkdir -p "$4/versions/{NEOFORGE_ID}"
cat > "$4/versions/{NEOFORGE_ID}/{NEOFORGE_ID}.json" <<'JSON'
{{"id": "{NEOFORGE_ID}", "inheritsFrom": "1.20.4",
  "mainClass": "cpw.mods.bootstraplauncher.BootstrapLauncher",
  "arguments": {{"game": ["--fml.neoForgeVersion", "20.4.237"], "jvm": []}},
  "libraries": [{{"name": "net.neoforged:neoforge:20.4.237:universal",
                 "downloads": {{"artifact": {{"path": "{NEOFORGE_LIBRARY}"}}}}}}]}}
JSON
echo "installed" > "$4/installer.log"
"""

FAILS = """#!/bin/sh
echo "Exception in thread main: processor failed"
exit 1
"""

WRITES_NOTHING = """#!/bin/sh
echo "nothing to do"
"""

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="stub java is a shell script")


def stub_java(tmp_path, script: str) -> str:
    java = tmp_path / "java"
    java.write_text(script, encoding="utf-8")
    java.chmod(0o755)
    return str(java)


def install_base(paths):
    write_json_atomic(paths.version_json("1.20.4"), {
        "id": "1.20.4",
        "mainClass": "net.minecraft.client.main.Main",
        "assetIndex": {"id": "12", "url": "https://example.invalid/12.json"},
        "libraries": [
            {"name": "com.mojang:brigadier:1.2.9",
             "downloads": {"artifact": {"path": "com/mojang/brigadier/1.2.9/brigadier-1.2.9.jar"}}},
        ],
    })


@posix_only
@pytest.mark.asyncio
async def test_install_runs_installer_and_merges(tmp_path, paths, http, meta, monkeypatch):
    install_base(paths)
    elsewhere = tmp_path / "elsewhere"
    elsewhere.mkdir()
    (elsewhere / "my-neoforge-notes.log").write_text("keep me", encoding="utf-8")
    monkeypatch.chdir(elsewhere)
    neoforge = NeoForgeInstaller(paths, http, meta.endpoints(), Platform.LINUX,
                                 java_path=stub_java(tmp_path, WRITES_PROFILE))

    profile = await neoforge.install_neoforge("1.20.4", "20.4.237")

    assert meta.hits == [
        "/neoforge/maven/net/neoforged/neoforge/20.4.237/neoforge-20.4.237-installer.jar"
    ]
    assert profile.versionId == NEOFORGE_ID
    assert profile.baseVersionId == "1.20.4"
    assert profile.loader is LoaderKind.NEOFORGE
    assert [entry.path for entry in profile.libraries] == [
        NEOFORGE_LIBRARY, "com/mojang/brigadier/1.2.9/brigadier-1.2.9.jar",
    ]
    assert profile.gameArguments == ["--fml.neoForgeVersion", "20.4.237"]
    assert neoforge.check_neoforge_installed("1.20.4", "20.4.237")
    assert paths.launcher_profiles_path.is_file()
    assert not (paths.meta_dir / "installer.log").exists()
    assert (elsewhere / "my-neoforge-notes.log").exists()

    meta.hits.clear()
    again = await neoforge.install_neoforge("1.20.4", "20.4.237")
    assert again.versionId == NEOFORGE_ID
    assert meta.hits == []


@posix_only
@pytest.mark.asyncio
async def test_installer_failure_reports_output(tmp_path, paths, http, meta):
    install_base(paths)
    neoforge = NeoForgeInstaller(paths, http, meta.endpoints(), Platform.LINUX,
                                 java_path=stub_java(tmp_path, FAILS))

    with pytest.raises(LoaderInstallFailed) as excinfo:
        await neoforge.install_neoforge("1.20.4", "20.4.237")

    assert "exited with code 1" in str(excinfo.value)
    assert "processor failed" in excinfo.value.detail
    assert not paths.version_json(NEOFORGE_ID).exists()


@posix_only
@pytest.mark.asyncio
async def test_installer_without_profile_fails(tmp_path, paths, http, meta):
    install_base(paths)
    neoforge = NeoForgeInstaller(paths, http, meta.endpoints(), Platform.LINUX,
                                 java_path=stub_java(tmp_path, WRITES_NOTHING))

    with pytest.raises(LoaderInstallFailed) as excinfo:
        await neoforge.install_neoforge("1.20.4", "20.4.237")
    assert str(paths.version_json(NEOFORGE_ID)) in excinfo.value.detail


@pytest.mark.asyncio
async def test_missing_java_is_a_spawn_failure(tmp_path, paths, http, meta):
    install_base(paths)
    neoforge = NeoForgeInstaller(paths, http, meta.endpoints(), Platform.LINUX,
                                 java_path=str(tmp_path / "no-such-java"))

    with pytest.raises(ProcessSpawnFailed):
        await neoforge.install_neoforge("1.20.4", "20.4.237")
