"""Tests for merging loader profiles onto their base version."""

import pytest

from atomiclaunch.errors import BaseVersionMissing, VersionNotInstalled
from atomiclaunch.modloaders.merger import (
    LibraryEntry,
    ProfileMerger,
    flatten_arguments,
    merge_loader_profile,
)
from atomiclaunch.modloaders.models import LoaderKind, LoaderProfile
from atomiclaunch.utils.files import write_json_atomic
from atomiclaunch.utils.platform import Platform
from atomiclaunch.versions.models import VersionDetails


def base_details(count=5):
    libraries = []
    for i in range(count):
        path = f"com/example/base{i}/1.0/base{i}-1.0.jar"
        libraries.append({
            "name": f"com.example:base{i}:1.0",
            "downloads": {"artifact": {"path": path, "url": f"https://libraries.invalid/{path}"}},
        })
    return VersionDetails(**{
        "id": "1.20.1",
        "mainClass": "net.minecraft.client.main.Main",
        "assetIndex": {"id": "5", "url": "https://example.invalid/5.json"},
        "libraries": libraries,
    })


def loader_profile(count=3, inherits="1.20.1"):
    return LoaderProfile(**{
        "id": f"fabric-loader-0.15.0-{inherits}",
        "inheritsFrom": inherits,
        "mainClass": "net.fabricmc.loader.impl.launch.knot.KnotClient",
        "libraries": [
            {"name": f"net.fabricmc:loader{i}:0.15.0", "url": "https://maven.fabricmc.net/"}
            for i in range(count)
        ],
    })


def test_loader_libraries_precede_base_libraries():
    merged = merge_loader_profile(loader_profile(3), base_details(5), platform=Platform.LINUX)

    names = [entry.name for entry in merged.libraries]
    assert len(names) == 8
    assert names[:3] == [f"net.fabricmc:loader{i}:0.15.0" for i in range(3)]
    assert names[3:] == [f"com.example:base{i}:1.0" for i in range(5)]


def test_merged_fields_come_from_both_documents():
    merged = merge_loader_profile(loader_profile(), base_details(), platform=Platform.LINUX)
    assert merged.versionId == "fabric-loader-0.15.0-1.20.1"
    assert merged.mainClass == "net.fabricmc.loader.impl.launch.knot.KnotClient"
    assert merged.baseVersionId == "1.20.1"
    assert merged.assetsId == "5"
    assert merged.loader is LoaderKind.FABRIC


def test_loader_libraries_carry_urls_and_base_only_paths():
    merged = merge_loader_profile(loader_profile(1), base_details(1), platform=Platform.LINUX)
    loader_entry, base_entry = merged.libraries
    assert loader_entry == LibraryEntry(
        "net.fabricmc:loader0:0.15.0",
        "https://maven.fabricmc.net/net/fabricmc/loader0/0.15.0/loader0-0.15.0.jar",
        None,
    )
    assert base_entry == LibraryEntry("com.example:base0:1.0", None, "com/example/base0/1.0/base0-1.0.jar")


def test_duplicates_are_kept():
    profile = loader_profile(0)
    profile.libraries = base_details(1).libraries
    merged = merge_loader_profile(profile, base_details(1), platform=Platform.LINUX)
    assert [e.path for e in merged.libraries] == [
        "com/example/base0/1.0/base0-1.0.jar",
        "com/example/base0/1.0/base0-1.0.jar",
    ]


def test_flatten_arguments_applies_rules():
    values = [
        "--plain",
        {"rules": [{"action": "allow", "os": {"name": "osx"}}], "value": ["-XstartOnFirstThread"]},
        {"rules": [{"action": "allow", "os": {"name": "linux"}}], "value": "-Dlinux=true"},
        {"rules": [{"action": "allow", "features": {"has_custom_resolution": True}}], "value": "--width"},
    ]
    assert flatten_arguments(values, Platform.LINUX) == ["--plain", "-Dlinux=true"]
    assert flatten_arguments(values, Platform.OSX) == ["--plain", "-XstartOnFirstThread"]


def test_merge_requires_installed_base(paths):
    merger = ProfileMerger(paths, Platform.LINUX)
    with pytest.raises(BaseVersionMissing) as excinfo:
        merger.merge(loader_profile())
    assert excinfo.value.version_id == "1.20.1"
    assert str(paths.version_json("1.20.1")) in str(excinfo.value)


def test_resolve_reads_installed_documents(paths):
    write_json_atomic(paths.version_json("1.20.1"), base_details().model_dump(mode="json", exclude_none=True))
    profile = loader_profile()
    write_json_atomic(paths.version_json(profile.id), profile.model_dump(mode="json", exclude_none=True))

    merger = ProfileMerger(paths, Platform.LINUX)
    vanilla = merger.resolve("1.20.1")
    assert vanilla.loader is None
    assert len(vanilla.libraries) == 5

    merged = merger.resolve(profile.id)
    assert merged.loader is LoaderKind.FABRIC
    assert len(merged.libraries) == 8


def test_resolve_missing_version(paths):
    with pytest.raises(VersionNotInstalled):
        ProfileMerger(paths, Platform.LINUX).resolve("1.18.2")


def test_loader_kind_from_version_id():
    assert LoaderKind.from_version_id("fabric-loader-0.15.0-1.20.1") is LoaderKind.FABRIC
    assert LoaderKind.from_version_id("neoforge-20.4.237") is LoaderKind.NEOFORGE
    assert LoaderKind.from_version_id("1.20.1") is None
    assert LoaderKind.parse("vanilla") is None
    assert LoaderKind.parse("neoforge") is LoaderKind.NEOFORGE
