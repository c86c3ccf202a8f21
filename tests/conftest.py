"""Shared fixtures: a local stand-in for the Mojang, CDN, Fabric and NeoForge endpoints."""

import hashlib
import io
import json
import zipfile
from typing import Callable, Dict, List, Optional, Set

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from atomiclaunch.config import Endpoints, LauncherPaths
from atomiclaunch.utils.async_http import AsyncHTTPClient


def sha1(data: bytes) -> str:
    return hashlib.sha1(data).hexdigest()


def native_jar(files: Dict[str, bytes]) -> bytes:
    buf = io.BytesIO()
    entries = {"META-INF/MANIFEST.MF": b"Manifest-Version: 1.0\n", "linux/": b"", **files}
    with zipfile.ZipFile(buf, "w") as archive:
        for name, data in entries.items():
            # Fixed timestamps keep the jar bytes, and so its SHA1, stable.
            archive.writestr(zipfile.ZipInfo(name, date_time=(2023, 1, 1, 0, 0, 0)), data)
    return buf.getvalue()


def library(name: str, path: str, data: bytes, url: str, os_name: Optional[str] = None) -> dict:
    entry = {
        "name": name,
        "downloads": {"artifact": {"path": path, "sha1": sha1(data), "size": len(data), "url": url}},
    }
    if os_name is not None:
        entry["rules"] = [{"action": "allow", "os": {"name": os_name}}]
    return entry


class FakeMeta:
    """Serves generated metadata; ``hits`` records every request path."""

    FABRIC_LOADER = "0.15.0"

    def __init__(self):
        self.base = ""
        self.hits: List[str] = []
        self.missing: Set[str] = set()
        self.tampered: Set[str] = set()
        self.on_request: Dict[str, Callable[[], None]] = {}
        self.files: Dict[str, bytes] = {}
        self.assets = {
            "minecraft/sounds/click.ogg": b"click-sound",
            "minecraft/lang/en_us.json": b'{"menu.play": "Play"}',
            "minecraft/sounds/click_copy.ogg": b"click-sound",
        }
        self.fabric_libraries = {
            "net/fabricmc/intermediary/1.20.1/intermediary-1.20.1.jar": b"intermediary",
            "net/fabricmc/fabric-loader/0.15.0/fabric-loader-0.15.0.jar": b"fabric-loader",
        }

    # --- documents -------------------------------------------------------

    def url(self, path: str) -> str:
        return f"{self.base}/{path.lstrip('/')}"

    def add_file(self, path: str, data: bytes) -> str:
        self.files[path] = data
        return self.url(f"files/{path}")

    def asset_index(self) -> bytes:
        objects = {name: {"hash": sha1(data), "size": len(data)} for name, data in self.assets.items()}
        return json.dumps({"objects": objects}).encode("utf-8")

    def vanilla_libraries(self, version_id: str) -> List[dict]:
        libs = []
        for name, path, data, os_name in [
            ("com.mojang:brigadier:1.1.8",
             "com/mojang/brigadier/1.1.8/brigadier-1.1.8.jar", b"brigadier", None),
            ("org.lwjgl:lwjgl:3.3.1",
             "org/lwjgl/lwjgl/3.3.1/lwjgl-3.3.1.jar", b"lwjgl", None),
            ("org.lwjgl:lwjgl:3.3.1:natives-linux",
             "org/lwjgl/lwjgl/3.3.1/lwjgl-3.3.1-natives-linux.jar",
             native_jar({"linux/x64/org/lwjgl/liblwjgl.so": b"ELF-lwjgl"}), "linux"),
            ("org.lwjgl:lwjgl:3.3.1:natives-windows",
             "org/lwjgl/lwjgl/3.3.1/lwjgl-3.3.1-natives-windows.jar",
             native_jar({"windows/x64/org/lwjgl/lwjgl.dll": b"MZ-lwjgl"}), "windows"),
            ("org.lwjgl:lwjgl:3.3.1:natives-macos",
             "org/lwjgl/lwjgl/3.3.1/lwjgl-3.3.1-natives-macos.jar",
             native_jar({"macos/x64/org/lwjgl/liblwjgl.dylib": b"MACH-lwjgl"}), "osx"),
            ("ca.weblite:java-objc-bridge:1.1",
             "ca/weblite/java-objc-bridge/1.1/java-objc-bridge-1.1.jar", b"objc-bridge", "osx"),
        ]:
            if version_id == "1.19.4" and ("natives-windows" in name or "natives-macos" in name):
                continue
            libs.append(library(name, path, data, self.add_file(path, data), os_name))
        return libs

    def details(self, version_id: str) -> dict:
        client = f"client-{version_id}".encode("utf-8")
        index = self.asset_index()
        return {
            "id": version_id,
            "type": "release",
            "mainClass": "net.minecraft.client.main.Main",
            "assets": "5",
            "assetIndex": {
                "id": "5", "sha1": sha1(index), "size": len(index),
                "url": self.add_file("indexes/5.json", index),
            },
            "downloads": {
                "client": {
                    "sha1": sha1(client), "size": len(client),
                    "url": self.add_file(f"client/{version_id}.jar", client),
                },
            },
            "libraries": self.vanilla_libraries(version_id),
            "releaseTime": "2023-06-12T13:25:51+00:00",
        }

    def manifest(self) -> dict:
        def entry(version_id, kind):
            return {
                "id": version_id, "type": kind,
                "url": self.url(f"v1/packages/{version_id}.json"),
                "time": "2023-06-12T13:25:51+00:00",
                "releaseTime": "2023-06-12T13:25:51+00:00",
            }
        return {
            "latest": {"release": "1.20.1", "snapshot": "23w31a"},
            "versions": [
                entry("23w31a", "snapshot"),
                entry("1.20.1", "release"),
                entry("1.19.4", "release"),
                entry("b1.7.3", "old_beta"),
            ],
        }

    def fabric_profile(self, game: str, loader: str) -> dict:
        return {
            "id": f"fabric-loader-{loader}-{game}",
            "inheritsFrom": game,
            "type": "release",
            "mainClass": "net.fabricmc.loader.impl.launch.knot.KnotClient",
            "arguments": {"game": [], "jvm": ["-DFabricMcEmu= net.minecraft.client.main.Main "]},
            "libraries": [
                {"name": f"net.fabricmc:intermediary:{game}", "url": self.url("maven/")},
                {"name": f"net.fabricmc:fabric-loader:{loader}", "url": self.url("maven/")},
            ],
        }

    # --- handlers ----------------------------------------------------------

    @web.middleware
    async def record(self, request, handler):
        self.hits.append(request.path)
        hook = self.on_request.get(request.path)
        if hook is not None:
            hook()
        if request.path in self.missing:
            raise web.HTTPNotFound()
        return await handler(request)

    async def version_manifest(self, request):
        return web.json_response(self.manifest())

    async def version_details(self, request):
        version_id = request.match_info["version"]
        if version_id not in ("1.20.1", "1.19.4"):
            raise web.HTTPNotFound()
        return web.json_response(self.details(version_id))

    async def file(self, request):
        path = request.match_info["path"]
        if path not in self.files:
            raise web.HTTPNotFound()
        data = self.files[path]
        if request.path in self.tampered:
            data = b"tampered" + data
        return web.Response(body=data)

    async def asset(self, request):
        wanted = request.match_info["hash"]
        for data in self.assets.values():
            if sha1(data) == wanted:
                return web.Response(body=data)
        raise web.HTTPNotFound()

    async def fabric_loaders(self, request):
        return web.json_response([
            {"separator": ".", "build": 1, "maven": "net.fabricmc:fabric-loader:0.15.1",
             "version": "0.15.1", "stable": False},
            {"separator": ".", "build": 0, "maven": "net.fabricmc:fabric-loader:0.15.0",
             "version": self.FABRIC_LOADER, "stable": True},
        ])

    async def fabric_games(self, request):
        return web.json_response([
            {"version": "23w31a", "stable": False},
            {"version": "1.20.1", "stable": True},
        ])

    async def fabric_loaders_for_game(self, request):
        game = request.match_info["game"]
        if game != "1.20.1":
            return web.json_response([])
        return web.json_response([
            {"loader": {"version": "0.15.1", "stable": False},
             "intermediary": {"version": game, "stable": True}},
            {"loader": {"version": self.FABRIC_LOADER, "stable": True},
             "intermediary": {"version": game, "stable": True}},
        ])

    async def fabric_profile_json(self, request):
        return web.json_response(
            self.fabric_profile(request.match_info["game"], request.match_info["loader"])
        )

    async def maven(self, request):
        path = request.match_info["path"]
        if path not in self.fabric_libraries:
            raise web.HTTPNotFound()
        return web.Response(body=self.fabric_libraries[path])

    async def neoforge_versions(self, request):
        return web.json_response({
            "isSnapshot": False,
            "versions": ["1.20.1-47.1.79", "20.4.80-beta", "20.4.237", "21.0.0-alpha.1", "21.0.10"],
        })

    async def neoforge_maven(self, request):
        if not request.match_info["path"].endswith("-installer.jar"):
            raise web.HTTPNotFound()
        return web.Response(body=b"neoforge-installer")

    def app(self) -> web.Application:
        app = web.Application(middlewares=[self.record])
        app.router.add_get("/mc/game/version_manifest.json", self.version_manifest)
        app.router.add_get("/v1/packages/{version}.json", self.version_details)
        app.router.add_get("/files/{path:.*}", self.file)
        app.router.add_get("/assets/{prefix}/{hash}", self.asset)
        app.router.add_get("/fabric/v2/versions/loader", self.fabric_loaders)
        app.router.add_get("/fabric/v2/versions/game", self.fabric_games)
        app.router.add_get("/fabric/v2/versions/loader/{game}", self.fabric_loaders_for_game)
        app.router.add_get("/fabric/v2/versions/loader/{game}/{loader}/profile/json",
                           self.fabric_profile_json)
        app.router.add_get("/maven/{path:.*}", self.maven)
        app.router.add_get("/neoforge/versions", self.neoforge_versions)
        app.router.add_get("/neoforge/maven/{path:.*}", self.neoforge_maven)
        return app

    def endpoints(self) -> Endpoints:
        return Endpoints(
            version_manifest=self.url("mc/game/version_manifest.json"),
            asset_base=self.url("assets"),
            libraries_base=self.url("files"),
            fabric_meta=self.url("fabric/v2"),
            neoforge_versions=self.url("neoforge/versions"),
            neoforge_maven=self.url("neoforge/maven"),
        )


@pytest.fixture
def paths(tmp_path):
    return LauncherPaths(tmp_path / "launcher")


@pytest_asyncio.fixture
async def meta():
    fake = FakeMeta()
    server = TestServer(fake.app())
    await server.start_server()
    fake.base = str(server.make_url("")).rstrip("/")
    yield fake
    await server.close()


@pytest_asyncio.fixture
async def http():
    async with AsyncHTTPClient() as client:
        yield client
