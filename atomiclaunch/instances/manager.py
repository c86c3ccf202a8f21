"""Instance directories and their ``instance.json`` records."""

import logging
import shutil
from typing import List, Optional

from pydantic import ValidationError

from ..config import LauncherPaths
from ..errors import InstanceExists, InstanceNotFound
from ..utils.files import read_json, write_json_atomic
from ..utils.validation import sanitize_instance_name
from .models import INSTANCE_FILE, Instance, utc_now

logger = logging.getLogger(__name__)

INSTANCE_SUBDIRS = ("saves", "resourcepacks", "shaderpacks", "mods", "logs")


class InstanceManager:
    """Each instance owns its directory; nothing is shared between them."""

    def __init__(self, paths: LauncherPaths):
        self.paths = paths

    def _record_path(self, name: str):
        return self.paths.instance_dir(name) / INSTANCE_FILE

    def exists(self, name: str) -> bool:
        return self._record_path(sanitize_instance_name(name)).is_file()

    def create(self, name: str, version: str, loader: Optional[str] = None,
               loader_version: Optional[str] = None) -> Instance:
        name = sanitize_instance_name(name)
        instance_dir = self.paths.instance_dir(name)
        if instance_dir.exists():
            raise InstanceExists(name)

        for sub in INSTANCE_SUBDIRS:
            (instance_dir / sub).mkdir(parents=True, exist_ok=True)

        instance = Instance(
            name=name,
            version=version,
            createdAt=utc_now(),
            loader=loader,
            loaderVersion=loader_version,
        )
        self.save(instance)
        logger.info("Created instance %s (%s)", name, version)
        return instance

    def get(self, name: str) -> Instance:
        path = self._record_path(sanitize_instance_name(name))
        if not path.is_file():
            raise InstanceNotFound(name)
        return Instance(**read_json(path))

    def list(self) -> List[Instance]:
        if not self.paths.instances_dir.is_dir():
            return []

        instances = []
        for entry in sorted(self.paths.instances_dir.iterdir()):
            record = entry / INSTANCE_FILE
            if not record.is_file():
                continue
            try:
                instances.append(Instance(**read_json(record)))
            except (OSError, ValueError, ValidationError) as e:
                logger.warning("Skipping unreadable instance record %s: %s", record, e)
        return instances

    def save(self, instance: Instance):
        write_json_atomic(self._record_path(instance.name),
                          instance.model_dump(mode="json", exclude_none=True))

    def delete(self, name: str):
        name = sanitize_instance_name(name)
        instance_dir = self.paths.instance_dir(name)
        if not instance_dir.is_dir():
            raise InstanceNotFound(name)
        shutil.rmtree(instance_dir)
        logger.info("Deleted instance %s", name)

    def rename(self, old_name: str, new_name: str) -> Instance:
        old_name = sanitize_instance_name(old_name)
        new_name = sanitize_instance_name(new_name)
        instance = self.get(old_name)
        new_dir = self.paths.instance_dir(new_name)
        if new_dir.exists():
            raise InstanceExists(new_name)

        self.paths.instance_dir(old_name).rename(new_dir)
        instance.name = new_name
        self.save(instance)
        logger.info("Renamed instance %s to %s", old_name, new_name)
        return instance

    def mark_played(self, name: str) -> Instance:
        instance = self.get(name)
        instance.lastPlayed = utc_now()
        self.save(instance)
        return instance
