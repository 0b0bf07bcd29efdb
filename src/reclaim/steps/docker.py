"""Step to remove unused Docker containers, images and volumes."""

from __future__ import annotations

import logging

from reclaim.adapters import docker
from reclaim.core.errors import PreconditionFailure
from reclaim.models.catalog import Catalog, CatalogItem
from reclaim.models.step import APPLICATIONS, CleanupStep
from reclaim.utils import has_command

log = logging.getLogger(__name__)

_VOLUME_NOTE = "Volume data is deleted permanently"


class DockerStep(CleanupStep):
    """Removes stopped containers, dangling images and unused volumes."""

    id = "docker"
    name = "Docker Artifacts"
    description = "Removes stopped containers, dangling images and volumes no container uses."
    category = "application"
    group = APPLICATIONS
    risk_level = "moderate"
    sort_order = 50
    item_noun = "object"
    selectable = True
    empty_message = "No unused Docker objects."

    @property
    def unavailable_reason(self) -> str | None:
        if not has_command("docker"):
            return "Docker is not installed"
        return None

    def scan(self) -> Catalog:
        if not docker.reachable():
            raise PreconditionFailure("cannot reach the Docker daemon. " + " ".join(docker.TROUBLESHOOTING))

        catalog = Catalog(self.id, self.name)
        objects = docker.stopped_containers() + docker.dangling_images() + docker.unused_volumes()
        for obj in objects:
            volume = obj.kind == "volume"
            catalog.add(
                CatalogItem(
                    identifier=f"{obj.kind}:{obj.id}",
                    label=f"[{obj.kind}] {obj.name}",
                    size_bytes=obj.size_bytes,
                    tags=frozenset({obj.kind, "caution"} if volume else {obj.kind}),
                    notes=(_VOLUME_NOTE,) if volume else (),
                )
            )
        if any(obj.kind == "volume" for obj in objects):
            catalog.notes.append("Docker does not report volume sizes here.")
        return catalog

    def remove(self, item: CatalogItem) -> None:
        kind, _, object_id = item.identifier.partition(":")
        docker.remove(docker.DockerObject(kind, object_id, item.label))
