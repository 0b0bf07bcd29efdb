"""Docker CLI adapter."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from reclaim.adapters.commands import output_lines, run

log = logging.getLogger(__name__)

_SIZE_RE = re.compile(r"^\s*([\d.]+)\s*([kKMGTP]?B)")
_DECIMAL_UNITS = {"B": 1, "KB": 1000, "MB": 1000**2, "GB": 1000**3, "TB": 1000**4, "PB": 1000**5}

TROUBLESHOOTING = (
    "Is the Docker daemon running? Try: sudo systemctl start docker",
    "Is your user in the docker group? Try: sudo usermod -aG docker $USER (then log in again)",
)


@dataclass(slots=True, frozen=True)
class DockerObject:
    """A container, image or volume as listed by the docker CLI."""

    kind: str
    id: str
    name: str
    size_bytes: int = 0


def parse_docker_size(text: str) -> int:
    """``"72.8MB"`` or ``"0B (virtual 1.2GB)"`` -> bytes (decimal units)."""
    match = _SIZE_RE.match(text)
    if match is None:
        return 0
    number, unit = match.groups()
    try:
        return int(float(number) * _DECIMAL_UNITS[unit.upper()])
    except (KeyError, ValueError):
        return 0


def reachable() -> bool:
    """Whether the docker daemon answers ``docker info``."""
    return run(["docker", "info"]).returncode == 0


def _rows(cmd: list[str], columns: int) -> list[list[str]]:
    rows = []
    for line in output_lines(cmd):
        parts = line.split("\t")
        if len(parts) >= columns:
            rows.append(parts)
    return rows


def stopped_containers() -> list[DockerObject]:
    cmd = [
        "docker", "ps", "-a",
        "--filter", "status=exited",
        "--filter", "status=created",
        "--format", "{{.ID}}\t{{.Names}}\t{{.Image}}\t{{.Size}}",
    ]
    return [
        DockerObject("container", row[0], f"{row[1]} ({row[2]})", parse_docker_size(row[3]))
        for row in _rows(cmd, 4)
    ]


def dangling_images() -> list[DockerObject]:
    cmd = [
        "docker", "images",
        "--filter", "dangling=true",
        "--format", "{{.ID}}\t{{.Repository}}:{{.Tag}}\t{{.Size}}",
    ]
    return [DockerObject("image", row[0], row[1], parse_docker_size(row[2])) for row in _rows(cmd, 3)]


def unused_volumes() -> list[DockerObject]:
    cmd = ["docker", "volume", "ls", "--filter", "dangling=true", "--format", "{{.Name}}"]
    return [DockerObject("volume", name.strip(), name.strip()) for name in output_lines(cmd)]


def remove(obj: DockerObject) -> None:
    match obj.kind:
        case "container":
            cmd = ["docker", "rm", obj.id]
        case "image":
            cmd = ["docker", "rmi", obj.id]
        case "volume":
            cmd = ["docker", "volume", "rm", obj.id]
        case _:
            raise ValueError(f"Unknown docker object kind: {obj.kind}")
    run(cmd, check=True)
