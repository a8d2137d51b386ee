"""Node registry persistence."""

import json
from pathlib import Path

from cruxctl.core.exceptions import CruxError, NotFoundError
from cruxctl.core.logging import StructuredLogger
from cruxctl.core.utils import get_config_dir
from cruxctl.nodes.models import Node

logger = StructuredLogger(__name__)


class NodeRegistry:
    """Keep registered nodes in a single ``nodes.json`` file."""

    def __init__(self, state_dir: str | Path | None = None):
        base = Path(state_dir) if state_dir else get_config_dir() / "state"
        base.mkdir(parents=True, exist_ok=True)
        self._path = base / "nodes.json"

    def _read(self) -> dict[str, Node]:
        if not self._path.exists():
            return {}
        try:
            with open(self._path) as f:
                data = json.load(f)
            return {item["id"]: Node.from_dict(item) for item in data.get("nodes", [])}
        except (OSError, ValueError, KeyError) as e:
            raise CruxError(f"Failed to read node registry {self._path}: {e}")

    def _write(self, nodes: dict[str, Node]) -> None:
        tmp_path = self._path.with_suffix(".json.tmp")
        try:
            with open(tmp_path, "w") as f:
                json.dump({"nodes": [n.to_dict() for n in nodes.values()]}, f, indent=2)
            tmp_path.replace(self._path)
        except OSError as e:
            raise CruxError(f"Failed to write node registry {self._path}: {e}")

    def list(self) -> list[Node]:
        return sorted(self._read().values(), key=lambda n: n.name)

    def get(self, node_id: str) -> Node:
        nodes = self._read()
        if node_id not in nodes:
            raise NotFoundError(f"Node not found: {node_id}", entity="node", entity_id=node_id)
        return nodes[node_id]

    def find_by_name(self, name: str) -> Node | None:
        for node in self._read().values():
            if node.name == name:
                return node
        return None

    def save(self, node: Node) -> None:
        nodes = self._read()
        nodes[node.id] = node
        self._write(nodes)
        logger.debug("Saved node", id=node.id, name=node.name)

    def delete(self, node_id: str) -> None:
        nodes = self._read()
        if nodes.pop(node_id, None) is not None:
            self._write(nodes)
            logger.debug("Deleted node", id=node_id)
