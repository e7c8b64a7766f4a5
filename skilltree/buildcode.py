"""
Build codes - encode/decode active skill tree nodes as a short string.

Format: prefix + base64 of a bitmask over catalog order.
Bit (i % 8) of byte (i // 8) is set iff node i is active.

Decoding never trusts the encoder: the decoded set is re-checked for
connectivity to the root and rejected as a whole if any node is cut
off. Affordability is not checked; an imported build is treated as a
finished allocation. Missing padding and whitespace inside the payload
are tolerated.
"""

from __future__ import annotations

import base64
import logging
from typing import Iterable, Optional

from skilltree.catalog import Adjacency, NodeCatalog, build_adjacency, default_catalog, reachable_from

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "NEXUS-"


def is_connected(active_ids: Iterable[str], adjacency: Adjacency, root_id: str) -> bool:
    """
    Check that every active node reaches the root through active nodes.

    The root itself must be part of the set.
    """
    active = set(active_ids)
    if root_id not in active:
        return False
    return active <= reachable_from(root_id, adjacency, allowed=active)


class BuildCodec:
    """
    Stateless encoder/decoder bound to one catalog.

    Usage:
        codec = BuildCodec(catalog)
        code = codec.encode(session.active_nodes)
        nodes = codec.decode(code)
        if nodes is not None:
            session.load_build(nodes)
    """

    def __init__(self, catalog: Optional[NodeCatalog] = None, prefix: str = DEFAULT_PREFIX):
        if not prefix:
            raise ValueError("Build code prefix must not be empty")
        self.catalog = catalog or default_catalog()
        self.prefix = prefix
        self._node_ids = self.catalog.ids
        self._byte_count = (len(self._node_ids) + 7) // 8

    @property
    def byte_count(self) -> int:
        """Size of the bitmask payload in bytes."""
        return self._byte_count

    def encode(self, active_ids: Iterable[str]) -> str:
        """
        Encode a set of active node ids.

        Ids the catalog does not know are skipped. The same set always
        yields the same code.
        """
        active = set(active_ids)
        mask = bytearray(self._byte_count)
        for i, node_id in enumerate(self._node_ids):
            if node_id in active:
                mask[i // 8] |= 1 << (i % 8)
        return self.prefix + base64.b64encode(bytes(mask)).decode('ascii')

    def decode(self, text: str) -> Optional[frozenset[str]]:
        """
        Decode a build code back to a set of node ids.

        Returns:
            The active node ids (root always included), or None if the
            code has the wrong prefix, is not valid base64, or describes
            nodes disconnected from the root
        """
        if not isinstance(text, str):
            return None

        stripped = text.strip()
        if not stripped.upper().startswith(self.prefix.upper()):
            logger.warning("Rejected build code: missing prefix")
            return None

        # Tolerate missing padding and embedded whitespace
        payload = "".join(stripped[len(self.prefix):].split())
        if len(payload) % 4 == 1:
            logger.warning("Rejected build code: truncated payload")
            return None
        payload += "=" * (-len(payload) % 4)

        try:
            mask = base64.b64decode(payload, validate=True)
        except ValueError as e:
            logger.warning(f"Rejected build code: {e}")
            return None

        active = {self.catalog.root_id}
        for i, node_id in enumerate(self._node_ids):
            byte_idx = i // 8
            if byte_idx < len(mask) and mask[byte_idx] & (1 << (i % 8)):
                active.add(node_id)

        if not is_connected(active, build_adjacency(self.catalog), self.catalog.root_id):
            logger.warning("Rejected build code: nodes disconnected from the root")
            return None

        return frozenset(active)


def encode_build(active_ids: Iterable[str]) -> str:
    """Encode with the shipped catalog and default prefix."""
    return BuildCodec().encode(active_ids)


def decode_build(text: str) -> Optional[frozenset[str]]:
    """Decode with the shipped catalog and default prefix."""
    return BuildCodec().decode(text)
