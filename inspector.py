from dataclasses import dataclass
from typing import Mapping, Optional
import logging
from multiformats import CID

from blocks import decode, is_supported
from carfile import parse_car
from dag import Structure, classify, estimate_size

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class InspectionResult:
	root: CID
	structure: Optional[Structure]
	size: Optional[int] # full DAG size declared by a dag-pb root, None otherwise
	structure_source: Optional[str] = None # "dag", "metadata", or None when we know nothing


def inspect_car(car_bytes: bytes, metadata: Optional[Mapping[str, str]]=None) -> InspectionResult:
	"""
	Parses a CAR and works out its root, whether it holds the whole DAG, and
	(for dag-pb roots) how big the whole DAG should be.

	If the root's codec is one we can't decode, the walk has no verdict and we
	fall back to a "structure" value recorded in the object metadata. That
	value is whatever the uploader claimed, so it's reported with
	structure_source="metadata" rather than passed off as verified.
	"""
	archive = parse_car(car_bytes)
	root = archive.root
	log.debug(f"Obtained root cid {root} ({len(archive.blocks)} blocks)")

	if not is_supported(root):
		structure = Structure.from_metadata((metadata or {}).get("structure"))
		log.debug(f"Root {root} has codec {root.codec.name}, using metadata structure {structure}")
		return InspectionResult(root, structure, None, "metadata" if structure else None)

	root_block = next(b for b in archive.blocks if bytes(b.cid) == bytes(root))
	root_node = decode(root, root_block.data)

	# the size of the full DAG for this root, even if we only have part of it
	size = estimate_size(root_block.data, root_node) if root_node.codec == "dag-pb" else None

	structure = classify(root, archive.blocks)
	log.debug(f"Obtained structure {structure.value} for root {root}, size {size}")
	return InspectionResult(root, structure, size, "dag")
