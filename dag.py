from enum import Enum
from typing import Dict, Optional, Sequence
from multiformats import CID

from blocks import Block, DecodedNode, decode_block


class Structure(Enum):
	COMPLETE = "Complete"
	PARTIAL = "Partial"

	@classmethod
	def from_metadata(cls, value: Optional[str]) -> Optional["Structure"]:
		try:
			return cls(value)
		except ValueError:
			return None


def index_blocks(blocks: Sequence[Block]) -> Dict[bytes, Block]:
	index: Dict[bytes, Block] = {}
	for block in blocks:
		index.setdefault(bytes(block.cid), block) # first one wins
	return index


def classify(root: CID, blocks: Sequence[Block]) -> Structure:
	"""
	Walks the DAG under root, depth first, and reports whether every linked
	block is present in blocks. Stops at the first missing link.

	Raises UnsupportedCodec if a present block can't be decoded.
	"""
	# a lone raw leaf is its own whole
	if len(blocks) == 1 and root.codec.name == "raw":
		return Structure.COMPLETE

	index = index_blocks(blocks)

	# no cycle detection: a block can't link to itself, its CID hashes over the link
	pending = [root]
	while pending:
		block = index.get(bytes(pending.pop()))
		if block is None:
			return Structure.PARTIAL
		node = decode_block(block)
		# reversed, so the first link is the next one walked
		pending.extend(link.cid for link in reversed(node.links))

	return Structure.COMPLETE


def estimate_size(root_bytes: bytes, root_node: DecodedNode) -> int:
	"""
	The sum of the node size and the declared size of each link.

	Tsize is optional and is only metadata, so it may be missing or simply
	wrong. Missing ones count as 0. This is the same sum go/js-ipfs show as
	a dag-pb DAG's cumulative size, and it doesn't care which blocks we have.
	"""
	if root_node.codec != "dag-pb":
		raise ValueError(f"can only estimate dag-pb roots, not {root_node.codec}")
	return len(root_bytes) + sum(link.tsize or 0 for link in root_node.links)
