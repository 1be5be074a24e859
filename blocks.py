from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, Optional, Tuple
from google.protobuf.message import DecodeError
from dag_cbor.decoding import DAGCBORDecodingError
from multiformats import CID
import dag_cbor
import dag_pb

from errors import MalformedBlock, UnsupportedCodec


@dataclass(frozen=True)
class Block:
	cid: CID
	data: bytes


def canonical_cid(cid: CID) -> CID:
	"""
	CIDv1 decoded from bytes comes back as base58btc, print it as base32 like everyone else
	"""
	if cid.version == 1:
		return cid.set(base="base32")
	return cid


@dataclass(frozen=True)
class Link:
	cid: CID
	name: str = ""
	tsize: Optional[int] = None # declared cumulative size of the linked subtree, dag-pb only


@dataclass(frozen=True)
class DecodedNode:
	codec: str # "raw", "dag-pb" or "dag-cbor"
	links: Tuple[Link, ...]
	size: int # serialized length of the node itself
	value: Any = None


def _decode_raw(cid: CID, data: bytes) -> DecodedNode:
	return DecodedNode("raw", (), len(data), data)


def _decode_pb(cid: CID, data: bytes) -> DecodedNode:
	try:
		node = dag_pb.decode_node(data)
	except DecodeError as e:
		raise MalformedBlock(cid, str(e)) from e
	links = []
	for pb_link in node.Links:
		try:
			link_cid = canonical_cid(CID.decode(pb_link.Hash))
		except (ValueError, KeyError) as e:
			raise MalformedBlock(cid, f"bad link hash: {e}") from e
		tsize = pb_link.Tsize if pb_link.HasField("Tsize") else None
		links.append(Link(link_cid, pb_link.Name, tsize))
	return DecodedNode("dag-pb", tuple(links), len(data), node)


def _iter_cids(value: Any) -> Iterator[CID]:
	# dag_cbor hands back tag-42 links as CID objects, wherever they're nested
	stack = [value]
	while stack:
		item = stack.pop()
		if isinstance(item, CID):
			yield item
		elif isinstance(item, dict):
			stack.extend(reversed(list(item.values())))
		elif isinstance(item, list):
			stack.extend(reversed(item))


def _decode_cbor(cid: CID, data: bytes) -> DecodedNode:
	try:
		value = dag_cbor.decode(data)
	except (DAGCBORDecodingError, ValueError, KeyError) as e:
		raise MalformedBlock(cid, str(e)) from e
	links = tuple(Link(canonical_cid(c)) for c in _iter_cids(value))
	return DecodedNode("dag-cbor", links, len(data), value)


DECODERS: Dict[str, Callable[[CID, bytes], DecodedNode]] = {
	"raw": _decode_raw,
	"dag-pb": _decode_pb,
	"dag-cbor": _decode_cbor,
}


def is_supported(cid: CID) -> bool:
	return cid.codec.name in DECODERS


def decode(cid: CID, data: bytes) -> DecodedNode:
	decoder = DECODERS.get(cid.codec.name)
	if decoder is None:
		raise UnsupportedCodec(cid)
	return decoder(cid, data)


def decode_block(block: Block) -> DecodedNode:
	return decode(block.cid, block.data)
