from dataclasses import dataclass
from typing import BinaryIO, Iterator, Tuple
import io
import dag_cbor
from dag_cbor.decoding import DAGCBORDecodingError
from multiformats import CID

from blocks import Block, canonical_cid
from errors import BlockTooLarge, EmptyArchive, MalformedInput, MissingRoot, MissingRootBlock, MultipleRoots

MAX_BLOCK_SIZE = 1 << 20 # 1MiB


@dataclass(frozen=True)
class CarArchive:
	root: CID
	blocks: Tuple[Block, ...] # in the order they were read


# LEB128
def parse_varint(stream: BinaryIO) -> int:
	n = 0
	shift = 0
	while True:
		val = stream.read(1)[0] # IndexError on EOF
		n |= (val & 0x7f) << shift
		if not val & 0x80:
			return n
		shift += 7
		if shift > 63:
			raise MalformedInput("varint too long")


def _read_exact(stream: BinaryIO, n: int) -> bytes:
	data = stream.read(n)
	if len(data) != n:
		raise MalformedInput(f"unexpected EOF: wanted {n} bytes, got {len(data)}")
	return data


def read_cid(stream: BinaryIO) -> CID:
	start = stream.tell()
	if stream.read(2) == b"\x12\x20": # CIDv0 is just a bare sha2-256 multihash
		_read_exact(stream, 32)
	else:
		stream.seek(start)
		try:
			version = parse_varint(stream)
			if version != 1:
				raise MalformedInput(f"unsupported CID version {version}")
			parse_varint(stream) # codec
			parse_varint(stream) # multihash function
			digest_len = parse_varint(stream)
		except IndexError as e:
			raise MalformedInput("unexpected EOF inside CID") from e
		_read_exact(stream, digest_len)
	end = stream.tell()
	stream.seek(start)
	cid_raw = stream.read(end - start)
	try:
		cid = CID.decode(cid_raw)
	except (ValueError, KeyError) as e:
		raise MalformedInput(f"invalid CID: {e}") from e
	return canonical_cid(cid)


def enumerate_car_blocks(car: BinaryIO) -> Iterator[Block]:
	while True:
		start = car.tell()
		try:
			section_len = parse_varint(car)
		except IndexError:
			if start != car.tell(): # EOF mid-varint
				raise MalformedInput("unexpected EOF inside section length")
			return
		cid_start = car.tell()
		cid = read_cid(car)
		block_len = section_len - (car.tell() - cid_start)
		if block_len < 0:
			raise MalformedInput(f"section for {cid} is shorter than its CID")
		if block_len > MAX_BLOCK_SIZE:
			raise BlockTooLarge(cid, block_len, MAX_BLOCK_SIZE)
		yield Block(cid, _read_exact(car, block_len))


def read_header(car: BinaryIO) -> CID:
	"""
	returns the single root declared by a CARv1 header
	"""
	try:
		header_len = parse_varint(car)
	except IndexError as e:
		raise MalformedInput("missing CAR header") from e
	if header_len > MAX_BLOCK_SIZE:
		raise MalformedInput(f"CAR header too big: {header_len}")
	try:
		car_header = dag_cbor.decode(_read_exact(car, header_len))
	except (DAGCBORDecodingError, ValueError, KeyError) as e:
		raise MalformedInput(f"undecodable CAR header: {e}") from e
	if not isinstance(car_header, dict):
		raise MalformedInput("CAR header is not a map")
	if car_header.get("version") != 1:
		raise MalformedInput(f"unsupported CAR version {car_header.get('version')}")
	roots = car_header.get("roots") or []
	if len(roots) == 0:
		raise MissingRoot()
	if len(roots) > 1:
		raise MultipleRoots(len(roots))
	if not isinstance(roots[0], CID):
		raise MalformedInput("CAR root is not a CID")
	return canonical_cid(roots[0])


def enumerate_car(car: BinaryIO) -> Tuple[CID, Iterator[Block]]:
	root = read_header(car)
	return root, enumerate_car_blocks(car)


def parse_car(car_bytes: bytes) -> CarArchive:
	root, block_iter = enumerate_car(io.BytesIO(car_bytes))
	blocks = []
	have_root = False
	root_key = bytes(root)
	for block in block_iter:
		if not have_root and bytes(block.cid) == root_key:
			have_root = True
		blocks.append(block)

	if not blocks:
		raise EmptyArchive()
	if not have_root:
		raise MissingRootBlock(root)
	return CarArchive(root, tuple(blocks))
