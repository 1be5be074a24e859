import pytest

from blocks import Block
from dag import Structure
from errors import MalformedBlock, MissingRoot, UnsupportedCodec
from inspector import inspect_car

from cars import cbor_block, cumulative_size, encode_car, make_cid, pack_file, pb_block, raw_block, sample_content, split_car


def test_raw_file_without_wrapping():
	root, blocks = pack_file(b"\x15\x1f", wrap_with_directory=False)
	result = inspect_car(encode_car([root], blocks))
	assert result.root == root
	assert result.structure is Structure.COMPLETE
	assert result.size is None
	assert result.structure_source == "dag"


def test_wrapped_small_file():
	root, blocks = pack_file(b"\x15\x1f")
	result = inspect_car(encode_car([root], blocks))
	assert result.root == root
	assert result.structure is Structure.COMPLETE
	assert result.size == cumulative_size(blocks)


def test_first_chunk_of_large_file():
	root, blocks = pack_file(sample_content(4000), chunk_size=100)
	first, *rest = split_car(root, blocks, 5)
	assert rest
	result = inspect_car(first)
	assert result.root == root
	assert result.structure is Structure.PARTIAL
	assert result.size == cumulative_size(blocks)


def test_size_does_not_depend_on_blocks_present():
	root, blocks = pack_file(sample_content(4000), chunk_size=100)
	sizes = {inspect_car(encode_car([root], blocks[:n])).size for n in (1, 2, 10, len(blocks))}
	assert sizes == {cumulative_size(blocks)}


def test_cbor_root_has_no_size():
	leaf = raw_block(b"leaf")
	root = cbor_block({"link": leaf.cid})
	result = inspect_car(encode_car([root.cid], [root, leaf]))
	assert result.structure is Structure.COMPLETE
	assert result.size is None


def _dag_json_car():
	data = b'{"hello":"world"}'
	block = Block(make_cid(data, "dag-json"), data)
	return encode_car([block.cid], [block])


def test_unsupported_root_falls_back_to_metadata():
	result = inspect_car(_dag_json_car(), {"structure": "Complete"})
	assert result.structure is Structure.COMPLETE
	assert result.structure_source == "metadata"
	assert result.size is None


@pytest.mark.parametrize("metadata", [None, {}, {"structure": "Whatever"}])
def test_unsupported_root_without_usable_metadata(metadata):
	result = inspect_car(_dag_json_car(), metadata)
	assert result.structure is None
	assert result.structure_source is None


def test_metadata_is_ignored_when_the_dag_can_be_walked():
	root, blocks = pack_file(sample_content(1000), chunk_size=100)
	result = inspect_car(encode_car([root], blocks[:1]), {"structure": "Complete"})
	assert result.structure is Structure.PARTIAL
	assert result.structure_source == "dag"


def test_unsupported_codec_deeper_in_the_dag_raises():
	data = b'{"a":1}'
	odd = Block(make_cid(data, "dag-json"), data)
	root = pb_block([(odd.cid, "", len(data))])
	with pytest.raises(UnsupportedCodec):
		inspect_car(encode_car([root.cid], [root, odd]))


def test_malformed_car_raises():
	with pytest.raises(MissingRoot):
		inspect_car(encode_car([], [raw_block(b"a")]))


def test_undecodable_cbor_block_raises():
	garbage = Block(make_cid(b"\xff\xff", "dag-cbor"), b"\xff\xff")
	root = pb_block([(garbage.cid, "", 2)])
	with pytest.raises(MalformedBlock):
		inspect_car(encode_car([root.cid], [root, garbage]))
