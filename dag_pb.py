from typing import Iterable, Optional, Tuple
from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

"""
The dag-pb wire schema (merkledag.proto), built at import time so we don't
need protoc-generated modules:

	message PBLink { optional bytes Hash = 1; optional string Name = 2; optional uint64 Tsize = 3; }
	message PBNode { repeated PBLink Links = 2; optional bytes Data = 1; }
"""

_F = descriptor_pb2.FieldDescriptorProto


def _build_schema():
	fdp = descriptor_pb2.FileDescriptorProto(name="merkledag.proto", package="merkledag.pb", syntax="proto2")

	link = fdp.message_type.add(name="PBLink")
	link.field.add(name="Hash", number=1, type=_F.TYPE_BYTES, label=_F.LABEL_OPTIONAL)
	link.field.add(name="Name", number=2, type=_F.TYPE_STRING, label=_F.LABEL_OPTIONAL)
	link.field.add(name="Tsize", number=3, type=_F.TYPE_UINT64, label=_F.LABEL_OPTIONAL)

	node = fdp.message_type.add(name="PBNode")
	node.field.add(name="Links", number=2, type=_F.TYPE_MESSAGE, label=_F.LABEL_REPEATED, type_name=".merkledag.pb.PBLink")
	node.field.add(name="Data", number=1, type=_F.TYPE_BYTES, label=_F.LABEL_OPTIONAL)

	pool = descriptor_pool.DescriptorPool()
	pool.AddSerializedFile(fdp.SerializeToString())
	return (
		message_factory.GetMessageClass(pool.FindMessageTypeByName("merkledag.pb.PBNode")),
		message_factory.GetMessageClass(pool.FindMessageTypeByName("merkledag.pb.PBLink")),
	)


PBNode, PBLink = _build_schema()


def decode_node(data: bytes):
	"""
	raises google.protobuf.message.DecodeError on garbage
	"""
	node = PBNode()
	node.ParseFromString(data)
	return node


# (hash, name, tsize) - tsize of None means the field is left out entirely
def encode_node(links: Iterable[Tuple[bytes, str, Optional[int]]], data: Optional[bytes]=None) -> bytes:
	node = PBNode()
	for link_hash, name, tsize in links:
		link = node.Links.add(Hash=link_hash, Name=name)
		if tsize is not None:
			link.Tsize = tsize
	if data is not None:
		node.Data = data
	return node.SerializeToString()
