from typing import Optional

"""
Everything the probe can fail with.

MalformedInput and UnsupportedCodec abort an inspection outright: a CAR we
couldn't fully interpret must never be reported as Complete or Partial.
A deferred fetch is *not* an error, see decision.FetchDecision.
"""


class ProbeError(Exception):
	pass


class InspectionError(ProbeError):
	pass


class MalformedInput(InspectionError):
	pass


class MissingRoot(MalformedInput):
	def __init__(self) -> None:
		super().__init__("missing roots")


class MultipleRoots(MalformedInput):
	def __init__(self, roots: int) -> None:
		self.roots = roots
		super().__init__(f"too many roots: {roots}")


class EmptyArchive(MalformedInput):
	def __init__(self) -> None:
		super().__init__("empty CAR")


class MissingRootBlock(MalformedInput):
	def __init__(self, cid) -> None:
		self.cid = cid
		super().__init__(f"missing root block {cid}")


class BlockTooLarge(MalformedInput):
	def __init__(self, cid, size: int, limit: int) -> None:
		self.cid = cid
		self.size = size
		self.limit = limit
		super().__init__(f"block too big: {cid} is {size} > {limit}")


class MalformedBlock(MalformedInput):
	def __init__(self, cid, reason: str) -> None:
		self.cid = cid
		super().__init__(f"malformed block {cid}: {reason}")


class UnsupportedCodec(InspectionError):
	def __init__(self, cid) -> None:
		self.cid = cid
		self.codec = cid.codec.name
		super().__init__(f"unsupported codec {self.codec} for {cid}")


class GatewayError(ProbeError):
	def __init__(self, url: str, status: Optional[int]) -> None:
		self.url = url
		self.status = status
		super().__init__(f"failed to fetch {url} from gateway (status {status})")
