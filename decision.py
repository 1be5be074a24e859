from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from dag import Structure

# we don't try to validate arbitrarily big DAGs through the gateway in one go
MAX_SIZE_TO_ATTEMPT = 100 * 1024 * 1024


class Verdict(Enum):
	ATTEMPT = "attempt"
	DEFER = "defer"


class Reason(Enum):
	COMPLETE = "structure is complete"
	NO_SIZE = "no dag-pb root, so no known size"
	TOO_LARGE = "known size is over the attempt limit"
	UPLOADED = "all expected bytes appear to be stored"
	UPLOADING = "still not entirely uploaded"


@dataclass(frozen=True)
class FetchDecision:
	verdict: Verdict
	reason: Reason

	@property
	def attempt(self) -> bool:
		return self.verdict is Verdict.ATTEMPT


def precheck(structure: Optional[Structure], size: Optional[int], size_ceiling: int=MAX_SIZE_TO_ATTEMPT) -> Optional[FetchDecision]:
	"""
	Everything we can decide without listing the store. None means the
	answer depends on how much has been uploaded next to this CAR.
	"""
	if structure is Structure.COMPLETE:
		return FetchDecision(Verdict.ATTEMPT, Reason.COMPLETE)
	if size is None:
		return FetchDecision(Verdict.DEFER, Reason.NO_SIZE)
	if size > size_ceiling:
		return FetchDecision(Verdict.DEFER, Reason.TOO_LARGE)
	return None


def decide(structure: Optional[Structure], size: Optional[int], size_ceiling: int=MAX_SIZE_TO_ATTEMPT, accumulated_size: int=0) -> FetchDecision:
	decision = precheck(structure, size, size_ceiling)
	if decision is not None:
		return decision
	# XXX: this is a heuristic. Unrelated CARs under the same prefix inflate
	# accumulated_size, and wrong or missing Tsizes skew size either way.
	if accumulated_size >= size:
		return FetchDecision(Verdict.ATTEMPT, Reason.UPLOADED)
	return FetchDecision(Verdict.DEFER, Reason.UPLOADING)


def accumulated_store_size(sizes: Iterable[int]) -> int:
	return sum(sizes)
