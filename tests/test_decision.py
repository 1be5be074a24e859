import pytest

from dag import Structure
from decision import MAX_SIZE_TO_ATTEMPT, FetchDecision, Reason, Verdict, accumulated_store_size, decide, precheck


@pytest.mark.parametrize("size,accumulated", [(None, 0), (10, 0), (MAX_SIZE_TO_ATTEMPT * 2, 0), (10, 10 ** 12)])
def test_complete_always_attempts(size, accumulated):
	decision = decide(Structure.COMPLETE, size, accumulated_size=accumulated)
	assert decision == FetchDecision(Verdict.ATTEMPT, Reason.COMPLETE)
	assert decision.attempt


@pytest.mark.parametrize("structure", [Structure.PARTIAL, None])
def test_no_size_defers(structure):
	decision = decide(structure, None, accumulated_size=10 ** 12)
	assert decision == FetchDecision(Verdict.DEFER, Reason.NO_SIZE)
	assert not decision.attempt


def test_too_large_defers_even_if_uploaded():
	size = MAX_SIZE_TO_ATTEMPT + 1
	assert decide(Structure.PARTIAL, size, accumulated_size=size * 2).reason is Reason.TOO_LARGE


def test_exactly_at_ceiling_is_allowed():
	assert decide(Structure.PARTIAL, MAX_SIZE_TO_ATTEMPT, accumulated_size=MAX_SIZE_TO_ATTEMPT).verdict is Verdict.ATTEMPT


def test_custom_ceiling():
	assert decide(Structure.PARTIAL, 100, size_ceiling=50, accumulated_size=1000).reason is Reason.TOO_LARGE


@pytest.mark.parametrize("accumulated,verdict,reason", [
	(0, Verdict.DEFER, Reason.UPLOADING),
	(999, Verdict.DEFER, Reason.UPLOADING),
	(1000, Verdict.ATTEMPT, Reason.UPLOADED),
	(5000, Verdict.ATTEMPT, Reason.UPLOADED),
])
def test_partial_compares_with_store(accumulated, verdict, reason):
	assert decide(Structure.PARTIAL, 1000, accumulated_size=accumulated) == FetchDecision(verdict, reason)


def test_precheck_leaves_the_listing_case_open():
	assert precheck(Structure.PARTIAL, 1000) is None
	assert precheck(Structure.COMPLETE, None).reason is Reason.COMPLETE
	assert precheck(Structure.PARTIAL, None).reason is Reason.NO_SIZE
	assert precheck(Structure.PARTIAL, MAX_SIZE_TO_ATTEMPT + 1).reason is Reason.TOO_LARGE


def test_accumulated_store_size():
	assert accumulated_store_size([]) == 0
	assert accumulated_store_size([49, 49]) == 98
	assert accumulated_store_size(iter([1, 2, 3])) == 6
