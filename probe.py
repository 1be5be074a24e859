from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple
from urllib.parse import unquote_plus
import asyncio
import logging
import time
import aiohttp

from config import LOG_LEVEL
from decision import FetchDecision, decide, precheck
from errors import InspectionError
from gateway import fetch_root
from inspector import InspectionResult, inspect_car
from store import S3Store

"""
Runs on every CAR written to the bucket.

We read the CAR from the gateway if either:
 - the CAR holds its whole DAG (or its metadata says it does)
 - the CAR has a dag-pb root with an acceptable known size, and the bucket
   directory for that upload already holds at least that many bytes
"""

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProbeResult:
	bucket: str
	key: str
	inspection: InspectionResult
	decision: FetchDecision
	status: Optional[int] = None # gateway response status, if we asked

	def summary(self) -> Dict[str, Any]:
		structure = self.inspection.structure
		return {
			"key": self.key,
			"rootCid": str(self.inspection.root),
			"structure": structure.value if structure else None,
			"size": self.inspection.size,
			"decision": self.decision.verdict.value,
			"reason": self.decision.reason.name,
			"status": self.status,
		}


def elapsed(start: float) -> str:
	return f"{(time.monotonic() - start) * 1000:.1f}ms"


def records_from_event(event: dict) -> Iterator[Tuple[str, str]]:
	for record in event["Records"]:
		s3 = record["s3"]
		bucket, key = s3["bucket"]["name"], s3["object"]["key"]
		if not isinstance(bucket, str) or not isinstance(key, str):
			raise TypeError(f"bucket name and object key must be strings, got {bucket!r}, {key!r}")
		# keys arrive URL-encoded, with spaces as "+"
		yield bucket, unquote_plus(key)


async def probe_object(store: S3Store, session: aiohttp.ClientSession, bucket: str, key: str) -> ProbeResult:
	start = time.monotonic()

	try:
		body, metadata = await asyncio.to_thread(store.get_object, bucket, key)
	except Exception:
		log.exception(f"Error getting object {key} from bucket {bucket}")
		raise

	try:
		# parsing and walking a multi-MiB CAR is CPU bound, keep it off the event loop
		inspection = await asyncio.to_thread(inspect_car, body, metadata)
	except InspectionError as e:
		log.error(f"Error parsing CAR {key} from bucket {bucket}: {e!r}")
		raise
	root = inspection.root
	if inspection.structure_source == "metadata":
		log.warning(f"Car with root {root} uses an unsupported codec, trusting structure={inspection.structure} from metadata")

	decision = precheck(inspection.structure, inspection.size)
	if decision is None:
		try:
			accumulated = await asyncio.to_thread(store.directory_size, bucket, key)
		except Exception:
			log.exception(f"Error listing objects next to {key} in bucket {bucket}")
			raise
		decision = decide(inspection.structure, inspection.size, accumulated_size=accumulated)

	if not decision.attempt:
		log.info(f"[{elapsed(start)}] Car with root {root} in {bucket}/{key} not requested: {decision.reason.value}")
		return ProbeResult(bucket, key, inspection, decision)

	try:
		status = await fetch_root(session, root)
	except Exception:
		log.exception(f"[{elapsed(start)}] Error fetching CAR with root {root} from gateway")
		raise

	log.info(f"[{elapsed(start)}] Car with root {root} was successfully requested ({decision.reason.value})")
	return ProbeResult(bucket, key, inspection, decision, status)


async def handle_event(event: dict, store: S3Store, session: aiohttp.ClientSession) -> List[ProbeResult]:
	return [
		await probe_object(store, session, bucket, key)
		for bucket, key in records_from_event(event)
	]


def lambda_handler(event: dict, context=None) -> List[Dict[str, Any]]:
	logging.basicConfig(level=LOG_LEVEL)

	async def run():
		store = S3Store()
		async with aiohttp.ClientSession() as session:
			return await handle_event(event, store, session)

	return [result.summary() for result in asyncio.run(run())]
