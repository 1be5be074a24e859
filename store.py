from typing import Dict, Iterator, Optional, Tuple
import logging
import boto3
from botocore.config import Config

from config import AWS_REGION, S3_ENDPOINT_URL
from decision import accumulated_store_size

log = logging.getLogger(__name__)


def directory_prefix(key: str) -> str:
	"""
	raw/<root cid>/<user>/<car hash>.car -> raw/<root cid>/<user>/
	"""
	head, sep, _ = key.rpartition("/")
	return head + sep


class S3Store:
	def __init__(self, client=None, region: str=AWS_REGION, endpoint_url: Optional[str]=S3_ENDPOINT_URL) -> None:
		if client is None:
			kwargs: dict = {
				"config": Config(
					region_name=region,
					signature_version="s3v4",
					retries={"max_attempts": 3, "mode": "standard"},
				),
			}
			if endpoint_url:
				kwargs["endpoint_url"] = endpoint_url
			client = boto3.client("s3", **kwargs)
		self.client = client

	def get_object(self, bucket: str, key: str) -> Tuple[bytes, Dict[str, str]]:
		log.debug(f"Getting object {key} from bucket {bucket}")
		response = self.client.get_object(Bucket=bucket, Key=key)
		return response["Body"].read(), response.get("Metadata", {})

	def list_sizes(self, bucket: str, prefix: str) -> Iterator[int]:
		paginator = self.client.get_paginator("list_objects_v2")
		for page in paginator.paginate(Bucket=bucket, Prefix=prefix):
			for obj in page.get("Contents", []):
				yield obj["Size"]

	def directory_size(self, bucket: str, key: str) -> int:
		"""
		total size of everything stored next to key, including key itself
		"""
		prefix = directory_prefix(key)
		log.debug(f"Getting list of objects of prefix {prefix} from bucket {bucket}")
		return accumulated_store_size(self.list_sizes(bucket, prefix))
