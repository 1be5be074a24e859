from typing import Union
from urllib.parse import urljoin
import logging
import aiohttp
from multiformats import CID

from config import GATEWAY, GATEWAY_TIMEOUT_SECS, USE_IPFS_PATH
from errors import GatewayError

log = logging.getLogger(__name__)


def normalize_cid(cid: Union[CID, str]) -> str:
	"""
	base32 CIDv1, which is what subdomain gateways need (v0 isn't case-insensitive)
	"""
	if isinstance(cid, str):
		cid = CID.decode(cid)
	return str(cid.set(version=1, base="base32"))


def gateway_url_for_cid(cid: Union[CID, str], gateway: str=GATEWAY, use_ipfs_path: bool=USE_IPFS_PATH) -> str:
	ncid = normalize_cid(cid)
	if use_ipfs_path:
		return f"{urljoin(gateway, 'ipfs')}/{ncid}"
	return f"https://{ncid}.{gateway}"


async def fetch_root(session: aiohttp.ClientSession, cid: Union[CID, str], gateway: str=GATEWAY, use_ipfs_path: bool=USE_IPFS_PATH, timeout: float=GATEWAY_TIMEOUT_SECS) -> int:
	"""
	Asks the gateway for the root, which makes it go and find the whole DAG.
	Returns the response status. We don't care about the body.

	Raises GatewayError on a non-2xx status; a timeout comes out as
	asyncio.TimeoutError.
	"""
	url = gateway_url_for_cid(cid, gateway, use_ipfs_path)
	log.debug(f"Requesting {url}")
	async with session.get(url, timeout=aiohttp.ClientTimeout(total=timeout)) as response:
		if not response.ok:
			raise GatewayError(url, response.status)
		return response.status
