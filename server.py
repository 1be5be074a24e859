from typing import Optional
import asyncio
import hmac
import logging
import aiohttp
from aiohttp import web

from config import LISTEN_HOST, LISTEN_PORT, LOG_LEVEL, WEBHOOK_AUTH_TOKEN
from errors import GatewayError, InspectionError
from probe import handle_event, records_from_event
from store import S3Store

log = logging.getLogger(__name__)

STORE = web.AppKey("store", S3Store)
SESSION = web.AppKey("session", aiohttp.ClientSession)
AUTH_TOKEN = web.AppKey("auth_token", object) # Optional[str]


async def hello(request: web.Request):
	return web.Response(text="Hello! This is a CAR completeness probe. POST S3 event notifications to /events")


async def events(request: web.Request):
	token = request.app[AUTH_TOKEN]
	if token is not None:
		supplied = request.headers.get("Authorization", "").removeprefix("Bearer ")
		if not hmac.compare_digest(supplied.encode(), token.encode()):
			raise web.HTTPUnauthorized(text="bad auth token")

	try:
		event = await request.json()
	except ValueError:
		raise web.HTTPBadRequest(text="body must be JSON")
	if not isinstance(event, dict) or not isinstance(event.get("Records"), list):
		raise web.HTTPBadRequest(text="body must be an S3 event notification")

	try:
		list(records_from_event(event))
	except (KeyError, TypeError) as e:
		raise web.HTTPBadRequest(text=f"malformed event record: {e!r}")

	try:
		results = await handle_event(event, request.app[STORE], request.app[SESSION])
	except InspectionError as e:
		raise web.HTTPUnprocessableEntity(text=str(e))
	except GatewayError as e:
		raise web.HTTPBadGateway(text=str(e))

	return web.json_response({"results": [r.summary() for r in results]})


def make_app(store: S3Store, auth_token: Optional[str]=WEBHOOK_AUTH_TOKEN) -> web.Application:
	app = web.Application()
	app[STORE] = store
	app[AUTH_TOKEN] = auth_token

	async def client_session(app: web.Application):
		async with aiohttp.ClientSession() as session:
			app[SESSION] = session
			yield

	app.cleanup_ctx.append(client_session)
	app.add_routes([
		web.get("/", hello),
		web.post("/events", events),
	])
	return app


async def main():
	logging.basicConfig(level=LOG_LEVEL)
	app = make_app(S3Store())

	LOG_FMT = '%{X-Forwarded-For}i %t (%Tf) "%r" %s %b "%{User-Agent}i"'
	runner = web.AppRunner(app, access_log_format=LOG_FMT)
	await runner.setup()
	site = web.TCPSite(runner, host=LISTEN_HOST, port=LISTEN_PORT)
	await site.start()
	log.info(f"Listening on http://{LISTEN_HOST}:{LISTEN_PORT}")

	try:
		await asyncio.Event().wait() # serve forever
	finally:
		await runner.cleanup()

if __name__ == "__main__":
	asyncio.run(main())
