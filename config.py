import os

# gateway host for subdomain requests (https://<cid>.<GATEWAY>), or a base
# URL when USE_IPFS_PATH is set (<GATEWAY>/ipfs/<cid>)
GATEWAY = os.environ.get("GATEWAY", "dweb.link")
USE_IPFS_PATH = bool(os.environ.get("USE_IPFS_PATH"))
GATEWAY_TIMEOUT_SECS = float(os.environ.get("GATEWAY_TIMEOUT_SECS", "25"))

AWS_REGION = os.environ.get("AWS_REGION", "us-east-1")
S3_ENDPOINT_URL = os.environ.get("S3_ENDPOINT_URL") # for minio etc.

LISTEN_HOST = os.environ.get("LISTEN_HOST", "127.0.0.1")
LISTEN_PORT = int(os.environ.get("LISTEN_PORT", "8080"))
WEBHOOK_AUTH_TOKEN = os.environ.get("WEBHOOK_AUTH_TOKEN")

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
