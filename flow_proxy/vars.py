import os

SERVICE_NAME = os.getenv("SERVICE_NAME", "flow-api-proxy")
HOST = os.environ.get("HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT") or "3000")

OTLP_ENDPOINT = os.getenv("OTLP_ENDPOINT")
OTLP_HEADERS = os.getenv("OTLP_HEADERS", "")
