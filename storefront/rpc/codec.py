"""JSON message codec for the gRPC facade.

Messages are JSON objects on the wire, so the services can be registered
with generic handlers and no generated stubs. Protobuf-encoded payloads
from stubs generated off shop.proto are not understood and are rejected.
"""
import json


def decode(payload: bytes) -> dict:
    if not payload:
        return {}
    try:
        message = json.loads(payload.decode("utf-8"))
    except ValueError as exc:
        raise ValueError("RPC messages must be UTF-8 JSON, not protobuf") from exc
    if not isinstance(message, dict):
        raise ValueError("RPC messages must be JSON objects")
    return message


def encode(message: dict) -> bytes:
    return json.dumps(message, separators=(",", ":")).encode("utf-8")
