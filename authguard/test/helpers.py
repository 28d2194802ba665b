# authguard/test/helpers.py

import base64
import io
import json

from PIL import Image

# 64 bytes -> 512 bits, recomendado para HS512
TEST_SECRET = base64.b64encode(bytes(range(64))).decode("ascii")

# 2023-11-14T22:13:20Z
FIXED_NOW = 1_700_000_000

ACCESS_TTL_SECONDS = 3600
REFRESH_TTL_SECONDS = 604800

TEST_IP = "203.0.113.10"


class FakeClock:
    """Controllable replacement for time.time."""

    def __init__(self, now: float = FIXED_NOW):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class TickingClock(FakeClock):
    """FakeClock that moves one second forward on every read."""

    def __call__(self) -> float:
        value = self.now
        self.now += 1
        return value


def b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def forge_token(header: dict, payload: dict, signature: str = "c2lnbmF0dXJl") -> str:
    """Build a compact token with an arbitrary header and signature."""
    return ".".join([
        b64url(json.dumps(header).encode("utf-8")),
        b64url(json.dumps(payload).encode("utf-8")),
        signature,
    ])


def make_image_bytes(width: int = 800, height: int = 600, image_format: str = "JPEG") -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color=(120, 80, 200)).save(buffer, format=image_format)
    return buffer.getvalue()
