"""
Kraken Desk — Private Request Signing
Nonce sequencing, form-body encoding and the API-Sign header computation.
"""
import base64
import hashlib
import hmac
import threading
import time
from typing import Callable, Dict, Mapping, Optional
from urllib.parse import quote_plus


def _wall_clock_micros() -> int:
    return time.time_ns() // 1000


class NonceGenerator:
    """
    Strictly increasing nonce source for one API key.

    Seeded from wall-clock microseconds; when the clock stalls or steps
    backwards the previous value is bumped by one instead. Safe to share
    between threads.
    """

    def __init__(self, clock: Optional[Callable[[], int]] = None):
        self._clock = clock or _wall_clock_micros
        self._last = 0
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            candidate = self._clock()
            if candidate <= self._last:
                candidate = self._last + 1
            self._last = candidate
            return candidate


_generators: Dict[str, NonceGenerator] = {}
_generators_lock = threading.Lock()


def get_nonce_generator(api_key: str) -> NonceGenerator:
    """Return the process-wide generator for an API key."""
    with _generators_lock:
        generator = _generators.get(api_key)
        if generator is None:
            generator = NonceGenerator()
            _generators[api_key] = generator
        return generator


def encode_body(params: Mapping[str, object]) -> str:
    """Serialize params as key=value pairs joined by '&', values form-encoded."""
    return "&".join(f"{key}={quote_plus(str(value))}" for key, value in params.items())


def sign_request(url_path: str, body: str, nonce: object, secret: str) -> str:
    """
    Compute the API-Sign header value.

    HMAC-SHA512 keyed with the base64-decoded secret over
    url_path + SHA256(nonce + body), returned base64-encoded.
    """
    secret_bytes = base64.b64decode(secret)
    digest = hashlib.sha256((str(nonce) + body).encode("utf-8")).digest()
    mac = hmac.new(secret_bytes, url_path.encode("utf-8") + digest, hashlib.sha512)
    return base64.b64encode(mac.digest()).decode("ascii")
