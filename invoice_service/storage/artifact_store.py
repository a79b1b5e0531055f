"""
Artifact Store - durable, write-once blob storage for rendered invoices

Artifacts live under INVOICE_STORAGE_DIR, one file per key. Keys are never
reused and files are never overwritten or deleted. Read access is granted
through signed, time-bounded URLs.
"""
import logging
import os
import threading
import time
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from pathlib import Path
from typing import Optional
from urllib.parse import quote

from jose import jwt, JWTError
from pydantic import BaseModel

from invoice_service.config import settings
from invoice_service.services.errors import StoreError

logger = logging.getLogger(__name__)

KEY_PREFIX = "invoices"
READ_SCOPE = "artifact:read"
SIGNING_ALGORITHM = "HS256"
CONTENT_TYPE_PDF = "application/pdf"


class ArtifactAck(BaseModel):
    """Acknowledgement of a completed write"""
    key: str
    size_bytes: int
    content_type: str = CONTENT_TYPE_PDF


class ArtifactStore:
    """Filesystem-backed artifact store with signed read URLs"""

    def __init__(
        self,
        base_dir: str,
        signing_secret: str,
        public_base_url: str,
        url_ttl: timedelta = timedelta(days=365)
    ):
        self.base_dir = Path(base_dir)
        self.signing_secret = signing_secret
        self.public_base_url = public_base_url.rstrip("/")
        self.url_ttl = url_ttl
        self._clock_lock = threading.Lock()
        self._last_timestamp = 0

    def _generation_timestamp(self) -> int:
        """Microseconds since the epoch, strictly increasing in this process"""
        with self._clock_lock:
            now = time.time_ns() // 1000
            self._last_timestamp = max(now, self._last_timestamp + 1)
            return self._last_timestamp

    def build_key(self, order_id: str) -> str:
        """
        Build a fresh storage key for an order

        Returns:
            Key of the form invoices/{orderId}-{generationTimestamp}

        Raises:
            StoreError: If the order id cannot be used inside a key
        """
        if not order_id or "/" in order_id or "\\" in order_id or order_id.startswith("."):
            raise StoreError(f"Order id {order_id!r} cannot be used as a storage key")
        return f"{KEY_PREFIX}/{order_id}-{self._generation_timestamp()}"

    def _path_for(self, key: str) -> Path:
        parts = key.split("/")
        if len(parts) != 2 or parts[0] != KEY_PREFIX or not parts[1] or parts[1].startswith("."):
            raise StoreError(f"Invalid storage key: {key!r}")
        return self.base_dir.joinpath(*parts)

    def write(self, data: bytes, key: str) -> ArtifactAck:
        """
        Persist an artifact under a new key

        Raises:
            StoreError: If the key already exists or the write fails
        """
        path = self._path_for(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "xb") as fh:
                fh.write(data)
        except FileExistsError as e:
            raise StoreError(f"Artifact {key} already exists") from e
        except OSError as e:
            raise StoreError(f"Failed to write artifact {key}: {e}") from e

        logger.debug("Stored artifact %s (%d bytes)", key, len(data))
        return ArtifactAck(key=key, size_bytes=len(data))

    def read(self, key: str) -> Optional[bytes]:
        """Return artifact bytes, or None if the key does not exist"""
        path = self._path_for(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StoreError(f"Failed to read artifact {key}: {e}") from e

    def exists(self, key: str) -> bool:
        return self._path_for(key).is_file()

    def issue_read_url(self, key: str, ttl: Optional[timedelta] = None) -> str:
        """
        Issue a read-only URL for an artifact, valid for ttl (default url_ttl)

        Raises:
            StoreError: If the artifact is missing or signing fails
        """
        if not self.exists(key):
            raise StoreError(f"Cannot sign URL for missing artifact {key}")

        issued_at = datetime.now(timezone.utc)
        claims = {
            "sub": key,
            "scope": READ_SCOPE,
            "iat": issued_at,
            "exp": issued_at + (ttl if ttl is not None else self.url_ttl),
        }
        try:
            token = jwt.encode(claims, self.signing_secret, algorithm=SIGNING_ALGORITHM)
        except JWTError as e:
            raise StoreError(f"Failed to sign URL for {key}: {e}") from e

        return f"{self.public_base_url}/artifacts/{quote(key)}?token={token}"

    def verify_read_token(self, key: str, token: str) -> bool:
        """Check that token grants read access to key and has not expired"""
        try:
            claims = jwt.decode(token, self.signing_secret, algorithms=[SIGNING_ALGORITHM])
        except JWTError:
            return False
        return claims.get("sub") == key and claims.get("scope") == READ_SCOPE

    def ensure_base_dir(self) -> None:
        """
        Create the storage directory if it does not exist yet

        Raises:
            StoreError: If the directory cannot be created
        """
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreError(f"Failed to create storage directory {self.base_dir}: {e}") from e

    def is_available(self) -> bool:
        """Check that the storage directory exists and is writable, without creating it"""
        return self.base_dir.is_dir() and os.access(self.base_dir, os.W_OK)


@lru_cache(maxsize=1)
def get_artifact_store() -> ArtifactStore:
    """Process-wide store handle, created on first use"""
    return ArtifactStore(
        base_dir=settings.INVOICE_STORAGE_DIR,
        signing_secret=settings.ARTIFACT_SIGNING_SECRET,
        public_base_url=settings.PUBLIC_BASE_URL,
        url_ttl=timedelta(days=settings.INVOICE_URL_TTL_DAYS)
    )
