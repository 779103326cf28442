from __future__ import annotations

import base64
import time
import urllib.error
import urllib.parse
import urllib.request
import uuid
from typing import Callable

from .config import ServiceConfig
from .errors import TransportError
from .logstore import LogStore
from .models import TranslateRequest

DOCUMENTS_PATH = "/v3/documents"
REQUEST_TIMEOUT = 30.0


def encode_multipart(fields: dict[str, str], file_field: str, filename: str, content_type: str, data: bytes) -> tuple[bytes, str]:
    boundary = f"doctrans-{uuid.uuid4().hex}"
    parts: list[bytes] = []
    for name, value in fields.items():
        parts.append(
            (
                f"--{boundary}\r\n"
                f'Content-Disposition: form-data; name="{name}"\r\n\r\n'
                f"{value}\r\n"
            ).encode("utf-8")
        )
    parts.append(
        (
            f"--{boundary}\r\n"
            f'Content-Disposition: form-data; name="{file_field}"; filename="{filename}"\r\n'
            f"Content-Type: {content_type}\r\n\r\n"
        ).encode("utf-8")
    )
    parts.append(data)
    parts.append(f"\r\n--{boundary}--\r\n".encode("utf-8"))
    return b"".join(parts), f"multipart/form-data; boundary={boundary}"


class DocumentService:
    """Thin client for the ``/v3/documents`` endpoints of the translation service."""

    def __init__(
        self,
        config: ServiceConfig,
        logstore: LogStore | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = config
        self.logstore = logstore
        self.sleep = sleep

    def list_documents(self) -> bytes:
        return self._send("GET", DOCUMENTS_PATH, retry=True)

    def delete_document(self, document_id: str) -> None:
        quoted = urllib.parse.quote(document_id, safe="")
        self._send("DELETE", f"{DOCUMENTS_PATH}/{quoted}", retry=True)

    def translate(self, request: TranslateRequest) -> bytes:
        try:
            data = request.file_path.read_bytes()
        except OSError as exc:
            raise TransportError(f"cannot read {request.file_path}: {exc}") from exc
        body, content_type = encode_multipart(
            {"source": request.source, "target": request.target},
            "file",
            request.filename,
            request.accept,
            data,
        )
        return self._send("POST", DOCUMENTS_PATH, body=body, content_type=content_type)

    def _url(self, path: str) -> str:
        query = urllib.parse.urlencode({"version": self.config.version})
        return f"{self.config.url}{path}?{query}"

    def _auth_header(self) -> str:
        token = base64.b64encode(f"apikey:{self.config.api_key}".encode("utf-8")).decode("ascii")
        return f"Basic {token}"

    def _send(
        self,
        method: str,
        path: str,
        *,
        body: bytes | None = None,
        content_type: str = "",
        retry: bool = False,
    ) -> bytes:
        attempts = 1 + (max(0, self.config.retries) if retry else 0)
        last_exc: TransportError | None = None
        for attempt in range(1, attempts + 1):
            try:
                return self._send_once(method, path, body, content_type)
            except TransportError as exc:
                last_exc = exc
                # Client errors will not improve on retry.
                if 400 <= exc.status < 500 or attempt == attempts:
                    break
                delay = self.config.retry_backoff * attempt
                self._log("warn", f"{method} {path} failed ({exc}); retry {attempt}/{attempts - 1} in {delay:.1f}s")
                self.sleep(delay)
        assert last_exc is not None
        raise last_exc

    def _send_once(self, method: str, path: str, body: bytes | None, content_type: str) -> bytes:
        url = self._url(path)
        req = urllib.request.Request(url, data=body, method=method)
        req.add_header("Authorization", self._auth_header())
        req.add_header("Accept", "application/json")
        if content_type:
            req.add_header("Content-Type", content_type)
        self._log("debug", f"{method} {url}")
        try:
            with urllib.request.urlopen(req, timeout=REQUEST_TIMEOUT) as resp:
                payload = resp.read()
                self._log("debug", f"{method} {path} -> status={resp.status} bytes={len(payload)}")
                return payload
        except urllib.error.HTTPError as exc:
            detail = exc.read(512).decode("utf-8", errors="ignore") if getattr(exc, "fp", None) else ""
            raise TransportError(f"{method} {path} returned status {exc.code}", status=exc.code, body=detail) from exc
        except urllib.error.URLError as exc:
            raise TransportError(f"{method} {path} failed: {exc.reason}") from exc
        except OSError as exc:
            raise TransportError(f"{method} {path} failed: {exc}") from exc

    def _log(self, level: str, message: str) -> None:
        if self.logstore is not None:
            self.logstore.append(level, "service", message, category="network")
