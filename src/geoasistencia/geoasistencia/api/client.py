from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import requests

from ..core.constants import DEFAULT_API_TIMEOUT_SECONDS
from ..core.exceptions import AuthenticationError, GatewayError

logger = logging.getLogger(__name__)


@dataclass
class ApiConfig:
    base_url: str
    timeout_seconds: float = DEFAULT_API_TIMEOUT_SECONDS


def unwrap(payload: Any) -> Any:
    """Backend answers either ``{"data": ...}`` or the bare payload."""
    if isinstance(payload, dict) and "data" in payload:
        return payload["data"]
    return payload


class ApiClient:
    """Thin JSON client for the attendance REST backend.

    One ``requests.Session`` is shared by every user; the bearer token is
    passed per call because each employee has their own.
    """

    def __init__(self, config: ApiConfig, *, session: Optional[requests.Session] = None):
        self._config = config
        self._session = session or requests.Session()
        self._session.headers.update({"Content-Type": "application/json"})

    def _url(self, path: str) -> str:
        return self._config.base_url.rstrip("/") + "/" + path.lstrip("/")

    def get(self, path: str, *, token: Optional[str] = None) -> Any:
        return self._request("GET", path, token=token)

    def post(self, path: str, payload: dict, *, token: Optional[str] = None) -> Any:
        return self._request("POST", path, token=token, json=payload)

    def _request(self, method: str, path: str, *, token: Optional[str], **kwargs) -> Any:
        headers = {}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            res = self._session.request(
                method,
                self._url(path),
                headers=headers,
                timeout=self._config.timeout_seconds,
                **kwargs,
            )
        except requests.Timeout as exc:
            logger.warning("%s %s timed out after %ss", method, path, self._config.timeout_seconds)
            raise GatewayError("El servidor no respondió a tiempo") from exc
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise GatewayError("No se pudo conectar con el servidor") from exc

        if res.status_code == 401:
            raise AuthenticationError("Sesión expirada, vuelve a iniciar sesión")
        if not res.ok:
            raise GatewayError(_error_message(res), status_code=res.status_code)

        if not res.content:
            return None
        try:
            return res.json()
        except ValueError as exc:
            raise GatewayError("Respuesta inválida del servidor", status_code=res.status_code) from exc


def _error_message(res: requests.Response) -> str:
    try:
        body = res.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return "No se pudo registrar"
