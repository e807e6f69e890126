"""HTTP client for the WonderLens backend."""

import logging
import os
from typing import Any, Dict, List, Optional

import httpx

from .compression import ImageSource, compress_image_to_base64
from .device import get_device_info

logger = logging.getLogger(__name__)


class WonderLensAPIError(Exception):
    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}")


class WonderLensClient:
    """Client for every WonderLens API endpoint.

    The base URL comes from the argument or WONDERLENS_BACKEND_URL
    (default http://127.0.0.1:7001).
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = 120.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = (base_url or os.getenv("WONDERLENS_BACKEND_URL", "http://127.0.0.1:7001")).rstrip("/")
        self.client = httpx.Client(base_url=self.base_url, timeout=timeout, transport=transport)

    def close(self) -> None:
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        response = self.client.request(method, path, **kwargs)
        if response.is_error:
            try:
                message = response.json().get("error") or response.reason_phrase
            except ValueError:
                message = "Unknown error (no JSON response from server)"
            logger.error(f"{method} {path} failed: {response.status_code} {message}")
            raise WonderLensAPIError(response.status_code, str(message))
        return response

    def health(self) -> bool:
        try:
            return self._request("GET", "/health").json().get("status") == "ok"
        except (httpx.HTTPError, WonderLensAPIError) as e:
            logger.error(f"Health check failed: {e}")
            return False

    def analyze_image(
        self,
        source: ImageSource,
        child_age: Optional[int] = None,
        child_country: Optional[str] = None,
        device_info: Optional[Dict[str, str]] = None,
        user_id: Optional[str] = None,
        compress: bool = True,
    ) -> Dict[str, Any]:
        """
        Compress an image and submit it for analysis.

        Returns the learning data as sent by the server: five lenses, the
        "unrecognized" refusal, or an {"error": ...} payload.
        """
        image = compress_image_to_base64(source) if compress else source
        body = {
            "image": image,
            "child_age": child_age,
            "child_country": child_country,
            "device_info": device_info if device_info is not None else get_device_info(),
        }
        if user_id:
            body["user_id"] = user_id
        logger.info("Submitting scan", extra={"payload_kb": round(len(image) / 1024)})
        return self._request("POST", "/api/analyze-image", json=body).json()

    def get_kid_news(self, country: str, age: int) -> Dict[str, Any]:
        return self._request("GET", "/api/kidnews", params={"country": country, "age": age}).json()

    def get_quiz(self, category: str, age: int) -> Dict[str, Any]:
        response = self._request("GET", "/api/quiz", params={"category": category, "age": age})
        quiz = response.json()
        if response.headers.get("X-Quiz-Fallback") == "true":
            logger.info(
                "Quiz served from another category",
                extra={"requested": category, "served": response.headers.get("X-Quiz-Category")},
            )
        return quiz

    def get_history(self, device_id: Optional[str] = None) -> List[Dict[str, Any]]:
        device_id = device_id or get_device_info()["deviceId"]
        return self._request("GET", "/api/scans/history", params={"device_id": device_id}).json()

    def delete_scan(self, scan_id: str, device_id: Optional[str] = None) -> Dict[str, Any]:
        device_id = device_id or get_device_info()["deviceId"]
        return self._request("DELETE", f"/api/scans/{scan_id}", params={"device_id": device_id}).json()

    def get_community(self, limit: int = 20, age: Optional[int] = None) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {"limit": limit}
        if age is not None:
            params["age"] = age
        return self._request("GET", "/api/scans/community", params=params).json()
