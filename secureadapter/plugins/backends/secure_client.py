import requests
import logging
from pydantic import BaseModel, ValidationError
from typing import Optional, Dict, Any, Type
from secureadapter.core.interfaces import SecureClientBase
from secureadapter.core import backend_models as secure
from secureadapter.core.errors import (
    RegistryAlreadyExists, ImageNotFound, ReportNotReady,
    RegistrationFailed, SubmissionFailed, BackendUnavailable,
)

logger = logging.getLogger(__name__)

REGISTRY_ALREADY_EXISTS_MESSAGE = "registry already exists in DB"
IMAGE_ANALYZING_MESSAGE = "image is not analyzed - analysis_status: analyzing"

class SecureClient(SecureClientBase):
    API_PREFIX = "/api/scanning/v1/anchore"

    def __init__(self, api_token: str, secure_url: str = "https://secure.sysdig.com",
                 verify_ssl: bool = True, timeout: float = 30):
        self.api_token = api_token
        self.secure_url = secure_url.rstrip("/")
        self.verify_ssl = verify_ssl
        self.timeout = timeout

    def _request(self, method: str, path: str, params: Optional[Dict[str, Any]] = None,
                 payload: Optional[Dict[str, Any]] = None) -> requests.Response:
        url = f"{self.secure_url}{self.API_PREFIX}{path}"
        headers = {
            "Authorization": f"Bearer {self.api_token}",
            "Content-Type": "application/json",
        }
        logger.debug(f"{method} {url}")
        try:
            return requests.request(
                method, url,
                params=params,
                json=payload,
                headers=headers,
                verify=self.verify_ssl,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise BackendUnavailable(f"Error contacting Secure at {self.secure_url}: {e}") from e

    def _error_message(self, response: requests.Response) -> str:
        """Return the message Secure puts in its error body, or the HTTP reason."""
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("message"):
            return body["message"]
        return response.reason or f"HTTP {response.status_code}"

    def _json(self, response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise BackendUnavailable(f"Unreadable response from Secure: {e}", response.status_code) from e

    def _validate(self, model: Type[BaseModel], data: Any, response: requests.Response):
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise BackendUnavailable(f"Unexpected {model.__name__} payload from Secure: {e}", response.status_code) from e

    def _registry_payload(self, registry: str, user: str, password: str) -> Dict[str, Any]:
        return {
            "registry": registry,
            "registry_user": user,
            "registry_pass": password,
            "registry_type": "docker_v2",
            "registry_verify": False,
        }

    def add_registry(self, registry: str, user: str, password: str) -> None:
        response = self._request("POST", "/registries", params={"validate": "false"},
                                 payload=self._registry_payload(registry, user, password))
        if response.status_code >= 400:
            message = self._error_message(response)
            if response.status_code == 409 or message == REGISTRY_ALREADY_EXISTS_MESSAGE:
                raise RegistryAlreadyExists(message, response.status_code)
            raise RegistrationFailed(message, response.status_code)
        logger.info(f"Registered registry {registry}")

    def update_registry(self, registry: str, user: str, password: str) -> None:
        response = self._request("PUT", f"/registries/{registry}", params={"validate": "false"},
                                 payload=self._registry_payload(registry, user, password))
        if response.status_code >= 400:
            raise RegistrationFailed(self._error_message(response), response.status_code)
        logger.info(f"Updated credentials for registry {registry}")

    def add_image(self, image: str, force: bool) -> secure.ScanResponse:
        response = self._request("POST", "/images", params={"force": str(force).lower()},
                                 payload={"tag": image})
        if response.status_code >= 400:
            raise SubmissionFailed(self._error_message(response), response.status_code)
        return self._first_image(response)

    def get_vulnerabilities(self, digest: str) -> secure.VulnerabilityReport:
        response = self._request("GET", f"/images/{digest}/vuln/all")
        if response.status_code >= 400:
            message = self._error_message(response)
            if response.status_code == 404:
                if message == IMAGE_ANALYZING_MESSAGE:
                    raise ReportNotReady(message, response.status_code)
                raise ImageNotFound(message, response.status_code)
            raise BackendUnavailable(message, response.status_code)
        return self._validate(secure.VulnerabilityReport, self._json(response), response)

    def get_image(self, digest: str) -> secure.ScanResponse:
        response = self._request("GET", f"/images/{digest}")
        if response.status_code >= 400:
            message = self._error_message(response)
            if response.status_code == 404:
                raise ImageNotFound(message, response.status_code)
            raise BackendUnavailable(message, response.status_code)
        return self._first_image(response)

    def _first_image(self, response: requests.Response) -> secure.ScanResponse:
        # Image endpoints answer with a one element list
        data = self._json(response)
        if isinstance(data, list):
            if not data:
                raise BackendUnavailable("Secure returned an empty image list", response.status_code)
            data = data[0]
        return self._validate(secure.ScanResponse, data, response)
