from abc import ABC, abstractmethod
from secureadapter.core.models import ScannerAdapterMetadata, ScanRequest, ScanResponse, VulnerabilityReport
from secureadapter.core import backend_models as secure

class SecureClientBase(ABC):
    @abstractmethod
    def add_registry(self, registry: str, user: str, password: str) -> None:
        """Register credentials for a registry. Raises RegistryAlreadyExists if it is known."""
        pass

    @abstractmethod
    def update_registry(self, registry: str, user: str, password: str) -> None:
        """Replace the credentials of an already registered registry."""
        pass

    @abstractmethod
    def add_image(self, image: str, force: bool) -> secure.ScanResponse:
        """Queue an image reference for analysis."""
        pass

    @abstractmethod
    def get_vulnerabilities(self, digest: str) -> secure.VulnerabilityReport:
        """Fetch the OS package vulnerabilities of an analyzed image."""
        pass

    @abstractmethod
    def get_image(self, digest: str) -> secure.ScanResponse:
        """Fetch the image metadata known for a digest."""
        pass

class AdapterBase(ABC):
    @abstractmethod
    def get_metadata(self) -> ScannerAdapterMetadata:
        """Describe the scanner and its capabilities."""
        pass

    @abstractmethod
    def scan(self, request: ScanRequest) -> ScanResponse:
        """Submit the requested artifact and return an opaque scan response ID."""
        pass

    @abstractmethod
    def get_vulnerability_report(self, scan_response_id: str) -> VulnerabilityReport:
        """Translate the backend findings for a previous scan."""
        pass
