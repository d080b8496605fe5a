import logging
from secureadapter.core.interfaces import AdapterBase, SecureClientBase
from secureadapter.core.errors import (
    RegistryAlreadyExists, ImageNotFound, ReportNotReady, SecureError,
    ScanRequestIDNotFound, VulnerabilityReportNotReady,
)
from secureadapter.core.models import (
    Scanner, ScannerCapability, ScannerAdapterMetadata, ScanRequest, ScanResponse,
    VulnerabilityItem, VulnerabilityReport, Artifact, Severity,
    OCI_IMAGE_MANIFEST_MIME_TYPE, DOCKER_DISTRIBUTION_MANIFEST_MIME_TYPE, SCAN_REPORT_MIME_TYPE,
)
from secureadapter.core import backend_models as secure
from secureadapter.utils import scan_handle
from secureadapter.utils.credentials import registry_from_url, user_and_password_from, image_from

logger = logging.getLogger(__name__)

BACKEND_VERSION = "3.2.0"

SCANNER = Scanner(name="Sysdig Secure", vendor="Sysdig", version=BACKEND_VERSION)

SCANNER_ADAPTER_METADATA = ScannerAdapterMetadata(
    scanner=SCANNER,
    capabilities=[
        ScannerCapability(
            consumes_mime_types=[OCI_IMAGE_MANIFEST_MIME_TYPE, DOCKER_DISTRIBUTION_MANIFEST_MIME_TYPE],
            produces_mime_types=[SCAN_REPORT_MIME_TYPE],
        )
    ],
    properties={"harbor.scanner-adapter/scanner-type": "os-package-vulnerability"},
)

class BackendAdapter(AdapterBase):
    """Drives Sysdig Secure on behalf of Harbor.

    Holds nothing but the backend client: everything needed to build a report
    later travels inside the scan response ID.
    """

    def __init__(self, client: SecureClientBase):
        self.client = client

    def get_metadata(self) -> ScannerAdapterMetadata:
        return SCANNER_ADAPTER_METADATA.model_copy(deep=True)

    def scan(self, request: ScanRequest) -> ScanResponse:
        registry = registry_from_url(request.registry.url)
        user, password = user_and_password_from(request.registry.authorization)
        self.ensure_registry_credentials(registry, user, password)

        image = image_from(request)
        logger.info(f"Submitting {image} for analysis")
        response = self.client.add_image(image, False)

        return ScanResponse(id=scan_handle.encode(request.artifact.repository, response.image_digest))

    def ensure_registry_credentials(self, registry: str, user: str, password: str):
        """Register the credentials, or overwrite them if the registry is already known."""
        try:
            self.client.add_registry(registry, user, password)
        except RegistryAlreadyExists:
            logger.debug(f"Registry {registry} already exists, updating credentials")
            self.client.update_registry(registry, user, password)

    def get_vulnerability_report(self, scan_response_id: str) -> VulnerabilityReport:
        repository, digest = scan_handle.decode(scan_response_id)
        result = VulnerabilityReport(scanner=SCANNER.model_copy(), severity=Severity.UNKNOWN)

        self._fill_vulnerabilities(digest, result)
        self._fill_artifact(repository, digest, result)

        return result

    def _fill_vulnerabilities(self, digest: str, result: VulnerabilityReport):
        try:
            vulnerability_report = self.client.get_vulnerabilities(digest)
        except ImageNotFound as e:
            raise ScanRequestIDNotFound() from e
        except ReportNotReady as e:
            raise VulnerabilityReportNotReady() from e

        for vulnerability in vulnerability_report.vulnerabilities:
            item = to_vulnerability_item(vulnerability)
            result.vulnerabilities.append(item)
            if result.severity.rank < item.severity.rank:
                result.severity = item.severity

    def _fill_artifact(self, repository: str, digest: str, result: VulnerabilityReport):
        # Harbor treats the artifact as optional, so a miss here leaves the report partial
        try:
            image = self.client.get_image(digest)
        except SecureError as e:
            logger.debug(f"Could not fetch image metadata for {digest}: {e}")
            return

        for detail in image.image_detail:
            if detail.repository == repository:
                result.generated_at = detail.created_at
                result.artifact = Artifact(
                    repository=detail.repository,
                    digest=detail.digest,
                    tag=detail.tag,
                    mime_type=DOCKER_DISTRIBUTION_MANIFEST_MIME_TYPE,
                )
                return

        logger.debug(f"No image detail for repository {repository} in {digest}")

def to_vulnerability_item(vulnerability: secure.Vulnerability) -> VulnerabilityItem:
    return VulnerabilityItem(
        id=vulnerability.vuln,
        package=vulnerability.package_name,
        version=vulnerability.package_version,
        fix_version=vulnerability.fix,
        severity=Severity.from_backend(vulnerability.severity),
        links=[vulnerability.url] if vulnerability.url else [],
    )
