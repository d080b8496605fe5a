from pydantic import BaseModel, Field
from typing import List, Optional, Dict
from enum import Enum
from datetime import datetime

OCI_IMAGE_MANIFEST_MIME_TYPE = "application/vnd.oci.image.manifest.v1+json"
DOCKER_DISTRIBUTION_MANIFEST_MIME_TYPE = "application/vnd.docker.distribution.manifest.v2+json"
SCAN_REPORT_MIME_TYPE = "application/vnd.scanner.adapter.vuln.report.harbor+json; version=1.0"

class Severity(str, Enum):
    UNKNOWN = "Unknown"
    NEGLIGIBLE = "Negligible"
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"

    @classmethod
    def from_backend(cls, value: Optional[str]) -> "Severity":
        """Cast a backend severity string, falling back to UNKNOWN."""
        try:
            return cls((value or "").capitalize())
        except ValueError:
            return cls.UNKNOWN

    @property
    def rank(self) -> int:
        return SEVERITY_RANK[self]

SEVERITY_RANK = {
    Severity.UNKNOWN: 0,
    Severity.NEGLIGIBLE: 1,
    Severity.LOW: 2,
    Severity.MEDIUM: 3,
    Severity.HIGH: 4,
    Severity.CRITICAL: 5,
}

class Scanner(BaseModel):
    name: str
    vendor: str
    version: str

class ScannerCapability(BaseModel):
    consumes_mime_types: List[str] = []
    produces_mime_types: List[str] = []

class ScannerAdapterMetadata(BaseModel):
    scanner: Scanner
    capabilities: List[ScannerCapability] = []
    properties: Dict[str, str] = {}

class Registry(BaseModel):
    url: str
    authorization: str = ""

class Artifact(BaseModel):
    repository: str
    digest: Optional[str] = None
    tag: Optional[str] = None
    mime_type: Optional[str] = None

class ScanRequest(BaseModel):
    registry: Registry
    artifact: Artifact

class ScanResponse(BaseModel):
    id: str

class VulnerabilityItem(BaseModel):
    id: str
    package: str
    version: str
    fix_version: Optional[str] = None
    severity: Severity = Severity.UNKNOWN
    description: Optional[str] = None
    links: List[str] = []

class VulnerabilityReport(BaseModel):
    generated_at: Optional[datetime] = None
    artifact: Optional[Artifact] = None # Unset when the backend has no matching image detail
    scanner: Scanner
    severity: Severity = Severity.UNKNOWN
    vulnerabilities: List[VulnerabilityItem] = Field(default_factory=list)
