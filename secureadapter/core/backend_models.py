"""Payloads exchanged with the Sysdig Secure scanning API."""
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Dict, Any
from datetime import datetime

class _SecureModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

class Vulnerability(_SecureModel):
    vuln: str
    package_name: str
    package_version: str
    fix: Optional[str] = None
    severity: str = "Unknown"
    url: Optional[str] = None
    package: Optional[str] = None
    package_type: Optional[str] = None
    feed: Optional[str] = None
    feed_group: Optional[str] = None
    nvd_data: List[Dict[str, Any]] = []

class VulnerabilityReport(_SecureModel):
    image_digest: Optional[str] = Field(default=None, alias="imageDigest")
    vulnerabilities: List[Vulnerability] = []

class ImageDetail(_SecureModel):
    repository: str = Field(alias="repo")
    digest: str
    full_digest: Optional[str] = Field(default=None, alias="fulldigest")
    tag: Optional[str] = None
    full_tag: Optional[str] = Field(default=None, alias="fulltag")
    registry: Optional[str] = None
    created_at: Optional[datetime] = None

class ImageContent(_SecureModel):
    metadata: Dict[str, Any] = {}

class ScanResponse(_SecureModel):
    image_digest: str = Field(alias="imageDigest")
    image_detail: List[ImageDetail] = []
    image_content: Optional[ImageContent] = None
