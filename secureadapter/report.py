import csv
import os
import logging
from datetime import datetime
from secureadapter.core.models import VulnerabilityReport

logger = logging.getLogger(__name__)

class ReportGenerator:
    def __init__(self, report: VulnerabilityReport):
        self.report = report

    def count_by_severity(self) -> dict:
        counts = {}
        for v in self.report.vulnerabilities:
            counts[v.severity] = counts.get(v.severity, 0) + 1
        return counts

    def sorted_vulnerabilities(self):
        # Most severe first, backend order kept within a severity
        return sorted(self.report.vulnerabilities, key=lambda v: -v.severity.rank)

    def generate_markdown(self, output_path: str = "report.md"):
        # Ensure directory exists
        dir_path = os.path.dirname(output_path)
        if dir_path:
            os.makedirs(dir_path, exist_ok=True)

        generated_at = self.report.generated_at or datetime.now()
        artifact = self.report.artifact
        with open(output_path, 'w') as f:
            f.write(f"# Vulnerability Scan Report\n")
            f.write(f"Generated at: {generated_at.isoformat()}\n\n")
            f.write(f"Scanner: {self.report.scanner.name} {self.report.scanner.version} ({self.report.scanner.vendor})\n\n")
            if artifact:
                f.write(f"Artifact: {artifact.repository}:{artifact.tag or 'N/A'} ({artifact.digest or 'N/A'})\n\n")

            # Summary
            counts = self.count_by_severity()
            f.write("## Summary\n")
            f.write(f"- Severity: {self.report.severity.value}\n")
            f.write(f"- Total Vulnerabilities: {len(self.report.vulnerabilities)}\n")
            for severity in sorted(counts, key=lambda s: -s.rank):
                f.write(f"- {severity.value}: {counts[severity]}\n")
            f.write("\n")

            # Table
            f.write("## Vulnerabilities\n")
            f.write("| ID | Package | Version | Severity | Fix Version | Links |\n")
            f.write("|---|---|---|---|---|---|\n")
            for v in self.sorted_vulnerabilities():
                links = " ".join(v.links)
                f.write(f"| {v.id} | {v.package} | {v.version} | {v.severity.value} | {v.fix_version or 'N/A'} | {links} |\n")
        logger.debug(f"Wrote markdown report to {output_path}")

    def generate_csv(self, output_path: str = "report.csv"):
        # Ensure directory exists
        dir_path = os.path.dirname(output_path)
        if dir_path:
            os.makedirs(dir_path, exist_ok=True)

        fieldnames = ['id', 'package', 'version', 'severity', 'fix_version', 'links']
        with open(output_path, 'w', newline='') as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames)
            writer.writeheader()
            for v in self.report.vulnerabilities:
                writer.writerow({
                    'id': v.id,
                    'package': v.package,
                    'version': v.version,
                    'severity': v.severity.value,
                    'fix_version': v.fix_version or '',
                    'links': " ".join(v.links),
                })
        logger.debug(f"Wrote CSV report to {output_path}")
