import argparse
import json
import logging
import sys
from secureadapter.config import AdapterConfig
from secureadapter.core.errors import AdapterError
from secureadapter.core.models import ScanRequest, Registry, Artifact
from secureadapter.plugins.adapters.backend_adapter import BackendAdapter, SCANNER_ADAPTER_METADATA
from secureadapter.plugins.backends.secure_client import SecureClient
from secureadapter.report import ReportGenerator

# Setup logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger("secureadapter")

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Harbor scanner adapter for Sysdig Secure")
    parser.add_argument("--secure-url", help="Sysdig Secure URL. Can also use SECURE_URL env var.")
    parser.add_argument("--secure-api-token", help="Sysdig Secure API token. Can also use SECURE_API_TOKEN env var.")
    parser.add_argument("--insecure", action="store_true", help="Skip TLS verification against Secure")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Metadata Command
    subparsers.add_parser("metadata", help="Print the scanner adapter metadata")

    # Scan Command
    scan_parser = subparsers.add_parser("scan", help="Submit an artifact for scanning")
    scan_parser.add_argument("--request", help="Path to a Harbor scan request JSON file")
    scan_parser.add_argument("--registry-url", help="Registry URL, e.g. https://index.docker.io")
    scan_parser.add_argument("--authorization", default="", help="Registry authorization header (Basic ...)")
    scan_parser.add_argument("--repository", help="Artifact repository")
    scan_parser.add_argument("--tag", help="Artifact tag")

    # Report Command
    report_parser = subparsers.add_parser("report", help="Fetch the vulnerability report of a scan")
    report_parser.add_argument("scan_id", help="Scan response ID returned by the scan command")
    report_parser.add_argument("--format-md", help="Path to generate Markdown report")
    report_parser.add_argument("--format-csv", help="Path to generate CSV report")
    return parser

def scan_request_from(args) -> ScanRequest:
    if args.request:
        with open(args.request, 'r') as f:
            return ScanRequest.model_validate(json.load(f))
    if not (args.registry_url and args.repository and args.tag):
        raise ValueError("--registry-url, --repository and --tag are required without --request")
    return ScanRequest(
        registry=Registry(url=args.registry_url, authorization=args.authorization),
        artifact=Artifact(repository=args.repository, tag=args.tag),
    )

def build_adapter(args) -> BackendAdapter:
    config = AdapterConfig.from_env(
        secure_url=args.secure_url,
        secure_api_token=args.secure_api_token,
        verify_ssl=False if args.insecure else None,
    )
    client = SecureClient(config.secure_api_token, config.secure_url,
                          verify_ssl=config.verify_ssl, timeout=config.timeout)
    return BackendAdapter(client)

def _print(model):
    print(json.dumps(model.model_dump(mode='json', exclude_none=True), indent=2))

def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.command is None:
        parser.print_help()
        return

    try:
        if args.command == "metadata":
            # Metadata is static, no backend needed
            _print(SCANNER_ADAPTER_METADATA)

        elif args.command == "scan":
            request = scan_request_from(args)
            adapter = build_adapter(args)
            logger.info(f"Starting scan for {request.artifact.repository}:{request.artifact.tag}")
            _print(adapter.scan(request))

        elif args.command == "report":
            adapter = build_adapter(args)
            report = adapter.get_vulnerability_report(args.scan_id)
            logger.info(f"Found {len(report.vulnerabilities)} vulnerabilities, severity {report.severity.value}")
            _print(report)

            reporter = ReportGenerator(report)
            if args.format_md:
                reporter.generate_markdown(args.format_md)
                logger.info(f"Markdown report ready: {args.format_md}")
            if args.format_csv:
                reporter.generate_csv(args.format_csv)
                logger.info(f"CSV report ready: {args.format_csv}")

    except (AdapterError, ValueError) as e:
        logger.error(f"{args.command} failed: {e}")
        sys.exit(1)

if __name__ == "__main__":
    main()
