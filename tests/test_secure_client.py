import unittest
import requests
from unittest.mock import MagicMock, patch
from secureadapter.core.errors import (
    RegistryAlreadyExists, RegistrationFailed, SubmissionFailed, ImageNotFound, ReportNotReady,
    BackendUnavailable,
)
from secureadapter.plugins.backends.secure_client import SecureClient

DIGEST = "sha256:fda6b046981f5dab88aad84c6cebed4e47a0d6ad1c8ff7f58b5f0e6a95a5b2c1"

def http_response(status_code: int, body=None, reason: str = "") -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.reason = reason
    if body is None:
        response.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        response.json.return_value = body
    return response

class TestSecureClient(unittest.TestCase):
    def setUp(self):
        self.client = SecureClient("secret-token", "https://secure.example.com/", verify_ssl=False, timeout=5)

    @patch("requests.request")
    def test_add_image(self, mock_request):
        mock_request.return_value = http_response(200, [{
            "imageDigest": DIGEST,
            "image_content": {"metadata": {"arch": "amd64"}},
            "image_detail": [{
                "repo": "sysdig/agent",
                "digest": DIGEST,
                "tag": "9.8.0",
                "fulltag": "docker.io/sysdig/agent:9.8.0",
                "registry": "docker.io",
                "created_at": "2020-03-05T10:11:12Z",
            }],
        }])

        response = self.client.add_image("sysdig/agent:9.8.0", False)

        self.assertEqual(response.image_digest, DIGEST)
        self.assertEqual(response.image_content.metadata["arch"], "amd64")
        self.assertEqual(response.image_detail[0].repository, "sysdig/agent")
        self.assertEqual(response.image_detail[0].full_tag, "docker.io/sysdig/agent:9.8.0")
        mock_request.assert_called_once_with(
            "POST", "https://secure.example.com/api/scanning/v1/anchore/images",
            params={"force": "false"},
            json={"tag": "sysdig/agent:9.8.0"},
            headers={"Authorization": "Bearer secret-token", "Content-Type": "application/json"},
            verify=False,
            timeout=5,
        )

    @patch("requests.request")
    def test_add_image_error(self, mock_request):
        mock_request.return_value = http_response(
            400, {"message": "cannot fetch image digest/manifest from registry"})

        with self.assertRaises(SubmissionFailed) as context:
            self.client.add_image("sysdiglabs/non-existent", False)
        self.assertEqual(str(context.exception), "cannot fetch image digest/manifest from registry")
        self.assertEqual(context.exception.status_code, 400)

    @patch("requests.request")
    def test_add_registry(self, mock_request):
        mock_request.return_value = http_response(200, [{"registry": "index.docker.io"}])

        self.client.add_registry("index.docker.io", "user", "pass")

        args, kwargs = mock_request.call_args
        self.assertEqual(args, ("POST", "https://secure.example.com/api/scanning/v1/anchore/registries"))
        self.assertEqual(kwargs["params"], {"validate": "false"})
        self.assertEqual(kwargs["json"], {
            "registry": "index.docker.io",
            "registry_user": "user",
            "registry_pass": "pass",
            "registry_type": "docker_v2",
            "registry_verify": False,
        })

    @patch("requests.request")
    def test_add_registry_already_exists(self, mock_request):
        mock_request.return_value = http_response(409, {"message": "registry already exists in DB"})

        with self.assertRaises(RegistryAlreadyExists):
            self.client.add_registry("index.docker.io", "user", "pass")

    @patch("requests.request")
    def test_add_registry_already_exists_by_message(self, mock_request):
        mock_request.return_value = http_response(400, {"message": "registry already exists in DB"})

        with self.assertRaises(RegistryAlreadyExists):
            self.client.add_registry("index.docker.io", "user", "pass")

    @patch("requests.request")
    def test_add_registry_other_error(self, mock_request):
        mock_request.return_value = http_response(401, {"message": "Unauthorized"})

        with self.assertRaises(RegistrationFailed) as context:
            self.client.add_registry("index.docker.io", "user", "pass")
        self.assertNotIsInstance(context.exception, RegistryAlreadyExists)
        self.assertEqual(context.exception.message, "Unauthorized")

    @patch("requests.request")
    def test_update_registry(self, mock_request):
        mock_request.return_value = http_response(200, [])

        self.client.update_registry("localhost:5000", "user", "pass")

        args, kwargs = mock_request.call_args
        self.assertEqual(args, ("PUT", "https://secure.example.com/api/scanning/v1/anchore/registries/localhost:5000"))
        self.assertEqual(kwargs["json"]["registry_pass"], "pass")

    @patch("requests.request")
    def test_update_registry_error(self, mock_request):
        mock_request.return_value = http_response(500, None, reason="Internal Server Error")

        with self.assertRaises(RegistrationFailed) as context:
            self.client.update_registry("localhost:5000", "user", "pass")
        self.assertEqual(str(context.exception), "Internal Server Error")

    @patch("requests.request")
    def test_get_vulnerabilities(self, mock_request):
        mock_request.return_value = http_response(200, {
            "imageDigest": DIGEST,
            "vulnerability_type": "os",
            "vulnerabilities": [{
                "vuln": "CVE-2020-1967",
                "package_name": "openssl",
                "package_version": "1.1.1d",
                "fix": "1.1.1g",
                "severity": "High",
                "url": "https://nvd.nist.gov/vuln/detail/CVE-2020-1967",
                "package": "openssl-1.1.1d",
                "package_type": "dpkg",
                "feed": "vulnerabilities",
                "feed_group": "debian:10",
                "nvd_data": [{"id": "CVE-2020-1967"}],
            }],
        })

        report = self.client.get_vulnerabilities(DIGEST)

        self.assertEqual(report.image_digest, DIGEST)
        self.assertEqual(len(report.vulnerabilities), 1)
        self.assertEqual(report.vulnerabilities[0].vuln, "CVE-2020-1967")
        self.assertEqual(len(report.vulnerabilities[0].nvd_data), 1)
        args, _ = mock_request.call_args
        self.assertEqual(args[1], f"https://secure.example.com/api/scanning/v1/anchore/images/{DIGEST}/vuln/all")

    @patch("requests.request")
    def test_get_vulnerabilities_image_not_found(self, mock_request):
        mock_request.return_value = http_response(404, {"message": "could not get image record from anchore"})

        with self.assertRaises(ImageNotFound):
            self.client.get_vulnerabilities("non-existent")

    @patch("requests.request")
    def test_get_vulnerabilities_not_ready(self, mock_request):
        mock_request.return_value = http_response(
            404, {"message": "image is not analyzed - analysis_status: analyzing"})

        with self.assertRaises(ReportNotReady):
            self.client.get_vulnerabilities(DIGEST)

    @patch("requests.request")
    def test_get_vulnerabilities_server_error(self, mock_request):
        mock_request.return_value = http_response(500, {"message": "boom"})

        with self.assertRaises(BackendUnavailable) as context:
            self.client.get_vulnerabilities(DIGEST)
        self.assertNotIsInstance(context.exception, (ImageNotFound, ReportNotReady))
        self.assertEqual(context.exception.message, "boom")
        self.assertEqual(context.exception.status_code, 500)

    @patch("requests.request")
    def test_get_vulnerabilities_service_unavailable(self, mock_request):
        mock_request.return_value = http_response(503, {"message": "down"})

        with self.assertRaises(BackendUnavailable) as context:
            self.client.get_vulnerabilities(DIGEST)
        self.assertEqual(str(context.exception), "down")

    @patch("requests.request")
    def test_get_vulnerabilities_unexpected_shape(self, mock_request):
        mock_request.return_value = http_response(200, {"imageDigest": DIGEST, "vulnerabilities": None})

        with self.assertRaises(BackendUnavailable) as context:
            self.client.get_vulnerabilities(DIGEST)
        self.assertEqual(context.exception.status_code, 200)

    @patch("requests.request")
    def test_get_image_server_error(self, mock_request):
        mock_request.return_value = http_response(502, None, reason="Bad Gateway")

        with self.assertRaises(BackendUnavailable) as context:
            self.client.get_image(DIGEST)
        self.assertEqual(str(context.exception), "Bad Gateway")

    @patch("requests.request")
    def test_get_image_not_found(self, mock_request):
        mock_request.return_value = http_response(404, {"message": "image not found"})

        with self.assertRaises(ImageNotFound):
            self.client.get_image(DIGEST)

    @patch("requests.request")
    def test_get_image_unexpected_shape(self, mock_request):
        mock_request.return_value = http_response(200, [{
            "imageDigest": DIGEST,
            "image_detail": [{"repo": None, "digest": DIGEST}],
        }])

        with self.assertRaises(BackendUnavailable):
            self.client.get_image(DIGEST)

    @patch("requests.request")
    def test_add_image_unexpected_shape(self, mock_request):
        mock_request.return_value = http_response(200, [{"image_detail": []}])

        with self.assertRaises(BackendUnavailable):
            self.client.add_image("sysdig/agent:9.8.0", False)

    @patch("requests.request")
    def test_get_image(self, mock_request):
        mock_request.return_value = http_response(200, [{
            "imageDigest": DIGEST,
            "image_detail": [{"repo": "sysdig/agent", "digest": DIGEST, "tag": "9.8.0"}],
        }])

        image = self.client.get_image(DIGEST)

        self.assertEqual(image.image_detail[0].tag, "9.8.0")
        args, _ = mock_request.call_args
        self.assertEqual(args, ("GET", f"https://secure.example.com/api/scanning/v1/anchore/images/{DIGEST}"))

    @patch("requests.request")
    def test_get_image_empty_list(self, mock_request):
        mock_request.return_value = http_response(200, [])

        with self.assertRaises(BackendUnavailable):
            self.client.get_image(DIGEST)

    @patch("requests.request")
    def test_transport_error(self, mock_request):
        mock_request.side_effect = requests.ConnectionError("connection refused")

        with self.assertRaises(BackendUnavailable) as context:
            self.client.get_vulnerabilities(DIGEST)
        self.assertIn("connection refused", str(context.exception))

    @patch("requests.request")
    def test_unreadable_body(self, mock_request):
        mock_request.return_value = http_response(200, None)

        with self.assertRaises(BackendUnavailable):
            self.client.get_vulnerabilities(DIGEST)

if __name__ == '__main__':
    unittest.main()
