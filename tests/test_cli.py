"""Tests for the ownercert command line interface."""

import io
import json
import os
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from unittest import mock

from ownercert.cli import main


def run(*argv):
    out, err = io.StringIO(), io.StringIO()
    with redirect_stdout(out), redirect_stderr(err):
        code = main(list(argv))
    return code, out.getvalue(), err.getvalue()


class TestCli(unittest.TestCase):

    def test_checksum(self):
        code, out, _ = run("checksum", "-t", "a")
        self.assertEqual(code, 0)
        self.assertEqual(out.strip(), "2p")

    def test_issue_and_verify_account(self):
        code, out, _ = run("--secret", "cli-secret", "issue-account", "-e", "alice@example.com")
        self.assertEqual(code, 0)
        issued = json.loads(out)
        self.assertTrue(issued["certificate_id"].startswith("CERT-"))

        code, out, err = run("--secret", "cli-secret", "verify", "-i", issued["certificate_id"])
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out)["subject_prefix"], "alice")
        self.assertIn("VALID", err)

        code, _, _ = run(
            "--secret", "cli-secret", "verify", "-i", issued["certificate_id"],
            "-e", "alice@example.com", "-s", issued["digital_signature"],
        )
        self.assertEqual(code, 0)

    def test_verify_rejects_wrong_subject(self):
        _, out, _ = run("--secret", "cli-secret", "issue-account", "-e", "alice@example.com")
        issued = json.loads(out)
        code, out, _ = run(
            "--secret", "cli-secret", "verify", "-i", issued["certificate_id"],
            "-e", "alice@other.org", "-s", issued["digital_signature"],
        )
        self.assertEqual(code, 1)
        self.assertEqual(json.loads(out)["reason"], "signature")

    def test_issue_and_verify_artifact(self):
        with tempfile.TemporaryDirectory() as tmp:
            image = os.path.join(tmp, "logo.png")
            other = os.path.join(tmp, "other.png")
            with open(image, "wb") as f:
                f.write(b"\x89PNG logo bytes")
            with open(other, "wb") as f:
                f.write(b"\x89PNG other bytes")

            code, out, _ = run(
                "--secret", "cli-secret", "issue-artifact",
                "-e", "alice@example.com", "-a", "logo-42", "-f", image,
            )
            self.assertEqual(code, 0)
            identifier = json.loads(out)["certificate_id"]

            code, out, _ = run("--secret", "cli-secret", "verify-artifact", "-i", identifier, "-f", image)
            self.assertEqual(code, 0)
            self.assertTrue(json.loads(out)["artifact_bytes_verified"])

            code, out, _ = run("--secret", "cli-secret", "verify-artifact", "-i", identifier, "-f", other)
            self.assertEqual(code, 0)
            self.assertFalse(json.loads(out)["artifact_bytes_verified"])

    def test_tampered_identifier(self):
        code, out, err = run("--secret", "cli-secret", "verify", "-i", "CERT-ABC-ALICE-XYZ")
        self.assertEqual(code, 1)
        self.assertEqual(json.loads(out)["reason"], "checksum")
        self.assertIn("INVALID", err)

    def test_missing_secret(self):
        with mock.patch.dict(os.environ, {"CERTIFICATE_SECRET": ""}):
            code, _, err = run("issue-account", "-e", "alice@example.com")
        self.assertEqual(code, 2)
        self.assertIn("CERTIFICATE_SECRET", err)

    def test_secret_from_environment(self):
        with mock.patch.dict(os.environ, {"CERTIFICATE_SECRET": "env-secret"}):
            code, out, _ = run("issue-account", "-e", "alice@example.com")
            self.assertEqual(code, 0)
            identifier = json.loads(out)["certificate_id"]
            code, _, _ = run("verify", "-i", identifier)
        self.assertEqual(code, 0)

    def test_issuance_error(self):
        code, _, err = run("--secret", "cli-secret", "issue-account", "-e", "")
        self.assertEqual(code, 2)
        self.assertIn("subject_email", err)

    def test_gen_secret(self):
        code, out, _ = run("gen-secret", "-b", "16")
        self.assertEqual(code, 0)
        self.assertGreaterEqual(len(out.strip()), 16)

    def test_no_command(self):
        code, _, _ = run()
        self.assertEqual(code, 2)


if __name__ == "__main__":
    unittest.main(verbosity=2)
