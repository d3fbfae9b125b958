#!/usr/bin/env python3
"""
Ownership Certificate Command Line Interface

Usage:
    ownercert issue-account --email <email>
    ownercert issue-artifact --email <email> --artifact-id <id> --file <image>
    ownercert verify --id <identifier> [--email <email> --signature <sig>]
    ownercert verify-artifact --id <identifier> [--file <image>]
    ownercert checksum --text <text>
    ownercert gen-secret

The certificate secret is read from --secret or CERTIFICATE_SECRET.
"""

import argparse
import json
import os
import sys
from pathlib import Path

from .codec import CertificateKind
from .documents import verification_url
from .errors import ConfigurationError, IssuanceError
from .hashing import checksum
from .issuer import CertificateIssuer
from .signing import Secret
from .verifier import CertificateVerifier

DEFAULT_BASE_URL = "http://localhost:8000"


def load_secret(args) -> Secret:
    """Resolve the certificate secret from the command line or environment."""
    value = args.secret or os.getenv("CERTIFICATE_SECRET", "")
    return Secret(value)


def print_json(data: dict):
    print(json.dumps(data, indent=2))


def cmd_issue_account(args) -> int:
    """Issue an account certificate."""
    issuer = CertificateIssuer(load_secret(args))
    cert = issuer.issue_account_certificate(args.email)
    print_json({
        "certificate_id": cert.identifier,
        "digital_signature": cert.signature,
        "issue_date": cert.issue_date,
        "verification_url": verification_url(args.base_url, cert.identifier, CertificateKind.ACCOUNT),
    })
    return 0


def cmd_issue_artifact(args) -> int:
    """Issue an artifact certificate for an image file."""
    issuer = CertificateIssuer(load_secret(args))
    data = Path(args.file).read_bytes()
    cert = issuer.issue_artifact_certificate(args.email, args.artifact_id, data)
    print_json({
        "certificate_id": cert.identifier,
        "artifact_id": cert.artifact_id,
        "content_hash": cert.content_hash,
        "issue_date": cert.issue_date,
        "verification_url": verification_url(args.base_url, cert.identifier, CertificateKind.ARTIFACT),
    })
    return 0


def _report(result) -> int:
    print_json(result.to_dict())
    if result.is_valid():
        print(f"\n✓ {result.outcome.value}", file=sys.stderr)
        return 0
    print(f"\n✗ INVALID ({result.reason.value}): {result.detail}", file=sys.stderr)
    return 1


def cmd_verify(args) -> int:
    """Verify an account certificate, fully if email and signature are given."""
    verifier = CertificateVerifier(load_secret(args))
    if args.email or args.signature:
        result = verifier.verify_account_certificate_full(args.id, args.email, args.signature)
    else:
        result = verifier.verify_account_certificate(args.id)
    return _report(result)


def cmd_verify_artifact(args) -> int:
    """Verify an artifact certificate, re-confirming the image if given."""
    verifier = CertificateVerifier(load_secret(args))
    data = Path(args.file).read_bytes() if args.file else None
    return _report(verifier.verify_artifact_certificate(args.id, data))


def cmd_checksum(args) -> int:
    """Print the rolling checksum of a string."""
    print(checksum(args.text))
    return 0


def cmd_gen_secret(args) -> int:
    """Generate a random certificate secret."""
    print(Secret.generate(args.bytes).value)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ownercert",
        description="Stateless ownership certificate CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  ownercert gen-secret
  ownercert issue-account -e alice@example.com
  ownercert verify -i CERT-...
  ownercert verify -i CERT-... -e alice@example.com -s <signature>
  ownercert issue-artifact -e alice@example.com -a logo-42 -f logo.png
  ownercert verify-artifact -i LOGO-... -f logo.png
        """
    )
    parser.add_argument("--secret", help="Certificate secret (default: $CERTIFICATE_SECRET)")
    parser.add_argument("--base-url", default=os.getenv("BASE_URL", DEFAULT_BASE_URL),
                        help="Base URL for verification links")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    issue_parser = subparsers.add_parser("issue-account", help="Issue an account certificate")
    issue_parser.add_argument("-e", "--email", required=True, help="Subject email")

    artifact_parser = subparsers.add_parser("issue-artifact", help="Issue an artifact certificate")
    artifact_parser.add_argument("-e", "--email", required=True, help="Subject email")
    artifact_parser.add_argument("-a", "--artifact-id", required=True, help="Artifact identifier")
    artifact_parser.add_argument("-f", "--file", required=True, help="Artifact image file")

    verify_parser = subparsers.add_parser("verify", help="Verify an account certificate")
    verify_parser.add_argument("-i", "--id", required=True, help="Certificate identifier")
    verify_parser.add_argument("-e", "--email", help="Asserted subject email (full verification)")
    verify_parser.add_argument("-s", "--signature", help="Asserted signature (full verification)")

    verify_artifact_parser = subparsers.add_parser("verify-artifact", help="Verify an artifact certificate")
    verify_artifact_parser.add_argument("-i", "--id", required=True, help="Certificate identifier")
    verify_artifact_parser.add_argument("-f", "--file", help="Artifact image file to re-confirm")

    checksum_parser = subparsers.add_parser("checksum", help="Compute the rolling checksum")
    checksum_parser.add_argument("-t", "--text", required=True, help="Input text")

    secret_parser = subparsers.add_parser("gen-secret", help="Generate a certificate secret")
    secret_parser.add_argument("-b", "--bytes", type=int, default=32, help="Random bytes")

    return parser


COMMANDS = {
    "issue-account": cmd_issue_account,
    "issue-artifact": cmd_issue_artifact,
    "verify": cmd_verify,
    "verify-artifact": cmd_verify_artifact,
    "checksum": cmd_checksum,
    "gen-secret": cmd_gen_secret,
}


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    handler = COMMANDS.get(args.command)
    if handler is None:
        parser.print_help()
        return 2

    try:
        return handler(args)
    except ConfigurationError as e:
        print(f"error: {e} (set --secret or CERTIFICATE_SECRET)", file=sys.stderr)
        return 2
    except IssuanceError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
