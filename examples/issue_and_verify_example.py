#!/usr/bin/env python3
"""
Ownership Certificate Example - Issue, Verify, Tamper

Issues an account certificate and a logo certificate, verifies both from
their identifiers alone, then shows what happens to an edited identifier
and to a signature presented with the wrong email.

Run with: python examples/issue_and_verify_example.py
"""

import json
from datetime import timedelta

from ownercert import (
    CertificateIssuer,
    CertificateVerifier,
    Secret,
)


def show(title: str, result) -> None:
    print(f"\n--- {title} ---")
    print(json.dumps(result.to_dict(), indent=2))


def main():
    secret = Secret.generate()
    issuer = CertificateIssuer(secret)
    verifier = CertificateVerifier(secret, max_age=timedelta(days=365), clock_skew=timedelta(hours=1))

    # Account certificate
    cert = issuer.issue_account_certificate("alice@example.com")
    print(f"Certificate ID:    {cert.identifier}")
    print(f"Digital signature: {cert.signature}")
    print(f"Issue date:        {cert.issue_date}")

    show("Stateless verification", verifier.verify_account_certificate(cert.identifier))
    show("Full verification", verifier.verify_account_certificate_full(
        cert.identifier, "alice@example.com", cert.signature
    ))
    show("Same prefix, different domain", verifier.verify_account_certificate_full(
        cert.identifier, "alice@attacker.example", cert.signature
    ))
    show("Edited prefix", verifier.verify_account_certificate(
        cert.identifier.replace("-ALICE-", "-MALLORY-")
    ))

    # Logo certificate; the logo id may contain the delimiter
    image = b"\x89PNG\r\n\x1a\n example logo bytes"
    logo = issuer.issue_artifact_certificate("alice@example.com", "brand-logo-v2", image)
    print(f"\nLogo certificate ID: {logo.identifier}")

    show("Logo verification with image", verifier.verify_artifact_certificate(logo.identifier, image))
    show("Logo verification with a different image", verifier.verify_artifact_certificate(
        logo.identifier, b"some other image"
    ))


if __name__ == "__main__":
    main()
