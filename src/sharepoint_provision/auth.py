# -*- coding: utf-8 -*-
"""
Microsoft authentication module for SharePoint provisioning.

This module loads the service principal's PKCS#12 certificate and handles
Azure AD app-only authentication using MSAL (Microsoft Authentication Library).
"""

import base64
import binascii

import msal
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.serialization import pkcs12

from .errors import AuthError


class CertificateSource:
    """
    Where the PKCS#12 certificate comes from.

    The certificate can be supplied either as a path to a .pfx/.p12 file or as
    a base64-encoded blob (typically a CI secret). Both forms decode to the same
    PKCS#12 bytes.
    """

    def __init__(self, path=None, encoded=None):
        self.path = path
        self.encoded = encoded

    @classmethod
    def from_path(cls, path):
        return cls(path=path)

    @classmethod
    def from_base64(cls, encoded):
        return cls(encoded=encoded)

    def describe(self):
        if self.path:
            return f"file '{self.path}'"
        return "base64 blob"

    def read_bytes(self):
        """
        Return the raw PKCS#12 bytes.

        Raises:
            AuthError: If no source is set, the file cannot be read or the blob is not valid base64
        """
        if self.path:
            try:
                with open(self.path, 'rb') as cert_file:
                    return cert_file.read()
            except OSError as e:
                raise AuthError(f"Cannot read certificate file '{self.path}': {e}")
        if self.encoded:
            try:
                return base64.b64decode(self.encoded, validate=True)
            except (binascii.Error, ValueError) as e:
                raise AuthError(f"Certificate blob is not valid base64: {e}")
        raise AuthError("No certificate supplied")


def load_certificate_credential(source, password):
    """
    Convert a PKCS#12 certificate into an MSAL client credential.

    Args:
        source (CertificateSource): Where to read the certificate from
        password (str): Passphrase protecting the private key

    Returns:
        dict: Credential accepted by msal.ConfidentialClientApplication:
            - 'private_key': PEM encoded private key
            - 'thumbprint': SHA-1 thumbprint of the certificate (hex)
            - 'public_certificate': PEM encoded certificate

    Raises:
        AuthError: If the certificate cannot be read or decrypted
    """
    pfx_bytes = source.read_bytes()
    passphrase = password.encode('utf-8') if password else None

    try:
        private_key, certificate, _ = pkcs12.load_key_and_certificates(pfx_bytes, passphrase)
    except ValueError as e:
        raise AuthError(f"Cannot load certificate from {source.describe()}: {e}")

    if private_key is None or certificate is None:
        raise AuthError(f"Certificate from {source.describe()} must contain a private key and a certificate")

    private_key_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption()
    ).decode('ascii')
    certificate_pem = certificate.public_bytes(serialization.Encoding.PEM).decode('ascii')

    return {
        'private_key': private_key_pem,
        'thumbprint': certificate.fingerprint(hashes.SHA1()).hex().upper(),
        'public_certificate': certificate_pem,
    }


def acquire_token(tenant_id, client_id, credential, login_endpoint, resource_host):
    """
    Acquire an app-only token for a SharePoint host from Azure Active Directory.

    This uses the OAuth 2.0 client credentials flow with a certificate
    assertion, which is the only app-only flow the SharePoint REST API accepts.

    Args:
        tenant_id (str): Azure AD tenant ID (GUID format)
        client_id (str): Application (client) ID from Azure AD app registration
        credential (dict): Certificate credential from load_certificate_credential()
        login_endpoint (str): Azure AD authentication endpoint (e.g., 'login.microsoftonline.com')
        resource_host (str): SharePoint host name (e.g., 'contoso.sharepoint.com')

    Returns:
        dict: MSAL token result. Contains 'access_token' on success,
              'error' and 'error_description' on failure.

    Note:
        The app registration needs the SharePoint Sites.Manage.All (or
        Sites.FullControl.All) application permission.
    """
    # Format: https://login.microsoftonline.com/{tenant_id}
    authority_url = f'https://{login_endpoint}/{tenant_id}'

    app = msal.ConfidentialClientApplication(
        authority=authority_url,
        client_id=client_id,
        client_credential=credential
    )

    # '/.default' scope means "use all permissions granted to this app"
    return app.acquire_token_for_client(scopes=[f"https://{resource_host}/.default"])
