# -*- coding: utf-8 -*-
"""
SharePoint Library Provisioning Package
=======================================

This package provisions choice columns and filtered views on SharePoint
document libraries, authenticating with a certificate-based service
principal. Every run reconciles the declared state and only ever adds.

Modules:
--------
- config: Configuration from the environment and command line
- auth: Certificate loading and Microsoft authentication
- sharepoint_api: SharePoint REST session and request retry logic
- schema: Field SchemaXml and CAML view query helpers
- fields: Choice field reconciliation
- views: View reconciliation
- desired_state: Declared columns and views
- provisioner: Run orchestration
- monitoring: Rate limiting monitoring and statistics tracking
- errors: Error types
- utils: Shared utility functions

Usage Example:
-------------
    from sharepoint_provision.config import parse_config
    from sharepoint_provision.provisioner import run_provisioning

    cfg = parse_config()
    stats = run_provisioning(cfg)
"""

__version__ = "1.0.0"

# Main exports for convenience
from .config import parse_config, Config
from .auth import CertificateSource, load_certificate_credential, acquire_token
from .errors import (
    ProvisioningError,
    ConfigError,
    AuthError,
    SiteConnectionError,
    NotFoundError,
    RemoteRequestError,
    RemoteWriteError,
    FieldTypeMismatchError
)
from .sharepoint_api import SharePointSession, connect, disconnect_quietly
from .fields import ChoiceFieldSpec, ensure_choice_field, merge_choices
from .views import ViewSpec, ensure_view
from .schema import FieldEquals
from .provisioner import run_provisioning
from .monitoring import provisioning_stats, rate_monitor, print_rate_limiting_summary

__all__ = [
    # Configuration
    'parse_config',
    'Config',
    # Authentication
    'CertificateSource',
    'load_certificate_credential',
    'acquire_token',
    # Errors
    'ProvisioningError',
    'ConfigError',
    'AuthError',
    'SiteConnectionError',
    'NotFoundError',
    'RemoteRequestError',
    'RemoteWriteError',
    'FieldTypeMismatchError',
    # SharePoint
    'SharePointSession',
    'connect',
    'disconnect_quietly',
    # Reconcilers
    'ChoiceFieldSpec',
    'ensure_choice_field',
    'merge_choices',
    'ViewSpec',
    'ensure_view',
    'FieldEquals',
    'run_provisioning',
    # Monitoring
    'provisioning_stats',
    'rate_monitor',
    'print_rate_limiting_summary',
]
