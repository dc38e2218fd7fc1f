#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
SharePoint Library Provisioning Script
======================================

PURPOSE:
    This script provisions choice columns and filtered views on a fixed set of
    SharePoint Online document libraries. It is configuration-as-code: the
    declared state lives in sharepoint_provision/desired_state.py and every run
    brings the site in line with it without deleting anything.

SYNOPSIS:
    python main.py [cert_path]

PARAMETERS:
    Optional Parameters:
    -------------------
    [cert_path]
        Path to the PKCS#12 (.pfx) certificate of the app registration.
        Takes precedence over CERT_PATH and CERT_BASE64.
        `Type`: String (file path)
        `Position`: 1

ENVIRONMENT:
    Variables may also be placed in a .env file in the working directory.

    SITE_URL
        Full URL of the target site.
        `Example`: 'https://company.sharepoint.com/sites/Documentation'

    TENANT_ID
        Azure AD tenant ID (GUID format).
        Find in Azure Portal → Azure Active Directory → Properties → Tenant ID

    CLIENT_ID
        Azure AD App Registration application (client) ID.
        Requires the SharePoint Sites.Manage.All (or Sites.FullControl.All)
        application permission. SharePoint REST only accepts certificate
        credentials for app-only access; client secrets will not work.

    CERT_PASSWORD
        Passphrase protecting the certificate's private key.
        WARNING: Keep this secure! Never commit to version control.

    CERT_PATH / CERT_BASE64
        The certificate, either as a file path or as the base64-encoded
        content of the .pfx file (convenient for CI secrets).
        Encode with: base64 -w0 app-cert.pfx

    LOGIN_ENDPOINT (optional)
        Azure AD authentication endpoint for special cloud environments.
        Default: 'login.microsoftonline.com'
        US Government Cloud: 'login.microsoftonline.us'

    MAX_RETRY (optional)
        Retries for throttled (429), server error (5xx) and network failures.
        Default: 3

    REQUEST_TIMEOUT (optional)
        Per-request timeout in seconds. Default: 60

    WHATIF (optional)
        'true' reports every change that would be made without writing it.
        Default: 'false'

    DEBUG (optional)
        'true' prints every REST call and extra diagnostics.

DESCRIPTION:
    - Creates each declared choice column if it is missing (not added to the
      default view) and sets its description
    - Appends declared choices missing from an existing column; existing
      choices are never removed or reordered
    - Creates each declared view with its filter if it is missing
    - Updates the displayed columns of existing views; a view's filter is
      never changed once the view exists (drift is reported as a warning)
    - Stops at the first error; changes already applied stay applied, which
      is safe because every step can simply be re-run

EXIT CODES:
    0 - All columns and views are provisioned
    1 - Configuration, authentication, connection or SharePoint error

EXAMPLES:
    1. Certificate file:
       SITE_URL=https://company.sharepoint.com/sites/Docs TENANT_ID=... \\
       CLIENT_ID=... CERT_PASSWORD=... python main.py ./app-cert.pfx

    2. Certificate from a CI secret, dry run:
       export CERT_BASE64="$(base64 -w0 app-cert.pfx)"
       WHATIF=true python main.py
"""

# ====================================
# IMPORTS
# ====================================

import sys

from sharepoint_provision.config import parse_config
from sharepoint_provision.errors import ProvisioningError
from sharepoint_provision.monitoring import print_rate_limiting_summary
from sharepoint_provision.provisioner import run_provisioning


# ====================================================================
# SUMMARY REPORT
# ====================================================================

def print_summary(stats, whatif_mode=False):
    """
    Print final summary report with provisioning statistics.

    Args:
        stats (ProvisioningStatistics): Outcome counters of the run
        whatif_mode (bool): Whether changes were only reported
    """
    print("\n" + "="*60)
    print("[✓] PROVISIONING COMPLETED")
    print("="*60)

    stats.print_summary(whatif_mode=whatif_mode)

    if stats.total_changes() == 0:
        print("\n[OK] SharePoint already matched the declared columns and views")
    print("="*60)

    print_rate_limiting_summary()


# ====================================================================
# MAIN EXECUTION
# ====================================================================

def main(argv=None):
    """
    Main execution function that orchestrates the provisioning run.

    Process:
        1. Parse and validate configuration
        2. Connect to SharePoint with the certificate
        3. Reconcile declared fields, then declared views
        4. Close the session (always)
        5. Print summary statistics and exit with the appropriate code
    """
    try:
        config = parse_config(argv=argv)
    except ProvisioningError as config_error:
        print(f"[Error] {config_error}")
        sys.exit(1)

    print(f"[=] Target site: {config.site_url}")
    if config.whatif:
        print("[!] WhatIf mode enabled - changes will be reported but not written")

    try:
        stats = run_provisioning(config)
    except ProvisioningError as run_error:
        print(f"\n[Error] {run_error}")
        sys.exit(1)

    print_summary(stats, whatif_mode=config.whatif)


if __name__ == "__main__":
    main()
