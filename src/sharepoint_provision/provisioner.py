# -*- coding: utf-8 -*-
"""
Provisioning run orchestration.

Connects to the site, reconciles every declared field and then every declared
view in order, and always closes the session afterwards.
"""

from .auth import CertificateSource
from .desired_state import FIELD_SPECS, VIEW_SPECS
from .fields import ensure_choice_field
from .monitoring import provisioning_stats
from .sharepoint_api import connect, disconnect_quietly
from .views import ensure_view


def certificate_source_from_config(config):
    """Pick the certificate source: a file path wins over a base64 blob."""
    if config.cert_path:
        return CertificateSource.from_path(config.cert_path)
    return CertificateSource.from_base64(config.cert_base64)


def reconcile_all(session, field_specs, view_specs, whatif=False):
    """
    Run every reconciler call in declared order.

    Fields are reconciled before views so that views can reference newly
    created columns. The first failure propagates and stops the sequence.
    """
    total = len(field_specs) + len(view_specs)
    step = 0

    for spec in field_specs:
        step += 1
        print(f"\n[*] ({step}/{total}) Field '{spec.internal_name}' on '{spec.library}'")
        provisioning_stats.record('fields', ensure_choice_field(session, spec, whatif=whatif))

    for spec in view_specs:
        step += 1
        print(f"\n[*] ({step}/{total}) View '{spec.name}' on '{spec.library}'")
        provisioning_stats.record('views', ensure_view(session, spec, whatif=whatif))


def run_provisioning(config, connector=connect, field_specs=None, view_specs=None):
    """
    Execute one provisioning run.

    Args:
        config (Config): Validated configuration
        connector (callable): Returns a session; defaults to sharepoint_api.connect
        field_specs (list): Declared fields, defaults to desired_state.FIELD_SPECS
        view_specs (list): Declared views, defaults to desired_state.VIEW_SPECS

    Returns:
        ProvisioningStatistics: Outcome counters of the run

    Raises:
        ProvisioningError: On the first failure; the session is closed first
    """
    field_specs = FIELD_SPECS if field_specs is None else field_specs
    view_specs = VIEW_SPECS if view_specs is None else view_specs
    provisioning_stats.reset()

    print("[*] Connecting to SharePoint...")
    session = connector(
        config.site_url, config.tenant_id, config.client_id,
        certificate_source_from_config(config), config.cert_password,
        login_endpoint=config.login_endpoint, max_retry=config.max_retry,
        timeout=config.request_timeout
    )

    try:
        reconcile_all(session, field_specs, view_specs, whatif=config.whatif)
    finally:
        disconnect_quietly(session)

    return provisioning_stats
