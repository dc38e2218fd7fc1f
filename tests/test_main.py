"""
Tests for the command-line entry point and its exit codes.
"""

import os
from unittest import mock

import pytest

import main
from sharepoint_provision.config import parse_config
from sharepoint_provision.errors import RemoteWriteError
from sharepoint_provision.monitoring import ProvisioningStatistics

ENV = {
    'SITE_URL': 'https://contoso.sharepoint.com/sites/Docs',
    'TENANT_ID': 'tenant',
    'CLIENT_ID': 'client',
    'CERT_PASSWORD': 'secret',
}


@pytest.fixture
def environment(monkeypatch):
    for name in ('SITE_URL', 'TENANT_ID', 'CLIENT_ID', 'CERT_PASSWORD', 'CERT_PATH', 'CERT_BASE64', 'WHATIF'):
        monkeypatch.delenv(name, raising=False)
    for name, value in ENV.items():
        monkeypatch.setenv(name, value)
    monkeypatch.setattr(main, 'parse_config', _parse_without_dotenv)
    return monkeypatch


def _parse_without_dotenv(argv=None):
    return parse_config(argv=argv, environ=dict(os.environ))


def test_missing_configuration_exits_before_connecting(environment, capsys):
    environment.delenv('TENANT_ID')
    with mock.patch.object(main, 'run_provisioning') as run:
        with pytest.raises(SystemExit) as excinfo:
            main.main(['main.py', '/certs/app.pfx'])

    assert excinfo.value.code == 1
    run.assert_not_called()
    assert '[Error] TENANT_ID cannot be empty' in capsys.readouterr().out


def test_provisioning_error_exits_non_zero(environment, capsys):
    with mock.patch.object(main, 'run_provisioning', side_effect=RemoteWriteError("POST failed (400): Duplicate")):
        with pytest.raises(SystemExit) as excinfo:
            main.main(['main.py', '/certs/app.pfx'])

    assert excinfo.value.code == 1
    assert 'Duplicate' in capsys.readouterr().out


def test_success_prints_summary(environment, capsys):
    stats = ProvisioningStatistics()
    stats.record('fields', 'created')
    with mock.patch.object(main, 'run_provisioning', return_value=stats):
        main.main(['main.py', '/certs/app.pfx'])

    output = capsys.readouterr().out
    assert 'PROVISIONING COMPLETED' in output
    assert 'Fields created:' in output


def test_whatif_summary_is_labelled(environment, capsys):
    environment.setenv('WHATIF', 'true')
    with mock.patch.object(main, 'run_provisioning', return_value=ProvisioningStatistics()):
        main.main(['main.py', '/certs/app.pfx'])

    output = capsys.readouterr().out
    assert 'WhatIf mode enabled' in output
    assert 'Field Statistics (WhatIf)' in output
