"""
Tests for the catalog CLI in direct mode.
"""

import pytest
from click.testing import CliRunner

from scripts import wms_cli


@pytest.fixture
def cli_db(tmp_path, monkeypatch):
    """Point the CLI at a file-backed SQLite database."""
    monkeypatch.setattr(wms_cli, 'DATABASE_URL', f"sqlite:///{tmp_path / 'cli.db'}")
    monkeypatch.setattr(wms_cli, 'UPLOADS_DIR', str(tmp_path / 'uploads'))


@pytest.fixture
def seeded(cli_db, products):
    session = wms_cli._session()
    try:
        session.add_all(products)
        session.commit()
    finally:
        session.close()


def test_list_empty(cli_db):
    result = CliRunner().invoke(wms_cli.cli, ['list'], obj={})

    assert result.exit_code == 0
    assert 'No products found' in result.output


def test_last(seeded):
    result = CliRunner().invoke(wms_cli.cli, ['last', '--size', '5'], obj={})

    assert result.exit_code == 0
    assert '120591' in result.output
    assert '120589' not in result.output


def test_patch_then_list(seeded, make_workbook, quantity_rows):
    path = make_workbook(quantity_rows)
    runner = CliRunner()

    result = runner.invoke(wms_cli.cli, ['patch', path, '--user', 'admin'], obj={})

    assert result.exit_code == 0, result.output
    assert 'Matched: 2' in result.output
    assert 'Unmatched: 1' in result.output

    result = runner.invoke(wms_cli.cli, ['last', '--size', '16'], obj={})
    assert '120589' in result.output
    assert '120590' not in result.output


def test_delete_all(seeded):
    result = CliRunner().invoke(wms_cli.cli, ['delete-all', '--yes'], obj={})

    assert result.exit_code == 0
    assert 'Deleted 3 products' in result.output


def test_delete_all_refused_in_api_mode(cli_db):
    result = CliRunner().invoke(
        wms_cli.cli, ['--api-url', 'http://localhost:8000', 'delete-all', '--yes'], obj={}
    )

    assert result.exit_code == 1


def test_last_defaults_to_configured_size():
    from api.config import settings

    size_option = next(p for p in wms_cli.last_cmd.params if p.name == 'last_size')

    assert size_option.default == settings.DEFAULT_LAST_SIZE
