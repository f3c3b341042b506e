"""Shared pytest fixtures for ledgerkit tests."""

import tempfile
import os
import pytest

from ledgerkit.database.factories import create_sqlite_database
from ledgerkit.domain.entities import SessionContext
from ledgerkit.domain.inventory import InventoryService
from ledgerkit.domain.reference import ReferenceDataService
from ledgerkit.domain.voucher import VoucherService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def session_context():
    """Session of user 7 acting for enterprise 1."""
    return SessionContext(enterprise_id=1, user_id=7)


@pytest.fixture
def voucher_service(temp_db):
    """Create a VoucherService with a temporary database."""
    return VoucherService(temp_db)


@pytest.fixture
def inventory_service(temp_db):
    """Create an InventoryService with a temporary database."""
    return InventoryService(temp_db)


@pytest.fixture
def reference_service(temp_db):
    """Create a ReferenceDataService with a temporary database."""
    return ReferenceDataService(temp_db)


@pytest.fixture
def reference_data(reference_service):
    """Create one group, type and unit and return their identifiers."""
    return {
        "group_uuid": reference_service.create_group(name="Medicines", code="MED"),
        "type_id": reference_service.create_type("Article"),
        "unit_id": reference_service.create_unit("tab", "Tablet"),
    }


@pytest.fixture
def balanced_items():
    """Two lines of a balanced 100.00 voucher."""
    return [
        {"account_id": 1, "debit": 100, "credit": 0},
        {"account_id": 2, "debit": 0, "credit": 100},
    ]


@pytest.fixture
def sample_item(inventory_service, reference_data, session_context):
    """Create a sample inventory item and return its identifier."""
    return inventory_service.create_item(
        {
            "code": "A100",
            "label": "Paracetamol 500mg",
            "price": "0.25",
            "consumable": True,
            **reference_data,
        },
        session_context,
    )


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
