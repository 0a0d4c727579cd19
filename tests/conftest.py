import sys
from decimal import Decimal
from pathlib import Path
from typing import List

import pytest
from freezegun import freeze_time

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))
SRC_ROOT = PROJECT_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from pricing_profiles.engine.catalog.models import Product  # noqa: E402

DEFAULT_ENV = {
    "AWS_ACCESS_KEY_ID": "test-access-key",
    "AWS_SECRET_ACCESS_KEY": "test-secret-key",
    "AWS_SESSION_TOKEN": "test-session",
    "AWS_DEFAULT_REGION": "us-east-1",
    "CLOUDWATCH_METRICS_ENABLED": "false",
}


@pytest.fixture(scope="session")
def project_root() -> Path:
    return PROJECT_ROOT


@pytest.fixture(scope="session")
def data_dir(project_root: Path) -> Path:
    return project_root / "data" / "pricing_profiles"


@pytest.fixture(autouse=True)
def _test_env(monkeypatch):
    for key, value in DEFAULT_ENV.items():
        monkeypatch.setenv(key, value)
    yield


@pytest.fixture
def products() -> List[Product]:
    return [
        Product(
            id=1,
            name="Trail Runner",
            sku="SHOE-001",
            quantity="12",
            brand="Acme",
            category="Footwear",
            sub_category="Running",
            segment="Retail",
            global_wholesale_price=Decimal("100.00"),
        ),
        Product(
            id=2,
            name="Road Runner",
            sku="SHOE-002",
            quantity="4",
            brand="Acme",
            category="Footwear",
            sub_category="Running",
            segment="Wholesale",
            global_wholesale_price=Decimal("49.99"),
        ),
        Product(
            id=3,
            name="Wool Socks",
            sku="SOCK-010",
            quantity="100",
            brand="Northwind",
            category="Accessories",
            sub_category="Socks",
            segment="Retail",
            global_wholesale_price=None,
        ),
    ]


@pytest.fixture
def freezer():
    with freeze_time("2020-01-01T00:00:00Z") as frozen_datetime:
        yield frozen_datetime
