# Standard Library

from decimal import Decimal
from typing import AsyncGenerator, Dict

# Third-Party Libraries
import pytest
import pytest_asyncio

from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

# First-Party Libraries
from storefront.main import app
from storefront.database import get_db_session
from storefront.core.money import Money
from storefront.catalog.infrastructure.orm_models import ProductRecord
from storefront.orders.infrastructure import orm_models as _order_tables  # noqa: F401
from storefront.pricing.infrastructure import orm_models as _pricing_tables  # noqa: F401
from storefront.pricing.dependencies import get_policy_config
from storefront.pricing.domain.entities import DeliveryAddress, NoTax, PolicyConfig, SplitGST

# URL de base pour la DB en mémoire
TEST_DATABASE_BASE_URL = "sqlite+aiosqlite:///:memory:"

# --- Fixtures de Base ---

@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Crée un engine, des tables, et fournit une session DB en mémoire pour chaque test."""
    engine: AsyncEngine = create_async_engine(TEST_DATABASE_BASE_URL, echo=False, poolclass=StaticPool)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    TestingSessionLocal = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )

    async with TestingSessionLocal() as session:
        yield session

    await engine.dispose()

# --- Fixtures Tarification ---

@pytest.fixture
def regional_config() -> PolicyConfig:
    """Politique 'remise + livraison' (aucune taxe), celle des commandes du Manipur."""
    return PolicyConfig(
        version="test-regional-v1",
        regional_prefix="795",
        regional_discount_rate=Decimal("0.10"),
        regional_delivery_charge=Money.of("80"),
        default_handling_fee=Money.zero(),
        tax_model=NoTax(),
    )


@pytest.fixture
def gst_config() -> PolicyConfig:
    """Politique GST 18 % répartie en CGST / SGST."""
    return PolicyConfig(
        version="test-gst-v1",
        regional_prefix="795",
        tax_model=SplitGST(rate=Decimal("0.18")),
    )


@pytest.fixture
def manipur_address() -> DeliveryAddress:
    return DeliveryAddress(
        full_name="Thoibi Devi",
        address_line_1="Singjamei Chingamakha",
        city="Imphal",
        state="Manipur",
        postal_code="795001",
        phone="9800000001",
    )


@pytest.fixture
def delhi_address() -> DeliveryAddress:
    return DeliveryAddress(
        full_name="Arjun Mehta",
        address_line_1="12 Janpath",
        address_line_2="Connaught Place",
        city="New Delhi",
        state="Delhi",
        postal_code="110001",
        phone="9800000002",
    )

# --- Fixtures Catalogue ---

@pytest_asyncio.fixture(scope="function")
async def catalog_products(db_session: AsyncSession) -> Dict[str, ProductRecord]:
    """Crée quelques produits actifs (et un inactif) dans le catalogue."""
    products = {
        "ghee-500": ProductRecord(id="ghee-500", name="Cow Ghee 500 g", unit_price_minor=50000),
        "pickle-250": ProductRecord(id="pickle-250", name="King Chilli Pickle", unit_price_minor=17550),
        "retired": ProductRecord(id="retired", name="Old Recipe", unit_price_minor=10000, is_active=False),
    }
    db_session.add_all(list(products.values()))
    await db_session.commit()
    return products

# --- Fixtures API ---

@pytest_asyncio.fixture(scope="function")
async def test_client(db_session: AsyncSession, regional_config: PolicyConfig) -> AsyncGenerator[AsyncClient, None]:
    """Fournit un AsyncClient httpx utilisant la session DB de test et la politique régionale."""
    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    def override_get_policy_config() -> PolicyConfig:
        return regional_config

    app.dependency_overrides[get_db_session] = override_get_db_session
    app.dependency_overrides[get_policy_config] = override_get_policy_config
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
