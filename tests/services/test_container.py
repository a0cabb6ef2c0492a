"""Service Container — verifies wiring from settings and shutdown drain."""

from credit_ledger.config import Settings
from credit_ledger.core.domain_types import IsolationLevel
from credit_ledger.services.container import build_services


def test_wiring_follows_settings(test_engine):
    settings = Settings(
        db_connect_retry_max_attempts=3,
        db_connect_retry_base_delay_ms=250,
        db_default_isolation_level="SERIALIZABLE",
        transaction_retry_base_delay_ms=20,
        transfer_max_retries=5,
    )

    services = build_services(settings, engine=test_engine)

    assert services.pool.engine is test_engine
    assert services.connector.pool is services.pool
    assert services.connector.max_attempts == 3
    assert services.connector.base_delay_ms == 250
    assert services.runner.connector is services.connector
    assert services.runner.default_isolation_level is IsolationLevel.SERIALIZABLE
    assert services.runner.retry_base_delay_ms == 20
    assert services.transfers._options.retries == 5


async def test_close_drains_pool(services):
    await services.close(timeout_s=1)

    assert services.pool.is_draining
    assert await services.pool.health_check() is False
