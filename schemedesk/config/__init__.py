"""
schemedesk config: load from env.

Load from env: load_postgres_config(), load_payment_config(), load_app_config().
"""
from schemedesk.config.app import AppConfig, load_app_config
from schemedesk.config.payments import PaymentConfig, load_payment_config
from schemedesk.config.postgres import PostgresConfig, load_postgres_config

__all__ = [
    "AppConfig",
    "load_app_config",
    "PaymentConfig",
    "load_payment_config",
    "PostgresConfig",
    "load_postgres_config",
]
