from decimal import Decimal
from pathlib import Path
from typing import Annotated, List

import orjson
from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_ENV_PATH = _PROJECT_ROOT / '.env'
_ENV_FILE = _ENV_PATH if _ENV_PATH.exists() else (_PROJECT_ROOT / '.env.example')


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_ignore_empty=True,
        extra='ignore',
    )

    PROJECT_NAME: str = 'VoltBay'
    VERSION: str = '0.1.0'
    DEBUG: bool = True  # Set to False in production

    # Security
    SECRET_KEY: SecretStr = SecretStr('test_secret_key_change_in_production')
    ACCESS_TOKEN_EXPIRE_DAYS: int = 7
    ALGORITHM: str = 'HS256'
    AUTH_COOKIE_NAME: str = 'voltbayauth'

    # CORS
    # Comma-separated or a JSON list; raw env text reaches the validator below
    BACKEND_CORS_ORIGINS: Annotated[List[str], NoDecode] = []

    @field_validator('BACKEND_CORS_ORIGINS', mode='before')
    @classmethod
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str) and v.strip().startswith('['):
            v = orjson.loads(v)
        elif isinstance(v, str):
            return [i.strip() for i in v.split(',') if i.strip()]
        if isinstance(v, list):
            return [str(i).strip() for i in v if str(i).strip()]
        return []

    # PostgreSQL
    POSTGRES_SERVER: str = 'localhost'
    POSTGRES_USER: str = 'postgres'
    POSTGRES_PASSWORD: SecretStr = SecretStr('postgres')
    POSTGRES_DB: str = 'voltbay'
    POSTGRES_PORT: int = 5432

    # Connection pool
    DB_POOL_SIZE: int = 10
    DB_POOL_MAX_OVERFLOW: int = 5
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 3600
    DB_POOL_PRE_PING: bool = True

    @property
    def DATABASE_URL_ASYNC(self) -> str:
        password = self.POSTGRES_PASSWORD.get_secret_value()
        return f'postgresql+asyncpg://{self.POSTGRES_USER}:{password}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}'

    @property
    def DATABASE_URL_SYNC(self) -> str:
        password = self.POSTGRES_PASSWORD.get_secret_value()
        return f'postgresql://{self.POSTGRES_USER}:{password}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}'

    # Payment gateway
    PAYMENT_GATEWAY_PUBLIC_KEY: str = 'pk_test_mock'
    PAYMENT_WEBHOOK_SECRET: SecretStr = SecretStr('whsec_test_mock')
    PAYMENT_CURRENCY: str = 'usd'
    PAYMENT_MINIMUM_AMOUNT: Decimal = Decimal('0.50')  # in currency units, not cents
    PLATFORM_FEE_PERCENTAGE: Decimal = Decimal('0.025')

    @field_validator('PLATFORM_FEE_PERCENTAGE')
    @classmethod
    def validate_fee_percentage(cls, v: Decimal) -> Decimal:
        if v < 0 or v >= 1:
            raise ValueError('PLATFORM_FEE_PERCENTAGE must be within [0, 1)')
        return v

    # Enterprise quotes
    FEATURE_INDUSTRIAL_QUOTES: bool = True
    QUOTE_REQUEST_TTL_DAYS: int = 30


settings = Settings()  # type: ignore
