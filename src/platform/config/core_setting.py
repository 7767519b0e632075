from pathlib import Path
from typing import List

from pydantic import SecretStr, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_ENV_PATH = _PROJECT_ROOT / '.env'
_ENV_FILE = _ENV_PATH if _ENV_PATH.exists() else (_PROJECT_ROOT / '.env.example')


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_ignore_empty=True,
        extra='ignore',
    )

    PROJECT_NAME: str = 'Seat Checkout Engine'
    VERSION: str = '0.1.0'
    DEBUG: bool = True  # Set to False in production

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = []

    @field_validator('BACKEND_CORS_ORIGINS', mode='before')
    @classmethod
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str) and not v.startswith('['):
            return [i.strip() for i in v.split(',') if i.strip()]
        elif isinstance(v, list):
            return v
        return []

    # PostgreSQL
    POSTGRES_SERVER: str = 'localhost'
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = 'postgres'
    POSTGRES_PASSWORD: SecretStr = SecretStr('postgres')
    POSTGRES_DB: str = 'checkout_db'

    # SQLAlchemy pool
    DB_POOL_SIZE: int = 10
    DB_POOL_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30  # seconds to wait for a free connection
    DB_POOL_RECYCLE: int = 1800  # seconds
    DB_POOL_PRE_PING: bool = True

    @computed_field  # type: ignore[prop-decorator]
    @property
    def DATABASE_URL_ASYNC(self) -> str:
        return (
            f'postgresql+asyncpg://{self.POSTGRES_USER}:'
            f'{self.POSTGRES_PASSWORD.get_secret_value()}'
            f'@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}'
        )

    # Checkout
    CHECKOUT_HOLD_MINUTES: int = 15

    # VNPay
    VNPAY_TMN_CODE: str = 'DEMOTMN1'
    VNPAY_HASH_SECRET: SecretStr = SecretStr('demo_hash_secret_change_me')
    VNPAY_HOST: str = 'https://sandbox.vnpayment.vn'
    VNPAY_PAYMENT_PATH: str = '/paymentv2/vpcpay.html'
    VNPAY_RETURN_URL: str = 'http://localhost:8000/api/checkout/vnpay/return'
    VNPAY_PAYMENT_TTL_SECONDS: int = 900
    VNPAY_LOCALE: str = 'vn'

    @property
    def VNPAY_PAYMENT_URL(self) -> str:
        return f'{self.VNPAY_HOST.rstrip("/")}{self.VNPAY_PAYMENT_PATH}'


settings = Settings()  # type: ignore
