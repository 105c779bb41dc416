import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Force-load .env (Windows-safe, reload-safe)
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH)

TRUTHY = {"1", "true", "yes", "on"}


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    # Blank values count as unset; braintree rejects "" credentials outright
    value = (os.getenv(name) or "").strip()
    return value or default


def _env_flag(name: str, default: bool) -> bool:
    value = _env(name)
    if value is None:
        return default
    return value.lower() in TRUTHY


@dataclass(frozen=True)
class Settings:
    environment: str = "sandbox"
    merchant_id: Optional[str] = None
    public_key: Optional[str] = None
    private_key: Optional[str] = None
    customer_id: Optional[str] = None
    host: str = "0.0.0.0"
    port: int = 3001
    log_level: str = "INFO"
    static_dir: str = "public"
    payment_routes: bool = True
    subscription_extras: bool = True

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @classmethod
    def from_env(cls) -> "Settings":
        environment = _env("BRAINTREE_ENVIRONMENT", "sandbox").lower()
        return cls(
            environment="production" if environment == "production" else "sandbox",
            merchant_id=_env("BRAINTREE_MERCHANT_ID"),
            public_key=_env("BRAINTREE_PUBLIC_KEY"),
            private_key=_env("BRAINTREE_PRIVATE_KEY"),
            customer_id=_env("CUSTOMER_ID"),
            host=_env("HOST", "0.0.0.0"),
            port=int(_env("PORT", "3001")),
            log_level=_env("LOG_LEVEL", "INFO").upper(),
            static_dir=_env("STATIC_DIR", "public"),
            payment_routes=_env_flag("PAYMENT_ROUTES", True),
            subscription_extras=_env_flag("SUBSCRIPTION_EXTRAS", True),
        )
