"""
Configuration management for the WhatsApp Scheduler relay.

Loads environment variables from .env file and provides typed access to configuration.
Provider and retry settings live in infra.config.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path(__file__).parent / ".env"
load_dotenv(env_path)


def _split_keys(raw: str) -> list:
    return [key.strip() for key in raw.split(",") if key.strip()]


class Config:
    """Process-level configuration."""

    # HTTP server
    PORT = int(os.getenv("PORT", "3000"))
    ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    CORS_ORIGIN = os.getenv("CORS_ORIGIN", "*")

    # Auth (passthrough; keys only recorded by optional auth)
    API_KEYS = _split_keys(os.getenv("API_KEY", "") + "," + os.getenv("ADDITIONAL_API_KEYS", ""))

    # Shared secret expected on Cronhooks callbacks (optional)
    WEBHOOK_SECRET = os.getenv("WEBHOOK_SECRET", "")

    # Provider tokens (checked by validate only)
    WASENDER_API_TOKEN = os.getenv("WASENDER_API_TOKEN", "")
    CRONHOOKS_API_TOKEN = os.getenv("CRONHOOKS_API_TOKEN", "")

    @classmethod
    def missing(cls) -> list:
        """Names of required settings that are unset."""
        required = ["WASENDER_API_TOKEN", "CRONHOOKS_API_TOKEN"]
        return [key for key in required if not getattr(cls, key)]

    @classmethod
    def validate(cls) -> bool:
        """Validate that required configuration is set."""
        return not cls.missing()

    @classmethod
    def is_development(cls) -> bool:
        return cls.ENVIRONMENT == "development"


if __name__ == "__main__":
    # Test configuration loading
    print("Configuration loaded:")
    print(f"  Port: {Config.PORT}")
    print(f"  Environment: {Config.ENVIRONMENT}")
    print(f"  Wasender token: {'✓ Set' if Config.WASENDER_API_TOKEN else '✗ Missing'}")
    print(f"  Cronhooks token: {'✓ Set' if Config.CRONHOOKS_API_TOKEN else '✗ Missing'}")
    print(f"  Webhook secret: {'✓ Set' if Config.WEBHOOK_SECRET else '✗ Not set'}")
    print(f"\n  Validation: {'✓ PASSED' if Config.validate() else '✗ FAILED'}")
