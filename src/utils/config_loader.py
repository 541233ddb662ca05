"""
Configuration loader for the product catalog client.

Two sources:
- config/catalog_config.yml: endpoint settings (locale, timeouts, limits, resources)
- environment / .env: signing credentials (never stored in YAML)
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, List, Mapping, NamedTuple, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from src.integrations.contracts.errors import ConfigurationError
from src.integrations.contracts.product_catalog import DEFAULT_SERVICE, SigningCredentials

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "catalog_config.yml"

ACCESS_KEY_ENV = "AMAZON_ACCESS_KEY"
SECRET_KEY_ENV = "AMAZON_SECRET_KEY"
PARTNER_TAG_ENV = "AMAZON_PARTNER_TAG"
REGION_ENV = "AMAZON_REGION"


class Locale(NamedTuple):
    host: str
    region: str
    marketplace: str


LOCALES: Dict[str, Locale] = {
    "us": Locale("webservices.amazon.com", "us-east-1", "www.amazon.com"),
    "ca": Locale("webservices.amazon.ca", "us-east-1", "www.amazon.ca"),
    "uk": Locale("webservices.amazon.co.uk", "eu-west-1", "www.amazon.co.uk"),
    "de": Locale("webservices.amazon.de", "eu-west-1", "www.amazon.de"),
    "fr": Locale("webservices.amazon.fr", "eu-west-1", "www.amazon.fr"),
    "es": Locale("webservices.amazon.es", "eu-west-1", "www.amazon.es"),
    "it": Locale("webservices.amazon.it", "eu-west-1", "www.amazon.it"),
    "in": Locale("webservices.amazon.in", "eu-west-1", "www.amazon.in"),
    "jp": Locale("webservices.amazon.co.jp", "us-west-2", "www.amazon.co.jp"),
    "au": Locale("webservices.amazon.com.au", "us-west-2", "www.amazon.com.au"),
}

DEFAULT_LOOKUP_RESOURCES = [
    "Images.Primary.Medium",
    "ItemInfo.Title",
    "Offers.Listings.Price",
    "Offers.Listings.SavingBasis",
    "Offers.Listings.Promotions",
]

DEFAULT_SEARCH_RESOURCES = [
    "Images.Primary.Medium",
    "ItemInfo.Title",
    "Offers.Listings.Price",
    "Offers.Listings.Promotions",
]


class CatalogEndpointConfig(BaseModel):
    """Everything about the remote endpoint except credentials."""

    locale: str = "us"
    partner_type: str = "Associates"
    timeout_seconds: float = Field(default=15.0, gt=0, le=60)
    max_batch_size: int = Field(default=10, ge=1, le=10)
    min_keyword_length: int = Field(default=3, ge=1)
    search_index: str = "All"
    lookup_resources: List[str] = Field(default_factory=lambda: list(DEFAULT_LOOKUP_RESOURCES))
    search_resources: List[str] = Field(default_factory=lambda: list(DEFAULT_SEARCH_RESOURCES))

    @property
    def endpoint(self) -> Locale:
        try:
            return LOCALES[self.locale.lower()]
        except KeyError:
            raise ConfigurationError(
                f"Unknown catalog locale '{self.locale}'. Known: {', '.join(sorted(LOCALES))}"
            ) from None

    @property
    def host(self) -> str:
        return self.endpoint.host

    @property
    def marketplace(self) -> str:
        return self.endpoint.marketplace


class CatalogConfig(BaseModel):
    catalog: CatalogEndpointConfig = Field(default_factory=CatalogEndpointConfig)


def load_catalog_config(config_path: Optional[Path] = None) -> CatalogConfig:
    """
    Load and validate catalog configuration from YAML

    Args:
        config_path: Path to config file. Defaults to config/catalog_config.yml

    Returns:
        Validated CatalogConfig. Built-in defaults are used when no path is
        given and the default file is absent.

    Raises:
        FileNotFoundError: If an explicit config file doesn't exist
        ValidationError: If config doesn't match schema
    """
    if config_path is None:
        if not DEFAULT_CONFIG_PATH.exists():
            logger.info("No catalog config at %s; using defaults", DEFAULT_CONFIG_PATH)
            return CatalogConfig()
        config_path = DEFAULT_CONFIG_PATH

    if not config_path.exists():
        raise FileNotFoundError(f"Catalog config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    try:
        cfg = CatalogConfig(**data)
        logger.info("Successfully loaded catalog config from %s", config_path)
        return cfg
    except ValidationError as e:
        logger.error("Catalog config validation failed: %s", e)
        raise


def load_credentials(
    env: Optional[Mapping[str, str]] = None,
    *,
    default_region: str = "us-east-1",
) -> SigningCredentials:
    """
    Read signing credentials from the environment.

    Args:
        env: mapping to read from; defaults to os.environ after loading .env
        default_region: region used when AMAZON_REGION is not set

    Raises:
        ConfigurationError: naming every missing variable
    """
    if env is None:
        load_dotenv()
        env = os.environ

    missing = [
        name
        for name in (ACCESS_KEY_ENV, SECRET_KEY_ENV, PARTNER_TAG_ENV)
        if not (env.get(name) or "").strip()
    ]
    if missing:
        raise ConfigurationError(f"Missing catalog credentials: {', '.join(missing)}")

    return SigningCredentials(
        access_key=env[ACCESS_KEY_ENV].strip(),
        secret_key=env[SECRET_KEY_ENV].strip(),
        partner_tag=env[PARTNER_TAG_ENV].strip(),
        region=(env.get(REGION_ENV) or default_region).strip(),
        service=DEFAULT_SERVICE,
    )
