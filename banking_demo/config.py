"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from typing import List, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


class BankingDemoConfig(BaseSettings):
    """Banking demo service configuration"""

    # API configuration
    api_host: str = "0.0.0.0"
    api_port: int = 3000

    # Storage configuration
    storage_backend: str = "json"  # json or memory
    data_file: str = "data.json"

    # Logging configuration
    log_level: str = "INFO"
    telemetry_sinks: str = "line,json,hec"  # comma separated: line, json, hec

    # Application identity stamped on collector events
    app_name: str = "banking-demo"
    environment: str = "demo"

    # HTTP Event Collector configuration. Empty endpoint or token = console only.
    hec_endpoint: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("SPLUNK_HEC_ENDPOINT", "BANKING_HEC_ENDPOINT", "hec_endpoint"),
    )
    hec_token: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("SPLUNK_HEC_TOKEN", "BANKING_HEC_TOKEN", "hec_token"),
    )
    hec_source: str = "banking-demo-app"
    hec_sourcetype: str = "banking:transaction"
    hec_index: str = "banking"
    hec_auth_scheme: str = "Splunk"
    hec_verify_tls: bool = True  # Opt out only for local demo collectors
    hec_timeout: float = 5.0
    hec_async_delivery: bool = True

    class Config:
        env_prefix = "BANKING_"
        env_file = ".env"
        case_sensitive = False
        populate_by_name = True
        extra = "ignore"

    @property
    def sink_names(self) -> List[str]:
        """Configured telemetry sink names, lowercased, in order"""
        return [name.strip().lower() for name in self.telemetry_sinks.split(",") if name.strip()]

    @property
    def hec_configured(self) -> bool:
        """True when both collector endpoint and token are set"""
        return bool(self.hec_endpoint) and bool(self.hec_token)


# Global configuration instance
config = BankingDemoConfig()


def get_config() -> BankingDemoConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> BankingDemoConfig:
    """Reload configuration from environment"""
    global config
    config = BankingDemoConfig()
    return config
