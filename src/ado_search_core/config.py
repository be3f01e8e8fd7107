"""Environment-driven configuration for the Azure DevOps search server."""
import os
import re
import tempfile
from functools import lru_cache
from typing import Literal, Optional
from urllib.parse import urlsplit, urlunsplit

from pydantic import Field, ValidationError as PydanticValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError

# All upstream calls are pinned to this REST api-version
API_VERSION = "7.1"

DEFAULT_TOOL_PREFIX = "azure_devops"


class Settings(BaseSettings):
    """Connection settings for one Azure DevOps organization.

    Built once at startup and passed explicitly to the client, the search
    service and the dispatcher.
    """

    org_url: str = Field(default="", alias="AZURE_DEVOPS_ORG_URL")
    pat: str = Field(default="", alias="AZURE_DEVOPS_PAT", repr=False)
    default_project: Optional[str] = Field(default=None, alias="AZURE_DEVOPS_PROJECT")
    display_name: Optional[str] = Field(default=None, alias="AZURE_DEVOPS_DISPLAY_NAME")
    log_dir: Optional[str] = Field(default=None, alias="LOG_DIR")
    transport: Literal["mcp", "lines"] = Field(default="mcp", alias="MCP_TRANSPORT")
    timeout: Optional[float] = Field(default=None, alias="AZURE_DEVOPS_TIMEOUT", gt=0)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("org_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.strip().rstrip("/")

    @field_validator("default_project", "display_name", "log_dir")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value

    @property
    def search_url(self) -> str:
        """Base URL of the search service for this organization.

        Search lives on a separate host: dev.azure.com becomes
        almsearch.dev.azure.com and {org}.visualstudio.com becomes
        {org}.almsearch.visualstudio.com.
        """
        parts = urlsplit(self.org_url)
        host = parts.netloc
        if host == "dev.azure.com":
            host = "almsearch.dev.azure.com"
        elif host.endswith(".visualstudio.com") and ".almsearch." not in host:
            org = host[: -len(".visualstudio.com")]
            host = f"{org}.almsearch.visualstudio.com"
        return urlunsplit((parts.scheme, host, parts.path, "", ""))

    @property
    def tool_prefix(self) -> str:
        """Prefix for exposed tool names, derived from the display name."""
        if not self.display_name:
            return DEFAULT_TOOL_PREFIX
        slug = re.sub(r"[^a-z0-9]+", "_", self.display_name.lower()).strip("_")
        return slug or DEFAULT_TOOL_PREFIX

    @property
    def audit_log_dir(self) -> str:
        return self.log_dir or os.path.join(
            tempfile.gettempdir(), "azure-devops-search-mcp", "logs"
        )

    def require_credentials(self) -> "Settings":
        """Fail fast when the organization URL or token is missing."""
        missing = []
        if not self.org_url:
            missing.append("AZURE_DEVOPS_ORG_URL")
        if not self.pat:
            missing.append("AZURE_DEVOPS_PAT")
        if missing:
            raise ConfigurationError(
                "Azure DevOps organization URL and personal access token are required "
                f"(missing: {', '.join(missing)})"
            )
        if not urlsplit(self.org_url).scheme:
            raise ConfigurationError(
                f"AZURE_DEVOPS_ORG_URL must be an absolute URL, got '{self.org_url}'"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings from the environment."""
    try:
        settings = Settings()
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
    return settings.require_credentials()
