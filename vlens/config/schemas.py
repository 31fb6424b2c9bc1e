"""Pydantic schemas for vlens configuration.

This module defines the data models for vlens.yaml:
- caching and HTTP options shared by every provider
- per-provider settings (registry URLs, GitHub access, NuGet sources)
"""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

ProviderName = Literal["npm", "composer", "dub", "dotnet"]


# =============================================================================
# Shared Options
# =============================================================================


class CachingOptions(BaseModel):
    """Response cache settings.

    - duration: Time-to-live in minutes (0 disables caching)
    - enabled: Master switch
    """

    duration: float = 3.0
    enabled: bool = True

    @field_validator("duration")
    @classmethod
    def validate_duration(cls, v: float) -> float:
        """Durations cannot be negative."""
        if v < 0:
            raise ValueError("Caching duration cannot be negative")
        return v

    @property
    def duration_seconds(self) -> float:
        return self.duration * 60


class HttpOptions(BaseModel):
    """HTTP transport settings."""

    strict_ssl: bool = True
    timeout: float = 30.0
    headers: dict[str, str] = Field(default_factory=dict)


# =============================================================================
# Provider Configuration
# =============================================================================


class ProviderConfig(BaseModel):
    """Settings common to every provider."""

    provider_name: str
    api_url: str
    caching: CachingOptions = Field(default_factory=CachingOptions)
    http: HttpOptions = Field(default_factory=HttpOptions)

    @field_validator("api_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Registry URLs are joined with "/" so keep them bare."""
        return v.rstrip("/")


class GitHubOptions(BaseModel):
    """GitHub API access for github: specifiers."""

    api_url: str = "https://api.github.com"
    access_token: str | None = None


class NpmConfig(ProviderConfig):
    """npm registry settings."""

    provider_name: str = "npm"
    api_url: str = "https://registry.npmjs.org"
    github: GitHubOptions = Field(default_factory=GitHubOptions)


class ComposerConfig(ProviderConfig):
    """Packagist settings."""

    provider_name: str = "composer"
    api_url: str = "https://repo.packagist.org/p"


class DubConfig(ProviderConfig):
    """code.dlang.org settings."""

    provider_name: str = "dub"
    api_url: str = "https://code.dlang.org/api/packages"


class NuGetSource(BaseModel):
    """A NuGet feed (service index URL)."""

    name: str
    url: str
    enabled: bool = True


class DotNetConfig(ProviderConfig):
    """NuGet settings.

    - sources: Feeds whose service index is searched for an autocomplete resource
    - fallback_source: Autocomplete URL used when a feed yields no resource
    - query_all_sources: Return one document per feed instead of the first hit
    """

    provider_name: str = "dotnet"
    api_url: str = "https://api.nuget.org/v3/index.json"
    sources: list[NuGetSource] = Field(
        default_factory=lambda: [
            NuGetSource(name="nuget.org", url="https://api.nuget.org/v3/index.json")
        ]
    )
    fallback_source: str | None = None
    query_all_sources: bool = False


# =============================================================================
# Top-level Configuration
# =============================================================================


class VlensConfig(BaseModel):
    """vlens.yaml root."""

    include_prereleases: bool = False
    fail_fast: bool = True
    npm: NpmConfig = Field(default_factory=NpmConfig)
    composer: ComposerConfig = Field(default_factory=ComposerConfig)
    dub: DubConfig = Field(default_factory=DubConfig)
    dotnet: DotNetConfig = Field(default_factory=DotNetConfig)

    def provider(self, name: str) -> ProviderConfig:
        """Get the configuration block for a provider.

        Raises:
            ValueError: If the provider is unknown
        """
        config = {
            "npm": self.npm,
            "composer": self.composer,
            "dub": self.dub,
            "dotnet": self.dotnet,
        }.get(name)
        if config is None:
            raise ValueError(f"Unknown provider: {name}")
        return config
