# modelsync Configuration Schema
# Pydantic models for YAML configuration validation

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class ConflictStrategy(str, Enum):
    """How merge conflicts found while pulling are resolved."""

    PROMPT = "prompt"
    LOCAL = "local"
    REMOTE = "remote"


class RepositoryConfig(BaseModel):
    """Where local repositories live and how commits are made."""

    repos_root: str = Field(
        default="~/.modelsync/repositories", validate_default=True, description="Folder holding local repositories"
    )
    remote: str = Field(default="origin", description="Git remote name")
    commit_message: str = Field(default="Model changes", description="Default commit message")

    @field_validator("repos_root")
    @classmethod
    def expand_path(cls, v: str) -> str:
        """Expand ~ in path."""
        return str(Path(v).expanduser())


class ProxyConfig(BaseModel):
    """HTTP proxy used for HTTP(S) remotes."""

    enabled: bool = Field(default=False, description="Route HTTP(S) remotes through the proxy")
    host: Optional[str] = Field(default=None, description="Proxy host name")
    port: int = Field(default=8080, ge=1, le=65535, description="Proxy port")

    @property
    def url(self) -> Optional[str]:
        if not self.enabled or not self.host:
            return None
        if "://" in self.host:
            return f"{self.host}:{self.port}"
        return f"http://{self.host}:{self.port}"


class TransportSettings(BaseModel):
    """Authentication settings for SSH and HTTP remotes."""

    ssh_identity_file: str = Field(
        default="~/.ssh/id_rsa", validate_default=True, description="Private key used for SSH remotes"
    )
    strict_host_key_checking: bool = Field(default=False, description="Verify SSH host keys")
    additional_header_env: str = Field(
        default="MODELSYNC_ADDITIONAL_HEADER",
        description="Environment variable holding one extra HTTP header as name:value",
    )
    proxy: ProxyConfig = Field(default_factory=ProxyConfig, description="Proxy settings")

    @field_validator("ssh_identity_file")
    @classmethod
    def expand_identity(cls, v: str) -> str:
        """Expand ~ in path."""
        return str(Path(v).expanduser())


class ConflictConfig(BaseModel):
    """Conflict resolution configuration."""

    strategy: ConflictStrategy = Field(default=ConflictStrategy.PROMPT, description="Resolution strategy")


class OutputConfig(BaseModel):
    """Output and logging configuration."""

    verbose: bool = Field(default=False, description="Enable verbose output")
    colored: bool = Field(default=True, description="Enable colored output")
    log_file: Optional[str] = Field(default=None, description="Path to log file")

    @field_validator("log_file")
    @classmethod
    def expand_optional_path(cls, v: Optional[str]) -> Optional[str]:
        """Expand ~ in optional paths."""
        if v is None:
            return None
        return str(Path(v).expanduser())


class ModelSyncConfig(BaseModel):
    """Root configuration model for modelsync."""

    repository: RepositoryConfig = Field(default_factory=RepositoryConfig, description="Repository settings")
    transport: TransportSettings = Field(default_factory=TransportSettings, description="Transport settings")
    conflicts: ConflictConfig = Field(default_factory=ConflictConfig, description="Conflict resolution settings")
    output: OutputConfig = Field(default_factory=OutputConfig, description="Output settings")
