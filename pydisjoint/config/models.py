"""Pydantic models for config types."""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

class RepoConfig(BaseModel):
    """Repository configuration."""
    model_config = ConfigDict(extra="allow")  # Allow extra fields for forward compatibility

    github_remote: str = "origin"
    push_remote: Optional[str] = None  # "fork" if present, else github_remote
    github_host: str = "github.com"
    github_repo_owner: Optional[str] = None
    github_repo_name: Optional[str] = None
    github_forker: Optional[str] = None  # Owner of the push remote
    github_branch: Optional[str] = None  # Overrides the default branch lookup

    @property
    def effective_push_remote(self) -> str:
        return self.push_remote or self.github_remote

class UserConfig(BaseModel):
    """User configuration."""
    model_config = ConfigDict(extra="allow")

    open_browser: bool = True

class ToolConfig(BaseModel):
    """Tool configuration, mostly filled in from command-line flags."""
    model_config = ConfigDict(extra="allow")

    base: Optional[str] = None
    choose: bool = False
    all: bool = False
    separate: bool = False
    overlay: bool = False
    dry_run: bool = False
    concurrency: int = Field(default=4, ge=1)  # Pull requests submitted in parallel

class DisjointConfig(BaseModel):
    """Full git-disjoint configuration."""
    model_config = ConfigDict(extra="allow")

    repo: RepoConfig = Field(default_factory=RepoConfig)
    user: UserConfig = Field(default_factory=UserConfig)
    tool: ToolConfig = Field(default_factory=ToolConfig)
