"""Workflow environment settings."""
from __future__ import annotations

from typing import Union

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from models.credential import GitCredential
from models.ref_spec import BranchRef, PullRequestRef, parse_ref


class CheckoutSettings(BaseSettings):
    """Settings read from the workflow runner environment.

    Field names match the environment variables, e.g. ``GITHUB_SHA``.
    The credential and target ref derived from them are validated up
    front so a bad environment fails before any git command runs.
    """

    model_config = SettingsConfigDict(case_sensitive=False, extra="ignore")

    github_server_url: str = "https://github.com"
    github_repository: str = Field(min_length=1)
    github_ref: str = Field(min_length=1)
    github_sha: str = Field(min_length=1)
    input_token: str
    input_persist_credentials: str = ""

    @field_validator("github_server_url")
    @classmethod
    def _require_protocol(cls, value: str) -> str:
        protocol, separator, host = value.partition("://")
        if not separator or not protocol or not host.strip("/"):
            raise ValueError(
                "GITHUB_SERVER_URL must include a protocol and host, e.g. https://github.com"
            )
        return value.rstrip("/")

    @model_validator(mode="after")
    def _check_derived(self) -> "CheckoutSettings":
        GitCredential.from_server_url(self.github_server_url, self.input_token)
        parse_ref(self.github_ref, self.github_sha)
        return self

    @property
    def credential(self) -> GitCredential:
        return GitCredential.from_server_url(self.github_server_url, self.input_token)

    @property
    def ref_spec(self) -> Union[BranchRef, PullRequestRef]:
        return parse_ref(self.github_ref, self.github_sha)

    @property
    def persist_credentials(self) -> bool:
        return self.input_persist_credentials == "true"

    @property
    def repository_url(self) -> str:
        return f"{self.github_server_url}/{self.github_repository}"
