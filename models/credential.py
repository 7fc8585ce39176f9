"""Git credential model for the credential store."""
from __future__ import annotations

from typing import Annotated
from urllib.parse import quote

from pydantic import Field
from pydantic.dataclasses import dataclass


@dataclass(frozen=True)
class GitCredential:
    """HTTP(S) credential persisted by git's store helper.

    Attributes:
        protocol: URL scheme of the git server, e.g. 'https'
        host: Host (and optional port or path) of the git server
        token: Access token used as the password
        username: User name paired with the token, ignored by GitHub
    """

    protocol: Annotated[str, Field(min_length=1)]
    host: Annotated[str, Field(min_length=1)]
    token: str
    username: str = "dummy"

    @classmethod
    def from_server_url(cls, server_url: str, token: str) -> "GitCredential":
        """Build a credential from a server URL such as 'https://github.com'.

        Raises:
            ValueError: If the URL has no scheme separator
        """
        if "://" not in server_url:
            raise ValueError(f"Server URL {server_url!r} has no protocol")
        protocol, _, host = server_url.partition("://")
        return cls(protocol=protocol, host=host.rstrip("/"), token=token)

    @property
    def line(self) -> str:
        """Line as written to the credential store file."""
        return f"{self.protocol}://{quote(self.username, safe='')}:{quote(self.token, safe='')}@{self.host}"
