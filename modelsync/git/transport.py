# modelsync Transport
# Authenticated git transport configuration for SSH and HTTP remotes

import base64
import logging
import os
import re
import shlex
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from modelsync.config.schema import TransportSettings
from modelsync.errors import TransportError

logger = logging.getLogger(__name__)

_SCP_LIKE = re.compile(r"^(?:[\w.-]+@)?(?![A-Za-z]:)[\w.-]+:(?!//)")


class TransportKind(str, Enum):
    SSH = "ssh"
    HTTP = "http"
    LOCAL = "local"


@dataclass(frozen=True)
class UsernamePassword:
    """Credentials for HTTP remotes."""

    username: str = ""
    password: str = field(default="", repr=False)

    def is_set(self) -> bool:
        return bool(self.username) or bool(self.password)


def is_ssh(url: str) -> bool:
    """True for ``ssh://`` URLs and scp-like ``[user@]host:path`` remotes.

    A single drive letter before the colon (``C:\\repos``) is a local path.
    """
    return url.startswith("ssh://") or bool(_SCP_LIKE.match(url))


def is_http(url: str) -> bool:
    return url.startswith("http://") or url.startswith("https://")


def transport_kind(url: str) -> TransportKind:
    if is_ssh(url):
        return TransportKind.SSH
    if is_http(url):
        return TransportKind.HTTP
    if url.startswith("file://") or "://" not in url:
        return TransportKind.LOCAL
    raise TransportError(f"Unsupported repository URL: {url}")


@dataclass
class TransportConfig:
    """
    Per-invocation git settings for one remote.

    Settings are handed to git through the environment
    (``GIT_CONFIG_COUNT``/``GIT_CONFIG_KEY_n``/``GIT_CONFIG_VALUE_n``), so
    credentials never appear on a command line. After ``release()`` the
    configuration is wiped and can no longer be used.
    """

    url: str
    kind: TransportKind
    git_config: list[tuple[str, str]] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict, repr=False)
    released: bool = False

    def environment(self) -> dict[str, str]:
        """Environment variables to pass to git for this transport."""
        if self.released:
            raise TransportError(f"Transport for {self.url} has been released")

        environment = dict(self.env)
        environment["GIT_CONFIG_COUNT"] = str(len(self.git_config))
        for index, (key, value) in enumerate(self.git_config):
            environment[f"GIT_CONFIG_KEY_{index}"] = key
            environment[f"GIT_CONFIG_VALUE_{index}"] = value
        return environment

    def release(self) -> None:
        """Drop credentials and proxy settings."""
        self.git_config.clear()
        self.env.clear()
        self.released = True


def _basic_auth_header(credentials: UsernamePassword) -> str:
    token = base64.b64encode(f"{credentials.username}:{credentials.password}".encode("utf-8")).decode("ascii")
    return f"Authorization: Basic {token}"


def _additional_header(env_var: str) -> Optional[str]:
    """Read one extra header from an environment variable formatted ``name:value``."""
    value = os.environ.get(env_var)
    if not value:
        return None

    parts = value.split(":")
    if len(parts) != 2:
        logger.warning("Ignoring %s: expected name:value", env_var)
        return None

    name, header_value = parts[0].strip(), parts[1].strip()
    logger.info(">> added http header: %s", name)
    return f"{name}: {header_value}"


def _ssh_command(settings: TransportSettings) -> str:
    identity = Path(settings.ssh_identity_file).expanduser()
    if not identity.is_file():
        raise TransportError(f"SSH identity file not found: {identity}")

    command = ["ssh", "-i", str(identity), "-o", "IdentitiesOnly=yes"]
    if not settings.strict_host_key_checking:
        command.extend(["-o", "StrictHostKeyChecking=no"])
    return shlex.join(command)


def transport_for(
    url: str,
    credentials: Optional[UsernamePassword] = None,
    settings: Optional[TransportSettings] = None,
) -> TransportConfig:
    """
    Build the transport configuration for a remote URL.

    SSH remotes authenticate with the configured identity file and ignore
    credentials. HTTP remotes require credentials and may carry one
    additional header from the environment. Local remotes need nothing.

    Raises:
        TransportError: If no transport can be configured.
    """
    if not url:
        raise TransportError("Repository has no remote URL")

    settings = settings or TransportSettings()
    kind = transport_kind(url)
    # Remove remote-tracking branches the remote no longer has
    transport = TransportConfig(url=url, kind=kind, git_config=[("fetch.prune", "true")])

    if kind == TransportKind.SSH:
        transport.env["GIT_SSH_COMMAND"] = _ssh_command(settings)
        return transport

    if kind == TransportKind.HTTP:
        if credentials is None or not credentials.is_set():
            raise TransportError(f"No user name or password set for {url}")

        transport.git_config.append(("http.extraHeader", _basic_auth_header(credentials)))

        header = _additional_header(settings.additional_header_env)
        if header:
            transport.git_config.append(("http.extraHeader", header))

        if settings.proxy.url:
            transport.git_config.append(("http.proxy", settings.proxy.url))

    return transport


@contextmanager
def transport_session(
    url: str,
    credentials: Optional[UsernamePassword] = None,
    settings: Optional[TransportSettings] = None,
) -> Iterator[TransportConfig]:
    """Acquire a transport for the duration of a block; always released on exit."""
    transport = transport_for(url, credentials, settings)
    try:
        yield transport
    finally:
        transport.release()
