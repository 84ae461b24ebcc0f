import os
from dataclasses import dataclass
from typing import Optional

import httpx

TIMEOUT_ENVVAR = "RESTCLIENT_TIMEOUT"
INSECURE_ENVVAR = "RESTCLIENT_INSECURE"

_TRUTHY = ("1", "true", "yes")


@dataclass(frozen=True)
class ClientConfig:
    """Settings applied to the transport used for a request.

    Attributes:
        verify: Whether TLS certificates are verified. See restclient.tls
          for building a configuration that skips the checks.
        timeout: Timeout in seconds for connecting, sending and receiving.
          None blocks until the exchange completes or fails.
        follow_redirects: Whether redirect responses are followed.
    """

    verify: bool = True
    timeout: Optional[float] = None
    follow_redirects: bool = True

    @classmethod
    def from_environment(cls) -> "ClientConfig":
        """Create a configuration from the RESTCLIENT_* environment variables.

        Raises:
            ValueError: if RESTCLIENT_TIMEOUT is not a positive number.
        """
        timeout: Optional[float] = None
        raw_timeout = os.environ.get(TIMEOUT_ENVVAR)
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError:
                raise ValueError(
                    f"invalid {TIMEOUT_ENVVAR}: '{raw_timeout}' is not a number"
                )
            if timeout <= 0:
                raise ValueError(f"invalid {TIMEOUT_ENVVAR}: must be positive")

        insecure = os.environ.get(INSECURE_ENVVAR, "").strip().lower() in _TRUTHY
        return cls(verify=not insecure, timeout=timeout)

    def build_client(self) -> httpx.Client:
        """Create an httpx.Client honoring this configuration."""
        return httpx.Client(
            verify=self.verify,
            timeout=self.timeout,
            follow_redirects=self.follow_redirects,
        )
