import dataclasses
import logging
from typing import Optional

from restclient.config import ClientConfig

logger = logging.getLogger(__name__)


def insecure(config: Optional[ClientConfig] = None) -> ClientConfig:
    """Returns a configuration that does not verify TLS certificates.

    Only requests made with the returned configuration skip the checks;
    nothing process-wide is changed. Use for testing only.

    Args:
        config: The configuration to derive from. Read from the environment
          by default.
    """
    config = config or ClientConfig.from_environment()
    logger.warning("TLS certificate verification is disabled")
    return dataclasses.replace(config, verify=False)
