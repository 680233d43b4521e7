"""Core infrastructure subpackage.

This package contains the run context and the SecretsSync facade class
along with the kubeseal encryptor factory.
"""

from kubeseal_sync.core.context import RunContext
from kubeseal_sync.core.sync import SecretsSync, build_kubeseal_cmd, create_encryptor, find_kubeseal_binary

__all__ = [
    "RunContext",
    "SecretsSync",
    "build_kubeseal_cmd",
    "create_encryptor",
    "find_kubeseal_binary",
]
