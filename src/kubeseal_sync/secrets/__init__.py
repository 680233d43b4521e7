"""Secrets management subpackage.

This package contains modules for manifest parsing, interactive field
selection, sealing and the plain secret config files.
"""

from kubeseal_sync.secrets.parsing import parse_manifest_file, with_argo_sync_option, write_manifest
from kubeseal_sync.secrets.plain import (
    PlainSecretConfigSync,
    ResourceCategory,
    ResourceSecrets,
    parse_plain_config,
    secrets_sample,
)
from kubeseal_sync.secrets.prompts import (
    Choice,
    ChoiceGroup,
    Prompter,
    QuestionaryPrompter,
    SecretSelector,
    group_by_namespace,
)
from kubeseal_sync.secrets.sealing import (
    Encryptor,
    KubesealEncryptor,
    SealingEngine,
    SealReport,
    build_sealed_secret,
)

__all__ = [
    # parsing
    "parse_manifest_file",
    "write_manifest",
    "with_argo_sync_option",
    # plain
    "PlainSecretConfigSync",
    "ResourceCategory",
    "ResourceSecrets",
    "parse_plain_config",
    "secrets_sample",
    # prompts
    "Choice",
    "ChoiceGroup",
    "Prompter",
    "QuestionaryPrompter",
    "SecretSelector",
    "group_by_namespace",
    # sealing
    "Encryptor",
    "KubesealEncryptor",
    "SealingEngine",
    "SealReport",
    "build_sealed_secret",
]
