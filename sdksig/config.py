"""Environment configuration.

Credentials are read from ``SDK_AK`` / ``SDK_SK`` rather than being hard-coded
in application code; ``SDK_SIGNING_ALGORITHM`` selects the signing algorithm.
"""
import os
from typing import Mapping, Optional

from .algorithms import Algorithm
from .exceptions import ValidationError
from .request import Credentials

ENV_ACCESS_KEY = 'SDK_AK'
ENV_SECRET_KEY = 'SDK_SK'
ENV_SIGNING_ALGORITHM = 'SDK_SIGNING_ALGORITHM'


def credentials_from_env(environ: Optional[Mapping[str, str]] = None) -> Credentials:
    """Load credentials from the environment.

    :param environ: mapping to read instead of ``os.environ``.
    :raise ValidationError: if either variable is unset or empty.
    :return: Credentials.
    """
    env = os.environ if environ is None else environ
    access_key = env.get(ENV_ACCESS_KEY)
    secret_key = env.get(ENV_SECRET_KEY)
    if not access_key or not secret_key:
        raise ValidationError(
            f"{ENV_ACCESS_KEY} and {ENV_SECRET_KEY} must be set in the environment"
        )
    return Credentials(access_key, secret_key)


def algorithm_from_env(environ: Optional[Mapping[str, str]] = None) -> Algorithm:
    """Signing algorithm from the environment, SDK-HMAC-SHA256 by default.

    :raise UnsupportedAlgorithmError: if the configured label is unknown.
    """
    env = os.environ if environ is None else environ
    label = env.get(ENV_SIGNING_ALGORITHM, '').strip()
    if not label:
        return Algorithm.HMAC_SHA256
    return Algorithm.from_label(label)
