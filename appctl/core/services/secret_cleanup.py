"""
Secret cleanup — remove the legacy source access token of a pipeline.

Only pipelines created against the first GitHub integration stored a
personal access token as a secret. Deleting it is optional: without an
explicit flag the user is asked first.
"""

from __future__ import annotations

import logging

from appctl.adapters.base import Prompter, SecretsManager
from appctl.core.errors import StepError

logger = logging.getLogger(__name__)

SECRET_DELETE_CONFIRM_PROMPT = (
    "Are you sure you want to delete the source secret {secret} associated with pipeline {pipeline}?"
)
SECRET_DELETE_CONFIRM_HELP = "This will delete the token associated with the source of your pipeline."


def delete_secret(
    secret_name: str,
    pipeline_name: str,
    secrets: SecretsManager,
    prompter: Prompter,
    force: bool = False,
) -> bool:
    """Delete a pipeline's access-token secret if one is recorded.

    Args:
        secret_name: Secret recorded against the pipeline ("" = none).
        pipeline_name: Owning pipeline, for the prompt.
        secrets: Secret store.
        prompter: Used when ``force`` is False.
        force: Skip the confirmation prompt.

    Returns:
        True if the secret was deleted, False if there was nothing to do
        or the user declined.

    Raises:
        StepError: If the confirmation prompt fails.
        Exception: Whatever ``delete_secret`` raised, unchanged.
    """
    if not secret_name:
        return False

    if not force:
        try:
            confirmed = prompter.confirm(
                SECRET_DELETE_CONFIRM_PROMPT.format(secret=secret_name, pipeline=pipeline_name),
                SECRET_DELETE_CONFIRM_HELP,
            )
        except Exception as e:
            raise StepError("pipeline delete secret confirmation prompt", e) from e
        if not confirmed:
            logger.info("Skipping deletion of secret %s.", secret_name)
            return False

    secrets.delete_secret(secret_name)
    logger.info("Deleted secret %s.", secret_name)
    return True
