"""
Tests for core services — artifact bucket resolution and secret cleanup.
"""

from unittest.mock import MagicMock

import pytest

from appctl.core.errors import StepError
from appctl.core.models.application import Application
from appctl.core.models.pipeline import ArtifactBucket
from appctl.core.models.resources import AppRegionalResources
from appctl.core.services.artifacts import get_artifact_buckets
from appctl.core.services.secret_cleanup import SECRET_DELETE_CONFIRM_PROMPT, delete_secret

# ── Artifact buckets ────────────────────────────────────────────


class TestGetArtifactBuckets:
    def test_maps_regions_in_order(self):
        deployer = MagicMock()
        deployer.get_regional_app_resources.return_value = [
            AppRegionalResources(region="us-west-2", s3_bucket="b-west", kms_key_arn="k-west"),
            AppRegionalResources(region="us-east-1", s3_bucket="b-east", kms_key_arn="k-east"),
        ]
        app = Application(name="badgoose")

        buckets = get_artifact_buckets(deployer, app)

        deployer.get_regional_app_resources.assert_called_once_with(app)
        assert buckets == [
            ArtifactBucket(bucket_name="b-west", key_arn="k-west", region="us-west-2"),
            ArtifactBucket(bucket_name="b-east", key_arn="k-east", region="us-east-1"),
        ]

    def test_no_regions(self):
        deployer = MagicMock()
        deployer.get_regional_app_resources.return_value = []
        assert get_artifact_buckets(deployer, Application(name="a")) == []

    def test_error_propagates_unchanged(self):
        deployer = MagicMock()
        err = RuntimeError("throttled")
        deployer.get_regional_app_resources.side_effect = err
        with pytest.raises(RuntimeError) as exc:
            get_artifact_buckets(deployer, Application(name="a"))
        assert exc.value is err


# ── Secret cleanup ──────────────────────────────────────────────


class TestDeleteSecret:
    def test_no_secret_is_noop(self):
        secrets, prompter = MagicMock(), MagicMock()
        assert delete_secret("", "pipepiper", secrets, prompter) is False
        prompter.confirm.assert_not_called()
        secrets.delete_secret.assert_not_called()

    def test_force_skips_prompt(self):
        secrets, prompter = MagicMock(), MagicMock()
        assert delete_secret("tok", "pipepiper", secrets, prompter, force=True) is True
        prompter.confirm.assert_not_called()
        secrets.delete_secret.assert_called_once_with("tok")

    def test_confirmed(self):
        secrets, prompter = MagicMock(), MagicMock()
        prompter.confirm.return_value = True
        assert delete_secret("tok", "pipepiper", secrets, prompter) is True
        prompt = prompter.confirm.call_args.args[0]
        assert prompt == SECRET_DELETE_CONFIRM_PROMPT.format(secret="tok", pipeline="pipepiper")
        secrets.delete_secret.assert_called_once_with("tok")

    def test_declined_is_success(self, caplog):
        secrets, prompter = MagicMock(), MagicMock()
        prompter.confirm.return_value = False
        with caplog.at_level("INFO"):
            assert delete_secret("tok", "pipepiper", secrets, prompter) is False
        secrets.delete_secret.assert_not_called()
        assert "Skipping deletion of secret tok." in caplog.text

    def test_prompt_failure(self):
        secrets, prompter = MagicMock(), MagicMock()
        prompter.confirm.side_effect = EOFError("closed")
        with pytest.raises(StepError) as exc:
            delete_secret("tok", "pipepiper", secrets, prompter)
        assert str(exc.value) == "pipeline delete secret confirmation prompt: closed"
        secrets.delete_secret.assert_not_called()

    def test_delete_failure_unchanged(self):
        secrets, prompter = MagicMock(), MagicMock()
        err = RuntimeError("access denied")
        secrets.delete_secret.side_effect = err
        with pytest.raises(RuntimeError) as exc:
            delete_secret("tok", "pipepiper", secrets, prompter, force=True)
        assert exc.value is err
