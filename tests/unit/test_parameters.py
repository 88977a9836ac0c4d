"""
Unit tests for StorageClass parameter parsing.
"""

import pytest

from cephfs_provisioner.provisioner.exceptions import (
    DuplicateParameter,
    InvalidParameter,
    MissingParameter,
    ProvisionValidationError,
)
from cephfs_provisioner.provisioner.parameters import parse_monitors, resolve_parameters


class TestResolveParameters:
    """Tests for resolve_parameters function."""

    @pytest.mark.unit
    def test_defaults(self):
        """Test defaults for optional keys."""
        resolved = resolve_parameters({"monitors": "10.0.0.1:6789", "adminSecretName": "ceph-admin"})

        assert resolved.cluster == "ceph"
        assert resolved.admin_id == "admin"
        assert resolved.monitors == ("10.0.0.1:6789",)
        assert resolved.secret_ref.namespace == "default"
        assert resolved.secret_ref.name == "ceph-admin"

    @pytest.mark.unit
    def test_all_keys(self):
        """Test every recognized key is applied."""
        resolved = resolve_parameters(
            {
                "cluster": "ceph2",
                "monitors": "10.0.0.1:6789,10.0.0.2:6789",
                "adminId": "kube",
                "adminSecretName": "ceph-admin",
                "adminSecretNamespace": "kube-system",
            }
        )

        assert resolved.cluster == "ceph2"
        assert resolved.admin_id == "kube"
        assert resolved.monitors == ("10.0.0.1:6789", "10.0.0.2:6789")
        assert resolved.secret_ref.namespace == "kube-system"

    @pytest.mark.unit
    def test_keys_are_case_insensitive(self):
        """Test keys match regardless of case."""
        resolved = resolve_parameters({"MONITORS": "m1", "adminsecretname": "s", "AdminID": "kube"})

        assert resolved.monitors == ("m1",)
        assert resolved.admin_id == "kube"

    @pytest.mark.unit
    @pytest.mark.parametrize("position", ["first", "last"])
    def test_unknown_key_fails_whole_bundle(self, position):
        """Test an unknown key fails regardless of where it appears."""
        params = {"monitors": "m1", "adminSecretName": "s"}
        if position == "first":
            params = {"adminSecretNmae": "typo", **params}
        else:
            params["adminSecretNmae"] = "typo"

        with pytest.raises(InvalidParameter, match="adminSecretNmae"):
            resolve_parameters(params)

    @pytest.mark.unit
    def test_duplicate_key(self):
        """Test the same key in two cases is rejected."""
        with pytest.raises(DuplicateParameter):
            resolve_parameters({"monitors": "m1", "Monitors": "m2", "adminSecretName": "s"})

    @pytest.mark.unit
    def test_missing_admin_secret_name(self):
        """Test adminSecretName is required."""
        with pytest.raises(MissingParameter, match="admin secret name"):
            resolve_parameters({"monitors": "m1"})

    @pytest.mark.unit
    def test_empty_admin_secret_name(self):
        """Test an empty adminSecretName counts as missing."""
        with pytest.raises(MissingParameter):
            resolve_parameters({"monitors": "m1", "adminSecretName": ""})

    @pytest.mark.unit
    @pytest.mark.parametrize("monitors", [None, "", ",", " , ,"])
    def test_missing_monitors(self, monitors):
        """Test monitors must yield at least one entry."""
        params = {"adminSecretName": "s"}
        if monitors is not None:
            params["monitors"] = monitors

        with pytest.raises(MissingParameter, match="monitors"):
            resolve_parameters(params)

    @pytest.mark.unit
    def test_errors_are_validation_errors(self):
        """Test all parameter errors are non-retryable validation errors."""
        with pytest.raises(ProvisionValidationError) as exc_info:
            resolve_parameters({"bogus": "1"})
        assert exc_info.value.retryable is False


class TestParseMonitors:
    """Tests for parse_monitors function."""

    @pytest.mark.unit
    def test_strips_and_drops_empty(self):
        assert parse_monitors(" a:6789, ,b:6789,") == ["a:6789", "b:6789"]

    @pytest.mark.unit
    def test_preserves_order(self):
        assert parse_monitors("c,a,b") == ["c", "a", "b"]
