"""Tests for host cloud region encoding and decoding."""

import pytest

from kubecloud.clouds.builder import derive_host_cloud_region
from kubecloud.clouds.region import K8S_CLOUD_OTHER, parent_cloud_and_region


class TestDeriveHostCloudRegion:
    def test_cloud_and_region(self):
        assert derive_host_cloud_region("aws", "us-east-1") == "aws/us-east-1"

    def test_neither_given_is_other(self):
        assert derive_host_cloud_region("", "") == K8S_CLOUD_OTHER

    def test_cloud_only_keeps_empty_region(self):
        assert derive_host_cloud_region("aws", "") == "aws/"

    def test_region_only_keeps_empty_cloud(self):
        assert derive_host_cloud_region("", "us-east-1") == "/us-east-1"


class TestParentCloudAndRegion:
    def test_splits_two_parts(self):
        assert parent_cloud_and_region("aws/us-east-1") == ("aws", "us-east-1")

    @pytest.mark.parametrize("value", ["", "no-slash-value", K8S_CLOUD_OTHER, "a/b/c"])
    def test_other_shapes_decode_empty(self, value):
        assert parent_cloud_and_region(value) == ("", "")

    def test_empty_segments_preserved(self):
        assert parent_cloud_and_region("aws/") == ("aws", "")

    @pytest.mark.parametrize("cloud,region", [("aws", "us-east-1"), ("gce", "europe-west1")])
    def test_decodes_what_was_encoded(self, cloud, region):
        assert parent_cloud_and_region(derive_host_cloud_region(cloud, region)) == (cloud, region)
