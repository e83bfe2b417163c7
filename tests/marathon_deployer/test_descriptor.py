"""
Tests for app descriptor loading.
"""

import json

import pytest

from marathon_deployer.descriptor import load_app_spec
from marathon_deployer.exceptions import DescriptorLoadError, EXIT_DESCRIPTOR_ERROR


class TestLoadAppSpec:
    """Test load_app_spec."""

    def test_loads_json_descriptor(self, tmp_path):
        """JSON descriptors are the Marathon native format."""
        path = tmp_path / "marathon.json"
        path.write_text(json.dumps({"id": "/example-service", "instances": 2, "cpus": 0.1}))

        spec = load_app_spec(path)

        assert spec.id == "/example-service"
        assert spec.instances == 2
        assert spec.payload["cpus"] == 0.1

    def test_loads_yaml_descriptor(self, tmp_path):
        """YAML descriptors are accepted too."""
        path = tmp_path / "marathon.yml"
        path.write_text("id: /example-service\nmem: 256\n")

        spec = load_app_spec(str(path))

        assert spec.id == "/example-service"
        assert spec.instances is None
        assert spec.payload == {"id": "/example-service", "mem": 256}

    def test_missing_file(self, tmp_path):
        """A missing file fails with a FileNotFoundError cause."""
        with pytest.raises(DescriptorLoadError) as exc_info:
            load_app_spec(tmp_path / "missing.json")

        assert isinstance(exc_info.value.cause, FileNotFoundError)
        assert exc_info.value.exit_code == EXIT_DESCRIPTOR_ERROR

    def test_malformed_json(self, tmp_path):
        """Broken JSON is a load error."""
        path = tmp_path / "marathon.json"
        path.write_text("{not json")

        with pytest.raises(DescriptorLoadError) as exc_info:
            load_app_spec(path)
        assert isinstance(exc_info.value.cause, ValueError)

    def test_descriptor_must_be_object(self, tmp_path):
        """A JSON list is not an app descriptor."""
        path = tmp_path / "marathon.json"
        path.write_text("[]")

        with pytest.raises(DescriptorLoadError, match="object"):
            load_app_spec(path)

    def test_descriptor_without_id(self, tmp_path):
        """The id is required."""
        path = tmp_path / "marathon.json"
        path.write_text(json.dumps({"cmd": "run.sh"}))

        with pytest.raises(DescriptorLoadError):
            load_app_spec(path)
