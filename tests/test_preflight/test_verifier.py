"""Tests for readiness verification."""

import logging
import socket
import tempfile
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from acme_companion.errors import (
    ConfigRendererNotFound,
    DirectoryMissing,
    DirectoryUnwritable,
    ProxyContainerNotFound,
    RuntimeSocketUnavailable,
    SelfIdentityUnresolved,
)
from acme_companion.models.container import ContainerRef
from acme_companion.preflight.verifier import ReadinessVerifier, WRITE_PROBE
from acme_companion.runtime.inspector import RuntimeInspector

from conftest import PROXY_ID, RENDERER_ID, SELF_ID


@pytest.fixture
def inspector(volume_dirs):
    """Inspector where every sibling resolves and every volume is mounted."""
    mock = MagicMock(spec=RuntimeInspector)
    mock.self_container_id.return_value = SELF_ID
    mock.inspect.return_value = ContainerRef(id=SELF_ID, mounts=[str(d) for d in volume_dirs])
    mock.proxy_container.return_value = ContainerRef(id=PROXY_ID, image="nginx:alpine")
    mock.renderer_container.return_value = ContainerRef(id=RENDERER_ID)
    mock.bundles_renderer.return_value = False
    return mock


@pytest.fixture
def verifier(companion_config, inspector):
    return ReadinessVerifier(companion_config, inspector)


class TestRuntimeSocket:
    """Test the Docker socket gate."""

    def test_network_endpoint_skips_check(self, verifier):
        verifier.check_runtime_socket()

    def test_missing_socket(self, verifier, tmp_path):
        verifier.config.docker.host = f"unix://{tmp_path}/docker.sock"

        with pytest.raises(RuntimeSocketUnavailable) as exc_info:
            verifier.check_runtime_socket()

        assert str(tmp_path / "docker.sock") in exc_info.value.message
        assert "-v /var/run/docker.sock:" in exc_info.value.remediation[0]

    def test_regular_file_is_not_a_socket(self, verifier, tmp_path):
        fake = tmp_path / "docker.sock"
        fake.write_text("")
        verifier.config.docker.host = f"unix://{fake}"

        with pytest.raises(RuntimeSocketUnavailable):
            verifier.check_runtime_socket()

    def test_real_socket(self, verifier):
        # Unix socket paths are length limited, keep it short
        with tempfile.TemporaryDirectory(prefix="ac") as short_dir:
            path = Path(short_dir) / "d.sock"
            server = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
            try:
                server.bind(str(path))
                verifier.config.docker.host = f"unix://{path}"
                verifier.check_runtime_socket()
            finally:
                server.close()


class TestContainerGates:
    """Test self, proxy and docker-gen resolution gates."""

    def test_all_resolved(self, verifier, volume_dirs):
        requirements = verifier.verify()

        assert [r.path for r in requirements] == [str(d) for d in volume_dirs]
        assert all(r.mounted and r.writable for r in requirements)

    def test_self_unresolved(self, verifier, inspector):
        inspector.self_container_id.return_value = None

        with pytest.raises(SelfIdentityUnresolved):
            verifier.verify()

        inspector.proxy_container.assert_not_called()

    def test_self_not_inspectable_still_passes(self, verifier, inspector, caplog):
        inspector.inspect.return_value = None

        own = verifier.check_self_identity()

        assert own.id == SELF_ID
        assert "could not be inspected" in caplog.text

    def test_proxy_not_found_fails_before_directory_checks(self, verifier, inspector):
        inspector.proxy_container.return_value = None

        with patch.object(verifier, "check_directory") as check_directory:
            with pytest.raises(ProxyContainerNotFound) as exc_info:
                verifier.verify()

        check_directory.assert_not_called()
        remediation = "\n".join(exc_info.value.remediation)
        assert "--volumes-from" in remediation
        assert "NGINX_PROXY_CONTAINER" in remediation
        assert verifier.config.containers.proxy_label in remediation

    def test_renderer_missing_and_not_bundled(self, verifier, inspector):
        inspector.renderer_container.return_value = None
        inspector.bundles_renderer.return_value = False
        inspector.containers_by_image.return_value = []

        with pytest.raises(ConfigRendererNotFound) as exc_info:
            verifier.verify()

        assert "NGINX_DOCKER_GEN_CONTAINER" in "\n".join(exc_info.value.remediation)
        assert exc_info.value.unlabeled == []

    def test_renderer_missing_names_unlabeled_docker_gen(self, verifier, inspector):
        inspector.renderer_container.return_value = None
        inspector.bundles_renderer.return_value = False
        inspector.containers_by_image.return_value = [
            ContainerRef(id=RENDERER_ID, name="docker-gen", image="nginxproxy/docker-gen:0.10"),
        ]

        with pytest.raises(ConfigRendererNotFound) as exc_info:
            verifier.verify()

        inspector.containers_by_image.assert_called_once_with("docker-gen")
        assert exc_info.value.unlabeled == ["docker-gen"]
        assert "without the label: docker-gen" in exc_info.value.remediation[-1]

    def test_renderer_bundled_in_proxy(self, verifier, inspector):
        inspector.renderer_container.return_value = None
        inspector.bundles_renderer.return_value = True

        verifier.verify()

        inspector.bundles_renderer.assert_called_once_with(inspector.proxy_container.return_value)


class TestDirectories:
    """Test volume directory gates."""

    def test_missing_directory(self, verifier, volume_dirs):
        volume_dirs[1].rmdir()

        with pytest.raises(DirectoryMissing) as exc_info:
            verifier.verify()

        assert exc_info.value.path == volume_dirs[1]

    def test_unwritable_despite_mount_metadata(self, verifier, volume_dirs):
        """The filesystem write check wins over what the Docker API reports."""
        own = ContainerRef(id=SELF_ID, mounts=[str(d) for d in volume_dirs])

        with patch("pathlib.Path.touch", side_effect=PermissionError("read-only file system")):
            with pytest.raises(DirectoryUnwritable) as exc_info:
                verifier.check_directory(volume_dirs[0], own)

        assert exc_info.value.path == volume_dirs[0]
        assert "writable volume" in exc_info.value.remediation[0]

    def test_unmounted_directory_only_warns(self, verifier, inspector, volume_dirs, caplog):
        caplog.set_level(logging.WARNING)
        inspector.inspect.return_value = ContainerRef(id=SELF_ID, mounts=[])

        requirements = verifier.verify()

        assert all(not r.mounted and r.writable for r in requirements)
        assert f"'{volume_dirs[0]}' does not appear to be a mounted volume." in caplog.text

    def test_write_check_file_removed(self, verifier, volume_dirs):
        verifier.verify()

        for directory in volume_dirs:
            assert not (directory / WRITE_PROBE).exists()
