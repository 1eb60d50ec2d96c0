"""Error types raised by the companion preflight."""

from pathlib import Path
from typing import List, Optional


class CompanionError(Exception):
    """Fatal startup error with operator-facing remediation hints."""

    def __init__(self, message: str, remediation: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.remediation = list(remediation or [])


class RuntimeApiError(Exception):
    """Docker API communication error."""
    pass


class RuntimeSocketUnavailable(CompanionError):
    """The Docker socket is not shared with the container."""

    def __init__(self, socket_path: str):
        super().__init__(
            f"you need to share your Docker host socket with a volume at {socket_path}",
            [f"Typically you should run your container with: '-v /var/run/docker.sock:{socket_path}:ro'"],
        )
        self.socket_path = socket_path


class SelfIdentityUnresolved(CompanionError):
    """The companion could not determine its own container ID."""

    def __init__(self):
        super().__init__("can't get my container ID !")


class ProxyContainerNotFound(CompanionError):
    """No nginx-proxy container could be resolved."""

    def __init__(self, proxy_label: str):
        super().__init__(
            "can't get nginx-proxy container ID !",
            [
                "Check that you are doing one of the following :",
                "\t- Use the --volumes-from option to mount volumes from the nginx-proxy container.",
                "\t- Set the NGINX_PROXY_CONTAINER env var on the letsencrypt-companion "
                "container to the name of the nginx-proxy container.",
                f"\t- Label the nginx-proxy container to use with '{proxy_label}'.",
            ],
        )


class ConfigRendererNotFound(CompanionError):
    """No docker-gen container could be resolved in a three container setup."""

    def __init__(self, renderer_label: str, unlabeled: Optional[List[str]] = None):
        remediation = [
            "If you are running a three containers setup, check that you are doing one of the following :",
            "\t- Set the NGINX_DOCKER_GEN_CONTAINER env var on the letsencrypt-companion "
            "container to the name of the docker-gen container.",
            f"\t- Label the docker-gen container to use with '{renderer_label}'.",
        ]
        if unlabeled:
            remediation.append(
                f"Found docker-gen containers without the label: {', '.join(unlabeled)}"
            )
        super().__init__("can't get docker-gen container id !", remediation)
        self.unlabeled = list(unlabeled or [])


class DirectoryMissing(CompanionError):
    """A required volume directory does not exist."""

    def __init__(self, path: Path):
        super().__init__(
            f"can't access to '{path}' directory !",
            [f"Check that '{path}' directory is declared as a writable volume."],
        )
        self.path = Path(path)


class DirectoryUnwritable(CompanionError):
    """A required volume directory exists but cannot be written to."""

    def __init__(self, path: Path):
        super().__init__(
            f"can't write to the '{path}' directory !",
            [f"Check that '{path}' directory is export as a writable volume."],
        )
        self.path = Path(path)


class InvalidParameterSize(CompanionError):
    """DHPARAM_BITS is not a positive integer."""

    def __init__(self, value: str):
        super().__init__(f"invalid Diffie-Hellman size of {value} !")
        self.value = value


class UnsupportedAcmeApi(CompanionError):
    """The configured ACME endpoint speaks an API version simp_le lacks."""

    def __init__(self, uri: str):
        super().__init__(
            "ACME v2 API is not yet supported by simp_le.",
            ["See https://github.com/zenhack/simp_le/issues/101"],
        )
        self.uri = uri
