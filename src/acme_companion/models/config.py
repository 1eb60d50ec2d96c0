"""Configuration models."""

from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


LABEL_PREFIX = "com.github.jrcs.letsencrypt_nginx_proxy_companion"


class DockerConfig(BaseModel):
    """Docker API endpoint configuration."""
    # YAML reads an unquoted api_version such as 1.41 as a float
    model_config = ConfigDict(coerce_numbers_to_str=True)

    host: str = Field(default="unix:///var/run/docker.sock")
    timeout: float = Field(default=10.0, gt=0)
    api_version: Optional[str] = None

    @field_validator("host")
    @classmethod
    def validate_host(cls, v):
        """Only unix sockets and plain TCP endpoints are supported."""
        if not v:
            raise ValueError("Docker host must not be empty")
        if "://" not in v:
            raise ValueError(f"Invalid Docker host: {v}")
        return v

    @property
    def socket_path(self) -> Optional[str]:
        """Local socket path, or None for network endpoints."""
        if self.host.startswith("unix://"):
            return self.host[len("unix://"):]
        return None


class ContainersConfig(BaseModel):
    """Sibling container discovery settings."""
    proxy: Optional[str] = Field(None, description="nginx-proxy container name or ID")
    renderer: Optional[str] = Field(None, description="docker-gen container name or ID")
    proxy_label: str = Field(default=f"{LABEL_PREFIX}.nginx_proxy")
    renderer_label: str = Field(default=f"{LABEL_PREFIX}.docker_gen")
    renderer_image_hint: str = Field(default="nginx-proxy")
    renderer_image: str = Field(default="docker-gen", description="Image name of a standalone docker-gen")


class DHParamConfig(BaseModel):
    """Diffie-Hellman parameter generation settings."""
    model_config = ConfigDict(coerce_numbers_to_str=True)

    # Kept as the raw input; the provisioner validates it before touching files
    bits: str = Field(default="2048")
    lock_timeout: int = Field(default=86400, ge=0, description="Seconds before a lock is stale, 0 = never")
    nice: int = Field(default=5, ge=-20, le=19)


class PathsConfig(BaseModel):
    """Filesystem contract shared with nginx-proxy."""
    dhparam_file: str = Field(default="/etc/nginx/certs/dhparam.pem")
    pregenerated_dhparam: str = Field(default="/app/dhparam.pem.default")
    lock_file: str = Field(default="/tmp/le_companion_dhparam_generating.lock")
    required_dirs: List[str] = Field(
        default_factory=lambda: [
            "/etc/nginx/certs",
            "/etc/nginx/vhost.d",
            "/usr/share/nginx/html",
        ]
    )


class AcmeConfig(BaseModel):
    """ACME client settings inspected at startup."""
    ca_uri: Optional[str] = None


class CompanionConfig(BaseModel):
    """Main configuration model."""
    model_config = ConfigDict(extra="ignore")

    docker: DockerConfig = Field(default_factory=DockerConfig)
    containers: ContainersConfig = Field(default_factory=ContainersConfig)
    dhparam: DHParamConfig = Field(default_factory=DHParamConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    acme: AcmeConfig = Field(default_factory=AcmeConfig)
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    start_command: List[str] = Field(default_factory=lambda: ["/bin/bash", "/app/start.sh"])
    deprecated_env: Dict[str, str] = Field(default_factory=dict)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}")
        return v.upper()

    @model_validator(mode="after")
    def debug_forces_debug_level(self):
        """DEBUG=true always wins over LOG_LEVEL."""
        if self.debug:
            self.log_level = "DEBUG"
        return self
