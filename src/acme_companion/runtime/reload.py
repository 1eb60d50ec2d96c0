"""Reload trigger for nginx-proxy after new TLS material is in place."""

import logging
from typing import Optional

from acme_companion.errors import RuntimeApiError
from acme_companion.runtime.inspector import RuntimeInspector


logger = logging.getLogger(__name__)

BUNDLED_RELOAD_COMMAND = [
    "sh",
    "-c",
    "/app/docker-entrypoint.sh /usr/local/bin/docker-gen /app/nginx.tmpl "
    "/etc/nginx/conf.d/default.conf; /usr/sbin/nginx -s reload",
]


class ProxyReloader:
    """Asks nginx (through docker-gen when separate) to reload its config."""

    def __init__(self, inspector: RuntimeInspector):
        """Initialize reloader."""
        self.inspector = inspector

    def reload(self) -> bool:
        """Reload nginx; returns False when no reload could be delivered."""
        renderer = self.inspector.renderer_container()
        proxy = self.inspector.proxy_container()

        try:
            if renderer:
                # Using docker-gen and nginx in separate containers
                logger.info(f"Reloading nginx docker-gen (using separate container {renderer.id})...")
                self.inspector.client.kill_container(renderer.id, "SIGHUP")

                if proxy:
                    # Reloading nginx in case only certificates had been renewed
                    logger.info(f"Reloading nginx (using separate container {proxy.id})...")
                    self.inspector.client.kill_container(proxy.id, "SIGHUP")
                return True

            if proxy:
                logger.info(f"Reloading nginx proxy ({proxy.id})...")
                result = self.inspector.client.exec_in_container(proxy.id, BUNDLED_RELOAD_COMMAND)
                exit_code: Optional[int] = result.get("exit_code")
                if exit_code not in (0, None):
                    logger.error(f"Can't reload nginx-proxy, command exited with {exit_code}")
                    return False
                return True

        except RuntimeApiError as e:
            logger.error(f"Can't reload nginx-proxy: {e}")
            return False

        logger.error("Can't reload nginx-proxy, no nginx-proxy or docker-gen container found")
        return False
