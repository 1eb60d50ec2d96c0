"""ACME endpoint compatibility guard."""

import re
from typing import Optional

from acme_companion.errors import UnsupportedAcmeApi


ACME_V2_RE = re.compile(r"https://acme-.*v02\.api\.letsencrypt\.org/directory")


def check_acme_endpoint(ca_uri: Optional[str]) -> None:
    """Reject ACME endpoints that simp_le cannot talk to."""
    if ca_uri and ACME_V2_RE.search(ca_uri):
        raise UnsupportedAcmeApi(ca_uri)
