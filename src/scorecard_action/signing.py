"""Keyless signing of scorecard results via Sigstore (Fulcio + Rekor)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

from scorecard_action.errors import SigningError

logger = logging.getLogger("scorecard_action.signing")

DEFAULT_FULCIO_URL = "https://fulcio.sigstore.dev"
DEFAULT_REKOR_URL = "https://rekor.sigstore.dev"
DEFAULT_OIDC_ISSUER_URL = "https://oauth2.sigstore.dev/auth"
DEFAULT_OIDC_CLIENT_ID = "sigstore"

STAGING_FULCIO_URL = "https://fulcio.sigstage.dev"
STAGING_REKOR_URL = "https://rekor.sigstage.dev"


@dataclass(frozen=True)
class SignerOptions:
    fulcio_url: str = DEFAULT_FULCIO_URL  # signing certificate provider
    rekor_url: str = DEFAULT_REKOR_URL  # transparency log
    oidc_issuer: str = DEFAULT_OIDC_ISSUER_URL
    oidc_client_id: str = DEFAULT_OIDC_CLIENT_ID
    experimental: bool = True  # keyless signing gate


SigningBackend = Callable[[bytes, SignerOptions], Any]


def _signing_context(options: SignerOptions) -> Any:
    instance = (options.fulcio_url, options.rekor_url)
    if instance not in ((DEFAULT_FULCIO_URL, DEFAULT_REKOR_URL), (STAGING_FULCIO_URL, STAGING_REKOR_URL)):
        raise SigningError(
            "unsupported Sigstore instance",
            {"fulcioURL": options.fulcio_url, "rekorURL": options.rekor_url},
        )

    from sigstore.sign import SigningContext

    if instance == (DEFAULT_FULCIO_URL, DEFAULT_REKOR_URL):
        return SigningContext.production()
    return SigningContext.staging()


def _identity_token(options: SignerOptions) -> Any:
    from sigstore.oidc import IdentityToken, Issuer, detect_credential

    # Ambient CI credential first (GitHub Actions OIDC), then the issuer flow.
    raw = detect_credential()
    if raw:
        return IdentityToken(raw)
    issuer = Issuer(options.oidc_issuer)
    return issuer.identity_token(client_id=options.oidc_client_id)


def sigstore_backend(payload: bytes, options: SignerOptions) -> Any:
    """Sign ``payload``, upload the entry to Rekor, and return the bundle."""
    context = _signing_context(options)
    token = _identity_token(options)
    with context.signer(token, cache=True) as signer:
        bundle = signer.sign_artifact(payload)
    logger.debug("rekor log index: %s", bundle.log_entry.log_index)
    return bundle


def sign_results(
    results_file: str | Path,
    options: SignerOptions | None = None,
    backend: SigningBackend | None = None,
) -> None:
    """Sign the results file and record the signature in the transparency log.

    The signature and certificate are discarded: verification only needs the
    published payload and the Rekor entry.
    """
    options = options or SignerOptions()
    backend = backend or sigstore_backend

    if not options.experimental:
        raise SigningError("keyless signing requires experimental mode to be enabled")

    path = Path(results_file)
    try:
        payload = path.read_bytes()
    except OSError as exc:
        raise SigningError("error reading results to sign", {"path": str(path)}) from exc

    logger.info("signing %s (fulcio=%s, rekor=%s)", path, options.fulcio_url, options.rekor_url)
    try:
        backend(payload, options)
    except SigningError:
        raise
    except Exception as exc:
        raise SigningError("error signing payload", {"path": str(path)}) from exc
