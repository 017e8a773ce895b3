"""Standalone chat server — run the hub's realtime chat without a host app.

Usage::

    poetry run the-hub                 # plain HTTP on :8000
    HTTPS=1 poetry run the-hub         # self-signed TLS on :8443

Environment variables:
    HOST / PORT          — Bind address (default: 0.0.0.0, 8000 or 8443 with HTTPS)
    HTTPS                — Set to 1 to serve TLS with a development certificate
    SSL_CERTFILE         — TLS certificate (generated on first start if missing)
    SSL_KEYFILE          — TLS private key (generated on first start if missing)
    LOG_LEVEL            — Root log level (default: INFO)
    HUB_MESSAGE_STORE    — ``memory`` (default) or ``mongodb``
    MONGODB_CONNECTION   — MongoDB URI for the mongodb store
    HUB_PUSH_TIMEOUT     — Seconds a single WebSocket push may take (default: 5)

Loads .env from the current working directory or any parent directory.
"""

import datetime
import ipaddress
import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Dict, Mapping, Optional

if TYPE_CHECKING:
    from the_hub.config import HubConfig
    from the_hub.realtime import ChatHub

logger = logging.getLogger(__name__)

DEV_CERT_DIR = Path.home() / ".the-hub" / "certs"


# ── Development TLS ──────────────────────────────────────────────

def _ensure_self_signed_cert(cert_path: Path, key_path: Path, *, hostname: str = "localhost",
                             valid_days: int = 30) -> bool:
    """Write an EC P-256 certificate/key pair for ``hostname`` unless both files exist.

    :return: True if a new pair was written
    """
    if cert_path.exists() and key_path.exists():
        return False

    from cryptography import x509
    from cryptography.x509.oid import NameOID
    from cryptography.hazmat.primitives import hashes, serialization
    from cryptography.hazmat.primitives.asymmetric import ec

    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([
        x509.NameAttribute(NameOID.COMMON_NAME, hostname),
        x509.NameAttribute(NameOID.ORGANIZATION_NAME, "the-hub development"),
    ])
    issued = datetime.datetime.now(datetime.timezone.utc)
    alt_names = [x509.DNSName(hostname), x509.IPAddress(ipaddress.ip_address("127.0.0.1"))]

    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(issued - datetime.timedelta(minutes=5))
        .not_valid_after(issued + datetime.timedelta(days=valid_days))
        .add_extension(x509.SubjectAlternativeName(alt_names), critical=False)
        .add_extension(x509.BasicConstraints(ca=False, path_length=None), critical=True)
        .sign(key, hashes.SHA256())
    )

    key_path.parent.mkdir(parents=True, exist_ok=True)
    cert_path.parent.mkdir(parents=True, exist_ok=True)
    key_path.write_bytes(key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ))
    key_path.chmod(0o600)
    cert_path.write_bytes(cert.public_bytes(serialization.Encoding.PEM))
    logger.info(f"[APP] Generated development certificate for {hostname}: {cert_path}")
    return True


def _server_options(env: Mapping[str, str]) -> Dict[str, object]:
    """Translate environment variables into ``uvicorn.run`` keyword arguments."""
    use_https = env.get("HTTPS", "0") == "1"
    options: Dict[str, object] = {
        "host": env.get("HOST", "0.0.0.0"),
        "port": int(env.get("PORT", "8443" if use_https else "8000")),
    }
    if use_https:
        cert_path = Path(env.get("SSL_CERTFILE", str(DEV_CERT_DIR / "localhost.pem")))
        key_path = Path(env.get("SSL_KEYFILE", str(DEV_CERT_DIR / "localhost-key.pem")))
        _ensure_self_signed_cert(cert_path, key_path)
        options["ssl_certfile"] = str(cert_path)
        options["ssl_keyfile"] = str(key_path)
    return options


# ── FastAPI app factory ──────────────────────────────────────────

def create_app(config: Optional["HubConfig"] = None, hub: Optional["ChatHub"] = None):
    """Create the FastAPI application.

    Also called by uvicorn in reload mode via the factory=True flag, in which case
    the config is read from the environment.
    """
    from dotenv import load_dotenv, find_dotenv
    load_dotenv(find_dotenv(usecwd=True))

    from fastapi import FastAPI

    from the_hub.config import HubConfig
    from the_hub.realtime import ChatHub
    from the_hub.server import get_router

    if config is None:
        config = HubConfig.from_env()
    if hub is None:
        hub = ChatHub.from_config(config)

    @asynccontextmanager
    async def lifespan(_a):
        await hub.start()
        logger.info(f"[APP] Chat hub started ({type(hub.store).__name__})")
        yield
        await hub.stop()

    _app = FastAPI(title="The Hub Chat", docs_url=None, redoc_url=None, lifespan=lifespan)
    _app.state.hub = hub
    _app.state.config = config
    _app.include_router(get_router(hub, config))

    @_app.get("/")
    async def index():
        return {"service": "the-hub", "ws": config.ws_path, "api": config.api_prefix}

    return _app


# ── Entry point ──────────────────────────────────────────────────

def main():
    """Load .env and serve the hub with uvicorn."""
    from dotenv import load_dotenv, find_dotenv
    load_dotenv(find_dotenv(usecwd=True))

    import uvicorn

    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s — %(message)s",
        datefmt="%H:%M:%S",
    )
    options = _server_options(os.environ)
    scheme = "https" if "ssl_certfile" in options else "http"
    logger.info(f"[APP] Serving the-hub on {scheme}://{options['host']}:{options['port']}")
    uvicorn.run("the_hub.standalone:create_app", factory=True, **options)


if __name__ == "__main__":
    main()
