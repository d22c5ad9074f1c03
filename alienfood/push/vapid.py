"""
Tool: VAPID Key Management
Purpose: Provide the server's VAPID key pair and claims

Usage:
    # Generate VAPID keys (one-time setup)
    python -m alienfood.push.vapid generate-keys

    # Show the public key clients subscribe with
    python -m alienfood.push.vapid get-public-key

Keys are read from VAPID_PUBLIC_KEY / VAPID_PRIVATE_KEY, then from the
``vapid`` section of args/push.yaml. Without either, a key pair is
generated once per process; those keys change on every restart and
invalidate all existing subscriptions, so only use them for local testing.
"""

import os

import yaml
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from alienfood.client.keys import bytes_to_url_base64
from alienfood.config import CONFIG_FILE
from alienfood.logging_config import get_logger


logger = get_logger(__name__)

DEFAULT_SUBJECT = "mailto:admin@tuneldeltiempo.com"
MIN_KEY_LENGTH = 20

_generated_keys: dict | None = None


def _load_vapid_config() -> dict:
    """Load VAPID configuration from environment, then config file."""
    config = {
        "public_key": os.environ.get("VAPID_PUBLIC_KEY", "").strip(),
        "private_key": os.environ.get("VAPID_PRIVATE_KEY", "").strip(),
        "subject": os.environ.get("VAPID_SUBJECT", "").strip() or DEFAULT_SUBJECT,
    }

    if CONFIG_FILE.exists() and (not config["public_key"] or not config["private_key"]):
        try:
            with open(CONFIG_FILE) as f:
                file_config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning("vapid_config_unreadable", error=str(e))
            file_config = {}

        vapid_config = file_config.get("vapid", {}) or {}
        if not config["public_key"]:
            config["public_key"] = str(vapid_config.get("public_key", "")).strip()
        if not config["private_key"]:
            config["private_key"] = str(vapid_config.get("private_key", "")).strip()
        if vapid_config.get("subject") and not os.environ.get("VAPID_SUBJECT"):
            config["subject"] = vapid_config["subject"]

    return config


def generate_vapid_keys() -> dict:
    """
    Generate new VAPID key pair for Web Push.

    Returns:
        {"success": True, "public_key": str, "private_key": str,
         "private_key_pem": str} or {"success": False, "error": str}

    Note:
        Store the private key securely in environment variables or vault.
        The public key is shared with clients for subscription.
    """
    try:
        # P-256 is the only curve Web Push accepts
        private_key = ec.generate_private_key(ec.SECP256R1())
        public_key = private_key.public_key()

        private_pem = private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        ).decode("utf-8")

        public_bytes = public_key.public_bytes(
            encoding=serialization.Encoding.X962,
            format=serialization.PublicFormat.UncompressedPoint,
        )

        private_value = private_key.private_numbers().private_value
        private_bytes = private_value.to_bytes(32, byteorder="big")

        return {
            "success": True,
            "public_key": bytes_to_url_base64(public_bytes),
            "private_key": bytes_to_url_base64(private_bytes),
            "private_key_pem": private_pem,
        }
    except Exception as e:
        return {"success": False, "error": str(e)}


def get_vapid_keys() -> dict:
    """
    Get the server's VAPID key pair.

    Returns:
        {"public_key": str, "private_key": str, "subject": str, "generated": bool}

    Raises:
        ValueError: Configured keys are too short to be real VAPID keys
    """
    global _generated_keys

    config = _load_vapid_config()
    public_key = config["public_key"]
    private_key = config["private_key"]

    if public_key and private_key:
        if len(public_key) < MIN_KEY_LENGTH or len(private_key) < MIN_KEY_LENGTH:
            logger.error(
                "vapid_keys_invalid",
                public_length=len(public_key),
                private_length=len(private_key),
            )
            raise ValueError(
                "Configured VAPID keys are not valid. "
                "Generate new keys with: alienfood generate-keys"
            )
        return {
            "public_key": public_key,
            "private_key": private_key,
            "subject": config["subject"],
            "generated": False,
        }

    if _generated_keys is None:
        result = generate_vapid_keys()
        if not result["success"]:
            raise ValueError(f"Could not generate VAPID keys: {result['error']}")
        logger.warning(
            "vapid_keys_generated_in_memory",
            note="keys change on restart; set VAPID_PUBLIC_KEY and VAPID_PRIVATE_KEY",
        )
        _generated_keys = {
            "public_key": result["public_key"],
            "private_key": result["private_key"],
        }

    return {**_generated_keys, "subject": config["subject"], "generated": True}


def get_vapid_public_key() -> str:
    """The public key string (URL-safe base64) clients subscribe with."""
    return get_vapid_keys()["public_key"]


def get_vapid_claims() -> dict[str, str]:
    """VAPID claims for pywebpush."""
    return {"sub": _load_vapid_config()["subject"]}


def has_configured_keys() -> bool:
    """Whether a persistent key pair is configured (not generated in memory)."""
    config = _load_vapid_config()
    return bool(config["public_key"] and config["private_key"])


# CLI interface
if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="VAPID key tools")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("generate-keys", help="Generate VAPID key pair")
    subparsers.add_parser("get-public-key", help="Get VAPID public key")

    args = parser.parse_args()

    if args.command == "generate-keys":
        result = generate_vapid_keys()
        if result["success"]:
            print("VAPID Keys Generated Successfully")
            print("-" * 40)
            print(f"Public Key:  {result['public_key']}")
            print(f"Private Key: {result['private_key']}")
            print("-" * 40)
            print("\nAdd to your .env file:")
            print(f"VAPID_PUBLIC_KEY={result['public_key']}")
            print(f"VAPID_PRIVATE_KEY={result['private_key']}")
            print(f"VAPID_SUBJECT={DEFAULT_SUBJECT}")
        else:
            print(f"Error: {result['error']}")

    elif args.command == "get-public-key":
        print(f"VAPID Public Key: {get_vapid_public_key()}")

    else:
        parser.print_help()
