#!/usr/bin/env python3
"""
Alien Food Push Command Line Interface

Main entry point for the `alienfood` command.

Usage:
    alienfood generate-keys                 # Generate a VAPID key pair
    alienfood public-key                    # Print the active VAPID public key
    alienfood subscriptions --user-id ana   # List stored subscriptions
    alienfood send --title T --message M    # Broadcast a notification
    alienfood serve                         # Start the backend server
    alienfood --version                     # Show version
"""

import argparse
import asyncio
import json
import sys


def cmd_generate_keys(args):
    """Generate a VAPID key pair and print it as environment variables."""
    from alienfood.push.vapid import generate_vapid_keys

    result = generate_vapid_keys()
    if not result["success"]:
        print(f"Error: {result['error']}")
        return 1

    if args.json:
        print(json.dumps({
            "public_key": result["public_key"],
            "private_key": result["private_key"],
        }, indent=2))
        return

    print("Add these to your .env file:")
    print(f"VAPID_PUBLIC_KEY={result['public_key']}")
    print(f"VAPID_PRIVATE_KEY={result['private_key']}")


def cmd_public_key(args):
    """Print the VAPID public key the backend hands out."""
    from alienfood.push.vapid import get_vapid_public_key

    try:
        print(get_vapid_public_key())
    except ValueError as e:
        print(f"Error: {e}")
        return 1


def cmd_subscriptions(args):
    """List stored subscriptions."""
    from alienfood.push.subscription_store import (
        get_all_subscriptions,
        get_user_subscriptions,
    )

    if args.user_id:
        subscriptions = asyncio.run(get_user_subscriptions(args.user_id))
    else:
        subscriptions = asyncio.run(get_all_subscriptions())

    if not subscriptions:
        print("No subscriptions")
        return

    for sub in subscriptions:
        print(f"{sub['user_id']}  {sub['endpoint'][:60]}...  (updated {sub['updated_at']})")


def cmd_send(args):
    """Send a notification to one user or everyone."""
    from alienfood.push.web_push import send_notification

    result = asyncio.run(send_notification(
        title=args.title,
        message=args.message,
        user_id=args.user_id,
        url=args.url,
    ))

    if not result["success"]:
        print(f"Failed to send: {result['error']}")
        return 1

    if result.get("queued"):
        print("User has no subscription; notification saved for later")
    else:
        print(f"Sent: {result['sent']}, failed: {result['failed']}")


def cmd_serve(args):
    """Handle serve subcommand."""
    import uvicorn

    host = args.host or "0.0.0.0"
    port = args.port or 5000

    print(f"Starting Alien Food Push backend at http://{host}:{port}")
    print("Press Ctrl+C to stop")

    uvicorn.run(
        "alienfood.backend.main:app",
        host=host,
        port=port,
        reload=args.reload,
        log_level="info",
    )


def cmd_version(args):
    """Show version information."""
    try:
        from importlib.metadata import version

        v = version("alienfood")
    except Exception:
        v = "0.1.0 (development)"

    print(f"Alien Food Push version {v}")


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="alienfood",
        description="Alien Food Push - Web Push notifications for the storefront",
    )
    parser.add_argument(
        "--version", "-V", action="store_true", help="Show version and exit"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    keys_parser = subparsers.add_parser("generate-keys", help="Generate a VAPID key pair")
    keys_parser.add_argument("--json", action="store_true", help="Output as JSON")
    keys_parser.set_defaults(func=cmd_generate_keys)

    public_parser = subparsers.add_parser("public-key", help="Print the VAPID public key")
    public_parser.set_defaults(func=cmd_public_key)

    subs_parser = subparsers.add_parser("subscriptions", help="List stored subscriptions")
    subs_parser.add_argument("--user-id", "-u", help="Only this user's subscriptions")
    subs_parser.set_defaults(func=cmd_subscriptions)

    send_parser = subparsers.add_parser("send", help="Send a notification")
    send_parser.add_argument("--title", "-t", required=True, help="Notification title")
    send_parser.add_argument("--message", "-m", required=True, help="Notification body")
    send_parser.add_argument("--user-id", "-u", default="all", help="Target user (default: all)")
    send_parser.add_argument("--url", default="/", help="URL opened on click")
    send_parser.set_defaults(func=cmd_send)

    serve_parser = subparsers.add_parser("serve", help="Start the backend server")
    serve_parser.add_argument(
        "--host", default="0.0.0.0", help="Host to bind to (default: 0.0.0.0)"
    )
    serve_parser.add_argument(
        "--port", type=int, default=5000, help="Port to bind to (default: 5000)"
    )
    serve_parser.add_argument(
        "--reload", action="store_true", help="Enable auto-reload for development"
    )
    serve_parser.set_defaults(func=cmd_serve)

    args = parser.parse_args(argv)

    # Handle --version at top level
    if args.version:
        cmd_version(args)
        return

    # If no command given, show help
    if not args.command:
        parser.print_help()
        return

    from alienfood.logging_config import setup_logging

    setup_logging()

    result = args.func(args)

    # Commands may return an exit code
    if isinstance(result, int) and result != 0:
        sys.exit(result)


if __name__ == "__main__":
    main()
