"""Command-line entry point for dashguard.

Usage:
    dashguard <command> [args...]

Commands:
    hash-password [PASSWORD]   Print a password hash record for HANGFIRE_PASSWORD_PHC
    generate-credentials       Generate a random username/password and its hash record
    serve [--host H] [--port P]
                               Run the application with uvicorn
    help                       Show this help message
"""

from __future__ import annotations

import getpass
import logging
import sys

from dashguard.auth.credentials import generate_credentials, hash_password
from dashguard.config import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def cmd_help() -> int:
    """Show help message."""
    print(__doc__)
    return 0


def cmd_hash_password(password: str | None = None) -> int:
    """Print the hash record for a password, prompting if not given."""
    if password is None:
        password = getpass.getpass("Password: ")
        if password != getpass.getpass("Repeat password: "):
            print("Passwords do not match", file=sys.stderr)
            return 1

    if not password:
        print("Password must not be empty", file=sys.stderr)
        return 1

    print(hash_password(password))
    return 0


def cmd_generate_credentials() -> int:
    """Generate credentials and print them with the matching configuration."""
    username, password = generate_credentials()
    print("\n" + "=" * 60)
    print("Generated credentials (save these!):")
    print(f"  Username: {username}")
    print(f"  Password: {password}")
    print("=" * 60 + "\n")
    print(f"HANGFIRE_USERNAME={username}")
    print(f"HANGFIRE_PASSWORD_PHC={hash_password(password)}")
    return 0


def cmd_serve(host: str | None = None, port: int | None = None) -> int:
    """Run the application in the foreground."""
    import uvicorn

    settings = get_settings()
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)

    uvicorn.run(
        "dashguard.web.app:create_app",
        factory=True,
        host=host or settings.host,
        port=port or settings.port,
        log_level=settings.log_level.lower(),
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if not args:
        return cmd_help()

    command, rest = args[0], args[1:]

    match command:
        case "hash-password":
            return cmd_hash_password(rest[0] if rest else None)
        case "generate-credentials":
            return cmd_generate_credentials()
        case "serve":
            host = None
            port = None
            for i, arg in enumerate(rest):
                if arg == "--host" and i + 1 < len(rest):
                    host = rest[i + 1]
                elif arg == "--port" and i + 1 < len(rest):
                    try:
                        port = int(rest[i + 1])
                    except ValueError:
                        print(f"Invalid port: {rest[i + 1]}", file=sys.stderr)
                        return 1
            return cmd_serve(host=host, port=port)
        case "help" | "-h" | "--help":
            return cmd_help()
        case _:
            print(f"Unknown command: {command}", file=sys.stderr)
            cmd_help()
            return 1


if __name__ == "__main__":
    sys.exit(main())
