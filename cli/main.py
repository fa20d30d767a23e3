"""CLI entry point and argument parsing"""

import sys
import argparse
import secrets
from rich.console import Console

from cli.status_display import show_config
from cli.state_commands import decode_state_command, encode_state_command


console = Console()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="GitHub App login gateway CLI")
    parser.add_argument("--debug", "-d", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command")

    serve = subparsers.add_parser("serve", help="Run the gateway server (default)")
    serve.add_argument("--bind", "-b", default=None, help="Override bind address (default: from config)")
    serve.add_argument("--port", "-p", type=int, default=None, help="Override port (default: from config)")

    subparsers.add_parser("gen-secret", help="Print a random value for ENCRYPTION_SECRET")
    subparsers.add_parser("config", help="Show the effective non-secret configuration")

    state = subparsers.add_parser("state", help="Mint or inspect state tokens with the configured secret")
    state_sub = state.add_subparsers(dest="state_command", required=True)
    encode = state_sub.add_parser("encode", help="Encrypt a payload into a state token")
    encode.add_argument("payload", help="Payload to encrypt (return URL or token)")
    encode.add_argument("--ttl", type=int, default=0, help="Validity in seconds (0 = no expiry)")
    decode = state_sub.add_parser("decode", help="Decrypt a state token")
    decode.add_argument("token", help="State token to decrypt")

    return parser


def main(argv=None):
    """Entry point for the CLI"""
    parser = build_parser()
    args = parser.parse_args(argv)
    command = args.command or "serve"

    try:
        if command == "gen-secret":
            console.print(secrets.token_urlsafe(48))
        elif command == "config":
            show_config(console)
        elif command == "state":
            if args.state_command == "encode":
                sys.exit(encode_state_command(console, args.payload, args.ttl))
            sys.exit(decode_state_command(console, args.token))
        else:
            from proxy import GatewayServer

            server = GatewayServer(
                debug=args.debug,
                bind_address=getattr(args, "bind", None),
                port=getattr(args, "port", None),
            )
            server.run()

    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        console.print("Goodbye!")
    except ValueError as e:
        # Configuration problems (missing secrets, empty allowlist)
        console.print(f"\n[red]Configuration error:[/red] {e}")
        if args.debug:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
