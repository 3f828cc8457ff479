"""
Command-line interface for the HTTP Signing SDK
Signs requests described on the command line and inspects private keys
"""

import argparse
import json
import os
import sys
from typing import Dict, List, Optional

import requests

from . import __version__
from .config import ENV_KEY_PASSPHRASE, configure_logging, load_config_from_file, LoggingConfig
from .crypto.keys import ECKeyMaterial, load_private_key, detect_key_type
from .exceptions import HttpSigningError, ConfigurationError
from .signing.http_signer import HttpSigner
from .signing.integration import descriptor_from_prepared_request
from .signing.signing_config import create_signing_config, list_signing_profiles
from .signing.types import HashAlgorithm, SigningAlgorithm


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog='httpsig-cli',
        description='hs2019 HTTP request signing command-line interface'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'HTTP Signing Python SDK {__version__}'
    )

    parser.add_argument(
        '--log-level',
        default='WARNING',
        help='SDK log level (default: WARNING)'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    setup_sign_parser(subparsers)
    setup_inspect_key_parser(subparsers)

    return parser


def _add_key_arguments(parser):
    parser.add_argument('--key-file', help='Path to the PEM private key')
    parser.add_argument(
        '--passphrase',
        help=f'Key passphrase (prefer the {ENV_KEY_PASSPHRASE} environment variable)'
    )


def setup_sign_parser(subparsers):
    """Setup sign subcommand."""
    sign_parser = subparsers.add_parser('sign', help='Sign a request and print the headers to send')
    sign_parser.add_argument('url', help='Full request URL including query string')
    sign_parser.add_argument('--method', '-X', default='GET', help='HTTP method (default: GET)')
    sign_parser.add_argument(
        '--header', '-H',
        action='append',
        default=[],
        help='Request header as "Name: value" (repeatable)'
    )
    sign_parser.add_argument('--data', '-d', help='Request body')
    sign_parser.add_argument('--config', help='JSON configuration file')
    sign_parser.add_argument('--key-id', help='Key identifier for the Authorization header')
    _add_key_arguments(sign_parser)
    sign_parser.add_argument(
        '--profile',
        choices=list_signing_profiles(),
        help='Signing header profile'
    )
    sign_parser.add_argument(
        '--signed-headers',
        help='Space separated list of headers to sign, e.g. "(request-target) (created) digest"'
    )
    sign_parser.add_argument(
        '--hash',
        choices=[a.value for a in HashAlgorithm],
        help='Hash algorithm (default: SHA-256)'
    )
    sign_parser.add_argument(
        '--algorithm',
        choices=[a.value for a in SigningAlgorithm],
        help='RSA signing algorithm (default: PKCS1-v15)'
    )
    sign_parser.add_argument('--validity', type=int, help='Signature validity in seconds')
    sign_parser.add_argument('--created', type=int, help='Fixed (created) timestamp')
    sign_parser.add_argument(
        '--show-canonical',
        action='store_true',
        help='Include the canonical signing string in the output'
    )


def setup_inspect_key_parser(subparsers):
    """Setup inspect-key subcommand."""
    inspect_parser = subparsers.add_parser('inspect-key', help='Show private key type and size')
    _add_key_arguments(inspect_parser)


def _parse_headers(raw_headers: List[str]) -> Dict[str, str]:
    headers = {}
    for raw in raw_headers:
        name, sep, value = raw.partition(':')
        if not sep or not name.strip():
            raise ConfigurationError(f"Invalid header: {raw!r}", "INVALID_HEADER")
        headers[name.strip()] = value.strip()
    return headers


def _passphrase_from_args(args) -> Optional[str]:
    return args.passphrase or os.environ.get(ENV_KEY_PASSPHRASE) or None


def _signing_config_from_args(args):
    if args.config:
        return load_config_from_file(args.config).signing

    if not args.key_id or not args.key_file:
        raise ConfigurationError(
            "Either --config or both --key-id and --key-file are required",
            "INVALID_CONFIG"
        )

    builder = create_signing_config()
    if args.profile:
        builder.profile(args.profile)
    builder.key_id(args.key_id).key_file(args.key_file, _passphrase_from_args(args))
    if args.signed_headers:
        builder.headers(args.signed_headers.split())
    if args.hash:
        builder.hash_algorithm(args.hash)
    if args.algorithm:
        builder.signing_algorithm(args.algorithm)
    if args.validity is not None:
        builder.validity_period(args.validity)
    return builder.build()


def handle_sign_command(args) -> int:
    """Handle request signing."""
    config = _signing_config_from_args(args)

    prepared = requests.Request(
        method=args.method.upper(),
        url=args.url,
        headers=_parse_headers(args.header),
        data=args.data
    ).prepare()
    descriptor = descriptor_from_prepared_request(prepared)

    result = HttpSigner(config).sign_request(descriptor, timestamp=args.created)

    output = {'headers': result.headers}
    if args.show_canonical:
        output['canonical_string'] = result.canonical_string
    print(json.dumps(output, indent=2))
    return 0


def handle_inspect_key_command(args) -> int:
    """Handle key inspection."""
    if not args.key_file:
        print("Error: --key-file is required", file=sys.stderr)
        return 1

    key_type = detect_key_type(args.key_file)
    material = load_private_key(args.key_file, _passphrase_from_args(args))

    info = {
        'path': args.key_file,
        'armor': key_type.value,
        'key_size': material.key_size,
    }
    if isinstance(material, ECKeyMaterial):
        info['type'] = 'EC'
        info['curve'] = material.curve.name
    else:
        info['type'] = 'RSA'
    print(json.dumps(info, indent=2))
    return 0


def main(argv: Optional[list] = None) -> int:
    """
    Main entry point for the CLI

    Args:
        argv: Command line arguments (None to use sys.argv)

    Returns:
        int: Exit code (0 for success, non-zero for failure)
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        configure_logging(LoggingConfig(level=args.log_level))

        if args.command == 'sign':
            return handle_sign_command(args)
        elif args.command == 'inspect-key':
            return handle_inspect_key_command(args)
        else:
            parser.print_help()
            return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled by user", file=sys.stderr)
        return 130
    except HttpSigningError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
