"""
chainprim command-line tool

Decode and hash encoded blocks, headers, digests and storage proofs.

    chainprim genesis-hash
    chainprim hash <header-hex>
    chainprim decode {header,block,digest,proof} <hex>
"""

from __future__ import annotations
import argparse
import json
import logging
import sys
from typing import List, Optional

from chainprim import __version__
from chainprim.config import ChainPrimConfig, setup_logging
from chainprim.constants import HASH_BACKENDS
from chainprim.core.block import Block, Header
from chainprim.core.digest import Digest
from chainprim.core.proof import StorageProof
from chainprim.errors import ChainPrimError, InvalidConfigError

logger = logging.getLogger(__name__)

DECODERS = {
    "header": Header.decode,
    "block": Block.decode,
    "digest": Digest.decode,
    "proof": StorageProof.decode,
}


def parse_hex(value: str) -> bytes:
    """Parse hex input, with or without 0x prefix."""
    value = value.strip()
    if value.startswith(("0x", "0X")):
        value = value[2:]
    try:
        return bytes.fromhex(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a hex string: {value[:32]}") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chainprim",
        description="Inspect canonically encoded block primitives",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", metavar="PATH", help="JSON configuration file")
    parser.add_argument("--hash-backend", choices=HASH_BACKENDS, help="Hash primitive binding")
    parser.add_argument("--log-level", metavar="LEVEL", help="Logging level (e.g. DEBUG)")

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("genesis-hash", help="Hash of the all-zero genesis header")

    hash_cmd = commands.add_parser("hash", help="Block hash of an encoded header")
    hash_cmd.add_argument("data", type=parse_hex, help="Encoded header (hex)")

    decode_cmd = commands.add_parser("decode", help="Decode and print as JSON")
    decode_cmd.add_argument("kind", choices=sorted(DECODERS))
    decode_cmd.add_argument("data", type=parse_hex, help="Encoded value (hex)")

    return parser


def load_config(args: argparse.Namespace) -> ChainPrimConfig:
    config = ChainPrimConfig.load(args.config) if args.config else ChainPrimConfig()
    if args.hash_backend:
        config.hash.backend = args.hash_backend
    if args.log_level:
        config.log.level = args.log_level

    errors = config.validate()
    if errors:
        raise InvalidConfigError(errors)
    return config


def run(args: argparse.Namespace, config: ChainPrimConfig) -> None:
    hasher = config.hasher()

    if args.command == "genesis-hash":
        print(Header.genesis().block_hash(hasher).hex())
    elif args.command == "hash":
        header = Header.decode(args.data)
        print(header.block_hash(hasher).hex())
    elif args.command == "decode":
        value = DECODERS[args.kind](args.data)
        output = value.to_dict()
        if isinstance(value, (Header, Block)):
            output["block_hash"] = value.block_hash(hasher).hex()
        print(json.dumps(output, indent=2))


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args)
    except ChainPrimError as e:
        print(json.dumps({"error": e.to_dict()}), file=sys.stderr)
        return 2
    except (OSError, json.JSONDecodeError) as e:
        error = InvalidConfigError([f"cannot read {args.config}: {e}"])
        print(json.dumps({"error": error.to_dict()}), file=sys.stderr)
        return 2

    setup_logging(config.log)

    try:
        run(args, config)
    except ChainPrimError as e:
        logger.debug(f"{args.command} failed: {e}")
        print(json.dumps({"error": e.to_dict()}), file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
