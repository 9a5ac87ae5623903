from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path

from bucketfs.adapter import BucketStorageAdapter
from bucketfs.errors import ConfigurationError, FileNotFound, StorageFailure
from bucketfs.factory import SUPPORTED_BACKENDS, create_adapter, load_backend_config_from_env
from bucketfs.options import (
    AdapterOptions,
    load_options_from_env,
    load_options_from_yaml,
    parse_acl,
)

logger = logging.getLogger(__name__)


def _split_pairs(values: list[str] | None) -> dict[str, str]:
    pairs: dict[str, str] = {}
    for raw in values or []:
        name, sep, value = raw.partition("=")
        if not sep or not name.strip():
            raise ConfigurationError(f"Expected name=value, got: {raw}")
        pairs[name.strip()] = value
    return pairs


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bucketfs", description="Key-addressed access to an object-store bucket."
    )
    parser.add_argument("--bucket", type=str, default=None)
    parser.add_argument("--backend", choices=SUPPORTED_BACKENDS, default=None)
    parser.add_argument("--directory", type=str, default=None)
    parser.add_argument(
        "--acl", action="append", default=None, help="grantee=role, repeatable"
    )
    parser.add_argument("--options-file", type=Path, default=None)
    parser.add_argument("-v", "--verbose", action="store_true")

    sub = parser.add_subparsers(dest="command", required=True)

    ls = sub.add_parser("ls", help="list keys")
    ls.add_argument("prefix", nargs="?", default=None)

    cat = sub.add_parser("cat", help="print an object's content")
    cat.add_argument("key")

    put = sub.add_parser("put", help="upload a local file ('-' for stdin)")
    put.add_argument("key")
    put.add_argument("source")

    rm = sub.add_parser("rm", help="delete a key")
    rm.add_argument("key")

    mv = sub.add_parser("mv", help="rename a key")
    mv.add_argument("source_key")
    mv.add_argument("target_key")

    stat = sub.add_parser("stat", help="show existence, directory flag and mtime")
    stat.add_argument("key")

    meta = sub.add_parser("meta", help="show metadata, or replace it with name=value pairs")
    meta.add_argument("key")
    meta.add_argument("pairs", nargs="*")
    return parser


def _options_from_args(args: argparse.Namespace) -> AdapterOptions:
    if args.options_file is not None:
        options = load_options_from_yaml(args.options_file)
    else:
        options = load_options_from_env()

    overrides: dict[str, object] = {}
    if args.directory is not None:
        overrides["directory"] = args.directory
    if args.acl:
        overrides["acl"] = parse_acl(",".join(args.acl))
    if not overrides:
        return options
    return AdapterOptions.from_mapping(options.merged(overrides).as_dict())


def _adapter_from_args(args: argparse.Namespace) -> BucketStorageAdapter:
    env = dict(os.environ)
    if args.bucket:
        env["BUCKETFS_BUCKET"] = args.bucket
    if args.backend:
        env["BUCKETFS_BACKEND"] = args.backend
    config = load_backend_config_from_env(env)
    return create_adapter(config, _options_from_args(args))


def _read_source(source: str) -> bytes:
    if source == "-":
        return sys.stdin.buffer.read()
    return Path(source).read_bytes()


def run(args: argparse.Namespace, adapter: BucketStorageAdapter) -> int:
    if args.command == "ls":
        for key in adapter.list_keys(args.prefix):
            print(key)
    elif args.command == "cat":
        content = adapter.read(args.key)
        sys.stdout.flush()
        sys.stdout.buffer.write(content)
        sys.stdout.buffer.flush()
    elif args.command == "put":
        adapter.write(args.key, _read_source(args.source))
    elif args.command == "rm":
        adapter.delete(args.key)
    elif args.command == "mv":
        adapter.rename(args.source_key, args.target_key)
    elif args.command == "stat":
        exists = adapter.exists(args.key)
        print(f"exists={str(exists).lower()}")
        print(f"directory={str(adapter.is_directory(args.key)).lower()}")
        if exists:
            print(f"mtime={adapter.mtime(args.key)}")
    elif args.command == "meta":
        if args.pairs:
            adapter.set_metadata(args.key, _split_pairs(args.pairs))
        else:
            print(json.dumps(adapter.get_metadata(args.key), sort_keys=True))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        adapter = _adapter_from_args(args)
        return run(args, adapter)
    except ConfigurationError as exc:
        print(f"bucketfs: configuration error: {exc}", file=sys.stderr)
        return 2
    except FileNotFound as exc:
        print(f"bucketfs: {exc}", file=sys.stderr)
        return 1
    except StorageFailure as exc:
        logger.debug("storage failure", exc_info=exc)
        print(f"bucketfs: {exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"bucketfs: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
