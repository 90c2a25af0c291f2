"""
Copyright (c) 2024 Aiven Ltd
See LICENSE for details

Manifest inspection utility. Allows to examine a backup manifest
(<backup>.meta) fetched from the backend storage.

"""

from graphbr.common.exceptions import ManifestException
from graphbr.common.metafile import read_backup_meta

import logging
import msgspec
import sys

logger = logging.getLogger(__name__)


def create_manifest_parsers(parser, subparsers):
    p_manifest = subparsers.add_parser("manifest", help="Examine backup manifests")
    manifest_subparsers = p_manifest.add_subparsers(title="Manifest commands")
    create_describe_parser(manifest_subparsers)
    create_dump_parser(manifest_subparsers)


def create_describe_parser(subparsers):
    p_describe = subparsers.add_parser("describe", help="Print summary of a backup manifest")
    p_describe.add_argument("manifest", type=str, help="Path to the manifest file")
    p_describe.set_defaults(func=_run_describe)


def create_dump_parser(subparsers):
    p_dump = subparsers.add_parser("dump", help="Dump contents of the manifest as JSON to standard output")
    p_dump.add_argument("manifest", type=str, help="Path to the manifest file")
    p_dump.set_defaults(func=_run_dump)


def _run_describe(args) -> bool:
    try:
        manifest = read_backup_meta(args.manifest)
    except (ManifestException, OSError) as ex:
        logger.error("Unable to read %s: %s", args.manifest, ex)
        return False
    print("Backup", manifest.backup_name)
    print("===============================")
    print(f"Meta files ({len(manifest.meta_files)}):")
    for meta_file in manifest.meta_files:
        print(f"  {meta_file}")
    for space_id in sorted(manifest.backup_info):
        cp_dirs = manifest.backup_info[space_id].cp_dirs
        print(f"Space #{space_id} has {len(cp_dirs)} checkpoints:")
        for cp_dir in cp_dirs:
            print(f"  {cp_dir.host}: {cp_dir.checkpoint_dir}")
    return True


def _run_dump(args) -> bool:
    try:
        manifest = read_backup_meta(args.manifest)
    except (ManifestException, OSError) as ex:
        logger.error("Unable to read %s: %s", args.manifest, ex)
        return False
    sys.stdout.buffer.write(msgspec.json.format(msgspec.json.encode(manifest), indent=2))
    print()
    return True
