"""Command-line shell over the folder operations; prints JSON."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Optional

from .controller import S3FoldersController
from .errors import S3FoldersError
from .models import BucketConfig

LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="s3-folders",
        description="Folder-style operations on S3-compatible buckets",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("buckets", help="List saved bucket configurations")

    add = commands.add_parser("add-bucket", help="Save a bucket configuration")
    add.add_argument("name", help="Bucket name")
    add.add_argument("--display-name", default="")
    add.add_argument("--region", default="us-east-1")
    add.add_argument("--endpoint")
    add.add_argument("--access-key", default="")
    add.add_argument("--secret-key", default="")
    add.add_argument("--aws-profile")

    remove = commands.add_parser("remove-bucket", help="Delete a saved bucket configuration")
    remove.add_argument("bucket_id")

    ls = commands.add_parser("ls", help="List folders and files under a prefix")
    ls.add_argument("bucket_id")
    ls.add_argument("prefix", nargs="?", default="")

    rm = commands.add_parser("rm", help="Delete an object, or a folder when the key ends with '/'")
    rm.add_argument("bucket_id")
    rm.add_argument("key")

    stat = commands.add_parser("stat", help="Show object metadata")
    stat.add_argument("bucket_id")
    stat.add_argument("key")

    upload = commands.add_parser("upload", help="Upload files and directories")
    upload.add_argument("bucket_id")
    upload.add_argument("files", nargs="+")
    upload.add_argument("--base-path", default="")
    upload.add_argument("--prefix", default="", help="Destination prefix")

    count = commands.add_parser("count", help="Count the files an upload would send")
    count.add_argument("files", nargs="+")

    mv = commands.add_parser("mv", help="Rename an object or a folder")
    mv.add_argument("bucket_id")
    mv.add_argument("old_key")
    mv.add_argument("new_key")
    mv.add_argument("--folder", action="store_true", help="Treat the keys as folder prefixes")

    mkdir = commands.add_parser("mkdir", help="Create a folder marker")
    mkdir.add_argument("bucket_id")
    mkdir.add_argument("folder")

    commands.add_parser("profiles", help="List named AWS profiles")

    profile_buckets = commands.add_parser("profile-buckets", help="List buckets visible to a profile")
    profile_buckets.add_argument("profile")
    return parser


def _run(args: argparse.Namespace, controller: S3FoldersController) -> object:
    if args.command == "buckets":
        return [bucket.to_dict(include_secret=False) for bucket in controller.get_buckets()]
    if args.command == "add-bucket":
        bucket = BucketConfig(
            id="",
            name=args.name,
            display_name=args.display_name,
            region=args.region,
            endpoint=args.endpoint,
            access_key=args.access_key,
            secret_key=args.secret_key,
            aws_profile=args.aws_profile,
        )
        return [item.to_dict(include_secret=False) for item in controller.add_bucket(bucket)]
    if args.command == "remove-bucket":
        return [item.to_dict(include_secret=False) for item in controller.delete_bucket_config(args.bucket_id)]
    if args.command == "ls":
        return [entry.to_dict() for entry in controller.list_objects(args.bucket_id, args.prefix)]
    if args.command == "rm":
        return controller.delete_object(args.bucket_id, args.key).to_dict()
    if args.command == "stat":
        return controller.get_object_metadata(args.bucket_id, args.key).to_dict()
    if args.command == "upload":
        return controller.upload_files(
            bucket_id=args.bucket_id,
            files=args.files,
            base_path=args.base_path,
            current_path=args.prefix,
        ).to_dict()
    if args.command == "count":
        return controller.count_files(args.files)
    if args.command == "mv":
        return controller.rename_object(
            bucket_id=args.bucket_id,
            old_key=args.old_key,
            new_key=args.new_key,
            is_folder=args.folder,
        ).to_dict()
    if args.command == "mkdir":
        return {"key": controller.create_folder(args.bucket_id, args.folder)}
    if args.command == "profiles":
        profiles = controller.list_aws_profiles()
        for profile in profiles:
            profile.status = controller.validate_aws_profile(profile.name)
        return [profile.to_dict() for profile in profiles]
    if args.command == "profile-buckets":
        return [bucket.to_dict() for bucket in controller.get_buckets_for_profile(args.profile)]
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[list[str]] = None, controller: S3FoldersController | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        controller = controller or S3FoldersController()
        result = _run(args, controller)
    except S3FoldersError as exc:
        LOGGER.debug("Command '%s' failed", args.command, exc_info=True)
        print(json.dumps({"error": type(exc).__name__, "message": str(exc)}), file=sys.stderr)
        return 1
    print(json.dumps(result, indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
