import os
import tempfile
import unittest
from pathlib import Path

from s3_fakes import FakeS3Client, client_error, factory_for
from s3_folders.gateway import ObjectGateway
from s3_folders.keys import KeyResolver
from s3_folders.models import BucketConfig, Complete, Partial
from s3_folders.uploader import BulkUploader, walk_files


def make_uploader(client, **kwargs):
    config = BucketConfig(id="b1", name="bucket-one", access_key="a", secret_key="s")
    return BulkUploader(ObjectGateway(config, client_factory=factory_for(client)), **kwargs)


def build_tree(root: Path, files: dict[str, bytes]) -> None:
    for relative, body in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(body)


TREE = {
    "a.txt": b"alpha",
    "sub/b.json": b"{}",
    "sub/deeper/c.bin": b"\x00\x01",
    "sub/deeper/report.js.map": b"{}",
    "z/d.csv": b"1,2",
}


class BulkUploaderTests(unittest.TestCase):
    def test_tree_upload_with_base_path_preserves_structure(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp) / "tree"
            build_tree(root, TREE)
            client = FakeS3Client({})

            result = make_uploader(client).upload([str(root)], str(root), "incoming")

            expected = {f"incoming/{relative}" for relative in TREE}
            self.assertEqual(expected, {item.key for item in result.uploaded})
            self.assertEqual(len(TREE), len(result.uploaded))
            self.assertEqual([], result.failed)
            self.assertEqual(len(TREE), result.total)
            self.assertEqual({key: len(TREE[key[len("incoming/"):]]) for key in expected}, client.sizes())
            self.assertEqual(f"Successfully uploaded {len(TREE)} file(s)", result.message)
            self.assertEqual(Complete(succeeded=len(TREE)), result.outcome)

    def test_uploads_use_destination_content_type(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            build_tree(root, TREE)
            client = FakeS3Client({})

            make_uploader(client, max_workers=1).upload([str(root)], str(root), "")

            types = {call["Key"]: call["ContentType"] for call in client.put_calls}
            self.assertEqual("application/json", types["sub/deeper/report.js.map"])
            self.assertEqual("application/json", types["sub/b.json"])
            self.assertEqual("text/plain", types["a.txt"])

    def test_missing_file_is_recorded_and_others_continue(self):
        with tempfile.TemporaryDirectory() as tmp:
            existing = Path(tmp) / "present.txt"
            existing.write_bytes(b"here")
            missing = Path(tmp) / "absent.txt"
            client = FakeS3Client({})

            result = make_uploader(client).upload([str(existing), str(missing)], tmp, "")

            self.assertEqual(2, result.total)
            self.assertEqual(["present.txt"], [item.key for item in result.uploaded])
            self.assertEqual(4, result.uploaded[0].size)
            self.assertEqual(1, len(result.failed))
            self.assertEqual(str(missing), result.failed[0].key)
            self.assertEqual("File does not exist", result.failed[0].error)
            self.assertEqual(0, result.failed[0].size)
            self.assertEqual("failed", result.failed[0].status)
            self.assertEqual("Uploaded 1 file(s), 1 failed", result.message)
            payload = result.to_dict()
            self.assertEqual(2, payload["totalFiles"])
            self.assertEqual("Uploaded 1 file(s), 1 failed", payload["message"])
            self.assertEqual("completed", payload["uploadedFiles"][0]["status"])

    def test_provider_failures_do_not_stop_siblings(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            build_tree(root, TREE)
            client = FakeS3Client({}, put_errors={"sub/b.json": client_error("AccessDenied", "PutObject")})

            result = make_uploader(client, max_workers=3).upload([str(root)], str(root), "")

            self.assertEqual(["sub/b.json"], [item.key for item in result.failed])
            self.assertEqual(len(TREE) - 1, result.succeeded)
            self.assertEqual(f"Uploaded {len(TREE) - 1} file(s), 1 failed", result.message)
            self.assertEqual(Partial(succeeded=len(TREE) - 1, failed=1), result.outcome)

    def test_all_failed_message(self):
        result = make_uploader(FakeS3Client({})).upload(["/does/not/exist", "/nor/this"], "", "")

        self.assertEqual("Failed to upload all 2 file(s)", result.message)
        self.assertEqual(Partial(succeeded=0, failed=2), result.outcome)

    @unittest.skipUnless(hasattr(os, "mkfifo"), "FIFOs unavailable")
    def test_special_file_input_is_recorded_without_reading(self):
        with tempfile.TemporaryDirectory() as tmp:
            fifo = Path(tmp) / "pipe"
            os.mkfifo(fifo)
            regular = Path(tmp) / "a.txt"
            regular.write_bytes(b"a")
            client = FakeS3Client({})

            result = make_uploader(client).upload([str(fifo), str(regular)], tmp, "")

            self.assertEqual(["a.txt"], [item.key for item in result.uploaded])
            self.assertEqual([str(fifo)], [item.key for item in result.failed])
            self.assertEqual("Not a regular file or directory", result.failed[0].error)
            self.assertEqual(["a.txt"], [call["Key"] for call in client.put_calls])
            self.assertEqual(1, BulkUploader.count_files([str(fifo), str(regular)]))

    def test_count_matches_upload_accounting(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            build_tree(root, TREE)
            client = FakeS3Client({}, put_errors={"z/d.csv": client_error("InternalError", "PutObject")})

            count = BulkUploader.count_files([str(root)])
            result = make_uploader(client).upload([str(root)], str(root), "p")

            self.assertEqual(len(TREE), count)
            self.assertEqual(count, len(result.uploaded) + len(result.failed))

    def test_count_files_has_no_side_effects_and_skips_missing(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            build_tree(root, {"a": b"", "d/b": b""})

            self.assertEqual(3, BulkUploader.count_files([str(root), str(root / "a"), str(root / "nope")]))

    def test_drag_and_drop_uses_heuristic_keys(self):
        with tempfile.TemporaryDirectory() as tmp:
            folder = Path(tmp) / "Documents" / "project"
            build_tree(folder, {"x.txt": b"x", "lib/y.txt": b"y"})
            client = FakeS3Client({})

            result = make_uploader(client).upload([str(folder)], "", "drop")

            self.assertEqual(
                ["drop/project/lib/y.txt", "drop/project/x.txt"],
                sorted(item.key for item in result.uploaded),
            )

    def test_custom_resolver_is_used(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "shared" / "team" / "notes.md"
            build_tree(Path(tmp), {"shared/team/notes.md": b"#"})
            uploader = make_uploader(FakeS3Client({}), resolver=KeyResolver(("shared",), 2))

            result = uploader.upload([str(path)], "", "")

            self.assertEqual(["team/notes.md"], [item.key for item in result.uploaded])

    def test_cancellation_marks_remaining_files(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            build_tree(root, TREE)
            uploader = make_uploader(FakeS3Client({}), max_workers=1, cancel_requested=lambda: True)

            result = uploader.upload([str(root)], str(root), "")

            self.assertEqual(0, result.succeeded)
            self.assertTrue(all(item.error == "Operation cancelled" for item in result.failed))
            self.assertEqual("Operation cancelled", result.outcome.reason)


class WalkFilesTests(unittest.TestCase):
    def test_walk_is_depth_first_in_name_order(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            build_tree(root, TREE)

            paths = [item.path for item in walk_files([str(root)])]

            relative = [os.path.relpath(path, tmp).replace(os.sep, "/") for path in paths]
            self.assertEqual(
                ["a.txt", "sub/b.json", "sub/deeper/c.bin", "sub/deeper/report.js.map", "z/d.csv"],
                relative,
            )

    def test_empty_directory_yields_nothing(self):
        with tempfile.TemporaryDirectory() as tmp:
            self.assertEqual([], list(walk_files([tmp])))

    @unittest.skipUnless(hasattr(os, "symlink"), "symlinks unavailable")
    def test_symlink_cycles_are_not_followed_twice(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            build_tree(root, {"d/file.txt": b""})
            try:
                os.symlink(root / "d", root / "d" / "loop", target_is_directory=True)
            except OSError:
                self.skipTest("cannot create symlinks")

            items = list(walk_files([str(root)]))

            self.assertEqual(1, len(items))


if __name__ == "__main__":
    unittest.main()
