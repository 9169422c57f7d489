import unittest
from datetime import datetime, timezone

from s3_fakes import FakeS3Client, client_error, factory_for
from s3_folders.aws_profiles import AwsProfileManager
from s3_folders.models import PROFILE_EXPIRED, PROFILE_INVALID, PROFILE_UNKNOWN, PROFILE_VALID


class FailingListClient(FakeS3Client):
    def __init__(self, error):
        super().__init__()
        self.error = error

    def list_buckets(self):
        raise self.error


class AwsProfileManagerTests(unittest.TestCase):
    def test_list_profiles_reads_shared_config(self):
        config = {"profiles": {"default": {"region": "eu-west-1"}, "dev": {}}}
        manager = AwsProfileManager(config_loader=lambda: config)

        profiles = manager.list_profiles()

        self.assertEqual([("default", "eu-west-1"), ("dev", None)], [(p.name, p.region) for p in profiles])
        self.assertEqual("unknown", profiles[0].status)

    def test_list_profiles_without_config(self):
        self.assertEqual([], AwsProfileManager(config_loader=dict).list_profiles())

    def test_validate_profile_statuses(self):
        cases = [
            (None, PROFILE_VALID),
            (client_error("ExpiredToken", "ListBuckets"), PROFILE_EXPIRED),
            (client_error("InvalidAccessKeyId", "ListBuckets"), PROFILE_INVALID),
            (client_error("AccessDenied", "ListBuckets"), PROFILE_INVALID),
            (client_error("InternalError", "ListBuckets"), PROFILE_UNKNOWN),
        ]
        for error, expected in cases:
            with self.subTest(expected=expected, error=error):
                client = FakeS3Client() if error is None else FailingListClient(error)
                calls = []
                manager = AwsProfileManager(client_factory=factory_for(client, calls))

                self.assertEqual(expected, manager.validate_profile("dev"))
                self.assertEqual("dev", calls[0][1]["profile_name"])

    def test_buckets_for_profile_sorted_with_regions(self):
        created = datetime(2023, 5, 1, tzinfo=timezone.utc)
        client = FakeS3Client(
            buckets=["zeta", "alpha", "mid"],
            locations={
                "zeta": "ap-south-1",
                "alpha": None,
                "mid": client_error("AccessDenied", "GetBucketLocation"),
            },
        )
        client.list_buckets = lambda: {
            "Buckets": [{"Name": name, "CreationDate": created} for name in ("zeta", "alpha", "mid")]
        }
        manager = AwsProfileManager(client_factory=factory_for(client))

        buckets = manager.buckets_for_profile("dev")

        self.assertEqual(
            [("alpha", "us-east-1"), ("mid", "us-east-1"), ("zeta", "ap-south-1")],
            [(bucket.name, bucket.region) for bucket in buckets],
        )
        self.assertEqual(created.isoformat(), buckets[0].to_dict()["creationDate"])


if __name__ == "__main__":
    unittest.main()
