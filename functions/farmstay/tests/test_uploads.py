import unittest
from unittest.mock import MagicMock

from farmstay.db import InMemoryDbClient
from farmstay.storage import InMemoryStorageClient, StorageError
from farmstay.types import UploadStatus
from farmstay.uploads import UploadJobList, process_job, storage_path_for, title_from_filename


class UploadJobListTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient()
        self.storage = InMemoryStorageClient()
        self.jobs = UploadJobList()

    def test_add_files_stages_pending_jobs(self):
        staged = self.jobs.add_files(
            [("lawn.jpg", b"abc", "image/jpeg"), ("bar", b"", None)], "Lawn"
        )
        self.assertEqual(len(staged), 2)
        self.assertEqual(staged[0].status, UploadStatus.PENDING)
        self.assertEqual(staged[0].progress, 0)
        self.assertEqual(staged[0].size, 3)
        self.assertEqual(staged[1].title, "bar")
        self.assertEqual(len(staged[0].id), 9)
        self.assertIs(self.jobs.get(staged[1].id), staged[1])
        self.assertIsNone(self.jobs.get("missing"))

    def test_start_all_uploads_and_records_images(self):
        self.jobs.add_files([("lawn.jpg", b"abc", "image/jpeg")], "Lawn")
        processed = self.jobs.start_all(self.db, self.storage, "gallery")

        job = processed[0]
        self.assertEqual(job.status, UploadStatus.COMPLETED)
        self.assertEqual(job.progress, 100)
        self.assertEqual(job.data, b"")
        self.assertEqual(job.image["title"], "lawn")
        self.assertEqual(job.image["category"], "Lawn")
        path = job.image["storage_path"]
        self.assertEqual(self.storage.get_bytes("gallery", path), b"abc")
        self.assertEqual(job.image["url"], self.storage.public_url("gallery", path))

        # A second run has nothing left to do.
        self.assertEqual(self.jobs.start_all(self.db, self.storage, "gallery"), [])

    def test_failed_upload_is_marked_error(self):
        failing = MagicMock()
        failing.upload_bytes.side_effect = StorageError("bucket missing")
        self.jobs.add_files(
            [("a.jpg", b"1", "image/jpeg"), ("b.jpg", b"2", "image/jpeg")], "Rooms"
        )
        processed = self.jobs.start_all(self.db, failing, "gallery")

        self.assertEqual([j.status for j in processed], [UploadStatus.ERROR, UploadStatus.ERROR])
        self.assertEqual(processed[0].error, "bucket missing")
        self.assertEqual(processed[0].progress, 0)
        self.assertEqual(self.db.select("gallery_images"), [])

    def test_clear_finished_keeps_pending(self):
        self.jobs.add_files([("a.jpg", b"1", None)], "Rooms")
        done = self.jobs.start_all(self.db, self.storage, "gallery")
        self.jobs.add_files([("b.jpg", b"2", None)], "Rooms")
        self.assertEqual(self.jobs.clear_finished(), 1)
        remaining = self.jobs.list()
        self.assertEqual(len(remaining), 1)
        self.assertNotEqual(remaining[0].id, done[0].id)
        self.assertEqual(remaining[0].status, UploadStatus.PENDING)

    def test_failed_job_releases_bytes_and_clears(self):
        failing = MagicMock()
        failing.upload_bytes.side_effect = StorageError("bucket missing")
        self.jobs.add_files([("a.jpg", b"x" * 1_000_000, "image/jpeg")], "Rooms")
        job = self.jobs.start_all(self.db, failing, "gallery")[0]

        self.assertEqual(job.status, UploadStatus.ERROR)
        self.assertEqual(job.data, b"")
        self.assertEqual(job.size, 1_000_000)
        self.assertEqual(self.jobs.start_all(self.db, failing, "gallery"), [])

        self.assertEqual(self.jobs.clear_finished(), 1)
        self.assertEqual(self.jobs.list(), [])

    def test_process_job_records_db_failure(self):
        job = self.jobs.add_files([("a.jpg", b"1", None)], "Rooms")[0]
        db = MagicMock()
        db.insert.side_effect = RuntimeError()
        process_job(job, db=db, storage=self.storage, bucket="gallery")
        self.assertEqual(job.status, UploadStatus.ERROR)
        self.assertEqual(job.error, "RuntimeError")


class UploadHelperTests(unittest.TestCase):
    def test_title_from_filename(self):
        self.assertEqual(title_from_filename("sunset.view.jpg"), "sunset")
        self.assertEqual(title_from_filename("noext"), "noext")

    def test_storage_path_for(self):
        path = storage_path_for("Photo.JPG")
        self.assertTrue(path.startswith("gallery/"))
        self.assertTrue(path.endswith(".jpg"))
        self.assertTrue(storage_path_for("noext").endswith(".bin"))
        self.assertNotEqual(storage_path_for("a.jpg"), storage_path_for("a.jpg"))


if __name__ == "__main__":
    unittest.main()
