import threading
import time
import unittest

from s3_folders.batch import run_batch


class RunBatchTests(unittest.TestCase):
    def test_results_keep_input_order(self):
        def worker(value):
            time.sleep(0.001 * (5 - value))
            return value * 10

        results, cancelled = run_batch(range(5), worker, lambda value: None, max_workers=4)

        self.assertEqual([0, 10, 20, 30, 40], results)
        self.assertFalse(cancelled)

    def test_concurrency_is_bounded(self):
        lock = threading.Lock()
        state = {"active": 0, "peak": 0}

        def worker(value):
            with lock:
                state["active"] += 1
                state["peak"] = max(state["peak"], state["active"])
            time.sleep(0.005)
            with lock:
                state["active"] -= 1
            return value

        run_batch(range(12), worker, lambda value: None, max_workers=3)

        self.assertLessEqual(state["peak"], 3)

    def test_cancellation_maps_unstarted_items(self):
        seen = []

        def cancel_requested():
            return len(seen) >= 2

        def worker(value):
            seen.append(value)
            return "done"

        results, cancelled = run_batch(
            ["a", "b", "c", "d"],
            worker,
            lambda value: "cancelled",
            max_workers=1,
            cancel_requested=cancel_requested,
        )

        self.assertEqual(["done", "done", "cancelled", "cancelled"], results)
        self.assertTrue(cancelled)

    def test_empty_input(self):
        self.assertEqual(([], False), run_batch([], lambda value: value, lambda value: value))


if __name__ == "__main__":
    unittest.main()
