import io
import os
import sqlite3
import datetime
import tempfile
import unittest
from contextlib import redirect_stderr

from angle_log import AngleRecorder


def fixed_clock():
    return datetime.datetime(2024, 3, 5, 14, 7, 9)


class TestAngleRecorder(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.db_path = os.path.join(self.tmp.name, "motor.db")
        self.recorder = AngleRecorder(self.db_path, clock=fixed_clock)

    def tearDown(self):
        self.tmp.cleanup()

    def rows(self):
        conn = sqlite3.connect(self.db_path)
        try:
            return conn.execute("SELECT ID, Angle, Time FROM motor ORDER BY ID").fetchall()
        finally:
            conn.close()

    def test_timestamp_format(self):
        self.assertEqual(self.recorder.timestamp(), "2024-03-05 14:07:09")

    def test_creates_table_and_appends(self):
        self.assertTrue(self.recorder.append(90))
        self.assertEqual(self.rows(), [(1, 90, "2024-03-05 14:07:09")])

    def test_one_row_per_append(self):
        self.recorder.append(45)
        self.recorder.append(45)
        self.recorder.append(0)
        self.assertEqual([angle for _, angle, _ in self.rows()], [45, 45, 0])
        self.assertEqual([row_id for row_id, _, _ in self.rows()], [1, 2, 3])

    def test_open_failure_is_swallowed(self):
        recorder = AngleRecorder(self.tmp.name, clock=fixed_clock)  # a directory
        err = io.StringIO()
        with redirect_stderr(err):
            self.assertFalse(recorder.append(10))
        self.assertIn("Database error", err.getvalue())

    def test_bad_schema_is_swallowed(self):
        conn = sqlite3.connect(self.db_path)
        conn.execute("CREATE TABLE motor (ID INTEGER PRIMARY KEY, Speed INT)")
        conn.commit()
        conn.close()

        err = io.StringIO()
        with redirect_stderr(err):
            self.assertFalse(self.recorder.append(10))
        self.assertIn("Database error", err.getvalue())

    def test_default_clock_is_local_time(self):
        recorder = AngleRecorder(self.db_path)
        stamp = recorder.timestamp()
        parsed = datetime.datetime.strptime(stamp, "%Y-%m-%d %H:%M:%S")
        self.assertLess(abs((datetime.datetime.now() - parsed).total_seconds()), 5)


if __name__ == "__main__":
    unittest.main()
