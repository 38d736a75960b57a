import sqlite3
import sys
import datetime
from contextlib import closing

import config

# ===== Angle Log =====
# One row per commanded angle in motor.db. The connection lives only for the
# duration of a single append.

CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS motor(
    ID INTEGER PRIMARY KEY AUTOINCREMENT,
    Angle INT NOT NULL,
    Time TEXT NOT NULL
)
"""

INSERT_SQL = "INSERT INTO motor (Angle, Time) VALUES (?, ?)"

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class AngleRecorder:
    def __init__(self, db_path=config.DB_PATH, clock=datetime.datetime.now):
        self.db_path = db_path
        self.clock = clock

    def timestamp(self):
        """Local wall-clock time, second resolution."""
        return self.clock().strftime(TIME_FORMAT)

    def append(self, angle):
        """Store one angle. Errors are reported on stderr and never raised."""
        stamp = self.timestamp()
        try:
            with closing(sqlite3.connect(self.db_path)) as conn:
                with conn:
                    conn.execute(CREATE_TABLE_SQL)
                    conn.execute(INSERT_SQL, (angle, stamp))
        except sqlite3.Error as e:
            print(f"Database error: {e}", file=sys.stderr)
            return False
        return True
