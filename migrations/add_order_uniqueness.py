"""
Migration: enforce unique ordering positions and one-row-per-pair tables.

- modules: unique (course_id, order_index)
- lessons: unique (module_id, order_index)
- quiz_questions: unique (quiz_id, order_index)
- user_lesson_progress: unique (user_id, lesson_id)
- enrollments: unique (user_id, course_id)

Databases created before these constraints may already hold duplicates; those
are reported and the index is not created until they are resolved by hand.
"""

import os
import sqlite3
from typing import Optional

INDEXES = [
    ("uq_modules_course_order", "modules", ("course_id", "order_index")),
    ("uq_lessons_module_order", "lessons", ("module_id", "order_index")),
    ("uq_quiz_questions_quiz_order", "quiz_questions", ("quiz_id", "order_index")),
    ("uq_user_lesson_progress", "user_lesson_progress", ("user_id", "lesson_id")),
    ("uq_enrollments_user_course", "enrollments", ("user_id", "course_id")),
]


def _default_db_path() -> str:
    return os.getenv("DATABASE_URL", "sqlite:///./learnpath.db").replace("sqlite:///", "")


def find_duplicates(cursor: sqlite3.Cursor, table: str, columns: tuple[str, ...]) -> list[tuple]:
    cols = ", ".join(columns)
    cursor.execute(f"SELECT {cols}, COUNT(*) FROM {table} GROUP BY {cols} HAVING COUNT(*) > 1")
    return cursor.fetchall()


def run_migration(db_path: Optional[str] = None) -> bool:
    """Returns True when every index exists afterwards."""
    db_path = db_path or _default_db_path()
    conn = None
    ok = True
    try:
        conn = sqlite3.connect(db_path)
        cursor = conn.cursor()

        for name, table, columns in INDEXES:
            cursor.execute("SELECT name FROM sqlite_master WHERE type='table' AND name=?", (table,))
            if not cursor.fetchone():
                print(f"{table} table not found. Skipping.")
                continue

            cursor.execute("SELECT name FROM sqlite_master WHERE type='index' AND name=?", (name,))
            if cursor.fetchone():
                print(f"{name} already exists. Skipping.")
                continue

            duplicates = find_duplicates(cursor, table, columns)
            if duplicates:
                ok = False
                print(f"✗ {table} has {len(duplicates)} duplicate {columns} group(s); not adding {name}:")
                for row in duplicates:
                    print(f"    {row[:-1]} x{row[-1]}")
                continue

            print(f"Adding {name} on {table}({', '.join(columns)})...")
            cursor.execute(f"CREATE UNIQUE INDEX {name} ON {table} ({', '.join(columns)})")

        conn.commit()
        if ok:
            print("✓ Migration add_order_uniqueness completed successfully!")
        return ok

    except sqlite3.Error as e:
        print(f"Error during migration: {e}")
        if conn:
            conn.rollback()
        return False
    finally:
        if conn:
            conn.close()


if __name__ == "__main__":
    raise SystemExit(0 if run_migration() else 1)
