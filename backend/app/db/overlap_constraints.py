"""PostgreSQL exclusion constraints that keep active schedules from overlapping.

No two active rows may share a teacher (or classroom), academic year and day
with intersecting ``[start, end)`` ranges. Shared by the Alembic migration and
the PostgreSQL test suite.
"""

INSTALL_STATEMENTS = (
    "CREATE EXTENSION IF NOT EXISTS btree_gist",
    "DO $$ BEGIN "
    "CREATE TYPE timerange AS RANGE (subtype = time); "
    "EXCEPTION WHEN duplicate_object THEN NULL; END $$",
    "ALTER TABLE schedules ADD CONSTRAINT ex_schedules_teacher_overlap "
    "EXCLUDE USING gist ("
    "teacher_id WITH =, academic_year WITH =, day_of_week WITH =, "
    "timerange(start_time, end_time, '[)') WITH &&"
    ") WHERE (is_active)",
    "ALTER TABLE schedules ADD CONSTRAINT ex_schedules_classroom_overlap "
    "EXCLUDE USING gist ("
    "classroom_id WITH =, academic_year WITH =, day_of_week WITH =, "
    "timerange(start_time, end_time, '[)') WITH &&"
    ") WHERE (is_active)",
)

DROP_STATEMENTS = (
    "ALTER TABLE schedules DROP CONSTRAINT IF EXISTS ex_schedules_classroom_overlap",
    "ALTER TABLE schedules DROP CONSTRAINT IF EXISTS ex_schedules_teacher_overlap",
)
