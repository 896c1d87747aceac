import logging

from student_records.core.config import settings
from student_records.core.database import Database
from student_records.models.student import Student

logger = logging.getLogger(__name__)

SAMPLE_STUDENTS = [
    {"name": "Alice Nguyen", "email": "alice@example.com", "course": "Computer Science"},
    {"name": "Bob Tran", "email": "bob@example.com", "course": "Mathematics"},
    {"name": "Carol Le", "email": "carol@example.com", "course": "Physics"},
]


def seed_data(database: Database) -> int:
    """
    Insert sample students into an empty table.

    Returns:
        int: number of students inserted (0 if data already exists)
    """
    db = database.SessionLocal()
    try:
        # Skip if there is data already, to avoid duplicates
        if db.query(Student).first():
            logger.info("Database already contains data. Skipping seed.")
            return 0

        logger.info("Seeding data...")
        db.add_all(Student(**fields) for fields in SAMPLE_STUDENTS)
        db.commit()

        logger.info(f"Seeded {len(SAMPLE_STUDENTS)} students")
        return len(SAMPLE_STUDENTS)
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    database = Database.from_settings(settings)
    if not database.try_connect():
        raise SystemExit("Cannot connect to database!")
    seed_data(database)
