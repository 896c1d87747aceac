import uvicorn

from student_records.core.config import settings


def main():
    uvicorn.run(
        "student_records.main:create_app",
        factory=True,
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
