import uvicorn

from project_api.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "project_api.app:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
