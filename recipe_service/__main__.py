import uvicorn

from recipe_service.core.config import settings


def main() -> None:
    uvicorn.run("recipe_service.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
