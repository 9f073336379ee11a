import uvicorn

from cherrypick.core.config import settings


def main() -> None:
    uvicorn.run("cherrypick.main:app", host="0.0.0.0", port=settings.api_port)


if __name__ == "__main__":
    main()
