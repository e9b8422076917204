"""ASGI entrypoint: `uvicorn folio.api.main:app`."""

import logging

import uvicorn
from dotenv import load_dotenv

from ..models import AppConfig
from .app import create_app

load_dotenv()

config = AppConfig()

logging.basicConfig(
    level=config.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = create_app(config)


def main():
    uvicorn.run(app, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
