import logging

from fastapi import FastAPI

from photoframe import config
from photoframe.routers.photo import router as photo_router


def configure_logging(level: str = config.LOG_LEVEL) -> None:
	logging.basicConfig(
		level=getattr(logging, level.upper(), logging.INFO),
		format="%(asctime)s %(levelname)s %(name)s: %(message)s",
	)


def create_app() -> FastAPI:
	app = FastAPI(title="PhotoFrame - EXIF Caption API", version="0.1.0")
	app.include_router(photo_router)
	return app


app = create_app()


if __name__ == "__main__":
	# uvicorn photoframe.main:app --reload
	import uvicorn

	configure_logging()
	uvicorn.run("photoframe.main:app", host="127.0.0.1", port=8000, reload=True)
