import logging

from fastapi import FastAPI

import stylestudio.routers.api as images_router
from stylestudio.config import LOG_LEVEL, SERVER_HOST, SERVER_PORT


def configure_logging():
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app() -> FastAPI:

    configure_logging()
    app = FastAPI(title="Character Style Studio API")

    from fastapi.middleware.cors import CORSMiddleware

    app.add_middleware(
        CORSMiddleware,
        # In production, replace with the studio frontend's domain
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(images_router.get_router(), prefix="/api")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=SERVER_HOST, port=SERVER_PORT)
