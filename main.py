import logging

import uvicorn

from autoorganize.app import create_app
from autoorganize.config import Settings

settings = Settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

# Main FastAPI instance (uvicorn main:app)
app = create_app(settings)

if __name__ == "__main__":
    uvicorn.run(app, host="127.0.0.1", port=8000)
