import logging

from fastapi import FastAPI

from twister.api.routes import router
from twister.config import get_settings

app = FastAPI(title="keyboard-twister", version="0.1.0")
app.include_router(router)
# Configure logging
logging.basicConfig(level=get_settings().log_level)
