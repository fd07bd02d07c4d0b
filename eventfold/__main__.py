"""Run the server: python -m eventfold"""

import uvicorn

from eventfold.config import settings

uvicorn.run("eventfold.main:app", host=settings.host, port=settings.port, reload=settings.debug)
