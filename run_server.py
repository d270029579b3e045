import copy
import logging.config
from pathlib import Path

import uvicorn
from uvicorn.config import LOGGING_CONFIG

try:
    from config import SERVER_HOST, SERVER_PORT
except ImportError:  # pragma: no cover
    SERVER_HOST, SERVER_PORT = "0.0.0.0", 8100

custom_logging = copy.deepcopy(LOGGING_CONFIG)
log_format = "%(asctime)s | %(levelprefix)s %(name)s | %(message)s"
custom_logging["formatters"]["default"]["fmt"] = log_format
custom_logging["formatters"]["access"]["fmt"] = (
    "%(asctime)s | %(levelprefix)s %(client_addr)s - \"%(request_line)s\" %(status_code)s"
)
custom_logging["formatters"]["default"]["datefmt"] = "%Y-%m-%d %H:%M:%S"
custom_logging["formatters"]["access"]["datefmt"] = "%Y-%m-%d %H:%M:%S"
# Route application loggers through uvicorn's default handler
custom_logging["loggers"][""] = {"handlers": ["default"], "level": "INFO"}

PROJECT_ROOT = Path(__file__).resolve().parent
DATA_DIRECTORIES = (
    "data",
    "data/web",
)

reload_excludes = [
    pattern
    for directory in DATA_DIRECTORIES
    for pattern in (
        directory,
        f"{directory}/*",
        f"{directory}/**/*",
    )
]
# Settings publication writes *.filepart siblings before renaming
reload_excludes.extend(["*.json", "*.filepart", "*.log"])

if __name__ == "__main__":
    logging.config.dictConfig(custom_logging)
    uvicorn.run(
        "services.webapp.main:app",
        host=SERVER_HOST,
        port=SERVER_PORT,
        reload=True,
        reload_dirs=[str(PROJECT_ROOT)],
        reload_excludes=reload_excludes,
        log_config=None,
        server_header=False,
    )
