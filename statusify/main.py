"""Entry: start API server; the now-playing poller runs inside it."""
import logging
import uvicorn

from statusify.config import API_HOST, API_PORT

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    uvicorn.run(
        "statusify.api.app:app",
        host=API_HOST,
        port=API_PORT,
    )
