"""
Serve the challenge API.

Usage:
    python -m magic_lens.scripts.run_api            # seeds the default catalogue if empty
    DB_PATH=/tmp/ml.db API_PORT=9000 python -m magic_lens.scripts.run_api
"""

import logging

import uvicorn

from magic_lens import config
from magic_lens.services.api import create_app
from magic_lens.services.store import ChallengeStore


def main():
    logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    store = ChallengeStore(config.DB_PATH)
    added = store.seed_defaults()
    if added:
        print(f"Seeded {added} default challenges into {config.DB_PATH}")
    print(f"magic-lens api starting on http://{config.API_HOST}:{config.API_PORT}")
    uvicorn.run(create_app(store), host=config.API_HOST, port=config.API_PORT)


if __name__ == "__main__":
    main()
