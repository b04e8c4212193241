#!/usr/bin/env python3
"""WSGI entry point: ``uwsgi --module server:application``."""

import logging

from bottle import run

from album.cli import setup_logging
from album.config import AlbumConfig
from album.web import make_app

config = AlbumConfig.from_env()
logger = setup_logging(config)

errors = config.validate()
if errors:
    for error in errors:
        logging.critical(error)
    raise SystemExit(1)

app = application = make_app(config, logger=logger)

if __name__ == '__main__':
    logger.info(f"Server started on port: {config.port}")
    run(app, host=config.host, port=config.port)
