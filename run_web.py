#!/usr/bin/env python3
"""
Minimal web server for the asset identity API
"""

import logging
import os

from flask import Flask

from asset_identity.api import assets_bp


def create_app() -> Flask:
    app = Flask(__name__)
    app.register_blueprint(assets_bp)
    return app


if __name__ == '__main__':
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    create_app().run(host='0.0.0.0', port=int(os.getenv("PORT", "8000")), debug=False)
