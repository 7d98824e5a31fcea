"""
Flask application serving the fixed greeting.

Only ``GET /`` is registered. Every other path or method gets Flask's default
response (404 or 405).
"""
from flask import Flask, Response

from .config import s


def create_app(greeting=None):
    """Create the Flask app. ``greeting`` defaults to the configured language's text."""
    text = greeting if greeting is not None else s.GREETING
    app = Flask(__name__)

    @app.route('/', methods=['GET'])
    def index():
        return Response(text, status=200, mimetype='text/plain')

    return app
