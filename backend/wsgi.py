"""
Entry point for the Pillgraph backend.
Run with: python wsgi.py
"""

from app.config import Config
from app.main import create_app

app = create_app()

if __name__ == "__main__":
    app.run(host="127.0.0.1", port=Config.PORT, debug=app.config.get("DEBUG", False))
