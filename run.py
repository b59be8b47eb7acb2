"""Run the marketing site with the Flask development server."""
import os

from app import create_app

app = create_app(os.environ.get("APP_CONFIG", "app.config.Config"))

if __name__ == "__main__":
    app.run(
        host="0.0.0.0",
        port=int(os.environ.get("PORT", 5001)),
        debug=app.config["DEBUG"],
    )
