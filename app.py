"""Application entry point for the salon booking scheduling API."""

from salonbook.webapp import create_app

app = create_app()


if __name__ == "__main__":
    app.run(debug=True)
