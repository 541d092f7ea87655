"""Run the companion form endpoint (GET / and POST /submit)."""

from form_collector import config
from form_collector.endpoint import create_app

app = create_app()


if __name__ == "__main__":
    print(f"Server running at http://localhost:{config.ENDPOINT_PORT}")
    app.run(host=config.ENDPOINT_HOST, port=config.ENDPOINT_PORT)
