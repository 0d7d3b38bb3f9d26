"""Run the streamgate gateway with uvicorn."""

import uvicorn

from .config import config
from .api import app


def main():
    settings = config["settings"]
    host = settings.get("host", "0.0.0.0")
    port = settings.get("port", 5000)

    print(f"Running streamgate on http://localhost:{port}")
    print(f"Available models: {', '.join(app.state.registry)}")

    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
