import uvicorn

from muchtodo.config import ConfigError, load_config
from muchtodo.main import create_app


def main():
    """Loads the configuration once and serves the API on the configured port."""
    config = load_config()
    try:
        port = int(config.server_port)
    except ValueError as e:
        raise ConfigError(f"PORT must be a number, got {config.server_port!r}") from e
    uvicorn.run(create_app(config), host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
