"""Run the agent."""

from os import getenv

import uvicorn


def main():
    """Serve the agent app."""
    uvicorn.run(
        "idchain_agent.agent.app:app",
        host=getenv("HOST", "0.0.0.0"),
        port=int(getenv("PORT", "8080")),
        log_config=None,
    )


if __name__ == "__main__":
    main()
