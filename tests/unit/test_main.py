"""Test the agent runner."""

from idchain_agent.agent.__main__ import main


def test_main_serves_app(monkeypatch):
    calls = []
    monkeypatch.setattr(
        "uvicorn.run", lambda app, **kwargs: calls.append((app, kwargs))
    )
    monkeypatch.setenv("PORT", "9090")
    monkeypatch.delenv("HOST", raising=False)

    main()

    assert calls == [
        (
            "idchain_agent.agent.app:app",
            {"host": "0.0.0.0", "port": 9090, "log_config": None},
        )
    ]
