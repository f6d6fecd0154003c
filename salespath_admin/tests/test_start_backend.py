import uvicorn

from salespath_admin import start_backend


def test_main_runs_uvicorn_with_app_path(monkeypatch):
    calls = {}

    def fake_run(app, **kwargs):
        calls["app"] = app
        calls.update(kwargs)

    monkeypatch.setattr(uvicorn, "run", fake_run)
    monkeypatch.setenv("PORT", "9100")

    start_backend.main()

    assert calls["app"] == "salespath_admin.main:app"
    assert calls["port"] == 9100
    assert calls["reload"] is False
