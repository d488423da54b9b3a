"""Application module and factory"""
import importlib

import mtbm_api.main as main_module


def test_import_needs_no_environment(monkeypatch):
    monkeypatch.delenv("MONGODB_URI", raising=False)
    monkeypatch.delenv("JWT_SECRET", raising=False)

    module = importlib.reload(main_module)

    assert not hasattr(module, "app")
    assert callable(module.create_app)


def test_factory_keeps_injected_settings_and_database(settings, db):
    application = main_module.create_app(settings=settings, database=db)

    assert application.state.settings is settings
    assert application.state.db is db
    assert application.state.token_service is not None
