from __future__ import annotations

from boxlink.adapters.list_store_memory import InMemoryListStore
from boxlink.adapters.list_store_rest import ListStoreRestAdapter
from boxlink.app.controller import AppController, default_store_factory
from boxlink.viewmodels.settings_vm import SettingsVM


def test_ensure_ready_wires_usecases_with_demo_store() -> None:
    controller = AppController(SettingsVM())

    assert controller.ensure_ready() is True
    assert isinstance(controller.store, InMemoryListStore)
    assert controller.uc_load_pipelines is not None
    assert controller.uc_link_email is not None
    assert controller.uc_create_box is not None
    assert controller.uc_create_pipeline is not None
    assert [p.title for p in controller.uc_load_pipelines()] == ["Partnerships", "Sales"]


def test_default_factory_builds_rest_adapter_for_site() -> None:
    settings = SettingsVM()
    settings.apply_dict(
        {"site_url": "https://tenant.example.com/sites/crm", "access_token": "t", "request_timeout_s": 9}
    )

    adapter = default_store_factory(settings)

    assert isinstance(adapter, ListStoreRestAdapter)
    assert adapter.site_url == "https://tenant.example.com/sites/crm"
    assert adapter.cfg.request_timeout_s == 9
    assert adapter.cfg.access_token == "t"


def test_invalid_settings_keep_controller_unready() -> None:
    settings = SettingsVM()
    settings.site_url = "tenant.example.com"

    controller = AppController(settings)

    assert controller.ensure_ready() is False
    assert controller.store is None


def test_reset_rebuilds_from_current_settings() -> None:
    built = []

    def factory(settings: SettingsVM) -> InMemoryListStore:
        store = InMemoryListStore()
        built.append(store)
        return store

    controller = AppController(SettingsVM(), store_factory=factory)
    controller.ensure_ready()
    controller.ensure_ready()
    controller.reset()

    assert controller.uc_load_boxes is None
    controller.ensure_ready()
    assert len(built) == 2
    assert controller.store is built[-1]
