from fastapi.testclient import TestClient

from vcpu_balancer.main import api, start_api_thread

client = TestClient(api)


def test_healthz():
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_metrics_exposes_counters():
    response = client.get("/metrics")
    assert response.status_code == 200
    body = response.text
    for name in ("scheduler_cycles_total", "override_triggers_total", "pin_changes_total", "max_core_usage_percent"):
        assert f"\n{name} " in body


def test_api_thread_disabled_without_port():
    assert start_api_thread(port=0) is None
