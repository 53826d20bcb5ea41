import json
import logging

import pytest

from plan_access.errors import RuleSetLoadError, RuleSetValidationError
from plan_access.loader import RuleSetLoader, parse_rule_set
from plan_access.rules import RedirectScenario

from conftest import SAMPLE_RULES_PATH


def _write(tmp_path, payload, name="rules.json"):
    path = tmp_path / name
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


MINIMAL = {
    "routes": {
        "protected": [{"path": "/dashboard", "requiredPlans": []}],
        "public": ["/"],
    },
    "plans": {"free": {"name": "Free", "priority": 1, "features": ["core"], "permissions": ["read"]}},
    "contentGating": {"features": {"core": ["free"]}},
}


def test_sample_rules_file_loads_cleanly():
    loader = RuleSetLoader(str(SAMPLE_RULES_PATH))
    rule_set = loader.rule_set

    assert loader.validation_errors == []
    assert [r.path for r in rule_set.protected_routes] == [
        "/dashboard",
        "/profile",
        "/premium",
        "/analytics",
        "/admin",
        "/settings",
    ]
    assert rule_set.get_plan("pln_enterprise").allows_all_routes is True
    assert rule_set.get_plan("pln_premium").priority == 2
    assert rule_set.components["AnalyticsDashboard"].fallback_component == "BasicAnalytics"
    assert rule_set.get_feature_plans("advanced-analytics") == ("pln_premium", "pln_enterprise")
    assert rule_set.redirect_url(RedirectScenario.PLAN_REQUIRED) == "/pricing"
    assert rule_set.settings.redirect_delay == 100


def test_parse_minimal_rule_set_applies_defaults():
    rule_set = parse_rule_set(MINIMAL)

    assert rule_set.protected_routes[0].required_plans == ()
    assert rule_set.protected_routes[0].allow_unauthenticated is False
    assert rule_set.redirect_url(RedirectScenario.UNAUTHENTICATED) == "/login"
    assert rule_set.redirect_url(RedirectScenario.AFTER_LOGOUT) == "/"
    assert rule_set.settings.enable_debug_mode is False
    assert rule_set.get_plan("free").name == "Free"


def test_plan_id_comes_from_mapping_key():
    payload = json.loads(json.dumps(MINIMAL))
    payload["plans"]["free"]["id"] = "something_else"

    assert parse_rule_set(payload).get_plan("free") is not None


def test_missing_plans_rejected():
    with pytest.raises(RuleSetLoadError) as exc:
        parse_rule_set({"routes": {}})

    assert exc.value.error_code == "RULE_SET_LOAD_FAILED"
    assert exc.value.to_dict()["source"] == "<memory>"


def test_empty_plans_rejected():
    with pytest.raises(RuleSetLoadError, match="at least one plan"):
        parse_rule_set({"plans": {}})


def test_blank_route_path_rejected():
    payload = json.loads(json.dumps(MINIMAL))
    payload["routes"]["protected"] = [{"path": "   "}]

    with pytest.raises(RuleSetLoadError):
        parse_rule_set(payload)


def test_non_object_rejected():
    with pytest.raises(RuleSetLoadError):
        parse_rule_set(["not", "an", "object"])


def test_loader_missing_file(tmp_path):
    with pytest.raises(RuleSetLoadError) as exc:
        RuleSetLoader(str(tmp_path / "missing.json"))

    assert "missing.json" in exc.value.source


def test_loader_invalid_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(RuleSetLoadError):
        RuleSetLoader(str(path))


def test_loader_top_level_must_be_object(tmp_path):
    path = _write(tmp_path, [1, 2, 3])

    with pytest.raises(RuleSetLoadError, match="top-level object"):
        RuleSetLoader(str(path))


def test_loader_warns_on_validation_errors(tmp_path, caplog):
    payload = json.loads(json.dumps(MINIMAL))
    payload["routes"]["protected"].append({"path": "/vault", "requiredPlans": ["ghost"]})
    path = _write(tmp_path, payload)

    with caplog.at_level(logging.WARNING, logger="plan_access.loader"):
        loader = RuleSetLoader(str(path), strict=False)

    assert loader.validation_errors == ["Route /vault references non-existent plan: ghost"]
    assert loader.rule_set.is_protected_route("/vault")
    assert any(r.getMessage() == "Rule set validation errors" for r in caplog.records)


def test_loader_strict_mode_raises(tmp_path):
    payload = json.loads(json.dumps(MINIMAL))
    payload["routes"]["redirects"] = {"unauthenticated": "login"}
    path = _write(tmp_path, payload)

    with pytest.raises(RuleSetValidationError) as exc:
        RuleSetLoader(str(path), strict=True)

    assert exc.value.errors == ["Invalid redirect path: login (must start with /)"]
    assert exc.value.to_dict()["error"] == "RULE_SET_INVALID"


def test_loader_strict_mode_from_environment(tmp_path, monkeypatch):
    payload = json.loads(json.dumps(MINIMAL))
    payload["contentGating"]["features"]["core"] = ["ghost"]
    path = _write(tmp_path, payload)
    monkeypatch.setenv("PLAN_ACCESS_STRICT_VALIDATION", "true")

    with pytest.raises(RuleSetValidationError):
        RuleSetLoader(str(path))


def test_loader_path_from_environment(tmp_path, monkeypatch):
    path = _write(tmp_path, MINIMAL, name="env_rules.json")
    monkeypatch.setenv("PLAN_ACCESS_RULES_PATH", str(path))

    loader = RuleSetLoader()

    assert loader.config_path == path
    assert loader.rule_set.get_plan("free") is not None


def test_reload_swaps_whole_rule_set(tmp_path):
    path = _write(tmp_path, MINIMAL)
    loader = RuleSetLoader(str(path))
    original = loader.rule_set

    payload = json.loads(json.dumps(MINIMAL))
    payload["plans"]["pro"] = {"name": "Pro", "priority": 2}
    path.write_text(json.dumps(payload), encoding="utf-8")
    reloaded = loader.reload()

    assert reloaded is loader.rule_set
    assert reloaded.get_plan("pro") is not None
    assert original.get_plan("pro") is None


def test_failed_reload_keeps_previous_rule_set(tmp_path):
    path = _write(tmp_path, MINIMAL)
    loader = RuleSetLoader(str(path))
    original = loader.rule_set

    path.write_text("{broken", encoding="utf-8")
    with pytest.raises(RuleSetLoadError):
        loader.reload()

    assert loader.rule_set is original


def test_settings_timing_values_pass_through():
    payload = json.loads(json.dumps(MINIMAL))
    payload["settings"] = {"sessionTimeout": 60, "redirectDelay": 250, "cacheExpiry": 10}

    settings = parse_rule_set(payload).settings

    assert (settings.session_timeout, settings.redirect_delay, settings.cache_expiry) == (60, 250, 10)


def test_fractional_plan_priority_accepted():
    payload = json.loads(json.dumps(MINIMAL))
    payload["plans"]["plus"] = {"name": "Plus", "priority": 1.5}

    rule_set = parse_rule_set(payload)

    assert rule_set.get_plan("plus").priority == 1.5
    assert rule_set.get_plan("free").priority == 1
