# tests/test_config.py
from __future__ import annotations

import gmpy2
import pytest

from bigfib import APPLY, CFG, DEFAULT_THRESHOLDS, Thresholds, UserInputError
from bigfib import config as CONFIG
from bigfib.dispatch import resolve_backend
from bigfib.runtime import current
from bigfib.workspace import ensure_workspace_seeded, seed_workspace, workspace_dir


def _write_profile(name: str, body: str) -> None:
    ensure_workspace_seeded()
    (workspace_dir() / "profiles" / f"{name}.toml").write_text(body, encoding="utf-8")


def test_workspace_follows_env(isolated_workspace):
    assert workspace_dir() == isolated_workspace.resolve()


def test_seed_copies_packaged_profiles():
    root, seeded, copied = ensure_workspace_seeded()
    assert seeded and copied >= 2
    assert (root / "profiles" / "default.toml").is_file()
    assert (root / "output").is_dir()
    # second run copies nothing, overwrite copies again
    assert ensure_workspace_seeded()[2] == 0
    assert seed_workspace(overwrite=True)[1] == copied


def test_default_profile_matches_builtin_defaults():
    ensure_workspace_seeded()
    settings = CONFIG.load_settings("default")
    assert settings.name == "default"
    assert "_PROFILE_" not in settings.data
    APPLY(settings)
    assert Thresholds.from_config() == DEFAULT_THRESHOLDS == Thresholds(100, 5504)
    assert CFG("ARITHMETIC.BACKEND") == "int"


def test_gmp_profile_selects_gmpy2_backend():
    ensure_workspace_seeded()
    APPLY(CONFIG.load_settings("gmp"))
    assert resolve_backend() is gmpy2.mpz
    assert current().profile_name == "gmp"


def test_list_profiles_with_descriptions():
    ensure_workspace_seeded()
    names = dict(CONFIG.list_profiles_with_descriptions())
    assert set(CONFIG.list_all_profiles()) >= {"default", "gmp"}
    assert names["default"].startswith("Reference crossover points")


def test_profile_without_metadata():
    _write_profile("bare", "[THRESHOLDS]\nSERIES_MAX = 150\n")
    settings = CONFIG.load_settings("bare")
    assert settings.name == "bare"
    assert settings.description == "(no description)"
    APPLY(settings)
    assert Thresholds.from_config() == Thresholds(150, 5504)


def test_missing_profile():
    ensure_workspace_seeded()
    assert not CONFIG.has_profile("nope")
    with pytest.raises(UserInputError, match="not found"):
        CONFIG.load_settings("nope")


def test_broken_toml_reports_location():
    _write_profile("broken", "[THRESHOLDS\nSERIES_MAX = 1\n")
    with pytest.raises(UserInputError, match=r"broken\.toml.*line 1"):
        CONFIG.load_settings("broken")


@pytest.mark.parametrize(
    "body,match",
    [
        ('[THRESHOLDS]\nSERIES_MAX = "100"\n', "bad.toml: threshold series_max must be an integer"),
        ("[THRESHOLDS]\nSERIES_MAX = true\n", "series_max must be an integer"),
        ("[THRESHOLDS]\nSERIES_MAX = 600\nBLENKINSOP_MAX = 500\n", r"series_max \(600\) exceeds"),
        ("[THRESHOLDS]\nBLENKINSOP_MAX = 50\n", r"series_max \(100\) exceeds"),
        ("THRESHOLDS = 5\n", r"\[THRESHOLDS\] must be a table"),
        ("[BENCHMARK]\nREPEAT = 0\n", "REPEAT must be an integer >= 1"),
        ("[BEHAVIOUR]\nMAX_DIGITS = -1\n", "MAX_DIGITS must be an integer >= 0"),
        ("BEHAVIOUR = []\n", r"\[BEHAVIOUR\] must be a table"),
    ],
    ids=["string", "bool", "order", "order-with-default", "not-a-table", "zero-repeat", "negative-digits", "behaviour-list"],
)
def test_invalid_profile_values(body, match):
    _write_profile("bad", body)
    with pytest.raises(UserInputError, match=match):
        CONFIG.load_settings("bad")


def test_current_profile_roundtrip():
    ensure_workspace_seeded()
    assert CONFIG.read_current_profile() is None
    CONFIG.write_current_profile("gmp.toml")
    assert CONFIG.read_current_profile() == "gmp"


@pytest.mark.parametrize(
    "kwargs,match",
    [
        ({"series_max": -1}, "series_max must be >= 0"),
        ({"blenkinsop_max": 2.5}, "blenkinsop_max must be an integer"),
        ({"series_max": 600, "blenkinsop_max": 500}, "exceeds"),
    ],
)
def test_invalid_thresholds(kwargs, match):
    with pytest.raises(UserInputError, match=match):
        Thresholds(**kwargs)


def test_thresholds_are_frozen():
    with pytest.raises(AttributeError):
        DEFAULT_THRESHOLDS.series_max = 5


def test_runtime_dotted_lookup_and_debug_flag():
    APPLY({"BEHAVIOUR": {"DEBUG": True, "MAX_DIGITS": 10}})
    rt = current()
    assert rt.debug is True
    assert CFG("BEHAVIOUR.MAX_DIGITS") == 10
    assert CFG("BEHAVIOUR.MISSING", "x") == "x"
    assert CFG("NOPE.DEEP.KEY") is None


def test_apply_settings_takes_profile_name_and_copies_data():
    data = {"THRESHOLDS": {"SERIES_MAX": 120}, "BEHAVIOUR": {"DEBUG": True}}
    APPLY(CONFIG.Settings(name="lab", description="x", data=data))
    rt = current()
    assert rt.profile_name == "lab"
    assert rt.debug is True
    data["ARITHMETIC"] = {"BACKEND": "gmpy2"}
    assert CFG("ARITHMETIC.BACKEND", "int") == "int"


def test_apply_plain_dict_is_unnamed_profile():
    APPLY(CONFIG.Settings(name="lab", description="x", data={}))
    APPLY({"THRESHOLDS": {"BLENKINSOP_MAX": 6000}})
    assert current().profile_name == "default"
    assert CFG("THRESHOLDS") == {"BLENKINSOP_MAX": 6000}
    # a scalar on the path stops the walk
    assert CFG("THRESHOLDS.BLENKINSOP_MAX.DEEP", 0) == 0
    assert Thresholds.from_config() == Thresholds(100, 6000)


def test_thresholds_from_section():
    assert Thresholds.from_section({}) == DEFAULT_THRESHOLDS
    assert Thresholds.from_section({"SERIES_MAX": 0, "BLENKINSOP_MAX": 0}) == Thresholds(0, 0)
    with pytest.raises(UserInputError, match="must be a table, got list"):
        Thresholds.from_section([1, 2])
