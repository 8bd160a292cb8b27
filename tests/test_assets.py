import json

import pytest

import assets

# Elm loader selection and compiled-pack URL resolution.
pytestmark = pytest.mark.assets


def test_production_rule_uses_plain_elm_loader(tmp_path):
    rule = assets.elm_loader_rule("production", tmp_path)

    assert rule["test"] == r"\.elm(\.erb)?$"
    assert rule["exclude"] == ["elm-stuff", "node_modules"]
    assert rule["use"] == [
        {
            "loader": "elm-webpack-loader",
            "options": {
                "cwd": str(tmp_path),
                "pathToElm": str(tmp_path / "node_modules" / ".bin" / "elm"),
            },
        }
    ]


def test_development_rule_adds_hot_loader_and_debug_options(tmp_path):
    rule = assets.elm_loader_rule("development", tmp_path)

    assert [step["loader"] for step in rule["use"]] == ["elm-hot-loader", "elm-webpack-loader"]
    options = rule["use"][1]["options"]
    assert options["verbose"] is True
    assert options["debug"] is True


def test_is_production_reads_node_env(monkeypatch):
    monkeypatch.setenv("NODE_ENV", "production")
    assert assets.is_production() is True
    monkeypatch.delenv("NODE_ENV")
    assert assets.is_production() is False
    assert assets.is_production(" Production ") is True
    assert assets.is_production("test") is False


def test_pack_url_prefers_manifest_entry(tmp_path):
    manifest_path = tmp_path / "manifest.json"
    manifest_path.write_text(
        json.dumps({"hello_elm.js": "/packs/hello_elm-3f2a1c.js"}), encoding="utf-8"
    )
    manifest = assets.load_manifest(manifest_path)

    assert assets.pack_url("hello_elm", manifest) == "/packs/hello_elm-3f2a1c.js"
    assert assets.pack_url("other", manifest) == "/static/packs/other.js"
    assert assets.pack_url("other", prefix="/assets/") == "/assets/other.js"


def test_load_manifest_missing_file_is_empty(tmp_path):
    assert assets.load_manifest(tmp_path / "nope.json") == {}
    assert assets.load_manifest(None) == {}


def test_elm_loader_cli_prints_rule(app, tmp_path):
    app.config.update(NODE_ENV="production", ELM_SOURCE=str(tmp_path))

    result = app.test_cli_runner().invoke(args=["elm-loader"])

    assert result.exit_code == 0
    assert json.loads(result.output) == assets.elm_loader_rule("production", tmp_path)


def test_pack_tag_uses_configured_manifest(fake_store, tmp_path):
    from board import create_app

    manifest_path = tmp_path / "manifest.json"
    manifest_path.write_text(json.dumps({"hello_elm.js": "/packs/hello_elm-abc.js"}), encoding="utf-8")
    app = create_app(
        test_config={"TESTING": True, "PACKS_MANIFEST": str(manifest_path)},
        list_messages_fn=fake_store.list_messages,
    )

    page = app.test_client().get("/").get_data(as_text=True)

    assert '<script src="/packs/hello_elm-abc.js" defer></script>' in page
