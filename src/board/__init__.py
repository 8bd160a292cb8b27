"""Flask application factory for the message board."""

import json
import os

from flask import Flask
from markupsafe import Markup, escape

import assets
from board import messages
from message_store import SORT_SPECS, create_db_if_not_exists, ensure_schema


def _resolve_sort(name):
    """Map a ``MESSAGE_SORT`` setting to its ``SortSpec``.

    :raises ValueError: For names outside ``SORT_SPECS``.
    """
    key = str(name).strip().lower()
    if key not in SORT_SPECS:
        choices = ", ".join(sorted(SORT_SPECS))
        raise ValueError(f"MESSAGE_SORT must be one of {choices}, got {name!r}")
    return SORT_SPECS[key]


def _register_pack_helper(app):
    """Expose ``javascript_pack_tag`` to templates."""

    def javascript_pack_tag(name):
        manifest = assets.load_manifest(app.config["PACKS_MANIFEST"])
        url = assets.pack_url(name, manifest, app.config["PACKS_PREFIX"])
        return Markup(f'<script src="{escape(url)}" defer></script>')

    app.jinja_env.globals["javascript_pack_tag"] = javascript_pack_tag


def _register_commands(app):
    @app.cli.command("init-db")
    def init_db_command():
        """Create the database and the messages table."""
        create_db_if_not_exists()
        ensure_schema()

    @app.cli.command("elm-loader")
    def elm_loader_command():
        """Print the Elm loader rule for the bundler config."""
        rule = assets.elm_loader_rule(app.config["NODE_ENV"], app.config["ELM_SOURCE"])
        print(json.dumps(rule, indent=2))


def create_app(
    *,
    test_config=None,
    create_message_fn=None,
    list_messages_fn=None,
):
    """Create and configure the Flask application.

    :param test_config: Optional config dictionary applied after defaults.
    :type test_config: dict | None
    :param create_message_fn: Optional override for the store's create function.
    :type create_message_fn: collections.abc.Callable | None
    :param list_messages_fn: Optional override for the store's list function.
    :type list_messages_fn: collections.abc.Callable | None
    :returns: Configured Flask app instance.
    :rtype: flask.Flask
    :raises ValueError: When ``MESSAGE_SORT`` names an unknown ordering.
    """
    app = Flask(__name__)
    app.config.update(
        MESSAGE_SORT=os.getenv("MESSAGE_SORT", "newest"),
        NODE_ENV=os.getenv("NODE_ENV", "development"),
        ELM_SOURCE=os.getenv("ELM_SOURCE", os.getcwd()),
        PACKS_PREFIX=os.getenv("PACKS_PREFIX", assets.DEFAULT_PACKS_PREFIX),
        PACKS_MANIFEST=os.getenv(
            "PACKS_MANIFEST",
            os.path.join(app.static_folder, "packs", "manifest.json"),
        ),
    )
    if test_config:
        app.config.update(test_config)
    app.config["MESSAGE_SORT_SPEC"] = _resolve_sort(app.config["MESSAGE_SORT"])
    if create_message_fn is not None:
        app.config["CREATE_MESSAGE_FN"] = create_message_fn
    if list_messages_fn is not None:
        app.config["LIST_MESSAGES_FN"] = list_messages_fn

    _register_pack_helper(app)
    _register_commands(app)
    app.register_blueprint(messages.bp)
    return app
