"""Front-end pack configuration for the Elm client.

The bundler itself lives outside this project. This module owns the two
things the server side agrees with it on: which Elm loader chain to use for
the current ``NODE_ENV``, and where compiled packs are served from.
"""

import json
import os
from pathlib import Path

ELM_FILE_PATTERN = r"\.elm(\.erb)?$"
ELM_EXCLUDES = ["elm-stuff", "node_modules"]
DEFAULT_PACKS_PREFIX = "/static/packs"


def is_production(node_env=None):
    """Return whether the bundler should build for production.

    :param node_env: Environment name; defaults to ``$NODE_ENV``.
    :type node_env: str | None
    :rtype: bool
    """
    if node_env is None:
        node_env = os.getenv("NODE_ENV", "development")
    return node_env.strip().lower() == "production"


def elm_loader_options(node_env=None, cwd=None):
    """Build ``elm-webpack-loader`` options.

    Development builds add verbose output and the Elm debugger.

    :param node_env: Environment name; defaults to ``$NODE_ENV``.
    :type node_env: str | None
    :param cwd: Directory holding ``elm.json`` and ``node_modules``.
    :type cwd: str | os.PathLike | None
    :returns: Loader options mapping.
    :rtype: dict[str, object]
    """
    elm_source = Path(cwd) if cwd is not None else Path.cwd()
    options = {
        "cwd": str(elm_source),
        "pathToElm": str(elm_source / "node_modules" / ".bin" / "elm"),
    }
    if not is_production(node_env):
        options.update(verbose=True, debug=True)
    return options


def elm_loader_rule(node_env=None, cwd=None):
    """Build the bundler rule that compiles ``.elm`` sources.

    Development prepends ``elm-hot-loader`` so modules reload in place.

    :returns: Rule with ``test``/``exclude`` patterns and the ``use`` chain.
    :rtype: dict[str, object]
    """
    elm_loader = {
        "loader": "elm-webpack-loader",
        "options": elm_loader_options(node_env, cwd),
    }
    use = [elm_loader]
    if not is_production(node_env):
        use.insert(0, {"loader": "elm-hot-loader"})
    return {
        "test": ELM_FILE_PATTERN,
        "exclude": list(ELM_EXCLUDES),
        "use": use,
    }


def load_manifest(path):
    """Read the bundler's ``manifest.json``; a missing file yields ``{}``.

    :param path: Manifest location.
    :type path: str | os.PathLike | None
    :rtype: dict[str, str]
    """
    if path is None:
        return {}
    manifest_path = Path(path)
    if not manifest_path.exists():
        return {}
    return json.loads(manifest_path.read_text(encoding="utf-8"))


def pack_url(name, manifest=None, prefix=DEFAULT_PACKS_PREFIX):
    """Resolve the public URL of a compiled pack.

    Fingerprinted names from the manifest win; otherwise ``<prefix>/<name>.js``.

    :param name: Pack name without extension, e.g. ``"hello_elm"``.
    :type name: str
    :param manifest: Entries from ``load_manifest``.
    :type manifest: dict[str, str] | None
    :param prefix: URL prefix packs are served under.
    :type prefix: str
    :rtype: str
    """
    filename = f"{name}.js"
    if manifest and filename in manifest:
        return manifest[filename]
    return f"{prefix.rstrip('/')}/{filename}"
