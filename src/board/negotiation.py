"""Content negotiation and response builders for message routes."""

from flask import abort, jsonify, render_template, request

from board.params import Invalid
from message_store import serialize_message

MIMETYPES = {
    "html": "text/html",
    "json": "application/json",
}
_FORMATS_BY_MIMETYPE = {mimetype: fmt for fmt, mimetype in MIMETYPES.items()}


def negotiate_format(supported, extension=None):
    """Pick the response format for the current request.

    An explicit path extension wins. Without an ``Accept`` header the first
    supported format is used, except that JSON request bodies get JSON back
    when the route offers it. Otherwise the best ``Accept`` match is taken,
    preferring earlier entries of ``supported`` on ties.

    :param supported: Format names the route can render, in preference order.
    :type supported: tuple[str, ...]
    :param extension: Format named by the URL suffix, e.g. ``"json"``.
    :type extension: str | None
    :returns: Negotiated format name, or ``None`` when nothing is acceptable.
    :rtype: str | None
    """
    if extension:
        return extension if extension in supported else None

    accept = request.accept_mimetypes
    if not accept:
        if request.is_json and "json" in supported:
            return "json"
        return supported[0]

    best = accept.best_match([MIMETYPES[fmt] for fmt in supported])
    return _FORMATS_BY_MIMETYPE.get(best)


class JsonResponder:
    format = "json"

    def index(self, messages):
        return jsonify([serialize_message(message) for message in messages])

    def created(self, message):
        return jsonify(serialize_message(message))

    def invalid(self, result: Invalid):
        status = 400 if result.wrapper_missing else 422
        return jsonify({
            "ok": False,
            "error": "param is missing" if result.wrapper_missing else "invalid message",
            "missing": list(result.missing),
            "errors": result.errors,
        }), status

    def failure(self, exc, status=500):
        return jsonify({"ok": False, "error": str(exc)}), status


class HtmlResponder:
    format = "html"

    def index(self, messages):
        return render_template('messages/index.html', messages=messages)

    def failure(self, exc, status=500):
        return render_template('messages/error.html', error=str(exc)), status


RESPONDERS = {
    "json": JsonResponder,
    "html": HtmlResponder,
}


def select_responder(supported, extension=None):
    """Return the response builder for the negotiated format.

    Aborts with 406 when the client accepts none of ``supported``.
    """
    fmt = negotiate_format(supported, extension)
    if fmt is None:
        abort(406)
    return RESPONDERS[fmt]()
