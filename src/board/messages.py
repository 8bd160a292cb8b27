"""Route handlers for creating and listing board messages."""

from flask import Blueprint, current_app, request

from board.negotiation import select_responder
from board.params import Invalid, extract_message_params, form_to_payload
from message_store import (
    MessageValidationError,
    StoreError,
    StoreUnavailableError,
    create_message,
    list_messages,
)

bp = Blueprint('messages', __name__)

INDEX_FORMATS = ("html", "json")
CREATE_FORMATS = ("json",)


def _create_message_service(name, content):
    """Resolve and execute the configured create function.

    :returns: The persisted message.
    :rtype: message_store.Message
    """
    fn = current_app.config.get("CREATE_MESSAGE_FN", create_message)
    return fn(name=name, content=content)


def _list_messages_service():
    """Resolve and execute the configured list function with the app's ordering.

    :returns: Stored messages.
    :rtype: list[message_store.Message]
    """
    fn = current_app.config.get("LIST_MESSAGES_FN", list_messages)
    return fn(sort=current_app.config.get("MESSAGE_SORT_SPEC"))


def _request_payload():
    """Decode the create payload from a JSON body or bracketed form fields."""
    if request.is_json:
        return request.get_json(silent=True)
    return form_to_payload(request.form)


def _store_failure(responder, exc):
    current_app.logger.exception("Message store failure: %s", exc)
    status = 503 if isinstance(exc, StoreUnavailableError) else 500
    return responder.failure(exc, status)


@bp.route('/')
@bp.route('/messages', methods=['GET'])
@bp.route('/messages.<ext>', methods=['GET'])
def index(ext=None):
    """List all messages as an HTML page or a JSON array.

    :param ext: Optional format suffix from the URL.
    :type ext: str | None
    :returns: Rendered page or JSON array of serialized messages.
    :rtype: flask.Response | str | tuple[flask.Response | str, int]
    """
    responder = select_responder(INDEX_FORMATS, ext)
    try:
        messages = _list_messages_service()
    except StoreError as exc:
        return _store_failure(responder, exc)
    return responder.index(messages)


@bp.route('/messages', methods=['POST'])
@bp.route('/messages.<ext>', methods=['POST'])
def create(ext=None):
    """Persist a message from ``{"message": {"name", "content"}}``.

    The response format is settled first, then the payload is validated;
    rejected payloads never reach the store.

    :param ext: Optional format suffix from the URL.
    :type ext: str | None
    :returns: Serialized message, or an error body with 400/422/500/503.
    :rtype: flask.Response | tuple[flask.Response, int]
    """
    responder = select_responder(CREATE_FORMATS, ext)
    result = extract_message_params(_request_payload())
    if isinstance(result, Invalid):
        current_app.logger.warning("Rejected message payload: %s", result.errors)
        return responder.invalid(result)

    try:
        message = _create_message_service(**result.fields)
    except MessageValidationError as exc:
        current_app.logger.warning("Store rejected message: %s", exc)
        return responder.invalid(Invalid(errors={"message": str(exc)}))
    except StoreError as exc:
        return _store_failure(responder, exc)

    current_app.logger.info("Created message %s from %s", message.id, message.name)
    return responder.created(message)
