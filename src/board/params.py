"""Request-body schema for message creation.

Validation never raises: ``extract_message_params`` returns either ``Ok``
with the permitted fields or ``Invalid`` naming what was missing, and the
route decides how to answer.
"""

import re
from dataclasses import dataclass, field

_FORM_KEY = re.compile(r"^(?P<root>[^\[\]]+)\[(?P<key>[^\[\]]+)\]$")


@dataclass(frozen=True)
class MessageParams:
    """Required/permitted keys of the nested ``message`` object."""

    root: str = "message"
    required: tuple = ("name", "content")

    @property
    def permitted(self):
        return self.required


MESSAGE_PARAMS = MessageParams()


@dataclass(frozen=True)
class Ok:
    fields: dict


@dataclass(frozen=True)
class Invalid:
    """Rejected payload.

    ``wrapper_missing`` is set when the nested object itself is absent; in
    that case ``missing`` names the wrapper key rather than its fields.
    """

    missing: tuple = ()
    wrapper_missing: bool = False
    errors: dict = field(default_factory=dict)


def _is_present(value):
    return isinstance(value, str) and value.strip() != ""


def extract_message_params(payload, schema=MESSAGE_PARAMS):
    """Validate a request payload against the message schema.

    :param payload: Decoded request body.
    :type payload: object
    :param schema: Keys to require and permit.
    :type schema: MessageParams
    :returns: ``Ok`` with exactly the permitted keys, or ``Invalid``.
    :rtype: Ok | Invalid
    """
    nested = payload.get(schema.root) if isinstance(payload, dict) else None
    if not isinstance(nested, dict):
        return Invalid(
            missing=(schema.root,),
            wrapper_missing=True,
            errors={schema.root: "is required"},
        )

    errors = {}
    for key in schema.required:
        if key not in nested or nested[key] is None:
            errors[key] = "is required"
        elif not isinstance(nested[key], str):
            errors[key] = "must be a string"
        elif not _is_present(nested[key]):
            errors[key] = "can't be blank"
        elif "\x00" in nested[key]:
            errors[key] = "contains invalid characters"
    if errors:
        missing = tuple(key for key in schema.required if key in errors)
        return Invalid(missing=missing, errors=errors)

    return Ok(fields={key: nested[key] for key in schema.permitted})


def form_to_payload(form):
    """Nest ``message[name]``-style form keys into a payload dict.

    Keys without brackets are kept at the top level.

    :param form: Submitted form fields.
    :type form: collections.abc.Mapping[str, str]
    :rtype: dict[str, object]
    """
    payload = {}
    for raw_key, value in form.items():
        match = _FORM_KEY.match(raw_key)
        if match is None:
            payload[raw_key] = value
            continue
        nested = payload.setdefault(match.group("root"), {})
        if isinstance(nested, dict):
            nested[match.group("key")] = value
    return payload
