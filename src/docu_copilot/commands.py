"""Chat input parsing — '/command args --flag value' into a Request."""

import logging
import shlex

from .models import Request

logger = logging.getLogger("docu.commands")


def _tokenize(text: str) -> list[str]:
    try:
        return shlex.split(text)
    except ValueError:
        # Unbalanced quote: keep going with plain whitespace splitting
        logger.debug("Could not tokenize %r with shell rules", text)
        return text.split()


def parse_chat_input(text: str, transport=None) -> Request:
    """Turn one line of chat input into a Request.

    '/new "Checkout Flow" --agent prd' ->
        Request(command="new", prompt_text="Checkout Flow", parameters={"agent": "prd"})
    Text without a leading slash is a command-less request carrying the text
    unchanged. Flags without a value are True.
    """
    stripped = (text or "").strip()
    if not stripped.startswith("/"):
        return Request(prompt_text=stripped, transport=transport)

    tokens = _tokenize(stripped[1:])
    if not tokens:
        return Request(prompt_text="", transport=transport)

    command = tokens[0].lower()
    parameters = {}
    arguments = []
    i = 1
    while i < len(tokens):
        token = tokens[i]
        if token.startswith("--") and len(token) > 2:
            name, sep, value = token[2:].partition("=")
            if sep:
                parameters[name] = value
            elif i + 1 < len(tokens) and not tokens[i + 1].startswith("-"):
                parameters[name] = tokens[i + 1]
                i += 1
            else:
                parameters[name] = True
        else:
            arguments.append(token)
        i += 1

    return Request(
        prompt_text=" ".join(arguments),
        command=command,
        parameters=parameters,
        transport=transport,
    )
