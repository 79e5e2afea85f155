"""Portuguese validation messages, Laravel style.

Pydantic reports errors as (location, type, ctx). This module turns them into
the messages the legacy Laravel client displays, e.g.
``"O campo nome é obrigatório."``. Messages are resolved in order:
a field specific override, then a generic rule message with the field's
display name.
"""

from collections.abc import Sequence
from typing import Any

# Display names used inside generic messages
ATTRIBUTES: dict[str, str] = {
    "name": "nome",
    "content": "conteúdo",
    "category": "categoria",
    "variables": "variáveis",
    "active": "ativo",
    "last_name": "sobrenome",
    "cel": "celular",
    "password": "senha",
    "password_confirmation": "confirmação de senha",
}

RULE_MESSAGES: dict[str, str] = {
    "missing": "O campo {attribute} é obrigatório.",
    "string_too_short": "O campo {attribute} é obrigatório.",
    "string_type": "O campo {attribute} deve ser uma string.",
    "string_too_long": "O campo {attribute} deve ter no máximo {max_length} caracteres.",
    "list_type": "O campo {attribute} deve ser um array.",
    "int_type": "O campo {attribute} deve ser um número inteiro.",
    "int_parsing": "O campo {attribute} deve ser um número inteiro.",
    "int_from_float": "O campo {attribute} deve ser um número inteiro.",
    "greater_than": "O campo {attribute} deve ser um número positivo.",
    "dict_type": "O campo {attribute} deve ser um objeto.",
    "value_error": "O campo {attribute} deve ser um endereço de e-mail válido.",
}

# (field, rule) overrides; "*" matches list items of the field
FIELD_MESSAGES: dict[tuple[str, str], str] = {
    ("active", "int_type"): "O campo ativo deve ser um número.",
    ("active", "int_parsing"): "O campo ativo deve ser um número.",
    ("variables.*", "string_type"): "Cada variável deve ser uma string.",
    ("instanceName", "missing"): "Nome da instância é obrigatório",
    ("instanceName", "string_too_short"): "Nome da instância é obrigatório",
    ("instanceName", "string_type"): "Nome da instância deve ser uma string",
    ("webhookUrl", "string_type"): "URL do webhook deve ser uma string",
}

FALLBACK_MESSAGE = "O campo {attribute} é inválido."


def _field_path(loc: Sequence[Any]) -> tuple[str, bool]:
    """Return (field name, is list item) for a FastAPI error location."""
    parts = [part for part in loc if part not in ("body", "query", "path", "header")]
    if not parts:
        return "", False
    field = str(parts[0])
    is_item = len(parts) > 1 and isinstance(parts[1], int)
    return field, is_item


def translate_error(error: dict[str, Any]) -> str:
    """Translate one pydantic error dict into a Portuguese message."""
    field, is_item = _field_path(error.get("loc", ()))
    if not field:
        return "Dados inválidos."
    rule = error.get("type", "")
    ctx = error.get("ctx") or {}

    key = f"{field}.*" if is_item else field
    override = FIELD_MESSAGES.get((key, rule))
    if override:
        return override

    attribute = ATTRIBUTES.get(field, field)
    template = RULE_MESSAGES.get(rule, FALLBACK_MESSAGE)
    try:
        return template.format(attribute=attribute, **ctx)
    except (KeyError, IndexError):
        return FALLBACK_MESSAGE.format(attribute=attribute)


def translate_errors(errors: Sequence[dict[str, Any]]) -> list[str]:
    """Translate all errors, keeping order and dropping duplicates."""
    messages: list[str] = []
    for error in errors:
        message = translate_error(error)
        if message not in messages:
            messages.append(message)
    return messages
