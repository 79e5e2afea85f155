"""Unit tests for placeholder extraction and rendering."""

import pytest

from app.strategies.template_engine import extract_variables, render_template


# =============================================================================
# extract_variables
# =============================================================================


class TestExtractVariables:
    """Test suite for extract_variables."""

    def test_first_occurrence_order(self):
        content = "Olá {{nome}}, seu pedido {{pedido}} chega {{data}}."
        assert extract_variables(content) == ["nome", "pedido", "data"]

    def test_trims_and_dedupes(self):
        assert extract_variables("{{a}} {{ a }} {{b}}") == ["a", "b"]

    def test_no_placeholders(self):
        assert extract_variables("Mensagem sem variáveis") == []

    def test_empty_content(self):
        assert extract_variables("") == []

    @pytest.mark.parametrize(
        "content",
        ["{{}}", "{nome}", "{{nome}", "{{ nome } }"],
    )
    def test_malformed_markers_do_not_match(self, content):
        assert extract_variables(content) == []

    def test_inner_text_is_kept_verbatim_after_trim(self):
        assert extract_variables("{{ first name }} {{cliente.email}}") == [
            "first name",
            "cliente.email",
        ]

    def test_whitespace_only_placeholder_yields_empty_name(self):
        assert extract_variables("{{  }}") == [""]


# =============================================================================
# render_template
# =============================================================================


class TestRenderTemplate:
    """Test suite for render_template."""

    def test_replaces_every_occurrence(self):
        content = "{{nome}}, oi {{ nome }}!"
        assert render_template(content, {"nome": "Ana"}) == "Ana, oi Ana!"

    def test_missing_keys_are_left_intact(self):
        content = "Olá {{nome}}, código {{codigo}}"
        assert render_template(content, {"nome": "Ana"}) == "Olá Ana, código {{codigo}}"

    def test_none_and_empty_values_render_empty(self):
        content = "[{{a}}][{{b}}]"
        assert render_template(content, {"a": None, "b": ""}) == "[][]"

    def test_unused_keys_are_ignored(self):
        assert render_template("Olá", {"nome": "Ana"}) == "Olá"

    def test_empty_data_returns_content(self):
        content = "Olá {{nome}}"
        assert render_template(content, {}) == content

    def test_inserted_values_are_not_rescanned(self):
        content = "{{a}} e {{b}}"
        rendered = render_template(content, {"a": "{{b}}", "b": "B"})
        assert rendered == "{{b}} e B"

    def test_regex_characters_in_keys_are_literal(self):
        content = "{{preço (R$)}} {{a.b}} {{axb}}"
        rendered = render_template(content, {"preço (R$)": "10", "a.b": "ok"})
        assert rendered == "10 ok {{axb}}"

    def test_replacement_is_literal(self):
        rendered = render_template("{{valor}}", {"valor": r"R$ \1 \g<0>"})
        assert rendered == r"R$ \1 \g<0>"

    def test_renders_every_extracted_variable(self):
        content = "Olá {{ nome }}, bem-vindo à {{empresa}}! {{nome}}"
        data = {name: name.upper() for name in extract_variables(content)}
        rendered = render_template(content, data)
        assert extract_variables(rendered) == []
        assert rendered == "Olá NOME, bem-vindo à EMPRESA! NOME"
