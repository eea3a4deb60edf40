"""Tests for reading and writing script entry-point signatures."""

import pytest

from ghjson.host import ScriptLanguage
from ghjson.signatures import (ScriptSignatureSynchronizer, parse_parameter,
                               split_parameters)

CS_SCRIPT = """\
public class Script_Instance
{
  private void RunScript(object x, object y, ref object a)
  {
    a = x;
  }
}
"""


@pytest.fixture
def sync():
    return ScriptSignatureSynchronizer()


class TestParameterParsing:
    """Splitting and parsing formal parameter lists."""

    def test_generic_commas_do_not_split(self):
        parts = split_parameters("Dictionary<string, int> map, double t")
        assert parts == ["Dictionary<string, int> map", "double t"]

    def test_unbalanced_raises(self):
        with pytest.raises(ValueError):
            split_parameters("List<int x")

    def test_parse_qualifier_and_default(self):
        param = parse_parameter("ref List<Curve> crv = null")
        assert (param.qualifier, param.type_text, param.name, param.default) == \
            ("ref", "List<Curve>", "crv", "null")
        assert param.is_output


class TestCSharp:
    """C# extraction and injection."""

    def test_extract_input_and_output(self, sync):
        assert sync.extract(CS_SCRIPT, "x") == "object"
        assert sync.extract(CS_SCRIPT, "a") == "object"
        assert sync.extract(CS_SCRIPT, "missing") is None

    def test_extract_verbatim_name(self, sync):
        script = "private void RunScript(double @class, ref object A)\n{\n}"
        assert sync.extract(script, "class") == "double"
        assert sync.extract(script, "@class") == "double"

    def test_inject_two_inputs_and_ref_output(self, sync):
        updated = sync.inject(CS_SCRIPT, ["double", "Curve"], ["string"])
        assert "private void RunScript(double x, Curve y, ref string a)" in updated
        assert updated.startswith("public class Script_Instance")
        assert "a = x;" in updated

    def test_inject_none_keeps_existing(self, sync):
        updated = sync.inject(CS_SCRIPT, [None, "int"], [None])
        assert "RunScript(object x, int y, ref object a)" in updated

    def test_inject_without_change_is_identity(self, sync):
        assert sync.inject(CS_SCRIPT, ["object", "object"], ["object"]) is CS_SCRIPT

    def test_inject_generic_list(self, sync):
        updated = sync.inject(CS_SCRIPT, ["List<Curve>"], [])
        assert sync.extract(updated, "x") == "List<Curve>"

    def test_no_signature_unchanged(self, sync):
        assert sync.inject("// nothing here", ["double"], []) == "// nothing here"
        assert sync.extract("// nothing here", "x") is None


def test_malformed_signature_never_raises(sync):
    """An unbalanced parameter list yields no hint and untouched text."""
    broken = "private void RunScript(List<int x, ref object a)\n{\n}"
    assert sync.extract(broken, "x") is None
    assert sync.inject(broken, ["double"], ["int"]) == broken


def test_python_and_vb_are_untyped(sync):
    """Dialects without static types neither read nor write hints."""
    py = "class Script:\n    def RunScript(self, x, y):\n        return x\n"
    assert sync.extract(py, "x", ScriptLanguage.PYTHON) is None
    assert sync.inject(py, ["float"], [], ScriptLanguage.PYTHON) == py

    vb = "Private Sub RunScript(ByVal x As Object, ByRef A As Object)\nEnd Sub"
    assert sync.extract(vb, "x", ScriptLanguage.VB) is None
    assert sync.inject(vb, ["Double"], [], ScriptLanguage.VB) == vb


def test_empty_script(sync):
    """Empty text gives no hint."""
    assert sync.extract("", "x") is None
    assert sync.inject("", ["double"], []) == ""
