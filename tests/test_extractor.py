"""Tests for document capture from live nodes."""

from PySide6.QtCore import QPointF

from ghjson.config import SerializationContext, SerializationOptions
from ghjson.extractor import DocumentExtractor, extract_document
from ghjson.host import DataMapping, ParamAccess


def _by_name(document, name):
    return next(c for c in document.components if c.name == name)


class TestComponents:
    """Component records."""

    def test_basic_record(self, chain_graph):
        slider = chain_graph["slider"]
        slider.selected = True
        comp = DocumentExtractor().extract_component(slider)
        assert comp.name == "Number Slider"
        assert comp.component_guid == "57da07bd-ecab-415d-9d86-af36d7073abc"
        assert comp.instance_guid == slider.instance_id
        assert comp.pivot == QPointF(0, 0)
        assert comp.selected
        assert comp.property_value("CurrentValue") == "0.250<0,1>"

    def test_pivot_is_a_copy(self, chain_graph):
        slider = chain_graph["slider"]
        comp = DocumentExtractor().extract_component(slider)
        slider.pivot.setX(99)
        assert comp.pivot.x() == 0

    def test_options_strip_pivots_selection_messages(self, chain_graph):
        add = chain_graph["add"]
        add.selected = True
        add.warnings.append("Input parameter B failed to collect data")
        options = SerializationOptions(include_pivots=False, include_selection=False,
                                       include_runtime_messages=False)
        comp = DocumentExtractor(options).extract_component(add)
        assert comp.pivot is None
        assert not comp.selected
        assert comp.warnings == []

    def test_runtime_messages(self, chain_graph):
        chain_graph["add"].errors.append("boom")
        comp = DocumentExtractor().extract_component(chain_graph["add"])
        assert comp.errors == ["boom"]

    def test_persistent_data_switch(self, sample_graph):
        number = sample_graph["number"]
        assert "PersistentData" in DocumentExtractor().extract_component(number).properties
        options = SerializationOptions(include_persistent_data=False)
        assert "PersistentData" not in DocumentExtractor(options).extract_component(number).properties

    def test_ai_optimized(self, sample_graph):
        options = SerializationOptions.ai_optimized()
        comp = DocumentExtractor(options).extract_component(sample_graph["swatch"])
        assert comp.properties["Color"].human_readable is None
        assert options.context is SerializationContext.AI_OPTIMIZED


class TestParameterSettings:
    """Per-parameter metadata."""

    def test_defaults_omitted_for_plain_nodes(self, chain_graph):
        comp = DocumentExtractor().extract_component(chain_graph["add"])
        assert comp.input_settings == []
        assert comp.output_settings == []

    def test_modified_parameter_recorded(self, sample_graph):
        add = sample_graph["add"]
        add.find_input("A").data_mapping = DataMapping.GRAFT
        comp = DocumentExtractor().extract_component(add)
        by_name = {s.parameter_name: s for s in comp.input_settings}
        assert by_name["A"].data_mapping is DataMapping.GRAFT
        assert by_name["B"].additional.reverse is True
        assert by_name["B"].additional.simplify is None

    def test_script_parameters_always_recorded(self, sample_graph):
        comp = DocumentExtractor().extract_component(sample_graph["script"])
        inputs = {s.parameter_name: s for s in comp.input_settings}
        assert list(inputs) == ["curves", "t"]
        assert inputs["curves"].type_hint == "List<Curve>"
        assert inputs["curves"].access is ParamAccess.LIST
        assert inputs["t"].type_hint == "double"
        assert not inputs["t"].required
        assert comp.output_settings[0].parameter_name == "points"
        assert comp.output_settings[0].type_hint == "object"

    def test_script_hint_fallback(self, make_node):
        script = make_node("C# Script")
        script.script_text = "// no entry point"
        script.find_input("x").type_hint = "Point3d"
        comp = DocumentExtractor().extract_component(script)
        assert comp.input_settings[0].type_hint == "Point3d"
        assert comp.input_settings[1].type_hint == "object"

    def test_escaped_variable_name(self, make_node):
        script = make_node("C# Script")
        param = script.find_input("x")
        param.name = "Max Radius"
        param.variable_name = "@__Max_20Radius"
        settings = DocumentExtractor().extract_component(script).input_settings[0]
        assert settings.parameter_name == "Max Radius"
        assert settings.variable_name == "Max Radius"

    def test_principal_flag(self, make_node):
        script = make_node("C# Script")
        script.principal_parameter_index = 1
        settings = DocumentExtractor().extract_component(script).input_settings
        assert [s.is_principal for s in settings] == [False, True]

    def test_parameters_only_context(self, make_node):
        panel = make_node("Panel")
        panel.user_text = "x"
        options = SerializationOptions(context=SerializationContext.PARAMETERS_ONLY)
        comp = DocumentExtractor(options).extract_component(panel)
        assert "UserText" not in comp.properties


class TestConnections:
    """Wires between captured nodes."""

    def test_chain(self, chain_graph):
        document = extract_document(chain_graph.values())
        pairs = [(c.source.name, c.target.name) for c in document.connections]
        assert pairs == [("Number", "A"), ("Result", "Input")]
        slider_id = chain_graph["slider"].instance_id
        assert document.connections[0].source.instance_id == slider_id

    def test_outside_nodes_excluded(self, chain_graph):
        document = extract_document([chain_graph["slider"], chain_graph["add"]])
        assert len(document.connections) == 1
        assert len(document.components) == 2

    def test_duplicates_collapsed(self, chain_graph):
        slider = chain_graph["slider"]
        document = extract_document([slider, slider, chain_graph["add"]])
        assert len(document.components) == 2

    def test_sample_graph_counts(self, sample_graph, ghjson_logs):
        document = extract_document(sample_graph.values())
        assert len(document.components) == 9
        assert len(document.connections) == 4
        assert "Extracted 9 components, 4 connections" in ghjson_logs.text
