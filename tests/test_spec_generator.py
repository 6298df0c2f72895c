"""Tests for the spec template catalog and the spec generator."""

import pytest

from cyspec.core import Strategy
from cyspec.core.spec_generator import (
    SECONDS_PER_SPEC,
    SpecGenerator,
    customize_template,
    select_spec_type,
    spec_filename,
)
from cyspec.core.template_service import (
    DEFAULT_TEMPLATE,
    TemplateService,
    load_builtin_templates,
    template_for_pattern,
)
from cyspec.errors import ConfigError


def _strategy(patterns, count=3, focus=("smoke-testing",)):
    return Strategy(
        name="Test Strategy",
        framework="react",
        project_type="React Application",
        recommended_specs=count,
        focus_areas=list(focus),
        test_patterns=list(patterns),
        selector_strategy=["data-testid"],
    )


# ─── Templates ───


class TestTemplateCatalog:
    def test_builtins(self):
        templates = load_builtin_templates()
        assert set(templates) == {"basic", "navigation", "forms", "api"}
        assert "cy.contains('Welcome')" in templates["basic"]

    def test_pattern_mapping(self):
        assert template_for_pattern("navigation-testing") == "navigation"
        assert template_for_pattern("form-testing") == "forms"
        assert template_for_pattern("api-testing") == "api"
        assert template_for_pattern("component-rendering") == DEFAULT_TEMPLATE

    def test_missing_basic_template(self, tmp_path):
        path = tmp_path / "templates.yaml"
        path.write_text("forms: |\n  describe('x', () => {})\n")
        with pytest.raises(ConfigError):
            load_builtin_templates(path)

    def test_unreadable_catalog(self, tmp_path):
        with pytest.raises(ConfigError):
            load_builtin_templates(tmp_path / "absent.yaml")

    def test_override_from_directory(self, tmp_path):
        (tmp_path / "forms.cy.js").write_text("describe('Custom forms', () => {})")
        (tmp_path / "notes.txt").write_text("ignored")
        service = TemplateService(tmp_path)
        assert service.get_template("forms") == "describe('Custom forms', () => {})"
        assert service.template_for_pattern("form-testing") == ("forms", "describe('Custom forms', () => {})")

    def test_override_adds_new_template(self, tmp_path):
        (tmp_path / "smoke.cy.js").write_text("describe('Smoke', () => {})")
        assert "smoke" in TemplateService(tmp_path).list_templates()

    def test_missing_override_directory(self, tmp_path):
        service = TemplateService(tmp_path / "absent")
        assert service.list_templates() == ["api", "basic", "forms", "navigation"]

    def test_unknown_template_falls_back(self):
        service = TemplateService()
        assert service.get_template("nope") == service.get_template(DEFAULT_TEMPLATE)


# ─── Generation ───


class TestSpecNaming:
    def test_filenames_are_one_based(self):
        assert spec_filename(0) == "generated-spec-1.cy.js"
        assert spec_filename(9) == "generated-spec-10.cy.js"

    def test_round_robin(self):
        strategy = _strategy(["a", "b"])
        assert [select_spec_type(strategy, i) for i in range(5)] == ["a", "b", "a", "b", "a"]


class TestCustomizeTemplate:
    def test_react_landmark(self, make_analysis):
        content = customize_template("cy.contains('Welcome'); cy.contains('Welcome')", make_analysis(framework="react"), "x")
        assert "cy.contains('React App'); cy.contains('Welcome')" in content

    def test_traditional_keeps_landmark(self, make_analysis):
        content = customize_template("cy.contains('Welcome')", make_analysis(), "x")
        assert content.endswith("cy.contains('Welcome')")

    def test_header(self, make_analysis):
        content = customize_template("body", make_analysis(framework="vue", project_type="Vue SPA"), "form-testing")
        lines = content.split("\n")
        assert lines[0] == "// Spec generated automatically by cyspec"
        assert lines[1] == "// Type: form-testing"
        assert lines[2] == "// Framework: vue"
        assert lines[3] == "// Project: Vue SPA"
        assert lines[4].startswith("// Date: ")
        assert lines[5] == ""
        assert lines[6] == "body"


class TestGenerateTestSpecs:
    def test_count_and_types(self, make_analysis):
        specs = SpecGenerator().generate_test_specs(
            make_analysis(framework="react"),
            _strategy(["navigation-testing", "form-testing", "api-testing"], count=4),
        )
        assert [s.name for s in specs] == [f"generated-spec-{i}.cy.js" for i in range(1, 5)]
        assert [s.type for s in specs] == ["navigation-testing", "form-testing", "api-testing", "navigation-testing"]
        assert [s.template for s in specs] == ["navigation", "forms", "api", "navigation"]
        assert specs[0].path == "cypress/e2e/generated-spec-1.cy.js"

    def test_unmapped_patterns_use_basic(self, make_analysis):
        specs = SpecGenerator().generate_test_specs(make_analysis(framework="react"), _strategy(["component-rendering"]))
        assert all(s.template == "basic" for s in specs)
        assert "cy.contains('React App')" in specs[0].content

    def test_custom_templates(self, make_analysis, tmp_path):
        (tmp_path / "basic.cy.js").write_text("describe('Mine', () => {})")
        generator = SpecGenerator(TemplateService(tmp_path))
        specs = generator.generate_test_specs(make_analysis(), _strategy(["anything"], count=1))
        assert specs[0].content.endswith("describe('Mine', () => {})")

    def test_repeat_runs_match(self, make_analysis):
        generator = SpecGenerator()
        analysis = make_analysis(framework="vue")
        strategy = _strategy(["navigation-testing", "form-testing", "component-rendering"], count=5)
        first = generator.generate_test_specs(analysis, strategy)
        second = generator.generate_test_specs(analysis, strategy)
        for attr in ("name", "type", "template"):
            assert [getattr(s, attr) for s in first] == [getattr(s, attr) for s in second]


class TestSaveSpecs:
    def test_writes_files(self, make_analysis, tmp_path):
        generator = SpecGenerator()
        specs = generator.generate_test_specs(make_analysis(), _strategy(["a"]))
        out = tmp_path / "out" / "nested"

        assert generator.save_specs_to_disk(specs, out) is True
        assert sorted(p.name for p in out.iterdir()) == [s.name for s in specs]
        assert (out / "generated-spec-1.cy.js").read_text() == specs[0].content

    def test_overwrites_existing(self, make_analysis, tmp_path):
        generator = SpecGenerator()
        (tmp_path / "generated-spec-1.cy.js").write_text("old")
        specs = generator.generate_test_specs(make_analysis(), _strategy(["a"], count=1))
        generator.save_specs_to_disk(specs, tmp_path)
        assert (tmp_path / "generated-spec-1.cy.js").read_text() == specs[0].content

    def test_returns_false_when_directory_is_a_file(self, make_analysis, tmp_path):
        blocker = tmp_path / "out"
        blocker.write_text("not a directory")
        generator = SpecGenerator()
        specs = generator.generate_test_specs(make_analysis(), _strategy(["a"]))
        assert generator.save_specs_to_disk(specs, blocker) is False

    def test_partial_write_keeps_earlier_specs(self, make_analysis, tmp_path):
        (tmp_path / "generated-spec-2.cy.js").mkdir()
        generator = SpecGenerator()
        specs = generator.generate_test_specs(make_analysis(), _strategy(["a"]))

        assert generator.save_specs_to_disk(specs, tmp_path) is False
        assert (tmp_path / "generated-spec-1.cy.js").read_text() == specs[0].content
        assert not (tmp_path / "generated-spec-3.cy.js").exists()


class TestSpecSummary:
    def test_summary(self, make_analysis):
        generator = SpecGenerator()
        strategy = _strategy(["a", "b"], count=5, focus=("form-testing", "api-testing"))
        specs = generator.generate_test_specs(make_analysis(), strategy)
        summary = generator.generate_spec_summary(specs, strategy)

        assert summary.total_specs == 5
        assert summary.spec_types == {"a": 3, "b": 2}
        assert summary.estimated_execution_time == 5 * SECONDS_PER_SPEC
        assert summary.focus_areas == ["form-testing", "api-testing"]

    def test_empty(self):
        summary = SpecGenerator().generate_spec_summary([], _strategy(["a"]))
        assert summary.total_specs == 0
        assert summary.spec_types == {}
        assert summary.estimated_execution_time == 0
