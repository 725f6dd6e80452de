import pytest

from stagemap.dictionary import Dictionary
from stagemap.editor import MapEditor
from stagemap.validation import FormValidator, SimpleField, ValidationResult, validate_form


class TestValidateForm:

    def test_all_valid(self):
        result = validate_form([
            SimpleField("label", value="Harbour"),
            SimpleField("content", kind="library", value="H5P.Image 1.1"),
        ])
        assert result.is_valid
        assert result.errors == []

    def test_library_without_content_fails(self):
        result = validate_form([SimpleField("content", kind="library", value="-")])
        assert not result
        assert result.errors == ["content: Please choose content for this stage."]

    def test_library_with_incomplete_content_passes(self):
        incomplete = SimpleField("content", kind="library", value="H5P.Image 1.1", check=lambda v: False)
        assert validate_form([incomplete]).is_valid

    def test_optional_empty_number_passes(self):
        field = SimpleField("time", kind="number", value=None, optional=True, check=lambda v: v is not None)
        assert validate_form([field]).is_valid

    def test_required_empty_number_fails(self):
        field = SimpleField("time", kind="number", value=None, check=lambda v: v is not None)
        assert not validate_form([field]).is_valid

    def test_every_field_reports(self):
        result = validate_form([
            SimpleField("label", value=""),
            SimpleField("content", kind="library", value="-"),
        ])
        assert len(result.errors) == 2

    def test_dictionary_texts(self):
        d = Dictionary({"l10n": {"contentRequired": "Inhalt fehlt"}})
        result = validate_form([SimpleField("content", kind="library", value="-")], d)
        assert result.errors == ["content: Inhalt fehlt"]


class TestFormValidatorWithEditor:

    def test_blocks_commit_until_fixed(self):
        editor = MapEditor()
        editor.add_stage()
        content = SimpleField("content", kind="library", value="-")
        validator = FormValidator([SimpleField("label", value="A"), content])

        editor.begin_edit(0)
        assert editor.commit_edit(0, validator) is False
        assert editor.state.editing_index == 0

        content.value = "H5P.Text 1.0"
        assert editor.commit_edit(0, validator) is True
        assert not editor.state.is_editing

    def test_result_truthiness(self):
        assert ValidationResult(True)
        assert not ValidationResult(False, ["x"])
