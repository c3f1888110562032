"""Tests for spec documents, merging and the spec loader."""

import pytest

from jsonatr.errors import (
    CircularUseError,
    ConflictingInputError,
    DuplicateOutputError,
    InputDefinitionError,
    SpecError,
    SpecParseError,
)
from jsonatr.loader import SpecLoader, load_spec
from jsonatr.spec import Input, InputKind, Spec


class TestInputFromDict:
    """Tests for parsing input declarations."""

    def test_minimal_declaration(self) -> None:
        """Test defaults for optional fields."""
        inp = Input.from_dict({"name": "a", "kind": "INLINE", "source": 1})
        assert inp.name == "a"
        assert inp.kind is InputKind.INLINE
        assert inp.source == 1
        assert inp.lets is None
        assert inp.stdin is True
        assert inp.args == []

    def test_full_declaration(self) -> None:
        """Test all optional fields are carried over."""
        inp = Input.from_dict(
            {
                "name": "tool",
                "kind": "COMMAND",
                "source": "echo hi",
                "let": {"x": "$"},
                "stdin": False,
                "args": ["first"],
            }
        )
        assert inp.kind is InputKind.COMMAND
        assert inp.lets == {"x": "$"}
        assert inp.stdin is False
        assert inp.args == ["first"]

    def test_null_source_is_allowed(self) -> None:
        """Test that an explicit null source is still a source."""
        inp = Input.from_dict({"name": "n", "kind": "INLINE", "source": None})
        assert inp.source is None

    @pytest.mark.parametrize(
        "data, fragment",
        [
            ("not-an-object", "must be an object"),
            ({"kind": "INLINE", "source": 1}, "identifier 'name'"),
            ({"name": "has space", "kind": "INLINE", "source": 1}, "identifier 'name'"),
            ({"name": "a", "kind": "HTTP", "source": 1}, "invalid kind"),
            ({"name": "a", "source": 1}, "invalid kind"),
            ({"name": "a", "kind": "INLINE"}, "missing required 'source'"),
            ({"name": "a", "kind": "INLINE", "source": 1, "let": [1]}, "wrong 'let'"),
            ({"name": "a", "kind": "INLINE", "source": 1, "let": {1: "x"}}, "wrong 'let'"),
            ({"name": "a", "kind": "COMMAND", "source": "x", "stdin": "no"}, "'stdin'"),
            ({"name": "a", "kind": "INLINE", "source": 1, "args": "x"}, "'args'"),
            ({"name": "a", "kind": "INLINE", "source": 1, "args": ["a-b"]}, "'args'"),
        ],
    )
    def test_invalid_declarations(self, data, fragment: str) -> None:
        """Test that malformed declarations are rejected."""
        with pytest.raises(InputDefinitionError) as exc_info:
            Input.from_dict(data)
        assert fragment in str(exc_info.value)


class TestSpecFromDict:
    """Tests for building a spec from a parsed document."""

    def test_empty_document(self) -> None:
        """Test that every section is optional."""
        spec = Spec.from_dict({})
        assert spec.uses == []
        assert spec.inputs == {}
        assert spec.output is None
        assert spec.description is None

    def test_inputs_keep_declaration_order(self) -> None:
        """Test that inputs are stored by name in order."""
        spec = Spec.from_dict(
            {
                "input": [
                    {"name": "b", "kind": "INLINE", "source": 1},
                    {"name": "a", "kind": "INLINE", "source": 2},
                ],
                "output": "$a",
            }
        )
        assert list(spec.inputs) == ["b", "a"]
        assert spec.get_input("a").source == 2
        assert spec.get_input("missing") is None
        assert spec.output == "$a"

    def test_uses_are_recorded_not_followed(self) -> None:
        """Test that from_dict does not read used files."""
        spec = Spec.from_dict({"use": ["does-not-exist.json"]})
        assert spec.uses == ["does-not-exist.json"]

    def test_same_input_declared_twice_in_one_document(self) -> None:
        """Test that an identical repeated declaration is accepted."""
        decl = {"name": "a", "kind": "INLINE", "source": 1}
        spec = Spec.from_dict({"input": [decl, dict(decl)]})
        assert list(spec.inputs) == ["a"]

    @pytest.mark.parametrize(
        "data",
        [
            [],
            {"use": "lib.json"},
            {"input": {"name": "a"}},
            {"description": 42},
        ],
    )
    def test_wrong_shapes(self, data) -> None:
        """Test that wrong document shapes raise SpecParseError."""
        with pytest.raises(SpecParseError):
            Spec.from_dict(data)

    def test_builtin_name_is_rejected(self) -> None:
        """Test that inputs may not shadow builtins."""
        with pytest.raises(InputDefinitionError) as exc_info:
            Spec.from_dict({"input": [{"name": "map", "kind": "INLINE", "source": 1}]})
        assert exc_info.value.input_name == "map"
        assert "builtin" in str(exc_info.value)


class TestSpecMerge:
    """Tests for merging specs."""

    def _spec(self, source=1, output=None) -> Spec:
        data = {"input": [{"name": "a", "kind": "INLINE", "source": source}]}
        if output is not None:
            data["output"] = output
        return Spec.from_dict(data)

    def test_merge_is_idempotent_for_identical_inputs(self) -> None:
        """Test merging the same declarations again changes nothing."""
        spec = self._spec()
        spec.merge(self._spec())
        assert list(spec.inputs) == ["a"]

    def test_conflicting_source(self) -> None:
        """Test a different source under the same name is a conflict."""
        spec = self._spec(source=1)
        with pytest.raises(ConflictingInputError) as exc_info:
            spec.merge(self._spec(source=2))
        assert exc_info.value.input_name == "a"
        assert "found conflicting definition of input 'a'" in str(exc_info.value)

    @pytest.mark.parametrize(
        "first, second",
        [
            ([1], [True]),
            (1, 1.0),
            (0, False),
            ({"a": 1}, {"a": 1.0}),
        ],
    )
    def test_equal_in_python_but_different_json(self, first, second) -> None:
        """Test that sources differing only in JSON type still conflict."""
        spec = self._spec(source=first)
        with pytest.raises(ConflictingInputError):
            spec.merge(self._spec(source=second))
        assert spec.get_input("a").source == first

    def test_object_key_order_does_not_conflict(self) -> None:
        """Test that the same object written in another key order merges."""
        spec = self._spec(source={"x": 1, "y": 2})
        spec.merge(self._spec(source={"y": 2, "x": 1}))
        assert list(spec.inputs) == ["a"]

    def test_conflicting_kind(self) -> None:
        """Test a different kind under the same name is a conflict."""
        spec = Spec.from_dict({"input": [{"name": "a", "kind": "FILE", "source": "x"}]})
        other = Spec.from_dict({"input": [{"name": "a", "kind": "COMMAND", "source": "x"}]})
        with pytest.raises(ConflictingInputError):
            spec.merge(other)

    def test_output_from_other_spec(self) -> None:
        """Test that the output is taken from whichever spec defines it."""
        spec = self._spec()
        spec.merge(self._spec(output="$a"))
        assert spec.output == "$a"

    def test_double_output(self) -> None:
        """Test that two outputs cannot be merged."""
        spec = self._spec(output="$a")
        with pytest.raises(DuplicateOutputError) as exc_info:
            spec.merge(self._spec(output="$a"))
        assert "double definition of output" in str(exc_info.value)

    def test_description_keeps_first(self) -> None:
        """Test that an existing description is not replaced."""
        spec = Spec(description="first")
        spec.merge(Spec(description="second"))
        assert spec.description == "first"

        empty = Spec()
        empty.merge(Spec(description="second"))
        assert empty.description == "second"


class TestSpecLoader:
    """Tests for SpecLoader."""

    def test_load_single_file(self, write_json) -> None:
        """Test loading a file without 'use' entries."""
        path = write_json(
            "spec.json",
            {"input": [{"name": "a", "kind": "INLINE", "source": 1}], "output": "$a"},
        )
        spec = load_spec(path)
        assert spec.output == "$a"
        assert "a" in spec.inputs

    def test_use_is_relative_to_including_file(self, tmp_path, write_json) -> None:
        """Test that 'use' paths resolve from the declaring file's directory."""
        write_json(
            "lib/common.json",
            {"input": [{"name": "greeting", "kind": "INLINE", "source": "hi"}]},
        )
        write_json("specs/main.json", {"use": ["../lib/common.json"], "output": "$greeting"})

        spec = SpecLoader(base_dir=tmp_path).load("specs/main.json")
        assert spec.output == "$greeting"
        assert spec.get_input("greeting").source == "hi"

    def test_used_inputs_come_first(self, write_json) -> None:
        """Test that used specs are merged before the file's own inputs."""
        lib = write_json("lib.json", {"input": [{"name": "lib", "kind": "INLINE", "source": 1}]})
        main = write_json(
            "main.json",
            {
                "use": [str(lib)],
                "input": [{"name": "own", "kind": "INLINE", "source": 2}],
            },
        )
        assert list(load_spec(main).inputs) == ["lib", "own"]

    def test_diamond_use_merges_shared_library_once(self, write_json) -> None:
        """Test that a library reached twice merges idempotently."""
        write_json("base.json", {"input": [{"name": "base", "kind": "INLINE", "source": 0}]})
        write_json("left.json", {"use": ["base.json"]})
        write_json("right.json", {"use": ["base.json"]})
        top = write_json("top.json", {"use": ["left.json", "right.json"], "output": "$base"})

        spec = load_spec(top)
        assert list(spec.inputs) == ["base"]

    def test_self_use_is_circular(self, write_json) -> None:
        """Test that a file using itself raises CircularUseError."""
        path = write_json("loop.json", {"use": ["loop.json"]})
        with pytest.raises(CircularUseError) as exc_info:
            load_spec(path)
        assert len(exc_info.value.chain) == 2

    def test_indirect_cycle(self, write_json) -> None:
        """Test a cycle through two files."""
        write_json("a.json", {"use": ["b.json"]})
        path = write_json("b.json", {"use": ["a.json"]})
        with pytest.raises(CircularUseError):
            load_spec(path)

    def test_conflict_between_files(self, write_json) -> None:
        """Test conflicting declarations across used files."""
        write_json("one.json", {"input": [{"name": "x", "kind": "INLINE", "source": 1}]})
        write_json("two.json", {"input": [{"name": "x", "kind": "INLINE", "source": 2}]})
        main = write_json("main.json", {"use": ["one.json", "two.json"]})
        with pytest.raises(ConflictingInputError):
            load_spec(main)

    def test_yaml_spec(self, tmp_path) -> None:
        """Test that .yaml files are parsed as YAML."""
        path = tmp_path / "spec.yaml"
        path.write_text(
            "input:\n"
            "  - name: a\n"
            "    kind: INLINE\n"
            "    source: [1, 2]\n"
            "output: \"$a | map(a)\"\n"
        )
        spec = load_spec(path)
        assert spec.get_input("a").source == [1, 2]
        assert spec.output == "$a | map(a)"

    def test_invalid_json(self, tmp_path) -> None:
        """Test that broken JSON raises SpecParseError."""
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(SpecParseError) as exc_info:
            load_spec(path)
        assert "JSON parse error" in str(exc_info.value)

    def test_invalid_yaml(self, tmp_path) -> None:
        """Test that broken YAML raises SpecParseError."""
        path = tmp_path / "broken.yml"
        path.write_text("input: [unclosed\n")
        with pytest.raises(SpecParseError) as exc_info:
            load_spec(path)
        assert "YAML parse error" in str(exc_info.value)

    def test_missing_file(self, tmp_path) -> None:
        """Test that a missing file raises SpecParseError."""
        with pytest.raises(SpecParseError) as exc_info:
            load_spec(tmp_path / "nope.json")
        assert "File read error" in str(exc_info.value)

    def test_errors_share_a_base(self, tmp_path) -> None:
        """Test that loader failures are SpecErrors."""
        with pytest.raises(SpecError):
            load_spec(tmp_path / "nope.json")

    def test_cache_returns_same_object(self, write_json) -> None:
        """Test that a file is parsed once per loader."""
        path = write_json("spec.json", {"output": 1})
        loader = SpecLoader()
        assert loader.load(path) is loader.load(path)

        loader.clear_cache()
        assert loader.load(path) is not None

    def test_add_use_merges_into_existing_spec(self, write_json) -> None:
        """Test Spec.add_use with a shared loader."""
        lib = write_json("lib.json", {"input": [{"name": "a", "kind": "INLINE", "source": 1}]})
        out = write_json("out.json", {"output": "$a"})

        loader = SpecLoader()
        spec = Spec()
        spec.add_use(lib, loader)
        spec.add_use(out, loader)
        spec.add_use(lib, loader)

        assert spec.output == "$a"
        assert list(spec.inputs) == ["a"]
