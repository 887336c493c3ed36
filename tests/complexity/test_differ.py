"""Tests for the diff function scanner and complexity differ."""

import pytest

from evolution_insight.complexity.differ import (
    TRANSITIONS,
    Action,
    LineKind,
    ScanState,
    analyze_complexity,
    classify_line,
    compile_patterns,
    extract_changed_functions,
    measure_change,
    split_file_diffs,
)
from evolution_insight.complexity.models import ExtractedFunction
from evolution_insight.config import DEFAULT_FUNCTION_PATTERNS, ComplexityConfig

PATTERNS = compile_patterns(DEFAULT_FUNCTION_PATTERNS)

JS_DIFF = """\
diff --git a/src/app.js b/src/app.js
index 1111111..2222222 100644
--- a/src/app.js
+++ b/src/app.js
@@ -1,5 +1,8 @@
 function check(a, b) {
-  return a;
+  if (a && b) {
+    return a;
+  }
+  return b;
 }
 
 function untouched() {"""

NEW_GO_FILE = """\
diff --git a/main.go b/main.go
new file mode 100644
index 0000000..1111111
--- /dev/null
+++ b/main.go
@@ -0,0 +1,3 @@
+func main() {
+	fmt.Println("hi")
+}"""

NEW_JS_FILE = """\
diff --git a/a.js b/a.js
new file mode 100644
index 0000000..2222222
--- /dev/null
+++ b/a.js
@@ -0,0 +1,6 @@
+function f(a, b) {
+  if (a && b) {
+    return a;
+  }
+  return b;
+}"""

DELETED_RUST_FILE = """\
diff --git a/old.rs b/old.rs
deleted file mode 100644
index 1111111..0000000
--- a/old.rs
+++ /dev/null
@@ -1,3 +0,0 @@
-fn gone() {
-    1
-}"""

README_DIFF = """\
diff --git a/README.md b/README.md
--- a/README.md
+++ b/README.md
@@ -1 +1 @@
-function in prose {
+function in prose {
"""


class TestTransitionTable:
    """Tests for the scan state machine itself."""

    def test_table_is_total(self):
        for state in ScanState:
            for kind in LineKind:
                assert (state, kind) in TRANSITIONS

    def test_declaration_opens_and_dedented_brace_closes(self):
        assert TRANSITIONS[(ScanState.OUTSIDE, LineKind.DECLARATION)] == (
            ScanState.INSIDE_FUNCTION,
            Action.OPEN,
        )
        assert TRANSITIONS[(ScanState.INSIDE_FUNCTION, LineKind.CLOSING_BRACE)] == (
            ScanState.OUTSIDE,
            Action.CLOSE,
        )

    @pytest.mark.parametrize("kind", [LineKind.FILE_HEADER, LineKind.HUNK_HEADER])
    def test_section_boundary_discards_open_function(self, kind):
        assert TRANSITIONS[(ScanState.INSIDE_FUNCTION, kind)] == (
            ScanState.OUTSIDE,
            Action.DISCARD,
        )


class TestClassifyLine:
    """Tests for classify_line."""

    def test_headers_and_meta(self):
        assert classify_line("diff --git a/x b/x", PATTERNS).kind is LineKind.FILE_HEADER
        assert classify_line("@@ -1,2 +1,3 @@ function x() {", PATTERNS).kind is LineKind.HUNK_HEADER
        assert classify_line("\\ No newline at end of file", PATTERNS).kind is LineKind.META

    def test_declarations_per_language(self):
        cases = {
            "+function render(props) {": "render",
            " export async function load() {": "load",
            "-func (s *Server) Start() error {": "Start",
            "+pub fn parse(input: &str) -> Result<()> {": "parse",
            " fun greet(name: String) {": "greet",
        }
        for raw, name in cases.items():
            line = classify_line(raw, PATTERNS)
            assert line.kind is LineKind.DECLARATION
            assert line.function_name == name

    def test_inline_function(self):
        line = classify_line("+function one() { return 1; }", PATTERNS)
        assert line.kind is LineKind.INLINE_FUNCTION

    def test_closing_brace_needs_open_function_and_dedent(self):
        assert classify_line("+}", PATTERNS).kind is LineKind.BODY
        assert classify_line("+}", PATTERNS, open_indent=0).kind is LineKind.CLOSING_BRACE
        assert classify_line("+    }", PATTERNS, open_indent=0).kind is LineKind.BODY
        assert classify_line("     }", PATTERNS, open_indent=4).kind is LineKind.CLOSING_BRACE

    def test_origin_and_code(self):
        line = classify_line("-  return a;", PATTERNS)
        assert line.origin == "-"
        assert line.code == "  return a;"
        assert line.indent == 2


class TestSplitFileDiffs:
    """Tests for splitting a multi-file diff."""

    def test_paths(self):
        diff = "\n".join([JS_DIFF, NEW_GO_FILE, DELETED_RUST_FILE])
        assert [f.path for f in split_file_diffs(diff)] == ["src/app.js", "main.go", "old.rs"]

    def test_headers_not_in_hunk_lines(self):
        (file_diff,) = split_file_diffs(NEW_GO_FILE)
        assert file_diff.hunk_lines[0].startswith("@@")
        assert not any(line.startswith("+++") for line in file_diff.hunk_lines)


class TestExtractChangedFunctions:
    """Tests for function extraction."""

    def test_changed_function_before_and_after(self):
        (function,) = extract_changed_functions(JS_DIFF)
        assert function.file == "src/app.js"
        assert function.name == "check"
        assert function.before == "function check(a, b) {\n  return a;\n}"
        assert "if (a && b) {" in function.after
        assert "return a;" in function.after

    def test_unclosed_function_dropped(self):
        names = [f.name for f in extract_changed_functions(JS_DIFF)]
        assert "untouched" not in names

    def test_context_only_function_not_emitted(self):
        diff = (
            "diff --git a/a.js b/a.js\n--- a/a.js\n+++ b/a.js\n@@ -1,3 +1,3 @@\n"
            " function same() {\n"
            "   return 1;\n"
            " }"
        )
        assert extract_changed_functions(diff) == []

    def test_hunk_header_inside_function_discards_it(self):
        diff = (
            "diff --git a/a.js b/a.js\n--- a/a.js\n+++ b/a.js\n"
            "@@ -1,2 +1,2 @@\n"
            " function a() {\n"
            "-  x();\n"
            "@@ -10,2 +10,2 @@\n"
            "+  y();\n"
            " }"
        )
        assert extract_changed_functions(diff) == []

    def test_non_source_files_skipped(self):
        assert extract_changed_functions(README_DIFF) == []

    def test_source_extensions_configurable(self):
        config = ComplexityConfig(source_extensions=(".go",))
        assert extract_changed_functions(JS_DIFF, config) == []
        assert [f.name for f in extract_changed_functions(NEW_GO_FILE, config)] == ["main"]


class TestMeasureChange:
    """Tests for before/after measurement and flags."""

    def test_if_plus_and_increases_by_two(self):
        (change,) = analyze_complexity(JS_DIFF)
        assert change.before_complexity == 1
        assert change.after_complexity == 3
        assert change.complexity_increase == 2
        assert change.nesting_level_change == 1
        assert change.before_line_count == 3
        assert change.after_line_count == 6
        assert change.line_count_change == 3
        assert change.is_complexity_increasing
        assert not change.is_significant_increase
        assert not change.refactoring_candidate

    def test_new_function(self):
        (change,) = analyze_complexity(NEW_GO_FILE)
        assert change.is_new
        assert change.before_complexity == 1
        assert change.before_line_count == 1
        assert change.after_complexity == 1
        assert change.complexity_increase == 0
        assert not change.is_complexity_increasing

    def test_new_function_counts_only_its_branches(self):
        (change,) = analyze_complexity(NEW_JS_FILE)
        assert change.is_new
        assert change.after_complexity == 3
        assert change.complexity_increase == 2
        assert change.is_complexity_increasing
        assert not change.refactoring_candidate

    def test_deleted_function(self):
        (change,) = analyze_complexity(DELETED_RUST_FILE)
        assert change.file == "old.rs"
        assert change.is_deleted
        assert change.after_complexity == 1
        assert change.after_line_count == 1
        assert change.complexity_increase == 0
        assert not change.is_complexity_increasing

    def test_significant_and_refactoring_flags(self):
        after = "\n".join(
            [
                "function deep(a) {",
                "  if (a) {",
                "    if (a.b) {",
                "      if (a.c) {",
                "        for (const x of a.d) {",
                "          return x;",
                "        }",
                "      }",
                "    }",
                "  }",
                "}",
            ]
        )
        function = ExtractedFunction(
            file="a.js", name="deep", before="function deep(a) {\n  return a;\n}", after=after
        )
        change = measure_change(function)
        assert change.complexity_increase == 4
        assert change.nesting_level_change == 4
        assert change.is_significant_increase
        assert change.refactoring_candidate

    def test_large_increase_alone_flags_refactoring(self):
        after = "function f() {\n" + "  if (a) x();\n" * 6 + "}"
        function = ExtractedFunction(file="a.js", name="f", before="function f() {\n}", after=after)
        change = measure_change(function)
        assert change.complexity_increase == 6
        assert change.nesting_level_change == 0
        assert not change.is_significant_increase
        assert change.refactoring_candidate

    def test_thresholds_overridable(self):
        (change,) = analyze_complexity(JS_DIFF, ComplexityConfig(refactor_increase_threshold=1))
        assert change.refactoring_candidate

    def test_empty_diff(self):
        assert analyze_complexity(None) == []
        assert analyze_complexity("") == []
