"""Tests for response_parser.py"""

from response_parser import BLOCK_SEPARATOR, join_blocks, parse_response_payload


class TestParseResponsePayload:
    def test_array_of_outputs(self):
        assert parse_response_payload('[{"output":"A"},{"output":"B"}]') == ["A", "B"]

    def test_array_element_without_output_is_reserialized(self):
        blocks = parse_response_payload('[{"output":"A"},{"name": "Jane", "age": 40}]')
        assert blocks == ["A", '{"name":"Jane","age":40}']

    def test_array_with_empty_output_is_reserialized(self):
        assert parse_response_payload('[{"output":""}]') == ['{"output":""}']

    def test_array_of_scalars(self):
        assert parse_response_payload('["x", 3]') == ['"x"', "3"]

    def test_empty_array(self):
        assert parse_response_payload("[]") == []

    def test_object_with_output(self):
        assert parse_response_payload('{"output": "**Jane**"}') == ["**Jane**"]

    def test_object_without_output(self):
        assert parse_response_payload('{"status": "done"}') == ['{"status":"done"}']

    def test_non_ascii_kept_in_reserialization(self):
        assert parse_response_payload('{"name": "Zoë"}') == ['{"name":"Zoë"}']

    def test_raw_text(self):
        assert parse_response_payload("Hello **World**") == ["Hello **World**"]

    def test_truncated_json_falls_back_to_raw(self):
        raw = '[{"output": "A"'
        assert parse_response_payload(raw) == [raw]

    def test_empty_body(self):
        assert parse_response_payload("") == [""]


class TestJoinBlocks:
    def test_separator_is_fifty_equals_between_blank_lines(self):
        assert BLOCK_SEPARATOR == "\n\n" + "=" * 50 + "\n\n"

    def test_join(self):
        assert join_blocks(["A", "B"]) == "A\n\n" + "=" * 50 + "\n\nB"

    def test_single_block_unchanged(self):
        assert join_blocks(["A"]) == "A"
