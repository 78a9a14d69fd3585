"""Tests for balanced JSON extraction from free-form replies."""

import pytest

from shared.errors import MalformedAIResponseError
from shared.json_extract import extract_json_object, iter_balanced_objects


class TestExtractJsonObject:
    def test_plain_object(self):
        assert extract_json_object('{"score": 80}') == {"score": 80}

    def test_object_wrapped_in_prose_and_fence(self):
        reply = 'Sure!\n```json\n{"title": "Engineer", "benefits": []}\n```\nThanks.'
        assert extract_json_object(reply) == {"title": "Engineer", "benefits": []}

    def test_nested_objects_returned_whole(self):
        reply = 'result: {"a": {"b": {"c": 1}}, "d": [1, 2]} trailing'
        assert extract_json_object(reply) == {"a": {"b": {"c": 1}}, "d": [1, 2]}

    def test_braces_inside_strings_do_not_unbalance(self):
        reply = '{"analysis": "uses {curly} braces and a \\"quote\\" }", "score": 5}'
        assert extract_json_object(reply) == {
            "analysis": 'uses {curly} braces and a "quote" }',
            "score": 5,
        }

    def test_first_parseable_object_wins(self):
        reply = "Template: {score: <number>} Answer: {\"score\": 42} Other: {\"score\": 7}"
        assert extract_json_object(reply) == {"score": 42}

    def test_broken_outer_object_never_yields_inner_value(self):
        reply = '{"title": "Backend Engineer", "location": "Remote", "salary": {"min": 1, "max": 2},}'
        with pytest.raises(MalformedAIResponseError):
            extract_json_object(reply)

    def test_object_after_broken_one_is_used(self):
        reply = 'Draft: {"score": {"value": 1},} Final: {"score": 42}'
        assert extract_json_object(reply) == {"score": 42}

    def test_no_braces_is_malformed(self):
        with pytest.raises(MalformedAIResponseError):
            extract_json_object("I could not evaluate this resume.")

    def test_unbalanced_is_malformed(self):
        with pytest.raises(MalformedAIResponseError):
            extract_json_object('{"score": 80, "analysis": "cut off')

    @pytest.mark.parametrize("reply", ["", "   ", None])
    def test_empty_reply_is_malformed(self, reply):
        with pytest.raises(MalformedAIResponseError):
            extract_json_object(reply)


class TestIterBalancedObjects:
    def test_yields_only_top_level_candidates(self):
        text = 'x {"a": {"b": 1}} y {"c": 2}'
        assert list(iter_balanced_objects(text)) == ['{"a": {"b": 1}}', '{"c": 2}']

    def test_unbalanced_opener_is_skipped(self):
        assert list(iter_balanced_objects('{"cut": {"x": 1}')) == ['{"x": 1}']
