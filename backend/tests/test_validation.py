"""
Unit tests for Question/Session models and generator output validation.
"""
import unittest

from quizapp.core.errors import InvalidIndexError, UpstreamGenerationError
from quizapp.core.models import Question, Session
from quizapp.core.validation import parse_question_drafts
from tests.fixtures import TestFixtures


class TestQuestion(unittest.TestCase):

    def test_correct_index_must_address_an_option(self):
        with self.assertRaises(ValueError):
            Question("Q?", ["a", "b", "c", "d"], 4)
        with self.assertRaises(ValueError):
            Question("Q?", ["a", "b", "c", "d"], -1)

    def test_record_answer_once(self):
        q = Question("Q?", ["a", "b", "c", "d"], 2)
        self.assertTrue(q.record_answer(2))
        self.assertEqual(q.user_answer_index, 2)
        with self.assertRaises(InvalidIndexError):
            q.record_answer(1)
        self.assertEqual(q.user_answer_index, 2)

    def test_generated_fields_are_read_only(self):
        q = Question("Q?", ["a", "b", "c", "d"], 2)
        for name, value in (("text", "X?"), ("options", ("w",)), ("correct_answer_index", 0), ("image", b"x")):
            with self.subTest(field=name):
                with self.assertRaises(AttributeError):
                    setattr(q, name, value)
        self.assertEqual((q.text, q.options, q.correct_answer_index), ("Q?", ("a", "b", "c", "d"), 2))
        q.record_answer(1)
        self.assertEqual(q.user_answer_index, 1)

    def test_view_hides_answer_key(self):
        q = Question("Q?", ["a", "b", "c", "d"], 2, image=b"img")
        view = q.view(3)
        self.assertNotIn("correct_answer_index", view)
        self.assertEqual(view["question_index"], 3)
        self.assertEqual(view["image_base64"], "aW1n")

    def test_review_exposes_answer_key(self):
        q = Question("Q?", ["a", "b", "c", "d"], 1)
        q.record_answer(0)
        review = q.review()
        self.assertEqual(review["correct_answer_index"], 1)
        self.assertEqual(review["user_answer_index"], 0)
        self.assertIsNone(review["image_base64"])


class TestSession(unittest.TestCase):

    def test_empty_question_set_rejected(self):
        with self.assertRaises(ValueError):
            Session("s", "Alice", "Easy", "Math", [])

    def test_question_at_bounds(self):
        s = Session("s", "Alice", "Easy", "Math", [Question("Q?", ["a", "b"], 0)])
        self.assertIsNotNone(s.question_at(0))
        self.assertIsNone(s.question_at(1))
        self.assertIsNone(s.question_at(-1))
        self.assertIsNone(s.question_at(True))


class TestParseQuestionDrafts(unittest.TestCase):

    def test_valid_text_questions(self):
        drafts = parse_question_drafts(TestFixtures.raw_questions())
        self.assertEqual(len(drafts), 5)
        self.assertEqual(drafts[2].correct_answer_index, 2)
        self.assertTrue(all(d.image_prompt is None for d in drafts))

    def test_snake_case_keys_accepted(self):
        raw = [{"question": "Q?", "options": ["a", "b", "c", "d"], "correct_answer_index": 3}]
        self.assertEqual(parse_question_drafts(raw)[0].correct_answer_index, 3)

    def test_empty_result(self):
        for raw in ([], None):
            with self.assertRaises(UpstreamGenerationError) as ctx:
                parse_question_drafts(raw)
            self.assertEqual(ctx.exception.reason, "empty")

    def test_not_a_list(self):
        with self.assertRaises(UpstreamGenerationError) as ctx:
            parse_question_drafts({"questions": []})
        self.assertEqual(ctx.exception.reason, "malformed")

    def test_malformed_items(self):
        base = {"question": "Q?", "options": ["a", "b", "c", "d"], "correctAnswerIndex": 0}
        bad_items = [
            {k: v for k, v in base.items() if k != "question"},
            {k: v for k, v in base.items() if k != "correctAnswerIndex"},
            {**base, "options": ["a", "b", "c"]},
            {**base, "options": ["a", "b", "", "d"]},
            {**base, "correctAnswerIndex": 4},
            {**base, "correctAnswerIndex": "1"},
            {**base, "question": "   "},
            "not a dict",
        ]
        for item in bad_items:
            with self.subTest(item=item):
                with self.assertRaises(UpstreamGenerationError) as ctx:
                    parse_question_drafts([item])
                self.assertEqual(ctx.exception.reason, "malformed")

    def test_visual_split_enforced(self):
        drafts = parse_question_drafts(TestFixtures.raw_questions(visual=True), visual_mode=True)
        self.assertEqual(sum(1 for d in drafts if d.image_prompt), 2)

        with self.assertRaises(UpstreamGenerationError):
            parse_question_drafts(
                TestFixtures.raw_questions(visual=True, image_count=3), visual_mode=True
            )

    def test_image_prompts_dropped_in_text_mode(self):
        drafts = parse_question_drafts(TestFixtures.raw_questions(visual=True), visual_mode=False)
        self.assertTrue(all(d.image_prompt is None for d in drafts))


if __name__ == "__main__":
    unittest.main()
